"""
Gunicorn configuration for Finance Tracker production deployment.

Values can be tuned through FINANCE_TRACKER_* environment variables.
"""
import os

bind = os.getenv("FINANCE_TRACKER_BIND", "0.0.0.0:8000")

# Uvicorn workers give FastAPI its async event loop
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.getenv("FINANCE_TRACKER_WORKERS", "2"))

# Budget reconciliation runs inside the request, keep some headroom
timeout = 30
graceful_timeout = 30
keepalive = 2

# Log to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("FINANCE_TRACKER_LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)s'

proc_name = "finance_tracker"

# SQLite connections must not be shared across forked workers
preload_app = False
