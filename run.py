#!/usr/bin/env python3
"""
Server runner for Finance Tracker.

    python run.py               # development: uvicorn with --reload
    python run.py --production  # gunicorn with Uvicorn workers (gunicorn_conf.py)
"""
import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

APP = "finance_tracker.main:app"


def run_development(port: int):
    """Run the API with auto-reload"""
    print("Starting Finance Tracker server...")
    print(f"Server will be available at: http://localhost:{port}")
    print("Press Ctrl+C to stop")

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        APP,
        "--host",
        "0.0.0.0",
        "--port",
        str(port),
        "--reload",
    ]

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nShutting down server...")


def run_production():
    """Replace this process with gunicorn so a supervisor can manage it"""
    gunicorn_bin = shutil.which("gunicorn")
    if not gunicorn_bin:
        print("Gunicorn not found. Please install: pip install -e .")
        return 1

    print("Starting Finance Tracker (Production Mode)")
    print(f"Environment: {os.getenv('ENVIRONMENT', 'production')}")
    print("Config: gunicorn_conf.py")

    os.chdir(project_root)
    os.execv(gunicorn_bin, [gunicorn_bin, "-c", "gunicorn_conf.py", APP])


def main():
    parser = argparse.ArgumentParser(description="Run the Finance Tracker API")
    parser.add_argument("--production", action="store_true", help="Serve with gunicorn")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    if args.production:
        return run_production()
    run_development(args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
