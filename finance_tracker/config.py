import os
from pathlib import Path

class Settings:
    # Database
    DATABASE_URL = os.getenv("FINANCE_TRACKER_DATABASE_URL", "sqlite:///./data/finance.db")
    DATABASE_PATH = Path("./data/finance.db")

    # API Settings
    API_V1_STR = "/api"
    PROJECT_NAME = "Finance Tracker"

    # Logging
    LOG_LEVEL = os.getenv("FINANCE_TRACKER_LOG_LEVEL", "INFO").upper()

    # Category defaults
    DEFAULT_CATEGORY_ICON = "pi pi-tag"

    # Budget settings
    BUDGET_WARNING_PERCENT = 80
    DEFAULT_NOTIFICATION_THRESHOLD = 80

    # Pagination
    PAGE_SIZE = 10
    MAX_LIMIT = 100

    def ensure_data_dir(self):
        """Create the SQLite data directory when using the default database"""
        if self.DATABASE_URL.startswith("sqlite:///./"):
            self.DATABASE_PATH.parent.mkdir(exist_ok=True)

settings = Settings()
