"""Application settings and environment variables."""

import os

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


class Settings:
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_DATABASE: str = os.getenv("DB_NAME", "pharmacy_stock_db")
    DB_USER: str = os.getenv("DB_USER", "user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")

    # Account used when the caller does not supply one (single-shop installs)
    DEFAULT_OWNER_ID: str = os.getenv("DEFAULT_OWNER_ID", "local")

    # Stock level thresholds, in base units (tablets). Per-account values override these.
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
    CRITICAL_STOCK_THRESHOLD: int = int(os.getenv("CRITICAL_STOCK_THRESHOLD", "5"))
    EXPIRY_ALERT_DAYS: int = int(os.getenv("EXPIRY_ALERT_DAYS", "30"))

    CURRENCY: str = os.getenv("CURRENCY", "INR")
    TIMEZONE: str = os.getenv("TIMEZONE", "Asia/Kolkata")

    # How many times sell_with_retry re-reads the item after a version conflict
    SALE_MAX_ATTEMPTS: int = int(os.getenv("SALE_MAX_ATTEMPTS", "3"))

    DAILY_REPORT_TIME: str = os.getenv("DAILY_REPORT_TIME", "21:00")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR, CRITICAL


settings = Settings()
