"""Application configuration, read from the environment (and a local .env)."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[1]


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    APP_ENV = os.getenv("APP_ENV", "development")
    TESTING = False

    # Pickle file backing the data store
    DATA_PATH = os.getenv("DATA_PATH", str(BASE_DIR / "data.pkl"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Timezone used by the fmt_iso_local Jinja filter
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Pacific/Auckland")

    # Account created when the store starts empty
    DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "Admin123")


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SECRET_KEY = "test"
    LOG_LEVEL = "WARNING"
