import logging
import os

from dotenv import load_dotenv
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

load_dotenv()

db = SQLAlchemy()
login = LoginManager()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # fallbacks when the system_setting table has no row for the key
    DEFAULT_ALLOCATION_METHOD = os.getenv("DEFAULT_ALLOCATION_METHOD", "FIFO")
    ALLOW_NEGATIVE_INVENTORY = _env_bool("ALLOW_NEGATIVE_INVENTORY", False)
    DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")
    DEFAULT_PAYMENT_TERMS = int(os.getenv("DEFAULT_PAYMENT_TERMS", "30"))

    ENABLE_ADMIN = _env_bool("ENABLE_ADMIN", True)


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level="INFO") -> None:
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root.setLevel(level)
    if not any(getattr(h, "_erp_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._erp_handler = True
        root.addHandler(handler)
