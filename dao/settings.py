# dao/settings.py
import logging
from typing import List

from flask import current_app

from configs import db
from dao import _tx
from db.models.setting import SystemSetting
from utils.allocation import AllocationMethod
from utils.errors import BadRequest

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = [
    ("ALLOCATION_METHOD", "FIFO", "Default inventory allocation method"),
    ("ALLOW_NEGATIVE_INVENTORY", "false", "Allow inventory to go negative"),
    ("DEFAULT_CURRENCY", "USD", "Default currency for transactions"),
    ("LOW_STOCK_ALERT_ENABLED", "true", "Enable low stock alerts"),
]

_BOOLEAN_KEYS = {"ALLOW_NEGATIVE_INVENTORY", "LOW_STOCK_ALERT_ENABLED"}


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def list_settings() -> List[SystemSetting]:
    return SystemSetting.query.order_by(SystemSetting.key.asc()).all()


def get_value(key: str, default=None):
    row = SystemSetting.query.filter_by(key=key).one_or_none()
    return row.value if row is not None else default


def allocation_method() -> AllocationMethod:
    raw = get_value(
        "ALLOCATION_METHOD", current_app.config.get("DEFAULT_ALLOCATION_METHOD", "FIFO")
    )
    try:
        return AllocationMethod(str(raw).upper())
    except ValueError:
        logger.warning("Unknown allocation method %r, falling back to FIFO", raw)
        return AllocationMethod.FIFO


def allow_negative_inventory() -> bool:
    raw = get_value("ALLOW_NEGATIVE_INVENTORY")
    if raw is None:
        return bool(current_app.config.get("ALLOW_NEGATIVE_INVENTORY", False))
    return _as_bool(raw)


def default_currency() -> str:
    return get_value(
        "DEFAULT_CURRENCY", current_app.config.get("DEFAULT_CURRENCY", "USD")
    )


def default_payment_terms() -> int:
    return int(current_app.config.get("DEFAULT_PAYMENT_TERMS", 30))


def _normalize(key: str, value: str) -> str:
    value = str(value).strip()
    if key == "ALLOCATION_METHOD":
        try:
            return AllocationMethod(value.upper()).value
        except ValueError:
            allowed = ", ".join(m.value for m in AllocationMethod)
            raise BadRequest(f"Invalid allocation method. Allowed: {allowed}")
    if key in _BOOLEAN_KEYS:
        if value.lower() not in ("true", "false"):
            raise BadRequest(f"{key} must be true or false")
        return value.lower()
    if key == "DEFAULT_CURRENCY":
        if len(value) != 3:
            raise BadRequest("Currency must be a 3-letter code")
        return value.upper()
    return value


def update_setting(key: str, value: str, description: str | None = None) -> SystemSetting:
    key = key.strip().upper()
    value = _normalize(key, value)
    row = SystemSetting.query.filter_by(key=key).one_or_none()
    if row is None:
        row = SystemSetting(key=key, value=value, description=description)
        db.session.add(row)
    else:
        row.value = value
        if description is not None:
            row.description = description
    _tx.commit()
    logger.info("setting %s = %s", key, value)
    return row


def seed_settings() -> List[dict]:
    results = []
    for key, value, description in DEFAULT_SETTINGS:
        row = SystemSetting.query.filter_by(key=key).one_or_none()
        if row is None:
            row = SystemSetting(
                key=key, value=value, description=description, is_system=True
            )
            db.session.add(row)
            results.append({"action": "created", "key": key, "value": value})
        else:
            results.append({"action": "skipped", "key": key, "value": row.value})
    _tx.commit()
    return results
