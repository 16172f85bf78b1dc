# dao/_tx.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from configs import db
from utils.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


def commit():
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit: %s", exc.orig)
        raise Conflict("Record violates a uniqueness constraint") from exc
    except SQLAlchemyError:
        db.session.rollback()
        raise


@contextmanager
def atomic():
    """One unit of work: commit on success, roll everything back otherwise."""
    try:
        yield db.session
        commit()
    except Exception:
        db.session.rollback()
        raise


def fetch(model, ident, label: str | None = None):
    """``db.session.get`` that raises NotFound instead of returning None."""
    obj = db.session.get(model, int(ident)) if ident is not None else None
    if obj is None:
        raise NotFound(f"{label or model.__name__} not found")
    return obj
