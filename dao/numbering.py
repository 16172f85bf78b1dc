# dao/numbering.py
"""Document numbers of the form ``PREFIX-YYYYMMDD-NNNN``.

The counter lives in ``number_series`` keyed by (prefix, day) and is bumped
under a row lock, so two transactions never hand out the same number. The
increment belongs to the caller's transaction: a rolled back document gives
its number back.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from configs import db
from db.models.setting import NumberSeries

logger = logging.getLogger(__name__)

PREFIXES = {
    "batch": "BTH",
    "purchase": "PO",
    "sales": "SO",
    "transfer": "TR",
    "journal": "JE",
}


def _locked_row(key: str, date_key: str):
    return (
        NumberSeries.query.filter_by(key=key, date_key=date_key)
        .with_for_update()
        .one_or_none()
    )


def next_number(kind: str, on: datetime | None = None) -> str:
    prefix = PREFIXES[kind]
    date_key = (on or datetime.utcnow()).strftime("%Y%m%d")

    row = _locked_row(prefix, date_key)
    if row is None:
        try:
            with db.session.begin_nested():
                db.session.add(NumberSeries(key=prefix, date_key=date_key, next_seq=1))
        except IntegrityError:
            # another transaction created the day's row first
            logger.debug("number series %s/%s created concurrently", prefix, date_key)
        row = _locked_row(prefix, date_key)

    seq = row.next_seq
    row.next_seq = seq + 1
    db.session.flush()
    return f"{prefix}-{date_key}-{seq:04d}"
