# utils/money.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")
UNIT_COST = Decimal("0.0001")
QTY = Decimal("0.001")
TOLERANCE = Decimal("0.01")


def d(x) -> Decimal:
    """Coerce to Decimal without passing through binary float formatting."""
    if isinstance(x, Decimal):
        return x
    if x is None or x == "":
        return ZERO
    try:
        return Decimal(str(x))
    except InvalidOperation:
        raise ValueError(f"Not a number: {x!r}")


def round2(x) -> Decimal:
    return d(x).quantize(CENT, rounding=ROUND_HALF_UP)


def round4(x) -> Decimal:
    return d(x).quantize(UNIT_COST, rounding=ROUND_HALF_UP)


def round_qty(x) -> Decimal:
    return d(x).quantize(QTY, rounding=ROUND_HALF_UP)


def per_unit(total, quantity) -> Decimal:
    quantity = d(quantity)
    if quantity <= 0:
        return round4(ZERO)
    return round4(d(total) / quantity)
