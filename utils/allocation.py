# utils/allocation.py
"""Batch selection for outgoing stock.

``plan_allocation`` is pure: it takes candidate inventory rows already loaded
by the caller and decides which batches to draw from. Persisting reservations
is the caller's job (see ``dao.inventory``).
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from utils.errors import BadRequest
from utils.money import ZERO, d, per_unit, round2, round4


class AllocationMethod(enum.Enum):
    FIFO = "FIFO"
    LIFO = "LIFO"
    WEIGHTED_AVG = "WEIGHTED_AVG"
    SPECIFIC = "SPECIFIC"


def fmt_qty(value) -> str:
    """Human friendly decimal: ``Decimal('5.000')`` -> ``'5'``."""
    value = d(value)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return format(value.normalize(), "f")


class InsufficientInventory(BadRequest):
    def __init__(self, shortfall, requested=None, available=None):
        self.shortfall = d(shortfall)
        details = {"shortfall": fmt_qty(self.shortfall)}
        if requested is not None:
            details["requested"] = fmt_qty(requested)
        if available is not None:
            details["available"] = fmt_qty(available)
        super().__init__(
            f"Insufficient inventory. Short by {fmt_qty(self.shortfall)} units",
            details,
        )


@dataclass(frozen=True)
class Candidate:
    batch_id: int
    inventory_id: int
    available: Decimal
    cost_per_unit: Decimal
    received_date: datetime
    batch_number: Optional[str] = None
    warehouse_id: Optional[int] = None


@dataclass(frozen=True)
class AllocationSlice:
    batch_id: int
    inventory_id: int
    quantity: Decimal
    cost_per_unit: Decimal
    batch_number: Optional[str] = None

    @property
    def cost(self) -> Decimal:
        return self.quantity * self.cost_per_unit


@dataclass
class AllocationPlan:
    method: AllocationMethod
    slices: List[AllocationSlice] = field(default_factory=list)

    @property
    def quantity(self) -> Decimal:
        return sum((s.quantity for s in self.slices), ZERO)

    @property
    def total_cost(self) -> Decimal:
        return round2(sum((s.cost for s in self.slices), ZERO))

    @property
    def avg_cost_per_unit(self) -> Decimal:
        return per_unit(self.total_cost, self.quantity)


def _ordered(candidates: Sequence[Candidate], newest_first: bool) -> List[Candidate]:
    return sorted(
        candidates,
        key=lambda c: (c.received_date, c.batch_id, c.inventory_id),
        reverse=newest_first,
    )


def _greedy(candidates, quantity, price=None) -> List[AllocationSlice]:
    remaining = quantity
    slices = []
    for c in candidates:
        if remaining <= 0:
            break
        take = min(d(c.available), remaining)
        slices.append(
            AllocationSlice(
                batch_id=c.batch_id,
                inventory_id=c.inventory_id,
                quantity=take,
                cost_per_unit=price if price is not None else d(c.cost_per_unit),
                batch_number=c.batch_number,
            )
        )
        remaining -= take
    return slices


def _specific(candidates, quantity, picks) -> List[AllocationSlice]:
    if not picks:
        raise BadRequest("Specific allocation requires batch selections")
    picked_total = sum((d(q) for _, q in picks), ZERO)
    if picked_total != quantity:
        raise BadRequest(
            f"Selected batches total {fmt_qty(picked_total)}, "
            f"requested {fmt_qty(quantity)}"
        )

    slices = []
    for batch_id, qty in picks:
        qty = d(qty)
        if qty <= 0:
            raise BadRequest("Batch quantity must be greater than 0")
        rows = _ordered([c for c in candidates if c.batch_id == int(batch_id)], False)
        available = sum((d(c.available) for c in rows), ZERO)
        if qty > available:
            raise BadRequest(
                "Insufficient quantity in batch. "
                f"Available: {fmt_qty(available)}, Requested: {fmt_qty(qty)}"
            )
        slices.extend(_greedy(rows, qty))
    return slices


def plan_allocation(
    candidates: Iterable[Candidate],
    quantity,
    method: AllocationMethod = AllocationMethod.FIFO,
    picks: Optional[Sequence[Tuple[int, Decimal]]] = None,
) -> AllocationPlan:
    quantity = d(quantity)
    if quantity <= 0:
        raise BadRequest("Quantity must be greater than 0")
    method = AllocationMethod(method) if not isinstance(method, AllocationMethod) else method

    pool = [c for c in candidates if d(c.available) > 0]
    available = sum((d(c.available) for c in pool), ZERO)

    if method == AllocationMethod.SPECIFIC:
        return AllocationPlan(method, _specific(pool, quantity, picks))

    if available < quantity:
        raise InsufficientInventory(quantity - available, quantity, available)

    if method == AllocationMethod.LIFO:
        slices = _greedy(_ordered(pool, True), quantity)
    elif method == AllocationMethod.WEIGHTED_AVG:
        weighted = sum((d(c.available) * d(c.cost_per_unit) for c in pool), ZERO)
        slices = _greedy(_ordered(pool, False), quantity, price=round4(weighted / available))
    else:
        slices = _greedy(_ordered(pool, False), quantity)

    return AllocationPlan(method, slices)
