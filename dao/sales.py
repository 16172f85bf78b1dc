# dao/sales.py
"""Sales order workflow: allocate on confirm, deduct on ship, bill on full shipment."""
import logging
from collections import defaultdict
from datetime import datetime
from typing import List

from sqlalchemy import func

from configs import db
from dao import _tx
from dao import accounting as acc_dao
from dao import inventory as inv_dao
from dao import numbering
from dao import settings as settings_dao
from db.models.customer import Customer
from db.models.product import Product
from db.models.sales import SalesOrder, SalesOrderAllocation, SalesOrderItem, SOStatus
from db.models.warehouse import Warehouse
from utils.allocation import AllocationMethod, fmt_qty
from utils.errors import BadRequest, NotFound
from utils.money import ZERO, d, per_unit, round2
from utils.pagination import paginate
from utils.workflow import transition

logger = logging.getLogger(__name__)


def list_sales(
    status: str | None = None,
    customer_id=None,
    warehouse_id=None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = SalesOrder.query
    if status:
        q = q.filter(SalesOrder.status == SOStatus(status))
    if customer_id:
        q = q.filter(SalesOrder.customer_id == int(customer_id))
    if warehouse_id:
        q = q.filter(SalesOrder.warehouse_id == int(warehouse_id))
    if date_from:
        q = q.filter(SalesOrder.order_date >= date_from)
    if date_to:
        q = q.filter(SalesOrder.order_date <= date_to)
    return paginate(
        q.order_by(SalesOrder.order_date.desc(), SalesOrder.id.desc()), page, page_size
    )


def get_so(so_id: int) -> SalesOrder:
    return _tx.fetch(SalesOrder, so_id, "Sales order")


def _build_items(items: List[dict]) -> List[SalesOrderItem]:
    if not items:
        raise BadRequest("At least one item is required")
    out = []
    for it in items:
        _tx.fetch(Product, it["product_id"], "Product")
        qty = d(it["quantity"])
        price = d(it["unit_price"])
        if qty <= 0:
            raise BadRequest("Quantity must be greater than 0")
        if price < 0:
            raise BadRequest("Unit price cannot be negative")
        out.append(
            SalesOrderItem(
                product_id=int(it["product_id"]),
                quantity=qty,
                unit_price=price,
                amount=round2(qty * price),
                unit_cost=ZERO,
                cost_amount=ZERO,
                shipped_quantity=ZERO,
                notes=it.get("notes"),
            )
        )
    return out


def _recalc_totals(so: SalesOrder) -> None:
    subtotal = round2(sum((d(i.amount) for i in so.items), ZERO))
    tax = round2(subtotal * d(so.tax_rate))
    so.subtotal = subtotal
    so.tax_amount = tax
    so.total_amount = round2(subtotal + tax + d(so.shipping_fee))


def _check_rate(tax_rate, shipping_fee) -> None:
    if tax_rate is not None and not (0 <= d(tax_rate) <= 1):
        raise BadRequest("Tax rate must be between 0 and 1")
    if shipping_fee is not None and d(shipping_fee) < 0:
        raise BadRequest("Shipping fee cannot be negative")


# ---------------- mutations ----------------
def create_so(
    customer_id: int,
    warehouse_id: int,
    items: List[dict],
    user_id: int | None = None,
    currency: str | None = None,
    tax_rate=0,
    shipping_fee=0,
    expected_ship_date: datetime | None = None,
    shipping_address: str | None = None,
    notes: str | None = None,
) -> SalesOrder:
    customer = _tx.fetch(Customer, customer_id, "Customer")
    _tx.fetch(Warehouse, warehouse_id, "Warehouse")
    _check_rate(tax_rate, shipping_fee)
    lines = _build_items(items)

    with _tx.atomic():
        so = SalesOrder(
            order_number=numbering.next_number("sales"),
            customer_id=customer.id,
            warehouse_id=int(warehouse_id),
            currency=(currency or settings_dao.default_currency()).upper(),
            tax_rate=d(tax_rate),
            shipping_fee=round2(shipping_fee),
            order_date=datetime.utcnow(),
            expected_ship_date=expected_ship_date,
            shipping_address=shipping_address or customer.address,
            notes=notes,
            status=SOStatus.DRAFT,
            total_cost=ZERO,
            created_by_id=user_id,
        )
        so.items.extend(lines)
        _recalc_totals(so)
        db.session.add(so)
    logger.info("SO %s created total=%s", so.order_number, so.total_amount)
    return so


def update_so(so_id: int, **fields) -> SalesOrder:
    so = get_so(so_id)
    if so.status != SOStatus.DRAFT:
        raise BadRequest("Only draft orders can be edited")
    if fields.get("customer_id"):
        _tx.fetch(Customer, fields["customer_id"], "Customer")
    if fields.get("warehouse_id"):
        _tx.fetch(Warehouse, fields["warehouse_id"], "Warehouse")
    _check_rate(fields.get("tax_rate"), fields.get("shipping_fee"))
    new_items = _build_items(fields["items"]) if fields.get("items") is not None else None

    with _tx.atomic():
        for k in ("customer_id", "warehouse_id", "expected_ship_date", "shipping_address", "notes"):
            if k in fields:
                setattr(so, k, fields[k])
        if fields.get("currency"):
            so.currency = fields["currency"].upper()
        if fields.get("tax_rate") is not None:
            so.tax_rate = d(fields["tax_rate"])
        if fields.get("shipping_fee") is not None:
            so.shipping_fee = round2(fields["shipping_fee"])
        if new_items is not None:
            so.items.clear()
            db.session.flush()
            so.items.extend(new_items)
        _recalc_totals(so)
    return so


def confirm_so(so_id: int, user_id: int | None) -> SalesOrder:
    """Allocate every line and reserve the stock; any shortfall aborts the lot."""
    so = get_so(so_id)
    if so.status != SOStatus.DRAFT:
        raise BadRequest("Only draft orders can be confirmed")
    if not so.items:
        raise BadRequest("Cannot confirm an order with no items")

    method = settings_dao.allocation_method()
    if method == AllocationMethod.SPECIFIC:
        # order lines carry no batch picks
        method = AllocationMethod.FIFO

    planned = defaultdict(lambda: ZERO)
    with _tx.atomic():
        total_cost = ZERO
        for item in so.items:
            plan = inv_dao.allocate(
                item.product_id, item.quantity, method, so.warehouse_id, planned=planned
            )
            for s in plan.slices:
                planned[s.inventory_id] += s.quantity
                item.allocations.append(
                    SalesOrderAllocation(
                        batch_id=s.batch_id,
                        inventory_id=s.inventory_id,
                        quantity=s.quantity,
                        cost_per_unit=s.cost_per_unit,
                        shipped_quantity=ZERO,
                    )
                )
            item.cost_amount = plan.total_cost
            item.unit_cost = per_unit(item.cost_amount, item.quantity)
            total_cost += item.cost_amount

        for inventory_id, qty in planned.items():
            inv_dao.reserve(inventory_id, qty)

        so.total_cost = round2(total_cost)
        transition(so, SOStatus.CONFIRMED, "Only draft orders can be confirmed", label=so.order_number)
        so.confirmed_by_id = user_id
        so.confirmed_at = datetime.utcnow()
    return so


def ship_so(
    so_id: int,
    lines: List[dict] | None,
    user_id: int | None = None,
    tracking_number: str | None = None,
    notes: str | None = None,
) -> SalesOrder:
    """Ship part or all of a confirmed order.

    ``lines`` is ``[{"item_id", "quantity_shipped"}]``; ``None`` ships every
    remaining quantity. Each line consumes the unshipped part of its
    allocations in allocation order.
    """
    so = get_so(so_id)
    if so.status not in (SOStatus.CONFIRMED, SOStatus.PROCESSING):
        raise BadRequest("Only confirmed or processing orders can be shipped")

    by_id = {i.id: i for i in so.items}
    if lines is None:
        lines = [
            {"item_id": i.id, "quantity_shipped": i.remaining_quantity}
            for i in so.items
            if d(i.remaining_quantity) > 0
        ]
    if not lines:
        raise BadRequest("At least one item must be shipped")

    requested = defaultdict(lambda: ZERO)
    for line in lines:
        item = by_id.get(int(line["item_id"]))
        if item is None:
            raise NotFound(f"Order item {line['item_id']} not found")
        qty = d(line["quantity_shipped"])
        if qty <= 0:
            raise BadRequest("Quantity must be greater than 0")
        requested[item.id] += qty
        remaining = d(item.quantity) - d(item.shipped_quantity)
        if requested[item.id] > remaining:
            raise BadRequest(
                f"Cannot ship more than remaining quantity for {item.product.name}. "
                f"Remaining: {fmt_qty(remaining)}"
            )

    with _tx.atomic():
        for item_id, qty in requested.items():
            item = by_id[item_id]
            left = qty
            for alloc in item.allocations:
                if left <= 0:
                    break
                take = min(d(alloc.outstanding_quantity), left)
                if take <= 0:
                    continue
                inv_dao.deduct(alloc.inventory_id, take)
                alloc.shipped_quantity = d(alloc.shipped_quantity) + take
                left -= take
            if left > 0:
                raise BadRequest(
                    f"Allocations for {item.product.name} do not cover the shipment. "
                    f"Short by {fmt_qty(left)}"
                )
            item.shipped_quantity = d(item.shipped_quantity) + qty

        if tracking_number:
            so.tracking_number = tracking_number
        if notes:
            so.notes = notes

        fully = all(d(i.shipped_quantity) >= d(i.quantity) for i in so.items)
        if fully:
            transition(so, SOStatus.SHIPPED, "Only confirmed or processing orders can be shipped", label=so.order_number)
            so.shipped_date = datetime.utcnow()
            acc_dao.create_sales_journal_entry(so, so.total_cost, user_id)
            if d(so.total_amount) > 0:
                acc_dao.create_receivable(so)
        else:
            transition(so, SOStatus.PROCESSING, "Only confirmed or processing orders can be shipped", label=so.order_number)
    return so


def cancel_so(so_id: int) -> SalesOrder:
    so = get_so(so_id)
    if so.status not in (SOStatus.DRAFT, SOStatus.CONFIRMED, SOStatus.PROCESSING):
        raise BadRequest("Cannot cancel a shipped, completed, or already cancelled order")

    with _tx.atomic():
        if so.status in (SOStatus.CONFIRMED, SOStatus.PROCESSING):
            for item in so.items:
                for alloc in item.allocations:
                    outstanding = d(alloc.outstanding_quantity)
                    if outstanding > 0:
                        inv_dao.release(alloc.inventory_id, outstanding)
        transition(
            so,
            SOStatus.CANCELLED,
            "Cannot cancel a shipped, completed, or already cancelled order",
            label=so.order_number,
        )
    return so


def complete_so(so_id: int) -> SalesOrder:
    so = get_so(so_id)
    with _tx.atomic():
        transition(so, SOStatus.COMPLETED, "Only shipped orders can be completed", label=so.order_number)
    return so


def delete_so(so_id: int) -> None:
    so = get_so(so_id)
    if so.status != SOStatus.DRAFT:
        raise BadRequest("Only draft orders can be deleted")
    db.session.delete(so)
    _tx.commit()
    logger.info("SO %s deleted", so.order_number)


def stats() -> dict:
    counts = dict(
        db.session.query(SalesOrder.status, func.count(SalesOrder.id))
        .group_by(SalesOrder.status)
        .all()
    )
    pending = (
        db.session.query(func.coalesce(func.sum(SalesOrder.total_amount), 0))
        .filter(SalesOrder.status.in_([SOStatus.CONFIRMED, SOStatus.PROCESSING]))
        .scalar()
    )
    return {
        "total": sum(counts.values()),
        **{s.value.lower(): counts.get(s, 0) for s in SOStatus},
        "pending_value": round2(pending),
    }
