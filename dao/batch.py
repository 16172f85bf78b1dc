# dao/batch.py
"""Batch landed-cost bookkeeping.

A batch's cost is its purchase cost plus the landed cost items recorded
against it while it is DRAFT. Confirmation freezes the numbers.
"""
import logging
from datetime import datetime

from sqlalchemy import func, or_

from configs import db
from dao import _tx
from dao import numbering
from dao import settings as settings_dao
from db.models.batch import Batch, BatchStatus, LandedCostItem
from db.models.cost_item_type import CostItemType
from db.models.inventory import Inventory
from db.models.product import Product
from db.models.sales import SalesOrderAllocation
from db.models.supplier import Supplier
from db.models.warehouse import Warehouse
from utils.errors import BadRequest, Forbidden, PreconditionFailed
from utils.money import ZERO, d, per_unit, round2, round4
from utils.pagination import paginate
from utils.workflow import transition

logger = logging.getLogger(__name__)


def list_batches(
    product_id=None,
    supplier_id=None,
    warehouse_id=None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = Batch.query.join(Product, Product.id == Batch.product_id)
    if product_id:
        q = q.filter(Batch.product_id == int(product_id))
    if supplier_id:
        q = q.filter(Batch.supplier_id == int(supplier_id))
    if warehouse_id:
        q = q.filter(Batch.warehouse_id == int(warehouse_id))
    if status:
        q = q.filter(Batch.status == BatchStatus(status))
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(
            or_(Batch.batch_number.ilike(like), Product.name.ilike(like), Product.sku.ilike(like))
        )
    return paginate(q.order_by(Batch.created_at.desc(), Batch.id.desc()), page, page_size)


def get_batch(batch_id: int) -> Batch:
    return _tx.fetch(Batch, batch_id, "Batch")


def recalculate(batch: Batch) -> Batch:
    """Refresh the derived cost columns from purchase cost and cost items."""
    landed = sum((d(i.amount_in_batch_currency) for i in batch.landed_cost_items), ZERO)
    batch.total_landed_cost = round2(landed)
    batch.total_cost = round2(d(batch.total_purchase_cost) + batch.total_landed_cost)
    batch.cost_per_unit = per_unit(batch.total_cost, batch.quantity)
    return batch


def _require_draft(batch: Batch, message: str) -> None:
    if batch.status != BatchStatus.DRAFT:
        raise Forbidden(message)


def build_batch(
    product_id: int,
    warehouse_id: int,
    quantity,
    unit_purchase_cost,
    supplier_id: int | None = None,
    purchase_order_id: int | None = None,
    currency: str | None = None,
    received_date: datetime | None = None,
    notes: str | None = None,
) -> Batch:
    """Create a DRAFT batch in the current transaction without committing."""
    quantity = d(quantity)
    unit_cost = d(unit_purchase_cost)
    if quantity <= 0:
        raise BadRequest("Quantity must be greater than 0")
    if unit_cost < 0:
        raise BadRequest("Unit purchase cost cannot be negative")

    purchase_cost = round2(quantity * unit_cost)
    b = Batch(
        batch_number=numbering.next_number("batch"),
        product_id=int(product_id),
        warehouse_id=int(warehouse_id),
        supplier_id=supplier_id,
        purchase_order_id=purchase_order_id,
        quantity=quantity,
        unit_purchase_cost=unit_cost,
        total_purchase_cost=purchase_cost,
        total_landed_cost=round2(ZERO),
        total_cost=purchase_cost,
        cost_per_unit=round4(unit_cost),
        currency=(currency or settings_dao.default_currency()).upper(),
        received_date=received_date or datetime.utcnow(),
        notes=notes,
        status=BatchStatus.DRAFT,
    )
    db.session.add(b)
    db.session.flush()
    logger.info("batch %s created qty=%s cost=%s", b.batch_number, quantity, purchase_cost)
    return b


def create_batch(**fields) -> Batch:
    _tx.fetch(Product, fields["product_id"], "Product")
    _tx.fetch(Warehouse, fields["warehouse_id"], "Warehouse")
    if fields.get("supplier_id"):
        _tx.fetch(Supplier, fields["supplier_id"], "Supplier")
    with _tx.atomic():
        b = build_batch(**fields)
    return b


def update_batch(batch_id: int, **fields) -> Batch:
    b = get_batch(batch_id)
    _require_draft(b, "Cannot modify confirmed or cancelled batches")

    if fields.get("supplier_id"):
        _tx.fetch(Supplier, fields["supplier_id"], "Supplier")
    if fields.get("warehouse_id"):
        _tx.fetch(Warehouse, fields["warehouse_id"], "Warehouse")

    with _tx.atomic():
        for k in ("supplier_id", "warehouse_id", "received_date", "notes"):
            if k in fields:
                setattr(b, k, fields[k])
        if fields.get("currency"):
            b.currency = fields["currency"].upper()
        if "quantity" in fields and fields["quantity"] is not None:
            if d(fields["quantity"]) <= 0:
                raise BadRequest("Quantity must be greater than 0")
            b.quantity = d(fields["quantity"])
        if "unit_purchase_cost" in fields and fields["unit_purchase_cost"] is not None:
            b.unit_purchase_cost = d(fields["unit_purchase_cost"])
        b.total_purchase_cost = round2(d(b.quantity) * d(b.unit_purchase_cost))
        recalculate(b)
    return b


def delete_batch(batch_id: int) -> None:
    b = get_batch(batch_id)
    _require_draft(b, "Only draft batches can be deleted")

    stocked = Inventory.query.filter(
        Inventory.batch_id == b.id,
        or_(Inventory.quantity != 0, Inventory.reserved_quantity != 0),
    ).count()
    allocated = SalesOrderAllocation.query.filter_by(batch_id=b.id).count()
    if stocked or allocated:
        raise PreconditionFailed("Cannot delete a batch that holds inventory or allocations")

    with _tx.atomic():
        Inventory.query.filter_by(batch_id=b.id).delete()
        db.session.delete(b)
    logger.info("batch %s deleted", b.batch_number)


def confirm_batch(batch_id: int, user_id: int | None) -> Batch:
    b = get_batch(batch_id)
    if b.status == BatchStatus.CONFIRMED:
        raise BadRequest("Batch is already confirmed")
    if b.status == BatchStatus.CANCELLED:
        raise BadRequest("Cannot confirm a cancelled batch")

    with _tx.atomic():
        recalculate(b)
        transition(b, BatchStatus.CONFIRMED, "Batch is already confirmed", label=b.batch_number)
        b.confirmed_at = datetime.utcnow()
        b.confirmed_by_id = user_id
    return b


def cancel_batch(batch_id: int) -> Batch:
    b = get_batch(batch_id)
    with _tx.atomic():
        transition(b, BatchStatus.CANCELLED, "Batch is already cancelled", label=b.batch_number)
    return b


# ---------------- landed cost items ----------------
def add_cost_item(
    batch_id: int,
    cost_type_id: int,
    amount,
    currency: str | None = None,
    exchange_rate=None,
    description: str | None = None,
    reference_number: str | None = None,
) -> LandedCostItem:
    b = get_batch(batch_id)
    _require_draft(b, "Cannot add costs to confirmed or cancelled batches")
    _tx.fetch(CostItemType, cost_type_id, "Cost item type")

    amount = d(amount)
    rate = d(exchange_rate) if exchange_rate else d(1)
    if amount < 0:
        raise BadRequest("Amount cannot be negative")
    if rate <= 0:
        raise BadRequest("Exchange rate must be greater than 0")

    with _tx.atomic():
        item = LandedCostItem(
            cost_type_id=int(cost_type_id),
            amount=amount,
            currency=(currency or b.currency).upper(),
            exchange_rate=rate,
            amount_in_batch_currency=round2(amount * rate),
            description=description,
            reference_number=reference_number,
        )
        b.landed_cost_items.append(item)
        db.session.flush()
        recalculate(b)
    logger.info(
        "batch %s landed cost +%s (total %s)", b.batch_number, item.amount_in_batch_currency, b.total_cost
    )
    return item


def update_cost_item(cost_item_id: int, **fields) -> LandedCostItem:
    item = _tx.fetch(LandedCostItem, cost_item_id, "Cost item")
    b = item.batch
    _require_draft(b, "Cannot modify costs of confirmed or cancelled batches")

    with _tx.atomic():
        if fields.get("cost_type_id"):
            _tx.fetch(CostItemType, fields["cost_type_id"], "Cost item type")
            item.cost_type_id = int(fields["cost_type_id"])
        if fields.get("amount") is not None:
            if d(fields["amount"]) < 0:
                raise BadRequest("Amount cannot be negative")
            item.amount = d(fields["amount"])
        if fields.get("currency"):
            item.currency = fields["currency"].upper()
        if fields.get("exchange_rate") is not None:
            if d(fields["exchange_rate"]) <= 0:
                raise BadRequest("Exchange rate must be greater than 0")
            item.exchange_rate = d(fields["exchange_rate"])
        for k in ("description", "reference_number"):
            if k in fields:
                setattr(item, k, fields[k])
        item.amount_in_batch_currency = round2(d(item.amount) * d(item.exchange_rate))
        db.session.flush()
        recalculate(b)
    return item


def remove_cost_item(cost_item_id: int) -> Batch:
    item = _tx.fetch(LandedCostItem, cost_item_id, "Cost item")
    b = item.batch
    _require_draft(b, "Cannot remove costs from confirmed or cancelled batches")

    with _tx.atomic():
        b.landed_cost_items.remove(item)
        db.session.flush()
        recalculate(b)
    return b


def stats() -> dict:
    counts = dict(
        db.session.query(Batch.status, func.count(Batch.id)).group_by(Batch.status).all()
    )
    confirmed_value = (
        db.session.query(func.coalesce(func.sum(Batch.total_cost), 0))
        .filter(Batch.status == BatchStatus.CONFIRMED)
        .scalar()
    )
    return {
        "total": sum(counts.values()),
        "draft": counts.get(BatchStatus.DRAFT, 0),
        "confirmed": counts.get(BatchStatus.CONFIRMED, 0),
        "cancelled": counts.get(BatchStatus.CANCELLED, 0),
        "total_confirmed_value": round2(confirmed_value),
    }
