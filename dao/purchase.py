# dao/purchase.py
import logging
from collections import defaultdict
from datetime import datetime
from typing import List

from sqlalchemy import func

from configs import db
from dao import _tx
from dao import accounting as acc_dao
from dao import batch as batch_dao
from dao import inventory as inv_dao
from dao import numbering
from dao import settings as settings_dao
from db.models.product import Product
from db.models.purchase import POStatus, PurchaseOrder, PurchaseOrderItem
from db.models.supplier import Supplier
from db.models.warehouse import Warehouse
from utils.allocation import fmt_qty
from utils.errors import BadRequest, NotFound
from utils.money import ZERO, d, round2
from utils.pagination import paginate
from utils.workflow import transition

logger = logging.getLogger(__name__)


def list_purchases(
    status: str | None = None,
    supplier_id=None,
    warehouse_id=None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = PurchaseOrder.query
    if status:
        q = q.filter(PurchaseOrder.status == POStatus(status))
    if supplier_id:
        q = q.filter(PurchaseOrder.supplier_id == int(supplier_id))
    if warehouse_id:
        q = q.filter(PurchaseOrder.warehouse_id == int(warehouse_id))
    if date_from:
        q = q.filter(PurchaseOrder.order_date >= date_from)
    if date_to:
        q = q.filter(PurchaseOrder.order_date <= date_to)
    return paginate(
        q.order_by(PurchaseOrder.order_date.desc().nullslast(), PurchaseOrder.id.desc()),
        page,
        page_size,
    )


def get_po(po_id: int) -> PurchaseOrder:
    return _tx.fetch(PurchaseOrder, po_id, "Purchase order")


# ---------------- helpers ----------------
def _build_items(items: List[dict]) -> List[PurchaseOrderItem]:
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
            PurchaseOrderItem(
                product_id=int(it["product_id"]),
                quantity=qty,
                unit_price=price,
                total_price=round2(qty * price),
                received_quantity=ZERO,
                notes=it.get("notes"),
            )
        )
    return out


def _recalc_totals(po: PurchaseOrder) -> None:
    subtotal = round2(sum((d(i.total_price) for i in po.items), ZERO))
    po.subtotal = subtotal
    po.total_amount = subtotal


# ---------------- mutations ----------------
def create_po(
    supplier_id: int,
    warehouse_id: int,
    items: List[dict],
    user_id: int | None = None,
    currency: str | None = None,
    expected_date: datetime | None = None,
    notes: str | None = None,
) -> PurchaseOrder:
    supplier = _tx.fetch(Supplier, supplier_id, "Supplier")
    _tx.fetch(Warehouse, warehouse_id, "Warehouse")
    lines = _build_items(items)

    with _tx.atomic():
        po = PurchaseOrder(
            order_number=numbering.next_number("purchase"),
            supplier_id=supplier.id,
            warehouse_id=int(warehouse_id),
            currency=(currency or supplier.currency or settings_dao.default_currency()).upper(),
            order_date=datetime.utcnow(),
            expected_date=expected_date,
            notes=notes,
            status=POStatus.DRAFT,
            created_by_id=user_id,
        )
        po.items.extend(lines)
        _recalc_totals(po)
        db.session.add(po)
    logger.info("PO %s created total=%s", po.order_number, po.total_amount)
    return po


def update_po(po_id: int, **fields) -> PurchaseOrder:
    po = get_po(po_id)
    if po.status != POStatus.DRAFT:
        raise BadRequest("Only draft orders can be edited")
    if fields.get("supplier_id"):
        _tx.fetch(Supplier, fields["supplier_id"], "Supplier")
    if fields.get("warehouse_id"):
        _tx.fetch(Warehouse, fields["warehouse_id"], "Warehouse")
    new_items = _build_items(fields["items"]) if fields.get("items") is not None else None

    with _tx.atomic():
        for k in ("supplier_id", "warehouse_id", "expected_date", "notes"):
            if k in fields:
                setattr(po, k, fields[k])
        if fields.get("currency"):
            po.currency = fields["currency"].upper()
        if new_items is not None:
            po.items.clear()
            db.session.flush()
            po.items.extend(new_items)
        _recalc_totals(po)
    return po


def confirm_po(po_id: int, user_id: int | None) -> PurchaseOrder:
    po = get_po(po_id)
    if po.status != POStatus.DRAFT:
        raise BadRequest("Only draft orders can be confirmed")
    if not po.items:
        raise BadRequest("Cannot confirm an order with no items")
    with _tx.atomic():
        transition(po, POStatus.CONFIRMED, "Only draft orders can be confirmed", label=po.order_number)
        po.confirmed_by_id = user_id
        po.confirmed_at = datetime.utcnow()
    return po


def receive_po(
    po_id: int,
    lines: List[dict],
    user_id: int | None = None,
    notes: str | None = None,
    received_date: datetime | None = None,
) -> dict:
    """Receive goods: one DRAFT batch and one inventory increment per line.

    Posts Inventory / Accounts Payable for the received value and opens a
    payable against the supplier, all in one transaction.
    """
    po = get_po(po_id)
    if po.status not in (POStatus.CONFIRMED, POStatus.PARTIAL):
        raise BadRequest("Only confirmed or partial orders can receive goods")
    if not lines:
        raise BadRequest("At least one item must be received")

    by_id = {i.id: i for i in po.items}
    requested = defaultdict(lambda: ZERO)
    for line in lines:
        item = by_id.get(int(line["item_id"]))
        if item is None:
            raise NotFound(f"Order item {line['item_id']} not found")
        qty = d(line["quantity_received"])
        if qty <= 0:
            raise BadRequest("Quantity must be greater than 0")
        requested[item.id] += qty
        remaining = d(item.quantity) - d(item.received_quantity)
        if requested[item.id] > remaining:
            raise BadRequest(
                f"Cannot receive more than remaining quantity for {item.product.name}. "
                f"Remaining: {fmt_qty(remaining)}"
            )

    created = []
    received_value = ZERO
    with _tx.atomic():
        for line in lines:
            item = by_id[int(line["item_id"])]
            qty = d(line["quantity_received"])
            b = batch_dao.build_batch(
                product_id=item.product_id,
                warehouse_id=po.warehouse_id,
                quantity=qty,
                unit_purchase_cost=item.unit_price,
                supplier_id=po.supplier_id,
                purchase_order_id=po.id,
                currency=po.currency,
                received_date=received_date,
                notes=notes,
            )
            inv_dao.add_from_batch(b.id, item.product_id, po.warehouse_id, qty)
            item.received_quantity = d(item.received_quantity) + qty
            received_value += d(b.total_purchase_cost)
            created.append(
                {
                    "batch_id": b.id,
                    "batch_number": b.batch_number,
                    "product_name": item.product.name,
                    "quantity": qty,
                }
            )

        fully = all(d(i.received_quantity) >= d(i.quantity) for i in po.items)
        transition(
            po,
            POStatus.RECEIVED if fully else POStatus.PARTIAL,
            "Only confirmed or partial orders can receive goods",
            label=po.order_number,
        )

        received_value = round2(received_value)
        je = payable = None
        if received_value > 0:
            je = acc_dao.create_purchase_journal_entry(po, received_value, user_id)
            payable = acc_dao.create_payable(po, received_value)

    return {
        "status": po.status.value,
        "batches": created,
        "received_value": received_value,
        "journal_entry_number": je.entry_number if je else None,
        "payable_id": payable.id if payable else None,
    }


def cancel_po(po_id: int) -> PurchaseOrder:
    po = get_po(po_id)
    with _tx.atomic():
        transition(
            po,
            POStatus.CANCELLED,
            "Cannot cancel a completed or already cancelled order",
            label=po.order_number,
        )
    return po


def delete_po(po_id: int) -> None:
    po = get_po(po_id)
    if po.status != POStatus.DRAFT:
        raise BadRequest("Only draft orders can be deleted")
    db.session.delete(po)
    _tx.commit()
    logger.info("PO %s deleted", po.order_number)


def stats() -> dict:
    counts = dict(
        db.session.query(PurchaseOrder.status, func.count(PurchaseOrder.id))
        .group_by(PurchaseOrder.status)
        .all()
    )
    pending = (
        db.session.query(func.coalesce(func.sum(PurchaseOrder.total_amount), 0))
        .filter(PurchaseOrder.status.in_([POStatus.CONFIRMED, POStatus.PARTIAL]))
        .scalar()
    )
    return {
        "total": sum(counts.values()),
        **{s.value.lower(): counts.get(s, 0) for s in POStatus},
        "pending_value": round2(pending),
    }
