# dao/transfer.py
import logging
from collections import defaultdict
from datetime import datetime
from typing import List

from configs import db
from dao import _tx
from dao import inventory as inv_dao
from dao import numbering
from db.models.batch import Batch
from db.models.transfer import InventoryTransfer, TransferItem, TransferStatus
from db.models.warehouse import Warehouse
from utils.allocation import fmt_qty
from utils.errors import BadRequest
from utils.money import ZERO, d
from utils.pagination import paginate
from utils.workflow import transition

logger = logging.getLogger(__name__)


def list_transfers(
    status: str | None = None,
    source_warehouse_id=None,
    target_warehouse_id=None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = InventoryTransfer.query
    if status:
        q = q.filter(InventoryTransfer.status == TransferStatus(status))
    if source_warehouse_id:
        q = q.filter(InventoryTransfer.source_warehouse_id == int(source_warehouse_id))
    if target_warehouse_id:
        q = q.filter(InventoryTransfer.target_warehouse_id == int(target_warehouse_id))
    return paginate(
        q.order_by(InventoryTransfer.created_at.desc(), InventoryTransfer.id.desc()),
        page,
        page_size,
    )


def get_transfer(transfer_id: int) -> InventoryTransfer:
    return _tx.fetch(InventoryTransfer, transfer_id, "Transfer")


def _check_available(source_warehouse_id: int, items) -> None:
    """Every (product, batch) must have enough unreserved stock at the source."""
    wanted = defaultdict(lambda: ZERO)
    for it in items:
        wanted[(int(it["product_id"]), int(it["batch_id"]))] += d(it["quantity"])

    for (product_id, batch_id), qty in wanted.items():
        if qty <= 0:
            raise BadRequest("Quantity must be greater than 0")
        inv = inv_dao.find_row(product_id, batch_id, source_warehouse_id)
        if inv is None:
            raise BadRequest("Product/batch not found in source warehouse")
        available = d(inv.quantity) - d(inv.reserved_quantity)
        if available < qty:
            raise BadRequest(
                "Insufficient quantity available. "
                f"Available: {fmt_qty(available)}, Requested: {fmt_qty(qty)}"
            )


def create_transfer(
    source_warehouse_id: int,
    target_warehouse_id: int,
    items: List[dict],
    user_id: int | None = None,
    notes: str | None = None,
) -> InventoryTransfer:
    if int(source_warehouse_id) == int(target_warehouse_id):
        raise BadRequest("Source and target warehouses must be different")
    _tx.fetch(Warehouse, source_warehouse_id, "Source warehouse")
    _tx.fetch(Warehouse, target_warehouse_id, "Target warehouse")
    if not items:
        raise BadRequest("At least one item is required")
    for it in items:
        b = _tx.fetch(Batch, it["batch_id"], "Batch")
        if b.product_id != int(it["product_id"]):
            raise BadRequest(f"Batch {b.batch_number} does not belong to the product")
    _check_available(source_warehouse_id, items)

    with _tx.atomic():
        t = InventoryTransfer(
            transfer_number=numbering.next_number("transfer"),
            source_warehouse_id=int(source_warehouse_id),
            target_warehouse_id=int(target_warehouse_id),
            status=TransferStatus.DRAFT,
            notes=notes,
            requested_by_id=user_id,
        )
        for it in items:
            t.items.append(
                TransferItem(
                    product_id=int(it["product_id"]),
                    batch_id=int(it["batch_id"]),
                    quantity=d(it["quantity"]),
                )
            )
        db.session.add(t)
    logger.info("transfer %s created", t.transfer_number)
    return t


def _lines(t: InventoryTransfer) -> List[dict]:
    return [
        {"product_id": i.product_id, "batch_id": i.batch_id, "quantity": i.quantity}
        for i in t.items
    ]


def submit_transfer(transfer_id: int) -> InventoryTransfer:
    t = get_transfer(transfer_id)
    if t.status != TransferStatus.DRAFT:
        raise BadRequest("Only draft transfers can be submitted")
    _check_available(t.source_warehouse_id, _lines(t))
    with _tx.atomic():
        transition(t, TransferStatus.PENDING, "Only draft transfers can be submitted", label=t.transfer_number)
    return t


def approve_transfer(transfer_id: int, user_id: int | None) -> InventoryTransfer:
    t = get_transfer(transfer_id)
    if t.status != TransferStatus.PENDING:
        raise BadRequest("Only pending transfers can be approved")
    with _tx.atomic():
        for item in t.items:
            inv = inv_dao.find_row(item.product_id, item.batch_id, t.source_warehouse_id)
            if inv is None:
                raise BadRequest("Inventory record not found for transfer item")
            inv_dao.reserve(inv, item.quantity)
        transition(t, TransferStatus.IN_TRANSIT, "Only pending transfers can be approved", label=t.transfer_number)
        t.approved_by_id = user_id
        t.approved_at = datetime.utcnow()
    return t


def complete_transfer(transfer_id: int, user_id: int | None) -> InventoryTransfer:
    t = get_transfer(transfer_id)
    if t.status != TransferStatus.IN_TRANSIT:
        raise BadRequest("Only in-transit transfers can be completed")
    with _tx.atomic():
        for item in t.items:
            inv = inv_dao.find_row(item.product_id, item.batch_id, t.source_warehouse_id)
            if inv is None:
                raise BadRequest("Inventory record not found for transfer item")
            inv_dao.deduct(inv, item.quantity)
            inv_dao.add_from_batch(item.batch_id, item.product_id, t.target_warehouse_id, item.quantity)
        transition(t, TransferStatus.COMPLETED, "Only in-transit transfers can be completed", label=t.transfer_number)
        t.completed_by_id = user_id
        t.completed_at = datetime.utcnow()
    return t


def cancel_transfer(transfer_id: int) -> InventoryTransfer:
    t = get_transfer(transfer_id)
    message = "Cannot cancel completed or already cancelled transfers"
    if t.status.is_terminal:
        raise BadRequest(message)
    with _tx.atomic():
        if t.status == TransferStatus.IN_TRANSIT:
            for item in t.items:
                inv = inv_dao.find_row(item.product_id, item.batch_id, t.source_warehouse_id)
                if inv is not None:
                    inv_dao.release(inv, item.quantity)
        transition(t, TransferStatus.CANCELLED, message, label=t.transfer_number)
    return t


def delete_transfer(transfer_id: int) -> None:
    t = get_transfer(transfer_id)
    if t.status != TransferStatus.DRAFT:
        raise BadRequest("Only draft transfers can be deleted")
    db.session.delete(t)
    _tx.commit()
    logger.info("transfer %s deleted", t.transfer_number)
