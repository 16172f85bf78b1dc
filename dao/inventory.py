# dao/inventory.py
"""Stock rows per (product, batch, warehouse) and the operations that move them.

Nothing in here commits: callers wrap reserve/release/deduct/add_from_batch in
``dao._tx.atomic()`` together with the document change that caused them.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import or_

from configs import db
from dao import _tx
from dao import settings as settings_dao
from db.models.batch import Batch, BatchStatus
from db.models.inventory import Inventory
from db.models.product import Product
from db.models.warehouse import Warehouse
from utils.allocation import (
    AllocationMethod,
    AllocationPlan,
    Candidate,
    fmt_qty,
    plan_allocation,
)
from utils.errors import AppError, BadRequest
from utils.money import ZERO, d, per_unit, round2
from utils.pagination import paginate, paginate_list

logger = logging.getLogger(__name__)


# ---------------- lookups ----------------
def find_row(product_id: int, batch_id: int, warehouse_id: int) -> Optional[Inventory]:
    return (
        Inventory.query.filter_by(
            product_id=int(product_id), batch_id=int(batch_id), warehouse_id=int(warehouse_id)
        )
        .with_for_update()
        .one_or_none()
    )


def _locked(inv) -> Inventory:
    if isinstance(inv, Inventory):
        return inv
    return db.session.get(Inventory, int(inv), with_for_update=True)


def available_inventory(
    product_id: int,
    warehouse_id: int | None = None,
    planned: Dict[int, Decimal] | None = None,
) -> List[Candidate]:
    """Candidate rows with stock left to allocate.

    ``planned`` maps inventory ids to quantities already promised in the
    current operation but not yet reserved.
    """
    q = (
        db.session.query(Inventory, Batch)
        .join(Batch, Batch.id == Inventory.batch_id)
        .filter(Inventory.product_id == int(product_id))
        .filter(Batch.status != BatchStatus.CANCELLED)
    )
    if warehouse_id:
        q = q.filter(Inventory.warehouse_id == int(warehouse_id))

    planned = planned or {}
    out = []
    for inv, batch in q.order_by(Batch.received_date.asc(), Batch.id.asc()).all():
        available = d(inv.quantity) - d(inv.reserved_quantity) - planned.get(inv.id, ZERO)
        if available <= 0:
            continue
        out.append(
            Candidate(
                batch_id=batch.id,
                inventory_id=inv.id,
                available=available,
                cost_per_unit=d(batch.cost_per_unit),
                received_date=batch.received_date,
                batch_number=batch.batch_number,
                warehouse_id=inv.warehouse_id,
            )
        )
    return out


def allocate(
    product_id: int,
    quantity,
    method: AllocationMethod | None = None,
    warehouse_id: int | None = None,
    picks=None,
    planned: Dict[int, Decimal] | None = None,
) -> AllocationPlan:
    method = method or settings_dao.allocation_method()
    candidates = available_inventory(product_id, warehouse_id, planned)
    return plan_allocation(candidates, quantity, method, picks)


# ---------------- mutations ----------------
def add_from_batch(batch_id: int, product_id: int, warehouse_id: int, quantity) -> Inventory:
    quantity = d(quantity)
    inv = find_row(product_id, batch_id, warehouse_id)
    if inv is None:
        inv = Inventory(
            product_id=int(product_id),
            batch_id=int(batch_id),
            warehouse_id=int(warehouse_id),
            quantity=quantity,
            reserved_quantity=ZERO,
        )
        db.session.add(inv)
    else:
        inv.quantity = d(inv.quantity) + quantity
    db.session.flush()
    logger.info(
        "inventory +%s product=%s batch=%s warehouse=%s",
        fmt_qty(quantity), product_id, batch_id, warehouse_id,
    )
    return inv


def reserve(inv, quantity) -> Inventory:
    inv = _locked(inv)
    quantity = d(quantity)
    available = d(inv.quantity) - d(inv.reserved_quantity)
    if quantity > available:
        raise BadRequest(
            "Insufficient quantity available. "
            f"Available: {fmt_qty(available)}, Requested: {fmt_qty(quantity)}"
        )
    inv.reserved_quantity = d(inv.reserved_quantity) + quantity
    logger.info("inventory %s reserved +%s", inv.id, fmt_qty(quantity))
    return inv


def release(inv, quantity) -> Inventory:
    inv = _locked(inv)
    quantity = d(quantity)
    inv.reserved_quantity = max(d(inv.reserved_quantity) - quantity, ZERO)
    logger.info("inventory %s reserved -%s", inv.id, fmt_qty(quantity))
    return inv


def deduct(inv, quantity, from_reserved: bool = True) -> Inventory:
    """Remove stock physically; with ``from_reserved`` the reservation goes too."""
    inv = _locked(inv)
    quantity = d(quantity)
    on_hand = d(inv.quantity)
    if on_hand - quantity < 0 and not settings_dao.allow_negative_inventory():
        raise BadRequest(
            "Insufficient stock on hand. "
            f"On hand: {fmt_qty(on_hand)}, Requested: {fmt_qty(quantity)}"
        )
    inv.quantity = on_hand - quantity
    if from_reserved:
        inv.reserved_quantity = max(d(inv.reserved_quantity) - quantity, ZERO)
    logger.info("inventory %s -%s", inv.id, fmt_qty(quantity))
    return inv


# ---------------- queries ----------------
def list_inventory(
    product_id=None,
    warehouse_id=None,
    batch_id=None,
    low_stock: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = Inventory.query.join(Product, Product.id == Inventory.product_id).join(
        Batch, Batch.id == Inventory.batch_id
    )
    if product_id:
        q = q.filter(Inventory.product_id == int(product_id))
    if warehouse_id:
        q = q.filter(Inventory.warehouse_id == int(warehouse_id))
    if batch_id:
        q = q.filter(Inventory.batch_id == int(batch_id))
    q = q.order_by(Product.name.asc(), Batch.received_date.desc())
    if low_stock:
        rows = [
            inv for inv in q.all()
            if d(inv.available_quantity) <= d(inv.product.min_stock_level)
        ]
        return paginate_list(rows, page, page_size)
    return paginate(q, page, page_size)


def _summarize(rows) -> dict:
    total_qty = sum((d(i.quantity) for i in rows), ZERO)
    reserved = sum((d(i.reserved_quantity) for i in rows), ZERO)
    value = sum((d(i.quantity) * d(i.batch.cost_per_unit) for i in rows), ZERO)
    return {
        "total_quantity": total_qty,
        "reserved_quantity": reserved,
        "available_quantity": total_qty - reserved,
        "total_value": round2(value),
        "avg_cost_per_unit": per_unit(value, total_qty),
    }


def summary_for_product(product_id: int) -> dict:
    rows = Inventory.query.filter_by(product_id=int(product_id)).all()
    return _summarize(rows)


def summary_by_product(
    search: str | None = None,
    low_stock_only: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = Product.query.filter(Product.inventory.any())
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Product.sku.ilike(like), Product.name.ilike(like)))
    q = q.order_by(Product.name.asc())

    def build(p: Product) -> dict:
        s = _summarize(p.inventory)
        s.update(
            product=p,
            is_low_stock=s["available_quantity"] <= d(p.min_stock_level),
            warehouse_count=len({i.warehouse_id for i in p.inventory}),
            batch_count=len(p.inventory),
        )
        return s

    if low_stock_only:
        rows = [s for s in (build(p) for p in q.all()) if s["is_low_stock"]]
        return paginate_list(rows, page, page_size)
    result = paginate(q, page, page_size)
    result["items"] = [build(p) for p in result["items"]]
    return result


def by_warehouse(warehouse_id: int) -> dict:
    w = _tx.fetch(Warehouse, warehouse_id, "Warehouse")
    rows = (
        Inventory.query.join(Product, Product.id == Inventory.product_id)
        .filter(Inventory.warehouse_id == w.id)
        .order_by(Product.name.asc())
        .all()
    )
    return {"warehouse": w, "inventory": rows}


def check_availability(product_id: int, quantity, warehouse_id=None) -> dict:
    quantity = d(quantity)
    candidates = available_inventory(product_id, warehouse_id)
    total = sum((c.available for c in candidates), ZERO)
    return {
        "is_available": total >= quantity,
        "available_quantity": total,
        "requested_quantity": quantity,
        "shortfall": max(quantity - total, ZERO),
        "batches": [
            {
                "batch_id": c.batch_id,
                "batch_number": c.batch_number,
                "available_quantity": c.available,
                "cost_per_unit": c.cost_per_unit,
            }
            for c in candidates
        ],
    }


def preview_allocation(
    product_id: int, quantity, method=AllocationMethod.FIFO, warehouse_id=None, picks=None
) -> dict:
    quantity = d(quantity)
    try:
        plan = allocate(product_id, quantity, method, warehouse_id, picks)
    except AppError as exc:
        return {
            "success": False,
            "error": exc.message,
            "allocations": [],
            "total_quantity": quantity,
            "total_cost": round2(ZERO),
            "avg_cost_per_unit": per_unit(ZERO, ZERO),
        }
    return {
        "success": True,
        "error": None,
        "allocations": [
            {
                "batch_id": s.batch_id,
                "batch_number": s.batch_number,
                "quantity": s.quantity,
                "cost_per_unit": s.cost_per_unit,
                "total_cost": round2(s.cost),
            }
            for s in plan.slices
        ],
        "total_quantity": quantity,
        "total_cost": plan.total_cost,
        "avg_cost_per_unit": plan.avg_cost_per_unit,
    }


def stats() -> dict:
    rows = Inventory.query.all()
    total_value = sum((d(i.quantity) * d(i.batch.cost_per_unit) for i in rows), ZERO)

    per_product = defaultdict(lambda: ZERO)
    for i in rows:
        per_product[i.product_id] += d(i.available_quantity)
    low_stock = 0
    for p in Product.query.filter_by(is_active=True).all():
        if per_product.get(p.id, ZERO) <= d(p.min_stock_level):
            low_stock += 1

    warehouses = []
    for w in Warehouse.query.filter_by(is_active=True).order_by(Warehouse.name.asc()).all():
        wh_rows = [i for i in rows if i.warehouse_id == w.id]
        warehouses.append(
            {
                "warehouse_id": w.id,
                "code": w.code,
                "name": w.name,
                "product_count": len({i.product_id for i in wh_rows}),
                "total_value": round2(
                    sum((d(i.quantity) * d(i.batch.cost_per_unit) for i in wh_rows), ZERO)
                ),
            }
        )

    return {
        "total_products": len({i.product_id for i in rows}),
        "total_value": round2(total_value),
        "low_stock_count": low_stock,
        "warehouses": warehouses,
    }
