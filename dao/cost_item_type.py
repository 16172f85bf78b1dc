# dao/cost_item_type.py
from typing import List

from configs import db
from dao import _tx
from db.models.batch import LandedCostItem
from db.models.cost_item_type import CostItemType
from utils.errors import Conflict, Forbidden, PreconditionFailed
from utils.pagination import paginate

DEFAULT_TYPES = [
    ("FREIGHT", "Freight", "International and domestic shipping costs", 1),
    ("DUTY", "Import Duty", "Customs duties and tariffs", 2),
    ("CLEARANCE", "Customs Clearance", "Customs broker and clearance fees", 3),
    ("INSURANCE", "Insurance", "Cargo insurance", 4),
    ("HANDLING", "Handling", "Port and terminal handling charges", 5),
    ("INSPECTION", "Inspection", "Quality and compliance inspection fees", 6),
    ("STORAGE", "Storage", "Warehousing and demurrage before receipt", 7),
    ("OTHER", "Other", "Other landed cost components", 99),
]


def list_cost_item_types(is_active=None, page: int = 1, page_size: int = 20) -> dict:
    q = CostItemType.query
    if is_active is not None:
        q = q.filter(CostItemType.is_active == bool(is_active))
    return paginate(
        q.order_by(CostItemType.sort_order.asc(), CostItemType.name.asc()), page, page_size
    )


def list_active_cost_item_types() -> List[CostItemType]:
    return (
        CostItemType.query.filter_by(is_active=True)
        .order_by(CostItemType.sort_order.asc(), CostItemType.name.asc())
        .all()
    )


def get_cost_item_type(type_id: int) -> CostItemType:
    return _tx.fetch(CostItemType, type_id, "Cost item type")


def _ensure_code_free(code: str, exclude_id=None) -> None:
    q = CostItemType.query.filter(CostItemType.code == code)
    if exclude_id:
        q = q.filter(CostItemType.id != exclude_id)
    if db.session.query(q.exists()).scalar():
        raise Conflict("Cost item type code already exists")


def create_cost_item_type(
    code: str,
    name: str,
    description: str | None = None,
    sort_order: int = 0,
    is_active: bool = True,
) -> CostItemType:
    code = code.strip().upper()
    _ensure_code_free(code)
    t = CostItemType(
        code=code,
        name=name.strip(),
        description=description,
        sort_order=sort_order,
        is_active=is_active,
        is_system=False,
    )
    db.session.add(t)
    _tx.commit()
    return t


def update_cost_item_type(type_id: int, **fields) -> CostItemType:
    t = get_cost_item_type(type_id)
    if fields.get("code") is not None:
        code = fields["code"].strip().upper()
        if t.is_system and code != t.code:
            raise Forbidden("Cannot change the code of a system cost type")
        _ensure_code_free(code, exclude_id=t.id)
        t.code = code
    for k in ("name", "description", "sort_order", "is_active"):
        if k in fields:
            setattr(t, k, fields[k])
    _tx.commit()
    return t


def delete_cost_item_type(type_id: int) -> None:
    t = get_cost_item_type(type_id)
    if t.is_system:
        raise Forbidden("Cannot delete a system cost type")
    if LandedCostItem.query.filter_by(cost_type_id=t.id).count():
        raise PreconditionFailed("Cannot delete a cost type used by landed cost items")
    db.session.delete(t)
    _tx.commit()


def seed_defaults() -> List[dict]:
    results = []
    for code, name, description, sort_order in DEFAULT_TYPES:
        if CostItemType.query.filter_by(code=code).one_or_none():
            results.append({"action": "skipped", "code": code})
            continue
        db.session.add(
            CostItemType(
                code=code,
                name=name,
                description=description,
                sort_order=sort_order,
                is_system=True,
                is_active=True,
            )
        )
        results.append({"action": "created", "code": code})
    _tx.commit()
    return results
