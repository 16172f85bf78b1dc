# dao/warehouse.py
import logging
from typing import List, Optional

from sqlalchemy import or_

from configs import db
from dao import _tx
from db.models.inventory import Inventory
from db.models.warehouse import Warehouse
from utils.errors import BadRequest, Conflict, PreconditionFailed
from utils.pagination import paginate

logger = logging.getLogger(__name__)


def list_warehouses(search=None, is_active=None, page: int = 1, page_size: int = 20) -> dict:
    q = Warehouse.query
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Warehouse.code.ilike(like), Warehouse.name.ilike(like)))
    if is_active is not None:
        q = q.filter(Warehouse.is_active == bool(is_active))
    return paginate(
        q.order_by(Warehouse.is_default.desc(), Warehouse.name.asc()), page, page_size
    )


def list_active_warehouses() -> List[Warehouse]:
    return (
        Warehouse.query.filter_by(is_active=True)
        .order_by(Warehouse.is_default.desc(), Warehouse.name.asc())
        .all()
    )


def get_warehouse(warehouse_id: int) -> Warehouse:
    return _tx.fetch(Warehouse, warehouse_id, "Warehouse")


def get_default_warehouse() -> Optional[Warehouse]:
    return Warehouse.query.filter_by(is_default=True).first()


def _ensure_code_free(code: str, exclude_id=None) -> None:
    q = Warehouse.query.filter(Warehouse.code == code)
    if exclude_id:
        q = q.filter(Warehouse.id != exclude_id)
    if db.session.query(q.exists()).scalar():
        raise Conflict("Warehouse code already exists")


def _clear_default(except_id=None) -> None:
    q = Warehouse.query.filter(Warehouse.is_default.is_(True))
    if except_id:
        q = q.filter(Warehouse.id != except_id)
    for w in q.all():
        w.is_default = False


def create_warehouse(
    code: str,
    name: str,
    address: str | None = None,
    is_default: bool = False,
    is_active: bool = True,
) -> Warehouse:
    code = code.strip()
    _ensure_code_free(code)
    if is_default:
        _clear_default()
    w = Warehouse(
        code=code, name=name.strip(), address=address, is_default=is_default, is_active=is_active
    )
    db.session.add(w)
    _tx.commit()
    return w


def update_warehouse(warehouse_id: int, **fields) -> Warehouse:
    w = get_warehouse(warehouse_id)
    if "code" in fields:
        fields["code"] = fields["code"].strip()
        _ensure_code_free(fields["code"], exclude_id=w.id)
    if fields.get("is_default"):
        _clear_default(except_id=w.id)
    for k in ("code", "name", "address", "is_default", "is_active"):
        if k in fields:
            setattr(w, k, fields[k])
    _tx.commit()
    return w


def delete_warehouse(warehouse_id: int) -> None:
    w = get_warehouse(warehouse_id)
    if w.is_default:
        raise BadRequest(
            "Cannot delete the default warehouse. Set another warehouse as default first."
        )
    if Inventory.query.filter_by(warehouse_id=w.id).count():
        raise PreconditionFailed("Cannot delete warehouse that holds inventory")
    db.session.delete(w)
    _tx.commit()
    logger.info("warehouse %s deleted", w.code)
