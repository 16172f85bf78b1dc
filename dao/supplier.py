from typing import List

from sqlalchemy import or_

from configs import db
from dao import _tx
from db.models.batch import Batch
from db.models.purchase import PurchaseOrder
from db.models.supplier import Supplier
from utils.errors import Conflict, PreconditionFailed
from utils.pagination import paginate

_FIELDS = (
    "code",
    "name",
    "contact_person",
    "phone",
    "email",
    "address",
    "country",
    "tax_id",
    "currency",
    "payment_terms",
    "notes",
    "is_active",
)


def list_suppliers(search=None, is_active=None, page: int = 1, page_size: int = 20) -> dict:
    q = Supplier.query
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Supplier.code.ilike(like), Supplier.name.ilike(like)))
    if is_active is not None:
        q = q.filter(Supplier.is_active == bool(is_active))
    return paginate(q.order_by(Supplier.name.asc()), page, page_size)


def list_active_suppliers() -> List[Supplier]:
    return Supplier.query.filter_by(is_active=True).order_by(Supplier.name.asc()).all()


def get_supplier(supplier_id: int) -> Supplier:
    return _tx.fetch(Supplier, supplier_id, "Supplier")


def _ensure_code_free(code: str, exclude_id=None) -> None:
    q = Supplier.query.filter(Supplier.code == code)
    if exclude_id:
        q = q.filter(Supplier.id != exclude_id)
    if db.session.query(q.exists()).scalar():
        raise Conflict("Supplier code already exists")


def _apply(s: Supplier, fields: dict) -> None:
    for k in _FIELDS:
        if k in fields:
            v = fields[k]
            if k == "code":
                v = v.strip()
            elif k == "currency" and v:
                v = v.upper()
            setattr(s, k, v)


def create_supplier(**fields) -> Supplier:
    _ensure_code_free(fields["code"].strip())
    s = Supplier()
    _apply(s, fields)
    db.session.add(s)
    _tx.commit()
    return s


def update_supplier(supplier_id: int, **fields) -> Supplier:
    s = get_supplier(supplier_id)
    if "code" in fields:
        _ensure_code_free(fields["code"].strip(), exclude_id=s.id)
    _apply(s, fields)
    _tx.commit()
    return s


def delete_supplier(supplier_id: int) -> None:
    s = get_supplier(supplier_id)
    cnt = (
        PurchaseOrder.query.filter_by(supplier_id=s.id).count()
        + Batch.query.filter_by(supplier_id=s.id).count()
    )
    if cnt > 0:
        raise PreconditionFailed("Cannot delete supplier with purchase orders or batches")
    db.session.delete(s)
    _tx.commit()
