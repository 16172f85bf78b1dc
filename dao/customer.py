# dao/customer.py
from typing import List

from sqlalchemy import or_

from configs import db
from dao import _tx
from db.models.customer import Customer
from db.models.sales import SalesOrder
from utils.errors import Conflict, PreconditionFailed
from utils.money import d
from utils.pagination import paginate

_FIELDS = (
    "code",
    "name",
    "contact_person",
    "phone",
    "email",
    "address",
    "city",
    "country",
    "tax_id",
    "payment_terms",
    "credit_limit",
    "notes",
    "is_active",
)


def list_customers(search=None, is_active=None, page: int = 1, page_size: int = 20) -> dict:
    q = Customer.query
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(
            or_(Customer.code.ilike(like), Customer.name.ilike(like), Customer.email.ilike(like))
        )
    if is_active is not None:
        q = q.filter(Customer.is_active == bool(is_active))
    return paginate(q.order_by(Customer.name.asc()), page, page_size)


def list_active_customers() -> List[Customer]:
    return Customer.query.filter_by(is_active=True).order_by(Customer.name.asc()).all()


def get_customer(customer_id: int) -> Customer:
    return _tx.fetch(Customer, customer_id, "Customer")


def _ensure_code_free(code: str, exclude_id=None) -> None:
    q = Customer.query.filter(Customer.code == code)
    if exclude_id:
        q = q.filter(Customer.id != exclude_id)
    if db.session.query(q.exists()).scalar():
        raise Conflict("Customer code already exists")


def _apply(c: Customer, fields: dict) -> None:
    for k in _FIELDS:
        if k in fields:
            v = fields[k]
            if k == "credit_limit":
                v = d(v)
            elif k == "code":
                v = v.strip()
            setattr(c, k, v)


def create_customer(**fields) -> Customer:
    _ensure_code_free(fields["code"].strip())
    c = Customer()
    _apply(c, fields)
    db.session.add(c)
    _tx.commit()
    return c


def update_customer(customer_id: int, **fields) -> Customer:
    c = get_customer(customer_id)
    if "code" in fields:
        _ensure_code_free(fields["code"].strip(), exclude_id=c.id)
    _apply(c, fields)
    _tx.commit()
    return c


def toggle_customer_active(customer_id: int) -> Customer:
    c = get_customer(customer_id)
    c.is_active = not c.is_active
    _tx.commit()
    return c


def delete_customer(customer_id: int) -> None:
    c = get_customer(customer_id)
    if SalesOrder.query.filter_by(customer_id=c.id).count():
        raise PreconditionFailed("Cannot delete customer with sales orders")
    db.session.delete(c)
    _tx.commit()
