"""Shared fixtures: an app on in-memory SQLite, a fresh schema per test and
small factories for master data and stocked batches."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from app import create_app
from configs import db as _db
from dao import _tx
from dao import accounting as acc_dao
from dao import batch as batch_dao
from dao import cost_item_type as cit_dao
from dao import inventory as inv_dao
from dao import user as user_dao
from db.models.customer import Customer
from db.models.product import Product
from db.models.supplier import Supplier
from db.models.user import UserRole
from db.models.warehouse import Warehouse

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test",
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "ENABLE_ADMIN": False,
    "LOG_LEVEL": "WARNING",
    "ALLOW_NEGATIVE_INVENTORY": False,
    "DEFAULT_ALLOCATION_METHOD": "FIFO",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def admin(app):
    return user_dao.create_user("admin", "secret", role=UserRole.ADMIN, full_name="Admin")


@pytest.fixture
def client(app, admin):
    c = app.test_client()
    resp = c.post("/auth/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 200
    return c


@pytest.fixture
def chart(app):
    return acc_dao.seed_chart()


@pytest.fixture
def cost_types(app):
    cit_dao.seed_defaults()
    return {t.code: t for t in cit_dao.list_active_cost_item_types()}


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_warehouse(app):
    def make(code="WH-A", name=None, is_default=False):
        w = Warehouse(code=code, name=name or f"Warehouse {code}", is_default=is_default)
        _db.session.add(w)
        _db.session.commit()
        return w

    return make


@pytest.fixture
def make_product(app):
    def make(sku="SKU-1", name=None, price="0", min_stock="0"):
        p = Product(
            sku=sku,
            name=name or f"Product {sku}",
            default_price=Decimal(price),
            min_stock_level=Decimal(min_stock),
            attrs={},
        )
        _db.session.add(p)
        _db.session.commit()
        return p

    return make


@pytest.fixture
def make_supplier(app):
    def make(code="SUP-1", payment_terms=30):
        s = Supplier(code=code, name=f"Supplier {code}", currency="USD", payment_terms=payment_terms)
        _db.session.add(s)
        _db.session.commit()
        return s

    return make


@pytest.fixture
def make_customer(app):
    def make(code="CUS-1", payment_terms=30):
        c = Customer(code=code, name=f"Customer {code}", payment_terms=payment_terms)
        _db.session.add(c)
        _db.session.commit()
        return c

    return make


@pytest.fixture
def stock(app):
    """Receive ``quantity`` units of a product into a warehouse as a new batch."""

    def make(product, warehouse, quantity, unit_cost, received_date=None):
        b = batch_dao.build_batch(
            product_id=product.id,
            warehouse_id=warehouse.id,
            quantity=quantity,
            unit_purchase_cost=unit_cost,
            received_date=received_date or datetime(2025, 1, 1),
        )
        inv_dao.add_from_batch(b.id, product.id, warehouse.id, quantity)
        _tx.commit()
        return b

    return make
