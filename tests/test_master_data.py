"""Products, partners, warehouses, cost types, settings and numbering."""

from __future__ import annotations

from datetime import datetime

import pytest

from dao import cost_item_type as cit_dao
from dao import customer as customer_dao
from dao import numbering
from dao import product as product_dao
from dao import settings as settings_dao
from dao import supplier as supplier_dao
from dao import warehouse as warehouse_dao
from utils.allocation import AllocationMethod
from utils.errors import BadRequest, Conflict, Forbidden, PreconditionFailed


class TestProducts:
    def test_duplicate_sku(self, app):
        product_dao.create_product(sku="SKU-1", name="Lamp")
        with pytest.raises(Conflict, match="SKU already exists"):
            product_dao.create_product(sku=" SKU-1 ", name="Other lamp")

    def test_product_with_stock_cannot_be_deleted(self, make_product, make_warehouse, stock):
        p = make_product()
        stock(p, make_warehouse(), 1, "1")
        with pytest.raises(PreconditionFailed, match="Deactivate it instead"):
            product_dao.delete_product(p.id)

    def test_toggle_active(self, make_product):
        p = make_product()
        assert product_dao.toggle_product_active(p.id).is_active is False

    def test_category_cannot_parent_itself(self, app):
        c = product_dao.create_category("Lighting")
        with pytest.raises(BadRequest, match="own parent"):
            product_dao.update_category(c.id, parent_id=c.id)


class TestPartners:
    def test_customer_code_unique(self, app):
        customer_dao.create_customer(code="C1", name="Alpha")
        with pytest.raises(Conflict):
            customer_dao.create_customer(code="C1", name="Beta")

    def test_supplier_search(self, app):
        supplier_dao.create_supplier(code="S1", name="Osaka Tools")
        supplier_dao.create_supplier(code="S2", name="Hamburg Pans")
        page = supplier_dao.list_suppliers(search="osaka")
        assert [s.code for s in page["items"]] == ["S1"]


class TestWarehouses:
    def test_single_default(self, app):
        a = warehouse_dao.create_warehouse("A", "Alpha", is_default=True)
        b = warehouse_dao.create_warehouse("B", "Beta", is_default=True)

        assert warehouse_dao.get_default_warehouse().id == b.id
        assert warehouse_dao.get_warehouse(a.id).is_default is False

    def test_default_cannot_be_deleted(self, app):
        w = warehouse_dao.create_warehouse("A", "Alpha", is_default=True)
        with pytest.raises(BadRequest, match="default warehouse"):
            warehouse_dao.delete_warehouse(w.id)


class TestCostItemTypes:
    def test_seed_skips_existing(self, app):
        first = cit_dao.seed_defaults()
        second = cit_dao.seed_defaults()

        assert {r["action"] for r in first} == {"created"}
        assert {r["action"] for r in second} == {"skipped"}

    def test_system_types_are_protected(self, cost_types):
        freight = cost_types["FREIGHT"]
        with pytest.raises(Forbidden):
            cit_dao.delete_cost_item_type(freight.id)
        with pytest.raises(Forbidden):
            cit_dao.update_cost_item_type(freight.id, code="SHIPPING")

    def test_custom_type_code_uppercased(self, app):
        t = cit_dao.create_cost_item_type("bank_fee", "Bank fee")
        assert t.code == "BANK_FEE"
        assert t.is_system is False


class TestSettings:
    def test_seed_and_read(self, app):
        settings_dao.seed_settings()
        assert settings_dao.allocation_method() == AllocationMethod.FIFO
        assert settings_dao.allow_negative_inventory() is False
        assert settings_dao.default_currency() == "USD"

    def test_invalid_allocation_method(self, app):
        with pytest.raises(BadRequest, match="Allowed: FIFO, LIFO, WEIGHTED_AVG, SPECIFIC"):
            settings_dao.update_setting("ALLOCATION_METHOD", "RANDOM")

    def test_boolean_setting_validated(self, app):
        with pytest.raises(BadRequest, match="true or false"):
            settings_dao.update_setting("ALLOW_NEGATIVE_INVENTORY", "maybe")


class TestNumbering:
    def test_format_and_daily_sequence(self, app):
        day = datetime(2025, 5, 17)
        assert numbering.next_number("purchase", day) == "PO-20250517-0001"
        assert numbering.next_number("purchase", day) == "PO-20250517-0002"
        assert numbering.next_number("sales", day) == "SO-20250517-0001"
        assert numbering.next_number("purchase", datetime(2025, 5, 18)) == "PO-20250518-0001"
