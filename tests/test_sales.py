"""Sales orders: allocation on confirm, shipping, receivables and cancellation."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from dao import accounting as acc_dao
from dao import inventory as inv_dao
from dao import sales as so_dao
from db.models.accounting import AccountReceivable, InvoiceStatus
from db.models.sales import SOStatus
from utils.allocation import InsufficientInventory
from utils.errors import BadRequest


@pytest.fixture
def env(chart, admin, make_customer, make_warehouse, make_product, stock):
    c = make_customer()
    w = make_warehouse()
    p = make_product("KETTLE-01")
    old = stock(p, w, 10, "5.00", received_date=datetime(2025, 1, 1))
    new = stock(p, w, 10, "7.00", received_date=datetime(2025, 1, 10))
    return {"customer": c, "warehouse": w, "product": p, "old": old, "new": new, "user": admin}


def _order(env, *quantities, **kw):
    items = [
        {"product_id": env["product"].id, "quantity": q, "unit_price": "10.00"} for q in quantities
    ]
    return so_dao.create_so(
        env["customer"].id, env["warehouse"].id, items, env["user"].id, **kw
    )


def _row(env, batch):
    return inv_dao.find_row(env["product"].id, env[batch].id, env["warehouse"].id)


class TestCreate:
    def test_totals(self, env):
        so = _order(env, 15, tax_rate="0.10", shipping_fee="5")

        assert so.order_number.startswith("SO-")
        assert so.subtotal == Decimal("150.00")
        assert so.tax_amount == Decimal("15.00")
        assert so.total_amount == Decimal("170.00")

    def test_rejects_tax_rate_above_one(self, env):
        with pytest.raises(BadRequest, match="Tax rate"):
            _order(env, 1, tax_rate="1.5")


# =============================================================================
# Confirmation
# =============================================================================


class TestConfirm:
    def test_allocates_fifo_and_reserves(self, env):
        so = so_dao.confirm_so(_order(env, 15).id, env["user"].id)

        assert so.status == SOStatus.CONFIRMED
        assert so.total_cost == Decimal("85.00")
        item = so.items[0]
        assert item.unit_cost == Decimal("5.6667")
        assert [(a.batch_id, a.quantity) for a in item.allocations] == [
            (env["old"].id, Decimal("10")),
            (env["new"].id, Decimal("5")),
        ]
        assert _row(env, "old").reserved_quantity == Decimal("10")
        assert _row(env, "new").reserved_quantity == Decimal("5")

    def test_lines_for_same_product_do_not_overlap(self, env):
        so = so_dao.confirm_so(_order(env, 8, 8).id, None)

        second = so.items[1]
        assert [(a.batch_id, a.quantity) for a in second.allocations] == [
            (env["old"].id, Decimal("2")),
            (env["new"].id, Decimal("6")),
        ]
        assert _row(env, "old").reserved_quantity == Decimal("10")

    def test_shortfall_aborts_everything(self, env):
        so = _order(env, 5, 25)

        with pytest.raises(InsufficientInventory, match="Short by 10 units"):
            so_dao.confirm_so(so.id, None)

        so = so_dao.get_so(so.id)
        assert so.status == SOStatus.DRAFT
        assert all(not i.allocations for i in so.items)
        assert _row(env, "old").reserved_quantity == Decimal("0")


# =============================================================================
# Shipping
# =============================================================================


class TestShip:
    def test_full_shipment_posts_and_opens_receivable(self, env):
        so = _order(env, 15, tax_rate="0.10", shipping_fee="5")
        so_dao.confirm_so(so.id, None)

        so = so_dao.ship_so(so.id, None, env["user"].id, tracking_number="TRK-1")

        assert so.status == SOStatus.SHIPPED
        assert so.tracking_number == "TRK-1"
        assert so.shipped_date is not None
        assert _row(env, "old").quantity == Decimal("0")
        assert _row(env, "new").quantity == Decimal("5")
        assert _row(env, "new").reserved_quantity == Decimal("0")

        ar = AccountReceivable.query.filter_by(sales_order_id=so.id).one()
        assert ar.invoice_number == so.order_number
        assert ar.amount == Decimal("170.00")
        assert ar.status == InvoiceStatus.PENDING

        assert acc_dao.account_balance("1110") == Decimal("170.00")
        assert acc_dao.account_balance("4110") == Decimal("170.00")
        assert acc_dao.account_balance("5100") == Decimal("85.00")

    def test_partial_shipment_then_rest(self, env):
        so = _order(env, 15)
        so_dao.confirm_so(so.id, None)
        item_id = so.items[0].id

        so = so_dao.ship_so(so.id, [{"item_id": item_id, "quantity_shipped": 12}])
        assert so.status == SOStatus.PROCESSING
        assert AccountReceivable.query.count() == 0
        assert _row(env, "new").quantity == Decimal("8")
        assert _row(env, "new").reserved_quantity == Decimal("3")

        so = so_dao.ship_so(so.id, None)
        assert so.status == SOStatus.SHIPPED
        assert _row(env, "new").quantity == Decimal("5")
        assert AccountReceivable.query.count() == 1

    def test_cannot_ship_more_than_ordered(self, env):
        so = _order(env, 5)
        so_dao.confirm_so(so.id, None)
        with pytest.raises(BadRequest, match="Remaining: 5"):
            so_dao.ship_so(so.id, [{"item_id": so.items[0].id, "quantity_shipped": 6}])

    def test_draft_cannot_ship(self, env):
        so = _order(env, 5)
        with pytest.raises(BadRequest, match="Only confirmed or processing"):
            so_dao.ship_so(so.id, None)

    def test_free_order_ships_and_books_cost_only(self, env):
        items = [{"product_id": env["product"].id, "quantity": 2, "unit_price": "0"}]
        so = so_dao.create_so(env["customer"].id, env["warehouse"].id, items, env["user"].id)
        so_dao.confirm_so(so.id, None)

        so = so_dao.ship_so(so.id, None, env["user"].id)

        assert so.status == SOStatus.SHIPPED
        assert AccountReceivable.query.count() == 0
        assert acc_dao.account_balance("1110") == Decimal("0.00")
        assert acc_dao.account_balance("5100") == Decimal("10.00")
        assert acc_dao.account_balance("1120") == Decimal("-10.00")

    def test_complete_after_shipping(self, env):
        so = _order(env, 5)
        so_dao.confirm_so(so.id, None)
        so_dao.ship_so(so.id, None)
        assert so_dao.complete_so(so.id).status == SOStatus.COMPLETED


# =============================================================================
# Cancellation
# =============================================================================


class TestCancel:
    def test_cancel_confirmed_releases_reservations(self, env):
        so = _order(env, 15)
        so_dao.confirm_so(so.id, None)

        so = so_dao.cancel_so(so.id)

        assert so.status == SOStatus.CANCELLED
        assert _row(env, "old").reserved_quantity == Decimal("0")
        assert _row(env, "new").reserved_quantity == Decimal("0")

    def test_cancel_partially_shipped_keeps_shipped_stock_out(self, env):
        so = _order(env, 15)
        so_dao.confirm_so(so.id, None)
        so_dao.ship_so(so.id, [{"item_id": so.items[0].id, "quantity_shipped": 12}])

        so_dao.cancel_so(so.id)

        assert _row(env, "new").quantity == Decimal("8")
        assert _row(env, "new").reserved_quantity == Decimal("0")

    def test_shipped_order_cannot_be_cancelled(self, env):
        so = _order(env, 5)
        so_dao.confirm_so(so.id, None)
        so_dao.ship_so(so.id, None)
        with pytest.raises(BadRequest, match="Cannot cancel"):
            so_dao.cancel_so(so.id)
