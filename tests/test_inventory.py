"""Stock rows: reservations, deductions and the read side."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from dao import batch as batch_dao
from dao import inventory as inv_dao
from dao import settings as settings_dao
from utils.allocation import AllocationMethod, InsufficientInventory
from utils.errors import BadRequest


@pytest.fixture
def setup(make_product, make_warehouse, stock):
    p = make_product("SKU-1", min_stock="5")
    w = make_warehouse("WH-A", is_default=True)
    old = stock(p, w, 10, "5.00", received_date=datetime(2025, 1, 1))
    new = stock(p, w, 10, "7.00", received_date=datetime(2025, 1, 10))
    return p, w, old, new


class TestMutations:
    def test_add_from_batch_accumulates(self, setup):
        p, w, old, _ = setup
        inv_dao.add_from_batch(old.id, p.id, w.id, 5)
        row = inv_dao.find_row(p.id, old.id, w.id)
        assert row.quantity == Decimal("15")

    def test_reserve_respects_available(self, setup):
        p, w, old, _ = setup
        row = inv_dao.find_row(p.id, old.id, w.id)
        inv_dao.reserve(row, 8)
        assert row.available_quantity == Decimal("2")

        with pytest.raises(BadRequest, match="Available: 2, Requested: 3"):
            inv_dao.reserve(row, 3)

    def test_release_never_goes_negative(self, setup):
        p, w, old, _ = setup
        row = inv_dao.find_row(p.id, old.id, w.id)
        inv_dao.reserve(row, 2)
        inv_dao.release(row, 5)
        assert row.reserved_quantity == Decimal("0")

    def test_deduct_blocks_negative_stock(self, setup):
        p, w, old, _ = setup
        row = inv_dao.find_row(p.id, old.id, w.id)
        with pytest.raises(BadRequest, match="Insufficient stock on hand"):
            inv_dao.deduct(row, 11)

    def test_deduct_allowed_below_zero_when_enabled(self, setup, admin):
        p, w, old, _ = setup
        settings_dao.update_setting("ALLOW_NEGATIVE_INVENTORY", "true")
        row = inv_dao.find_row(p.id, old.id, w.id)
        inv_dao.deduct(row, 12, from_reserved=False)
        assert row.quantity == Decimal("-2")


# =============================================================================
# Allocation against stored rows
# =============================================================================


class TestAllocate:
    def test_reserved_stock_is_not_offered(self, setup):
        p, w, old, _ = setup
        inv_dao.reserve(inv_dao.find_row(p.id, old.id, w.id), 10)

        plan = inv_dao.allocate(p.id, 5, AllocationMethod.FIFO, w.id)
        assert [s.batch_id for s in plan.slices] == [setup[3].id]

    def test_cancelled_batches_are_skipped(self, setup):
        p, w, old, new = setup
        batch_dao.cancel_batch(old.id)

        with pytest.raises(InsufficientInventory):
            inv_dao.allocate(p.id, 15, AllocationMethod.FIFO, w.id)

    def test_planned_quantities_count_against_rows(self, setup):
        p, w, old, new = setup
        row = inv_dao.find_row(p.id, old.id, w.id)
        plan = inv_dao.allocate(p.id, 4, AllocationMethod.FIFO, w.id, planned={row.id: Decimal("8")})

        assert [(s.batch_id, s.quantity) for s in plan.slices] == [
            (old.id, Decimal("2")),
            (new.id, Decimal("2")),
        ]

    def test_default_method_comes_from_settings(self, setup):
        p, w, old, new = setup
        settings_dao.update_setting("ALLOCATION_METHOD", "lifo")
        plan = inv_dao.allocate(p.id, 3)
        assert plan.method == AllocationMethod.LIFO
        assert plan.slices[0].batch_id == new.id


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    def test_check_availability(self, setup):
        p, w, _, _ = setup
        result = inv_dao.check_availability(p.id, 25, w.id)

        assert result["is_available"] is False
        assert result["available_quantity"] == Decimal("20")
        assert result["shortfall"] == Decimal("5")
        assert len(result["batches"]) == 2

    def test_preview_success(self, setup):
        p, w, _, _ = setup
        result = inv_dao.preview_allocation(p.id, 15, AllocationMethod.FIFO, w.id)

        assert result["success"] is True
        assert result["total_cost"] == Decimal("85.00")
        assert [a["quantity"] for a in result["allocations"]] == [Decimal("10"), Decimal("5")]

    def test_preview_reports_failure_without_raising(self, setup):
        p, w, _, _ = setup
        result = inv_dao.preview_allocation(p.id, 30, AllocationMethod.FIFO, w.id)

        assert result["success"] is False
        assert result["error"] == "Insufficient inventory. Short by 10 units"
        assert result["allocations"] == []

    def test_summary_by_product(self, setup):
        p, _, _, _ = setup
        page = inv_dao.summary_by_product()

        assert page["total"] == 1
        row = page["items"][0]
        assert row["product"].id == p.id
        assert row["total_quantity"] == Decimal("20")
        assert row["total_value"] == Decimal("120.00")
        assert row["avg_cost_per_unit"] == Decimal("6.0000")
        assert row["is_low_stock"] is False
        assert row["batch_count"] == 2

    def test_low_stock_filter(self, setup):
        p, w, old, new = setup
        inv_dao.reserve(inv_dao.find_row(p.id, old.id, w.id), 10)

        page = inv_dao.list_inventory(low_stock=True)
        assert page["total"] == 1
        assert page["items"][0].batch_id == old.id

    def test_stats(self, setup):
        s = inv_dao.stats()
        assert s["total_products"] == 1
        assert s["total_value"] == Decimal("120.00")
        assert s["warehouses"][0]["product_count"] == 1
