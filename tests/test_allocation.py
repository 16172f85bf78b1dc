"""Batch selection rules, exercised without a database."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from utils.allocation import (
    AllocationMethod,
    Candidate,
    InsufficientInventory,
    fmt_qty,
    plan_allocation,
)
from utils.errors import BadRequest


def _candidates():
    # older batch is cheaper
    return [
        Candidate(
            batch_id=2,
            inventory_id=20,
            available=Decimal("10"),
            cost_per_unit=Decimal("7.0000"),
            received_date=datetime(2025, 1, 5),
        ),
        Candidate(
            batch_id=1,
            inventory_id=10,
            available=Decimal("10"),
            cost_per_unit=Decimal("5.0000"),
            received_date=datetime(2025, 1, 1),
        ),
    ]


# =============================================================================
# Ordered methods
# =============================================================================


class TestFifoLifo:
    def test_fifo_draws_oldest_batch_first(self):
        plan = plan_allocation(_candidates(), Decimal("15"), AllocationMethod.FIFO)

        assert [(s.batch_id, s.quantity) for s in plan.slices] == [
            (1, Decimal("10")),
            (2, Decimal("5")),
        ]
        assert plan.total_cost == Decimal("85.00")
        assert plan.avg_cost_per_unit == Decimal("5.6667")

    def test_lifo_draws_newest_batch_first(self):
        plan = plan_allocation(_candidates(), Decimal("15"), AllocationMethod.LIFO)

        assert [(s.batch_id, s.quantity) for s in plan.slices] == [
            (2, Decimal("10")),
            (1, Decimal("5")),
        ]
        assert plan.total_cost == Decimal("95.00")

    def test_exact_fit_uses_single_batch(self):
        plan = plan_allocation(_candidates(), Decimal("10"), AllocationMethod.FIFO)

        assert len(plan.slices) == 1
        assert plan.slices[0].batch_id == 1
        assert plan.quantity == Decimal("10")

    def test_method_accepts_string_value(self):
        plan = plan_allocation(_candidates(), Decimal("3"), "LIFO")
        assert plan.method == AllocationMethod.LIFO
        assert plan.slices[0].batch_id == 2

    def test_empty_rows_are_skipped(self):
        rows = _candidates() + [
            Candidate(
                batch_id=3,
                inventory_id=30,
                available=Decimal("0"),
                cost_per_unit=Decimal("1.0000"),
                received_date=datetime(2024, 12, 1),
            )
        ]
        plan = plan_allocation(rows, Decimal("4"), AllocationMethod.FIFO)
        assert [s.batch_id for s in plan.slices] == [1]


class TestWeightedAverage:
    def test_every_slice_priced_at_pool_average(self):
        plan = plan_allocation(_candidates(), Decimal("15"), AllocationMethod.WEIGHTED_AVG)

        assert {s.cost_per_unit for s in plan.slices} == {Decimal("6.0000")}
        assert plan.total_cost == Decimal("90.00")
        # physical draw still follows receipt order
        assert plan.slices[0].batch_id == 1


# =============================================================================
# Specific picks
# =============================================================================


class TestSpecific:
    def test_follows_picks(self):
        plan = plan_allocation(
            _candidates(), Decimal("6"), AllocationMethod.SPECIFIC, picks=[(2, 4), (1, 2)]
        )

        assert [(s.batch_id, s.quantity) for s in plan.slices] == [
            (2, Decimal("4")),
            (1, Decimal("2")),
        ]
        assert plan.total_cost == Decimal("38.00")

    def test_requires_picks(self):
        with pytest.raises(BadRequest, match="requires batch selections"):
            plan_allocation(_candidates(), Decimal("6"), AllocationMethod.SPECIFIC)

    def test_picks_must_sum_to_quantity(self):
        with pytest.raises(BadRequest, match="Selected batches total 5, requested 6"):
            plan_allocation(
                _candidates(), Decimal("6"), AllocationMethod.SPECIFIC, picks=[(1, 5)]
            )

    def test_pick_beyond_batch_stock(self):
        with pytest.raises(BadRequest, match="Available: 10, Requested: 12"):
            plan_allocation(
                _candidates(), Decimal("12"), AllocationMethod.SPECIFIC, picks=[(1, 12)]
            )


# =============================================================================
# Failures
# =============================================================================


class TestShortfall:
    def test_reports_missing_units(self):
        with pytest.raises(InsufficientInventory, match="Short by 5 units") as exc:
            plan_allocation(_candidates(), Decimal("25"), AllocationMethod.FIFO)

        assert exc.value.shortfall == Decimal("5")
        assert exc.value.details["available"] == "20"

    def test_shortfall_is_a_bad_request(self):
        with pytest.raises(BadRequest):
            plan_allocation([], Decimal("1"), AllocationMethod.FIFO)

    def test_quantity_must_be_positive(self):
        with pytest.raises(BadRequest, match="greater than 0"):
            plan_allocation(_candidates(), Decimal("0"), AllocationMethod.FIFO)


class TestFmtQty:
    def test_integral_values_drop_scale(self):
        assert fmt_qty(Decimal("5.000")) == "5"

    def test_fraction_kept(self):
        assert fmt_qty(Decimal("2.500")) == "2.5"
