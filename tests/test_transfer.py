"""Warehouse-to-warehouse transfers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from dao import inventory as inv_dao
from dao import transfer as transfer_dao
from db.models.transfer import TransferStatus
from utils.errors import BadRequest


@pytest.fixture
def env(admin, make_product, make_warehouse, stock):
    p = make_product("DESK-01")
    a = make_warehouse("WH-A")
    b = make_warehouse("WH-B")
    batch = stock(p, a, 10, "20.00")
    return {"product": p, "source": a, "target": b, "batch": batch, "user": admin}


def _create(env, quantity):
    return transfer_dao.create_transfer(
        env["source"].id,
        env["target"].id,
        [{"product_id": env["product"].id, "batch_id": env["batch"].id, "quantity": quantity}],
        env["user"].id,
    )


def _row(env, side):
    return inv_dao.find_row(env["product"].id, env["batch"].id, env[side].id)


class TestLifecycle:
    def test_full_flow_moves_stock_and_keeps_batch(self, env):
        t = _create(env, 5)
        assert t.transfer_number.startswith("TR-")
        assert t.status == TransferStatus.DRAFT

        transfer_dao.submit_transfer(t.id)
        t = transfer_dao.approve_transfer(t.id, env["user"].id)
        assert t.status == TransferStatus.IN_TRANSIT
        assert _row(env, "source").reserved_quantity == Decimal("5")

        t = transfer_dao.complete_transfer(t.id, env["user"].id)
        assert t.status == TransferStatus.COMPLETED
        assert t.completed_by_id == env["user"].id

        src = _row(env, "source")
        dst = _row(env, "target")
        assert src.quantity == Decimal("5")
        assert src.reserved_quantity == Decimal("0")
        assert dst.quantity == Decimal("5")
        assert dst.batch_id == env["batch"].id

    def test_cancel_in_transit_releases(self, env):
        t = _create(env, 4)
        transfer_dao.submit_transfer(t.id)
        transfer_dao.approve_transfer(t.id, None)

        t = transfer_dao.cancel_transfer(t.id)

        assert t.status == TransferStatus.CANCELLED
        assert _row(env, "source").reserved_quantity == Decimal("0")
        assert _row(env, "target") is None

    def test_completed_cannot_be_cancelled(self, env):
        t = _create(env, 1)
        transfer_dao.submit_transfer(t.id)
        transfer_dao.approve_transfer(t.id, None)
        transfer_dao.complete_transfer(t.id, None)
        with pytest.raises(BadRequest, match="Cannot cancel"):
            transfer_dao.cancel_transfer(t.id)

    def test_steps_must_follow_order(self, env):
        t = _create(env, 1)
        with pytest.raises(BadRequest, match="Only pending transfers"):
            transfer_dao.approve_transfer(t.id, None)
        with pytest.raises(BadRequest, match="Only in-transit transfers"):
            transfer_dao.complete_transfer(t.id, None)


class TestValidation:
    def test_same_warehouse(self, env):
        with pytest.raises(BadRequest, match="must be different"):
            transfer_dao.create_transfer(
                env["source"].id,
                env["source"].id,
                [{"product_id": env["product"].id, "batch_id": env["batch"].id, "quantity": 1}],
            )

    def test_more_than_available(self, env):
        with pytest.raises(BadRequest, match="Available: 10, Requested: 12"):
            _create(env, 12)

    def test_batch_must_match_product(self, env, make_product):
        other = make_product("OTHER")
        with pytest.raises(BadRequest, match="does not belong"):
            transfer_dao.create_transfer(
                env["source"].id,
                env["target"].id,
                [{"product_id": other.id, "batch_id": env["batch"].id, "quantity": 1}],
            )

    def test_submit_rechecks_stock(self, env):
        t = _create(env, 8)
        inv_dao.reserve(_row(env, "source"), 5)
        with pytest.raises(BadRequest, match="Available: 5, Requested: 8"):
            transfer_dao.submit_transfer(t.id)
