"""HTTP surface: auth, the JSON envelope and a purchase-to-sale round trip."""

from __future__ import annotations

from decimal import Decimal

import pytest

from dao import user as user_dao
from db.models.user import UserRole


def _data(resp):
    body = resp.get_json()
    assert body["ok"] is True, body
    return body["data"]


def _error(resp):
    body = resp.get_json()
    assert body["ok"] is False
    return body["error"]


class TestAuth:
    def test_login_and_me(self, client):
        me = _data(client.get("/auth/me"))
        assert me["username"] == "admin"
        assert me["role"] == "ADMIN"
        assert "password_hash" not in me

    def test_wrong_password(self, app, admin):
        resp = app.test_client().post("/auth/login", json={"username": "admin", "password": "nope"})
        assert resp.status_code == 401
        assert _error(resp)["code"] == "UNAUTHORIZED"

    def test_disabled_account(self, app):
        user_dao.create_user("ghost", "pw", is_active=False)
        resp = app.test_client().post("/auth/login", json={"username": "ghost", "password": "pw"})
        assert resp.status_code == 403

    def test_procedures_require_login(self, app):
        resp = app.test_client().post("/api/product/list", json={})
        assert resp.status_code == 401
        assert _error(resp) == {
            "code": "UNAUTHORIZED",
            "message": "Authentication required",
            "details": None,
        }

    def test_logout(self, client):
        assert client.post("/auth/logout").status_code == 200
        assert client.get("/auth/me").status_code == 401

    def test_admin_only_procedure(self, app):
        user_dao.create_user("sales1", "pw", role=UserRole.SALES)
        c = app.test_client()
        c.post("/auth/login", json={"username": "sales1", "password": "pw"})

        resp = c.post("/api/accounting/seed_chart", json={})

        assert resp.status_code == 403
        assert _error(resp)["code"] == "FORBIDDEN"


# =============================================================================
# Envelope
# =============================================================================


class TestEnvelope:
    def test_health(self, app):
        resp = app.test_client().get("/")
        assert _data(resp)["status"] == "ok"

    def test_create_and_page(self, client):
        for i in range(3):
            created = _data(
                client.post(
                    "/api/product/create",
                    json={"sku": f"SKU-{i}", "name": f"Item {i}", "default_price": "12.5"},
                )
            )
        assert Decimal(created["default_price"]) == Decimal("12.5")
        assert created["unit"] == "PCS"

        page = _data(client.post("/api/product/list", json={"page": 1, "page_size": 2}))
        assert page["total"] == 3
        assert page["total_pages"] == 2
        assert len(page["items"]) == 2

    def test_validation_error(self, client):
        resp = client.post("/api/product/create", json={"sku": "X"})
        assert resp.status_code == 400
        err = _error(resp)
        assert err["code"] == "BAD_REQUEST"
        assert err["message"].startswith("name:")
        assert isinstance(err["details"], list)

    def test_page_size_capped(self, client):
        resp = client.post("/api/product/list", json={"page_size": 101})
        assert resp.status_code == 400

    def test_conflict(self, client):
        client.post("/api/product/create", json={"sku": "DUP", "name": "One"})
        resp = client.post("/api/product/create", json={"sku": "DUP", "name": "Two"})
        assert resp.status_code == 409
        assert _error(resp)["code"] == "CONFLICT"

    def test_not_found(self, client):
        resp = client.post("/api/product/get_by_id", json={"id": 404})
        assert resp.status_code == 404
        assert _error(resp)["message"] == "Product not found"

    def test_update_is_partial(self, client):
        p = _data(client.post("/api/product/create", json={"sku": "P1", "name": "Lamp"}))
        updated = _data(
            client.post("/api/product/update", json={"id": p["id"], "data": {"name": "Desk lamp"}})
        )
        assert updated["name"] == "Desk lamp"
        assert updated["sku"] == "P1"

    def test_delete_returns_id(self, client):
        p = _data(client.post("/api/product/create", json={"sku": "P1", "name": "Lamp"}))
        assert _data(client.post("/api/product/delete", json={"id": p["id"]})) == {"id": p["id"]}

    def test_unknown_api_route_is_json(self, client):
        resp = client.post("/api/nothing/here", json={})
        assert resp.status_code == 404
        assert _error(resp)["code"] == "NOT_FOUND"


# =============================================================================
# End to end
# =============================================================================


@pytest.fixture
def master(client):
    _data(client.post("/api/accounting/seed_chart", json={}))
    wh = _data(client.post("/api/warehouse/create", json={"code": "WH-1", "name": "Main", "is_default": True}))
    sup = _data(client.post("/api/supplier/create", json={"code": "S1", "name": "Osaka Tools"}))
    cus = _data(client.post("/api/customer/create", json={"code": "C1", "name": "Saigon Retail"}))
    prod = _data(client.post("/api/product/create", json={"sku": "WR-1", "name": "Wrench"}))
    return {"warehouse": wh, "supplier": sup, "customer": cus, "product": prod}


class TestRoundTrip:
    def test_buy_then_sell(self, client, master):
        po = _data(
            client.post(
                "/api/purchase_order/create",
                json={
                    "supplier_id": master["supplier"]["id"],
                    "warehouse_id": master["warehouse"]["id"],
                    "items": [
                        {"product_id": master["product"]["id"], "quantity": "10", "unit_price": "8"}
                    ],
                },
            )
        )
        _data(client.post("/api/purchase_order/confirm", json={"id": po["id"]}))
        received = _data(
            client.post(
                "/api/purchase_order/receive",
                json={"id": po["id"], "items": [{"item_id": po["items"][0]["id"], "quantity_received": "10"}]},
            )
        )
        assert received["status"] == "RECEIVED"
        assert Decimal(received["received_value"]) == Decimal("80")

        preview = _data(
            client.post(
                "/api/inventory/preview_allocation",
                json={"product_id": master["product"]["id"], "quantity": "4"},
            )
        )
        assert preview["success"] is True
        assert Decimal(preview["total_cost"]) == Decimal("32")

        so = _data(
            client.post(
                "/api/sales_order/create",
                json={
                    "customer_id": master["customer"]["id"],
                    "warehouse_id": master["warehouse"]["id"],
                    "items": [
                        {"product_id": master["product"]["id"], "quantity": "4", "unit_price": "15"}
                    ],
                },
            )
        )
        confirmed = _data(client.post("/api/sales_order/confirm", json={"id": so["id"]}))
        assert Decimal(confirmed["total_cost"]) == Decimal("32")

        shipped = _data(client.post("/api/sales_order/ship", json={"id": so["id"]}))
        assert shipped["status"] == "SHIPPED"

        receivables = _data(client.post("/api/accounting/list_receivables", json={}))
        assert receivables["total"] == 1
        ar = receivables["items"][0]
        assert Decimal(ar["balance"]) == Decimal("60")

        paid = _data(
            client.post("/api/accounting/receive_payment", json={"id": ar["id"], "amount": "60"})
        )
        assert paid["status"] == "PAID"

        balance = _data(client.post("/api/accounting/account_balance", json={"account_code": "1120"}))
        assert Decimal(balance["balance"]) == Decimal("48")
