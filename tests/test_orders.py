"""Order creation, status transitions and order stats."""

import re
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import event, select

from shopdesk.models.inventory import ProductDeliveryStats, Stock, StockHistory
from shopdesk.models.orders import Order
from shopdesk.models.user import UserRole
from shopdesk.services import orders as order_service
from shopdesk.services.orders import next_order_number
from shopdesk.services.stock_ledger import replay_quantity


def _order_payload(product_id, quantity=3, **overrides):
    payload = {
        "customerName": "Youssef",
        "customerPhone": "0612345678",
        "customerAddress": "12 Rue Atlas",
        "customerCity": "Casablanca",
        "deliveryPrice": "20",
        "items": [{"productId": product_id, "quantity": quantity}],
    }
    payload.update(overrides)
    return payload


def _stock_quantity(db_session, product_id):
    return db_session.scalar(select(Stock.quantity).where(Stock.product_id == product_id))


def _delivery_stats(db_session, product_id):
    db_session.expire_all()
    return db_session.scalar(select(ProductDeliveryStats).where(ProductDeliveryStats.product_id == product_id))


class TestCreateOrder:
    def test_create_reserves_stock_and_totals(self, client, admin, headers, make_product, db_session):
        product = make_product("ARG-100", selling_price="100", cost_price="50", quantity=10)

        response = client.post("/api/orders", json=_order_payload(product.id), headers=headers(admin))

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["totalAmount"]) == Decimal("320.00")
        assert Decimal(body["deliveryPrice"]) == Decimal("20.00")
        assert body["status"] == "PENDING"
        assert body["paymentStatus"] == "UNPAID"
        assert body["isFromShop"] is False
        assert re.fullmatch(r"ORD-\d{8}-0001", body["orderNumber"])
        item = body["items"][0]
        assert item["quantity"] == 3
        assert Decimal(item["unitPrice"]) == Decimal("100.00")
        assert Decimal(item["subtotal"]) == Decimal("300.00")
        assert item["productSku"] == "ARG-100"

        assert _stock_quantity(db_session, product.id) == 7
        assert replay_quantity(db_session, product.id) == 7
        assert _delivery_stats(db_session, product.id).total_orders == 1

    def test_sequence_increments_within_the_day(self, client, admin, headers, make_product):
        product = make_product("ARG-100", quantity=10)

        first = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()
        second = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()

        assert first["orderNumber"].endswith("-0001")
        assert second["orderNumber"].endswith("-0002")

    def test_insufficient_stock_rejects_whole_order(self, client, admin, headers, make_product, db_session):
        plenty = make_product("A", quantity=10)
        scarce = make_product("B", name="Rose Soap", quantity=1)
        payload = _order_payload(plenty.id)
        payload["items"].append({"productId": scarce.id, "quantity": 999})

        response = client.post("/api/orders", json=payload, headers=headers(admin))

        assert response.status_code == 400
        assert response.json()["error"] == "Insufficient stock for Rose Soap"
        assert response.json()["details"]["available"] == 1
        assert _stock_quantity(db_session, plenty.id) == 10
        assert _stock_quantity(db_session, scarce.id) == 1
        assert db_session.scalar(select(Order.id)) is None

    def test_duplicate_lines_are_merged(self, client, admin, headers, make_product):
        product = make_product("ARG-100", quantity=10)
        payload = _order_payload(product.id, 2)
        payload["items"].append({"productId": product.id, "quantity": 3})

        body = client.post("/api/orders", json=payload, headers=headers(admin)).json()

        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 5

    def test_empty_items_is_a_validation_error(self, client, admin, headers):
        response = client.post("/api/orders", json=_order_payload(1, items=[]), headers=headers(admin))

        assert response.status_code == 400

    def test_unknown_product_is_404(self, client, admin, headers):
        response = client.post("/api/orders", json=_order_payload(999), headers=headers(admin))

        assert response.status_code == 404

    def test_inactive_product_cannot_be_ordered(self, client, admin, headers, make_product, db_session):
        product = make_product("OLD", quantity=10)
        product.is_active = False
        db_session.commit()

        response = client.post("/api/orders", json=_order_payload(product.id), headers=headers(admin))

        assert response.status_code == 400

    def test_shop_agent_orders_are_flagged(self, client, shop_agent, headers, make_product):
        product = make_product("ARG-100", quantity=10)

        body = client.post("/api/orders", json=_order_payload(product.id), headers=headers(shop_agent)).json()

        assert body["isFromShop"] is True
        assert body["createdBy"] == shop_agent.id

    def test_next_order_number_uses_configured_prefix(self, db_session):
        assert next_order_number(db_session, datetime(2026, 10, 19)) == "ORD-20261019-0001"

    def test_order_number_collision_is_retried(self, client, admin, headers, make_product, db_session, monkeypatch):
        product = make_product("ARG-100", quantity=10)
        taken = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()
        calls = []

        def colliding_once(db, day):
            calls.append(day)
            if len(calls) == 1:
                return taken["orderNumber"]
            return next_order_number(db, day)

        monkeypatch.setattr(order_service, "next_order_number", colliding_once)

        response = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin))

        assert response.status_code == 201
        assert response.json()["orderNumber"] != taken["orderNumber"]
        assert response.json()["orderNumber"].endswith("-0002")
        assert len(calls) == 2
        assert _stock_quantity(db_session, product.id) == 8
        assert replay_quantity(db_session, product.id) == 8

    def test_order_number_collision_gives_up_with_conflict(
        self, client, admin, headers, make_product, db_session, monkeypatch
    ):
        product = make_product("ARG-100", quantity=10)
        taken = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()
        monkeypatch.setattr(order_service, "next_order_number", lambda db, day: taken["orderNumber"])

        response = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin))

        assert response.status_code == 409
        assert _stock_quantity(db_session, product.id) == 9
        assert len(db_session.scalars(select(Order.id)).all()) == 1


class TestStatusTransitions:
    @pytest.fixture
    def order(self, client, admin, headers, make_product):
        product = make_product("ARG-100", selling_price="100", cost_price="50", quantity=10)
        body = client.post("/api/orders", json=_order_payload(product.id), headers=headers(admin)).json()
        return {"id": body["id"], "product_id": product.id, "number": body["orderNumber"]}

    def _set_status(self, client, user, headers, order_id, new_status):
        return client.put(f"/api/orders/{order_id}/status", json={"status": new_status}, headers=headers(user))

    def test_pending_order_returned_restores_stock(self, client, admin, headers, order, db_session):
        response = self._set_status(client, admin, headers, order["id"], "RETURNED")

        assert response.status_code == 200
        assert response.json()["order"]["paymentStatus"] == "REFUNDED"
        changes = db_session.scalars(
            select(StockHistory.quantity_change)
            .where(StockHistory.product_id == order["product_id"])
            .order_by(StockHistory.id)
        ).all()
        assert changes == [10, -3, 3]
        assert _stock_quantity(db_session, order["product_id"]) == 10

    def test_delivered_order_can_be_returned(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "DELIVERED")
        assert _delivery_stats(db_session, order["product_id"]).delivered_orders == 1

        response = self._set_status(client, admin, headers, order["id"], "RETURNED")

        assert response.status_code == 200
        assert response.json()["order"]["paymentStatus"] == "REFUNDED"
        assert _stock_quantity(db_session, order["product_id"]) == 10
        assert replay_quantity(db_session, order["product_id"]) == 10
        stats = _delivery_stats(db_session, order["product_id"])
        assert stats.delivered_orders == 0
        assert stats.returned_orders == 1

    def test_repeated_return_restocks_once(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "DELIVERED")
        self._set_status(client, admin, headers, order["id"], "RETURNED")

        response = self._set_status(client, admin, headers, order["id"], "RETURNED")

        assert response.status_code == 200
        assert _stock_quantity(db_session, order["product_id"]) == 10
        assert _delivery_stats(db_session, order["product_id"]).returned_orders == 1

    def test_return_from_transit_restocks(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "IN_TRANSIT")

        response = self._set_status(client, admin, headers, order["id"], "RETURNED")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Order status updated to RETURNED"
        assert body["order"]["paymentStatus"] == "REFUNDED"
        assert _stock_quantity(db_session, order["product_id"]) == 10
        assert replay_quantity(db_session, order["product_id"]) == 10
        restock = db_session.scalars(
            select(StockHistory).where(StockHistory.product_id == order["product_id"]).order_by(StockHistory.id.desc())
        ).first()
        assert restock.reason == f"Returned order #{order['number']}"
        stats = _delivery_stats(db_session, order["product_id"])
        assert stats.in_transit_orders == 0
        assert stats.returned_orders == 1

    def test_delivery_marks_paid(self, client, admin, headers, order, db_session):
        response = self._set_status(client, admin, headers, order["id"], "DELIVERED")

        assert response.json()["order"]["paymentStatus"] == "PAID"
        assert _delivery_stats(db_session, order["product_id"]).delivered_orders == 1
        assert _stock_quantity(db_session, order["product_id"]) == 7

    def test_cancel_does_not_restock(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "CANCELLED")

        assert _stock_quantity(db_session, order["product_id"]) == 7
        assert _delivery_stats(db_session, order["product_id"]).cancelled_orders == 1

    def test_cancelled_order_can_be_reopened(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "CANCELLED")

        response = self._set_status(client, admin, headers, order["id"], "PENDING")

        assert response.status_code == 200
        assert response.json()["order"]["status"] == "PENDING"
        assert _delivery_stats(db_session, order["product_id"]).cancelled_orders == 0
        assert _stock_quantity(db_session, order["product_id"]) == 7

    def test_returned_order_cannot_change(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "RETURNED")

        response = self._set_status(client, admin, headers, order["id"], "PENDING")

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid status transition"
        assert response.json()["details"] == {"from": "RETURNED", "to": "PENDING"}
        assert _stock_quantity(db_session, order["product_id"]) == 10

    def test_same_status_is_a_no_op(self, client, admin, headers, order, db_session):
        self._set_status(client, admin, headers, order["id"], "IN_TRANSIT")

        response = self._set_status(client, admin, headers, order["id"], "IN_TRANSIT")

        assert response.status_code == 200
        assert _delivery_stats(db_session, order["product_id"]).in_transit_orders == 1

    def test_unknown_status_is_a_validation_error(self, client, admin, headers, order):
        response = self._set_status(client, admin, headers, order["id"], "LOST")

        assert response.status_code == 400

    def test_warehouse_agent_updates_status_but_not_notes(self, client, warehouse_agent, headers, order):
        response = client.put(
            f"/api/orders/{order['id']}",
            json={"status": "CONFIRMED"},
            headers=headers(warehouse_agent),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"

        response = client.put(
            f"/api/orders/{order['id']}",
            json={"notes": "Call before delivery"},
            headers=headers(warehouse_agent),
        )
        assert response.status_code == 403

    def test_admin_updates_notes(self, client, admin, headers, order):
        response = client.put(f"/api/orders/{order['id']}", json={"notes": "Fragile"}, headers=headers(admin))

        assert response.status_code == 200
        assert response.json()["notes"] == "Fragile"

    def test_update_without_changes_is_rejected(self, client, admin, headers, order):
        response = client.put(f"/api/orders/{order['id']}", json={}, headers=headers(admin))

        assert response.status_code == 400

    def test_shop_agent_cannot_update_status(self, client, shop_agent, headers, order):
        response = self._set_status(client, shop_agent, headers, order["id"], "CONFIRMED")

        assert response.status_code == 403


class TestReadOrders:
    def test_shop_agent_sees_only_own_orders(self, client, admin, make_user, headers, make_product):
        product = make_product("ARG-100", quantity=20)
        mine = make_user(UserRole.SHOP_AGENT)
        other = make_user(UserRole.SHOP_AGENT)
        own = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(mine)).json()
        foreign = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(other)).json()
        client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin))

        listing = client.get("/api/orders", headers=headers(mine)).json()
        assert [item["id"] for item in listing["orders"]] == [own["id"]]

        response = client.get(f"/api/orders/{foreign['id']}", headers=headers(mine))
        assert response.status_code == 403
        assert response.json()["error"] == "You can only view your own orders"

        assert client.get("/api/orders", headers=headers(admin)).json()["total"] == 3

    def test_filter_by_status_and_search(self, client, admin, headers, make_product):
        product = make_product("ARG-100", quantity=20)
        first = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()
        client.post(
            "/api/orders",
            json=_order_payload(product.id, 1, customerName="Salma", customerPhone="0700000000"),
            headers=headers(admin),
        )
        client.put(f"/api/orders/{first['id']}/status", json={"status": "CONFIRMED"}, headers=headers(admin))

        by_status = client.get("/api/orders", params={"status": "CONFIRMED"}, headers=headers(admin)).json()
        by_search = client.get("/api/orders", params={"search": "salma"}, headers=headers(admin)).json()

        assert [item["id"] for item in by_status["orders"]] == [first["id"]]
        assert by_search["total"] == 1
        assert by_search["orders"][0]["customerName"] == "Salma"

    def test_lookup_by_number(self, client, warehouse_agent, admin, headers, make_product):
        product = make_product("ARG-100", quantity=10)
        created = client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin)).json()

        response = client.get(f"/api/orders/number/{created['orderNumber']}", headers=headers(warehouse_agent))

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_missing_order_is_404(self, client, admin, headers):
        response = client.get("/api/orders/12345", headers=headers(admin))

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found"

    def test_stats(self, client, admin, headers, make_product):
        product = make_product("ARG-100", selling_price="100", quantity=20)
        delivered = client.post("/api/orders", json=_order_payload(product.id, 3), headers=headers(admin)).json()
        client.post("/api/orders", json=_order_payload(product.id, 1), headers=headers(admin))
        client.put(f"/api/orders/{delivered['id']}/status", json={"status": "DELIVERED"}, headers=headers(admin))

        stats = client.get("/api/orders/stats", headers=headers(admin)).json()

        assert stats["totalOrders"] == 2
        assert stats["pendingOrders"] == 1
        assert stats["deliveredOrders"] == 1
        assert Decimal(stats["totalRevenue"]) == Decimal("320.00")
        assert Decimal(stats["todayRevenue"]) == Decimal("320.00")
        assert stats["todayOrders"] == 2
        counts = {row["status"]: row["count"] for row in stats["ordersByStatus"]}
        assert counts == {"PENDING": 1, "DELIVERED": 1}
        assert len(stats["revenueByMonth"]) == 1
        assert stats["revenueByMonth"][0]["orders"] == 1


class TestLockOrder:
    """Stock rows are always read before delivery stats rows."""

    @pytest.fixture
    def table_reads(self, engine):
        reads = []

        def record(conn, cursor, statement, parameters, context, executemany):
            for table in ("stock", "product_delivery_stats"):
                if re.search(rf"FROM {table}\b", statement):
                    reads.append(table)

        event.listen(engine, "before_cursor_execute", record)
        yield reads
        event.remove(engine, "before_cursor_execute", record)

    def test_create_reads_stock_first(self, client, admin, headers, make_product, table_reads):
        product = make_product("ARG-100", quantity=10)
        table_reads.clear()

        client.post("/api/orders", json=_order_payload(product.id), headers=headers(admin))

        assert table_reads.index("stock") < table_reads.index("product_delivery_stats")

    def test_return_reads_stock_first(self, client, admin, headers, make_product, table_reads):
        product = make_product("ARG-100", quantity=10)
        created = client.post("/api/orders", json=_order_payload(product.id), headers=headers(admin)).json()
        client.put(f"/api/orders/{created['id']}/status", json={"status": "DELIVERED"}, headers=headers(admin))
        table_reads.clear()

        client.put(f"/api/orders/{created['id']}/status", json={"status": "RETURNED"}, headers=headers(admin))

        assert table_reads.index("stock") < table_reads.index("product_delivery_stats")
