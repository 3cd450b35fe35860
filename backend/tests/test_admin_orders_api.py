"""
Tests for the admin order dashboard endpoints.
"""
from decimal import Decimal

import pytest


async def create_orders(async_client, auth_headers, admin_headers, product_id: str, order_payload) -> list[dict]:
    orders = []
    for _ in range(3):
        response = await async_client.post("/api/orders", json=order_payload(product_id), headers=auth_headers)
        orders.append(response.json())

    await async_client.put(f"/api/orders/{orders[0]['id']}", json={"paymentStatus": "verified"}, headers=admin_headers)
    await async_client.put(f"/api/orders/{orders[0]['id']}", json={"orderStatus": "processing"}, headers=admin_headers)
    await async_client.put(f"/api/orders/{orders[1]['id']}", json={"paymentStatus": "rejected"}, headers=admin_headers)
    return orders


class TestAdminOrderList:
    """GET /api/admin/orders"""

    async def test_pagination(self, async_client, auth_headers, admin_headers, make_product, order_payload):
        product = await make_product()
        await create_orders(async_client, auth_headers, admin_headers, str(product.id), order_payload)

        response = await async_client.get(
            "/api/admin/orders", params={"page": 2, "limit": 2}, headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["page"] == 2
        assert data["pages"] == 2
        assert len(data["items"]) == 1

    @pytest.mark.parametrize(
        "status,expected",
        [("pending", 1), ("verified", 1), ("rejected", 1), ("processing", 1), ("all", 3)],
    )
    async def test_status_filter(
        self, async_client, auth_headers, admin_headers, make_product, order_payload, status, expected
    ):
        product = await make_product()
        await create_orders(async_client, auth_headers, admin_headers, str(product.id), order_payload)

        response = await async_client.get("/api/admin/orders", params={"status": status}, headers=admin_headers)

        assert response.json()["total"] == expected

    async def test_customer_forbidden(self, async_client, auth_headers):
        response = await async_client.get("/api/admin/orders", headers=auth_headers)

        assert response.status_code == 403


class TestAdminOrderSummary:
    """GET /api/admin/orders/summary"""

    async def test_counts_and_revenue(self, async_client, auth_headers, admin_headers, make_product, order_payload):
        product = await make_product(price=Decimal("500"))
        await create_orders(async_client, auth_headers, admin_headers, str(product.id), order_payload)

        response = await async_client.get("/api/admin/orders/summary", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["totalOrders"] == 3
        assert data["pendingPayment"] == 1
        assert data["rejectedPayment"] == 1
        assert data["processing"] == 1
        assert data["cancelled"] == 0
        # 500 + 100 shipping + 65 tax, verified order only
        assert data["revenue"] == 665


class TestStockWarnings:
    """GET /api/admin/orders/{id}/stock-warnings"""

    async def test_short_stock_is_reported(
        self, async_client, auth_headers, admin_headers, make_product, order_payload
    ):
        product = await make_product(name="Rare Hoodie", stock=1)
        order = (
            await async_client.post("/api/orders", json=order_payload(str(product.id), 3), headers=auth_headers)
        ).json()

        response = await async_client.get(f"/api/admin/orders/{order['id']}/stock-warnings", headers=admin_headers)

        assert response.status_code == 200
        warnings = response.json()
        assert len(warnings) == 1
        assert warnings[0]["productId"] == str(product.id)
        assert warnings[0]["requested"] == 3
        assert warnings[0]["available"] == 1

    async def test_warning_does_not_block_verification(
        self, async_client, auth_headers, admin_headers, make_product, order_payload
    ):
        product = await make_product(stock=0)
        order = (
            await async_client.post("/api/orders", json=order_payload(str(product.id)), headers=auth_headers)
        ).json()

        response = await async_client.put(
            f"/api/orders/{order['id']}", json={"paymentStatus": "verified"}, headers=admin_headers
        )

        assert response.status_code == 200

        warnings = await async_client.get(f"/api/admin/orders/{order['id']}/stock-warnings", headers=admin_headers)
        assert warnings.json() == []
