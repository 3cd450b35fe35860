"""
Tests for promo code endpoints.
"""
from datetime import datetime, timedelta, timezone

import pytest


class TestValidatePromoCode:
    """POST /api/promocodes/validate"""

    async def test_valid_code(self, async_client, auth_headers, make_promo):
        await make_promo(code="SAVE20")

        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "save20", "cartTotal": 3000},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["code"] == "SAVE20"
        assert data["discountPercentage"] == 20
        assert data["discountAmount"] == 600

    async def test_discount_capped(self, async_client, auth_headers, make_promo):
        await make_promo(code="SAVE20")

        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "SAVE20", "cartTotal": 10000},
            headers=auth_headers,
        )

        assert response.json()["discountAmount"] == 1000

    async def test_validation_does_not_consume_usage(self, async_client, auth_headers, make_promo, db_session):
        promo = await make_promo(code="LIMITED", usage_limit=1)

        for _ in range(3):
            response = await async_client.post(
                "/api/promocodes/validate",
                json={"code": "LIMITED", "cartTotal": 500},
                headers=auth_headers,
            )
            assert response.status_code == 200

        await db_session.refresh(promo)
        assert promo.usage_count == 0

    async def test_unknown_code(self, async_client, auth_headers):
        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "NOPE", "cartTotal": 500},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["reason"] == "CodeNotFound"

    @pytest.mark.parametrize(
        "overrides,cart,reason",
        [
            ({"is_active": False}, {"cartTotal": 500}, "Inactive"),
            ({"valid_to": datetime.now(timezone.utc) - timedelta(days=1),
              "valid_from": datetime.now(timezone.utc) - timedelta(days=5)}, {"cartTotal": 500}, "OutOfWindow"),
            ({"usage_limit": 2, "usage_count": 2}, {"cartTotal": 500}, "UsageExhausted"),
            ({"min_purchase": 1000}, {"cartTotal": 999}, "BelowMinimum"),
            ({"applicable_categories": ["hoodies"]}, {"cartTotal": 500, "categories": ["caps"]}, "CategoryMismatch"),
        ],
    )
    async def test_rejections(self, async_client, auth_headers, make_promo, overrides, cart, reason):
        await make_promo(code="CHECKME", **overrides)

        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "CHECKME", **cart},
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["reason"] == reason
        assert body["errorType"] == "PromoCodeRejected"
        assert body["detail"]

    async def test_requires_login(self, async_client):
        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "SAVE20", "cartTotal": 500},
        )

        assert response.status_code == 401

    async def test_cart_total_must_be_positive(self, async_client, auth_headers):
        response = await async_client.post(
            "/api/promocodes/validate",
            json={"code": "SAVE20", "cartTotal": 0},
            headers=auth_headers,
        )

        assert response.status_code == 422


class TestAdminPromoCodes:
    """/api/admin/promocodes"""

    @pytest.fixture
    def promo_data(self) -> dict:
        now = datetime.now(timezone.utc)
        return {
            "code": "welcome10",
            "description": "Welcome discount",
            "discountPercentage": 10,
            "maxDiscount": 500,
            "validFrom": (now - timedelta(days=1)).isoformat(),
            "validTo": (now + timedelta(days=30)).isoformat(),
            "applicableCategories": ["Hoodies", " hoodies ", "Caps"],
            "usageLimit": 100,
        }

    async def test_create(self, async_client, admin_headers, promo_data):
        response = await async_client.post("/api/admin/promocodes", json=promo_data, headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["code"] == "WELCOME10"
        assert data["usageCount"] == 0
        assert data["applicableCategories"] == ["caps", "hoodies"]

    async def test_duplicate_code(self, async_client, admin_headers, promo_data):
        await async_client.post("/api/admin/promocodes", json=promo_data, headers=admin_headers)

        response = await async_client.post(
            "/api/admin/promocodes", json={**promo_data, "code": "WELCOME10"}, headers=admin_headers
        )

        assert response.status_code == 400

    async def test_window_must_be_ordered(self, async_client, admin_headers, promo_data):
        promo_data["validFrom"], promo_data["validTo"] = promo_data["validTo"], promo_data["validFrom"]

        response = await async_client.post("/api/admin/promocodes", json=promo_data, headers=admin_headers)

        assert response.status_code == 422

    async def test_window_mixing_naive_and_offset_times(self, async_client, admin_headers, promo_data):
        promo_data["validFrom"] = "2030-01-01T10:00:00+05:45"
        promo_data["validTo"] = "2030-01-01T05:00:00"

        response = await async_client.post("/api/admin/promocodes", json=promo_data, headers=admin_headers)

        # 10:00+05:45 is 04:15 UTC, before the naive (UTC) end
        assert response.status_code == 201
        assert response.json()["validFrom"].startswith("2030-01-01T04:15:00")

    async def test_inverted_window_mixing_naive_and_offset_times(self, async_client, admin_headers, promo_data):
        promo_data["validFrom"] = "2030-01-01T10:00:00"
        promo_data["validTo"] = "2030-01-01T12:00:00+05:45"

        response = await async_client.post("/api/admin/promocodes", json=promo_data, headers=admin_headers)

        assert response.status_code == 422

    async def test_customer_forbidden(self, async_client, auth_headers, promo_data):
        response = await async_client.post("/api/admin/promocodes", json=promo_data, headers=auth_headers)

        assert response.status_code == 403

    async def test_update_and_get(self, async_client, admin_headers, make_promo):
        promo = await make_promo()

        response = await async_client.put(
            f"/api/admin/promocodes/{promo.id}",
            json={"discountPercentage": 25, "maxDiscount": None},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["discountPercentage"] == 25
        assert response.json()["maxDiscount"] is None

        fetched = await async_client.get(f"/api/admin/promocodes/{promo.id}", headers=admin_headers)
        assert fetched.json()["discountPercentage"] == 25

    async def test_update_rejects_inverted_window(self, async_client, admin_headers, make_promo):
        promo = await make_promo()
        past = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat()

        response = await async_client.put(
            f"/api/admin/promocodes/{promo.id}",
            json={"validTo": past},
            headers=admin_headers,
        )

        assert response.status_code == 400

    async def test_usage_limit_below_count(self, async_client, admin_headers, make_promo):
        promo = await make_promo(usage_limit=10, usage_count=5)

        response = await async_client.put(
            f"/api/admin/promocodes/{promo.id}",
            json={"usageLimit": 3},
            headers=admin_headers,
        )

        assert response.status_code == 400

    async def test_delete(self, async_client, admin_headers, make_promo):
        promo = await make_promo()

        response = await async_client.delete(f"/api/admin/promocodes/{promo.id}", headers=admin_headers)
        assert response.status_code == 204

        missing = await async_client.get(f"/api/admin/promocodes/{promo.id}", headers=admin_headers)
        assert missing.status_code == 404

    async def test_list_and_stats(self, async_client, admin_headers, make_promo):
        now = datetime.now(timezone.utc)
        await make_promo(code="ACTIVE1", usage_count=3)
        await make_promo(code="OLD1", valid_from=now - timedelta(days=10), valid_to=now - timedelta(days=5), usage_count=4)
        await make_promo(code="OFF1", is_active=False)

        listing = await async_client.get("/api/admin/promocodes", headers=admin_headers)
        stats = await async_client.get("/api/admin/promocodes/stats", headers=admin_headers)

        assert {p["code"] for p in listing.json()} == {"ACTIVE1", "OLD1", "OFF1"}
        assert stats.json() == {"total": 3, "active": 1, "expired": 1, "totalUsage": 7}
