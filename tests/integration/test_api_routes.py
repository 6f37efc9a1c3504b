from datetime import datetime

import pytest
from fastapi import status
from httpx import AsyncClient

from app.models import (
    DeliverySession, DeliverySessionOrder, Floor, Location, MerchantParameters, OrderLocation, Payment, User,
    UserRights,
)


@pytest.mark.asyncio
class TestAuthentication:
    """Token resolution on every route"""

    async def test_missing_token(self, client: AsyncClient, baseline):
        response = await client.get("/api/v1/orders/pending")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_unknown_token(self, client: AsyncClient, baseline):
        response = await client.get("/api/v1/orders/pending", headers={"Authorization": "Bearer nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_raw_header_token(self, client: AsyncClient, baseline):
        response = await client.get("/api/v1/orders/pending", headers={"Authorization": baseline.token})
        assert response.status_code == status.HTTP_200_OK

    async def test_query_token(self, client: AsyncClient, baseline):
        response = await client.get(f"/api/v1/orders/pending?token={baseline.token}")
        assert response.status_code == status.HTTP_200_OK

    async def test_disabled_user(self, client: AsyncClient, seed, baseline):
        await seed.add(
            UserRights(id=3, merchant_id="M1", token="token-disabled"),
            User(user_id=4, merchant_id="M1", access_id=3, user_name="gone", enabled=False),
        )
        response = await client.get("/api/v1/menu", headers={"Authorization": "Bearer token-disabled"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestOrderRoutes:
    """Order endpoints"""

    async def test_pending(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            seed.order(1),
            seed.item(11, 1),
            seed.order(2, state="CLOSED"),
            DeliverySession(id=1, merchant_id="M1", user_id=baseline.driver_id, status="PENDING"),
            DeliverySessionOrder(id=1, delivery_session_id=1, order_id=2, priority=1),
        )

        response = await client.get("/api/v1/orders/pending", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [o["order_id"] for o in data["orders"]] == [1, 2]
        assert data["orders"][0]["products"][0]["isPaid"] == 0
        assert data["orders"][0]["products"][0]["comment"]["content"] == ""
        assert data["orders"][0]["TTC"] == 20.0
        assert data["delivery_sessions"][0]["orders"][0]["order_id"] == 2

    async def test_pending_for_delivery_app(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            seed.order(1),
            seed.order(2, order_type="DELIVERY", fulfillment_type="DELIVERY_BY_RESTAURANT"),
        )

        response = await client.get("/api/v1/orders/pending?app=WR_DELIVERY", headers=auth_headers)

        assert [o["order_id"] for o in response.json()["orders"]] == [2]

    async def test_get_order(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(seed.order(1))

        response = await client.get("/api/v1/orders/1", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["order_id"] == 1

    @pytest.mark.parametrize("order_id", ["does-not-exist", "999", "99999999999999999999", "-5"])
    async def test_get_unknown_order(self, client: AsyncClient, baseline, auth_headers, order_id):
        response = await client.get(f"/api/v1/orders/{order_id}", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_history(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            seed.order(1, state="CLOSED", creation_date=datetime(2024, 5, 1, 9, 0)),
            seed.order(2, state="CLOSED", creation_date=datetime(2024, 6, 1, 9, 0)),
        )

        response = await client.post(
            "/api/v1/orders/history",
            json={"date_from": "2024-05-01", "date_to": "2024-05-31"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert [o["order_id"] for o in response.json()["orders"]] == [1]

    async def test_history_up_to_the_last_date(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(seed.order(1, state="CLOSED", creation_date=datetime(2024, 5, 1, 9, 0)))

        response = await client.post(
            "/api/v1/orders/history",
            json={"date_from": "2024-05-01", "date_to": "9999-12-31"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert [o["order_id"] for o in response.json()["orders"]] == [1]

    async def test_history_inverted_range(self, client: AsyncClient, baseline, auth_headers):
        response = await client.post(
            "/api/v1/orders/history",
            json={"date_from": "2024-05-31", "date_to": "2024-05-01"},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_payments(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            seed.order(1),
            Payment(payment_id=1, order_id=1, mop="CASH", amount=5.0, enabled=1),
            Payment(payment_id=2, order_id=1, mop="CARD", amount=15.0, enabled=1),
        )

        deleted = await client.delete("/api/v1/orders/1/payments/2", headers=auth_headers)
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json()["enabled"] == 0

        listed = await client.get("/api/v1/orders/1/payments", headers=auth_headers)
        assert listed.status_code == status.HTTP_200_OK
        data = listed.json()
        assert data["order_id"] == 1
        assert [(p["payment_id"], p["enabled"]) for p in data["payments"]] == [(1, 1), (2, 0)]

    async def test_payments_of_unknown_order(self, client: AsyncClient, baseline, auth_headers):
        response = await client.get("/api/v1/orders/42/payments", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_delivery_sessions(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            seed.order(1, state="CLOSED"),
            DeliverySession(id=1, merchant_id="M1", user_id=baseline.driver_id, status="1"),
            DeliverySessionOrder(id=1, delivery_session_id=1, order_id=1, priority=1),
        )

        response = await client.get("/api/v1/delivery_sessions/pending", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        sessions = response.json()["delivery_sessions"]
        assert sessions[0]["delivery_session_id"] == 1
        assert sessions[0]["delivery_man"]["user_id"] == baseline.driver_id
        assert [o["order_id"] for o in sessions[0]["orders"]] == [1]


@pytest.mark.asyncio
class TestMenuRoute:
    """Menu endpoint"""

    async def test_menu(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(MerchantParameters(merchant_id="M1", last_menu_update=datetime(2024, 5, 10, 8, 30, 15)))

        response = await client.get("/api/v1/menu", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ok"
        assert data["last_menu_update"] == "2024-05-10 08:30:15"
        assert [c["category"] for c in data["products_types"]] == ["Burgers", "Sides"]

    async def test_menu_up_to_date(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(MerchantParameters(merchant_id="M1", last_menu_update=datetime(2024, 5, 10, 8, 30, 15)))

        response = await client.get(
            "/api/v1/menu", params={"last_menu_update": "2024-05-10 08:30:15"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "no_update_required"}


@pytest.mark.asyncio
class TestLocationsRoute:
    """Floor plan endpoint"""

    async def test_locations(self, client: AsyncClient, seed, baseline, auth_headers):
        await seed.add(
            Floor(id=1, merchant_id="M1", name="Ground floor"),
            Location(location_id=1, merchant_id="M1", location_name="T1", seats=4, floor_id=1),
            Location(location_id=2, merchant_id="M1", location_name="T2", location_order=1, floor_id=1),
            seed.order(1),
            OrderLocation(id=1, order_id=1, location_id=1),
        )

        response = await client.get("/api/v1/locations", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [(loc["location_name"], loc["available"], loc["open_order_id"]) for loc in data["locations"]] == [
            ("T1", 0, 1),
            ("T2", 1, None),
        ]
        assert data["floors"] == [{"id": 1, "name": "Ground floor"}]
        assert data["bookings"] == []

    async def test_locations_require_a_token(self, client: AsyncClient, baseline):
        response = await client.get("/api/v1/locations")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
