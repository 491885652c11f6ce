"""
Tests for subscription status, purchase and the admin dashboard.
"""

import pytest
from httpx import AsyncClient

from app.models.user import User
from app.repositories.property import PropertyRepository
from app.repositories.room_request import RoomRequestRepository
from app.services.subscription import AdminService, SubscriptionService
from app.utils.exceptions import InsufficientPermissionsError, ValidationError
from tests.conftest import PropertyFactory, RoomRequestFactory, assert_error_body, auth_headers


class TestSubscriptionService:

    async def test_default_status(self, test_user: User):
        assert SubscriptionService.get_status(test_user) == {"status": "inactive", "plan": None}

    async def test_purchase(self, db_session, test_user: User):
        user = await SubscriptionService(db_session).purchase(test_user, "  premium ")
        assert SubscriptionService.get_status(user) == {"status": "active", "plan": "premium"}

    @pytest.mark.parametrize("plan", [None, "", "   "])
    async def test_purchase_requires_plan(self, db_session, test_user: User, plan):
        with pytest.raises(ValidationError, match="Plan is required"):
            await SubscriptionService(db_session).purchase(test_user, plan)


class TestSubscriptionAPI:

    async def test_status(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get("/api/subscription/status", headers=auth_headers(test_user))

        assert response.status_code == 200
        assert response.json() == {"status": "inactive", "plan": None}

    async def test_purchase_then_status(self, async_client: AsyncClient, test_broker: User):
        purchase = await async_client.post(
            "/api/subscription/purchase",
            json={"plan": "gold"},
            headers=auth_headers(test_broker)
        )

        assert purchase.status_code == 200, purchase.text
        assert purchase.json() == {
            "message": "Successfully subscribed to gold plan",
            "status": "active",
            "plan": "gold",
        }

        status = await async_client.get("/api/subscription/status", headers=auth_headers(test_broker))
        assert status.json() == {"status": "active", "plan": "gold"}

    async def test_purchase_without_plan(self, async_client: AsyncClient, test_user: User):
        response = await async_client.post("/api/subscription/purchase", json={}, headers=auth_headers(test_user))
        assert_error_body(response, 400, "VALIDATION_ERROR", "Plan is required")

    async def test_status_requires_auth(self, async_client: AsyncClient):
        response = await async_client.get("/api/subscription/status")
        assert_error_body(response, 401, "UNAUTHORIZED")


class TestAdminStats:

    async def test_counts(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        room_request_repository: RoomRequestRepository,
        test_admin: User,
        test_user: User,
        test_broker: User
    ):
        await PropertyFactory.create_property(property_repository, test_user)
        await PropertyFactory.create_property(property_repository, test_broker)
        await RoomRequestFactory.create_room_request(room_request_repository, test_user)

        response = await async_client.get("/api/admin/stats", headers=auth_headers(test_admin))

        assert response.status_code == 200, response.text
        assert response.json() == {
            "totalUsers": 3,
            "totalProperties": 2,
            "totalRoomRequests": 1,
            "totalBrokers": 1,
        }

    async def test_non_admin_refused(self, async_client: AsyncClient, test_user: User):
        response = await async_client.get("/api/admin/stats", headers=auth_headers(test_user))
        assert_error_body(response, 403, "FORBIDDEN")

    async def test_service_checks_admin(self, db_session, test_user: User):
        with pytest.raises(InsufficientPermissionsError):
            await AdminService(db_session).get_stats(test_user)
