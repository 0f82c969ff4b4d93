"""
ProFast Parcel API — Rider Service Unit Tests
===============================================

What we test:
    ✅ Applications default to status "pending"
    ✅ Activation returns the email to promote (body email, else rider's own)
    ✅ Non-activating transitions promote nobody
    ✅ Promotion failure is logged, not raised
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from profast.database import InsertOutcome, UpdateOutcome
from profast.exceptions import DatabaseError
from profast.schemas.rider import RiderApplication
from profast.services.rider_service import RiderService


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.riders.insert_one = AsyncMock(
        return_value=InsertOutcome(acknowledged=True, inserted_id="rider-1")
    )
    gateway.riders.update_one = AsyncMock(
        return_value=UpdateOutcome(acknowledged=True, matched_count=1, modified_count=1)
    )
    gateway.riders.find_one = AsyncMock(return_value={"_id": "r", "email": "rider@example.com"})
    gateway.users.update_one = AsyncMock(
        return_value=UpdateOutcome(acknowledged=True, matched_count=1, modified_count=1)
    )
    return gateway


class TestRiderApplications:

    @pytest.mark.asyncio
    async def test_status_defaults_to_pending(self, mock_gateway):
        application = RiderApplication(email="r@example.com", name="Rahim", region="Dhaka")

        await RiderService().create_application(mock_gateway, application)

        stored = mock_gateway.riders.insert_one.await_args.args[0]
        assert stored == {"email": "r@example.com", "name": "Rahim", "region": "Dhaka", "status": "pending"}


class TestUpdateStatus:

    def setup_method(self):
        self.service = RiderService()

    @pytest.mark.asyncio
    async def test_activation_uses_body_email(self, mock_gateway):
        result, email = await self.service.update_status(
            mock_gateway, str(ObjectId()), "active", "given@example.com"
        )

        assert result.modified_count == 1
        assert email == "given@example.com"
        mock_gateway.riders.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_activation_falls_back_to_rider_email(self, mock_gateway):
        _, email = await self.service.update_status(mock_gateway, str(ObjectId()), "active")

        assert email == "rider@example.com"

    @pytest.mark.asyncio
    async def test_other_status_promotes_nobody(self, mock_gateway):
        _, email = await self.service.update_status(
            mock_gateway, str(ObjectId()), "rejected", "given@example.com"
        )

        assert email is None

    @pytest.mark.asyncio
    async def test_unknown_rider_promotes_nobody(self, mock_gateway):
        mock_gateway.riders.update_one.return_value = UpdateOutcome(
            acknowledged=True, matched_count=0, modified_count=0
        )

        _, email = await self.service.update_status(
            mock_gateway, str(ObjectId()), "active", "given@example.com"
        )

        assert email is None


class TestActivateLinkedUser:

    @pytest.mark.asyncio
    async def test_sets_rider_role(self, mock_gateway):
        await RiderService().activate_linked_user(mock_gateway, "rider@example.com")

        mock_gateway.users.update_one.assert_awaited_once_with(
            {"email": "rider@example.com"}, {"$set": {"role": "rider"}}
        )

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, mock_gateway, caplog):
        mock_gateway.users.update_one.side_effect = DatabaseError(context={"error": "timeout"})

        with caplog.at_level(logging.ERROR, logger="profast.services.rider_service"):
            await RiderService().activate_linked_user(mock_gateway, "rider@example.com")

        assert "could not promote rider@example.com" in caplog.text
