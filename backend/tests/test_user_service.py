"""
ProFast Parcel API — User Service Unit Tests
==============================================

What we test:
    ✅ Search requires a fragment, escapes regex metacharacters, caps results
    ✅ Role lookup: 400 / 404 / default role
    ✅ Idempotent signup, including the duplicate-key race
    ✅ Role changes restricted to admin/user
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from profast.database import InsertOutcome, UpdateOutcome
from profast.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from profast.schemas.user import UserCreate
from profast.services.user_service import SEARCH_LIMIT, UserService


@pytest.fixture
def mock_gateway():
    gateway = MagicMock()
    gateway.users.find_one = AsyncMock(return_value=None)
    gateway.users.find_many = AsyncMock(return_value=[])
    gateway.users.insert_one = AsyncMock(
        return_value=InsertOutcome(acknowledged=True, inserted_id=str(ObjectId()))
    )
    gateway.users.update_one = AsyncMock(
        return_value=UpdateOutcome(acknowledged=True, matched_count=1, modified_count=1)
    )
    return gateway


class TestSearchUsers:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fragment", [None, "", "   "])
    async def test_missing_fragment_raises(self, mock_gateway, fragment):
        with pytest.raises(ValidationError):
            await self.service.search_users(mock_gateway, fragment)
        mock_gateway.users.find_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_case_insensitive_escaped_regex_with_limit(self, mock_gateway):
        await self.service.search_users(mock_gateway, "a.b+")

        query = mock_gateway.users.find_many.await_args.args[0]
        kwargs = mock_gateway.users.find_many.await_args.kwargs
        assert query == {"email": {"$regex": r"a\.b\+", "$options": "i"}}
        assert kwargs["limit"] == SEARCH_LIMIT == 10


class TestGetUserRole:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_blank_email_raises_validation_error(self, mock_gateway):
        with pytest.raises(ValidationError):
            await self.service.get_user_role(mock_gateway, " ")

    @pytest.mark.asyncio
    async def test_unknown_user_raises_not_found(self, mock_gateway):
        with pytest.raises(NotFoundError):
            await self.service.get_user_role(mock_gateway, "ghost@example.com")

    @pytest.mark.asyncio
    async def test_missing_role_defaults_to_user(self, mock_gateway):
        mock_gateway.users.find_one.return_value = {"_id": "x", "email": "a@x.com"}

        assert await self.service.get_user_role(mock_gateway, "a@x.com") == "user"

    @pytest.mark.asyncio
    async def test_stored_role_is_returned(self, mock_gateway):
        mock_gateway.users.find_one.return_value = {"_id": "x", "email": "a@x.com", "role": "admin"}

        assert await self.service.get_user_role(mock_gateway, "a@x.com") == "admin"


class TestCreateUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_new_email_is_inserted_as_plain_user(self, mock_gateway):
        payload = UserCreate(email="new@example.com", role="admin", name="New")

        body, inserted = await self.service.create_user(mock_gateway, payload)

        assert inserted is True
        assert body.inserted is True
        stored = mock_gateway.users.insert_one.await_args.args[0]
        assert stored == {"email": "new@example.com", "name": "New", "role": "user"}

    @pytest.mark.asyncio
    async def test_existing_email_is_not_inserted(self, mock_gateway):
        mock_gateway.users.find_one.return_value = {"_id": "x", "email": "old@example.com"}

        body, inserted = await self.service.create_user(mock_gateway, UserCreate(email="old@example.com"))

        assert inserted is False
        assert body.inserted is False
        mock_gateway.users.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_key_race_reports_existing(self, mock_gateway):
        mock_gateway.users.insert_one.side_effect = DuplicateRecordError()

        body, inserted = await self.service.create_user(mock_gateway, UserCreate(email="race@example.com"))

        assert inserted is False
        assert body.message == "User already exists"


class TestUpdateUserRole:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["manager", "rider", "", "ADMIN"])
    async def test_rejects_roles_outside_admin_and_user(self, mock_gateway, role):
        with pytest.raises(ValidationError):
            await self.service.update_user_role(mock_gateway, str(ObjectId()), role)
        mock_gateway.users.update_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sets_role(self, mock_gateway):
        user_id = ObjectId()

        result = await self.service.update_user_role(mock_gateway, str(user_id), "admin")

        assert result.modified_count == 1
        mock_gateway.users.update_one.assert_awaited_once_with(
            {"_id": user_id}, {"$set": {"role": "admin"}}
        )

    @pytest.mark.asyncio
    async def test_malformed_user_id_raises_validation_error(self, mock_gateway):
        with pytest.raises(ValidationError):
            await self.service.update_user_role(mock_gateway, "nope", "admin")
