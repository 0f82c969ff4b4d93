"""
ProFast Parcel API — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The API is exercised through httpx.AsyncClient over ASGITransport
       against a fresh create_app(). The lifespan does not run, so the
       fixtures put doubles on app.state instead of real clients:

Fixture Hierarchy:
    ├── fake_database:     in-memory stand-in for a pymongo AsyncDatabase
    ├── gateway:           MongoGateway over fake_database, already connected
    ├── identity_verifier: maps known bearer tokens to identities
    ├── stripe_client:     MagicMock with payment_intents.create_async
    ├── payment_gateway:   StripePaymentGateway around stripe_client
    ├── app:               create_app() with the doubles installed
    └── test_client:       HTTPX AsyncClient bound to `app`
"""

import copy
import os
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

# Before any profast import reads Settings
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/?serverSelectionTimeoutMS=100"
os.environ["PAYMENT_GATEWAY_KEY"] = "sk_test_not_real"
os.environ["FIREBASE_CREDENTIALS_PATH"] = "/nonexistent/firebase.json"

from profast.database import MongoGateway  # noqa: E402
from profast.exceptions import AuthorizationError  # noqa: E402
from profast.security import Identity  # noqa: E402
from profast.services.payment_gateway import StripePaymentGateway  # noqa: E402


ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"
ALICE = "alice@example.com"
BOB = "bob@example.com"


# ══════════════════════════════════════════════════════════════════════════
# In-memory MongoDB double
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, dict) and any(op.startswith("$") for op in condition):
            for op, arg in condition.items():
                if op == "$ne":
                    if value == arg:
                        return False
                elif op == "$regex":
                    flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                    if not isinstance(value, str) or not re.search(arg, value, flags):
                        return False
                elif op == "$options":
                    continue
                else:
                    raise NotImplementedError(f"operator {op} not supported by the test double")
        elif value != condition:
            return False
    return True


def _sort_key(value: Any):
    return (value is None, value if value is not None else 0)


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    def sort(self, key_or_list, direction: Optional[int] = None) -> "FakeCursor":
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        for key, order in reversed(keys):
            self._documents.sort(key=lambda doc: _sort_key(doc.get(key)), reverse=order < 0)
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._documents[:length] if length else self._documents)


class FakeCollection:
    """Subset of pymongo's AsyncCollection used by the Repository class."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.unique_fields: set = set()

    def find(self, query: Optional[Dict[str, Any]] = None, projection: Optional[Dict[str, Any]] = None) -> FakeCursor:
        found = [doc for doc in self.documents if _matches(doc, query or {})]
        if projection:
            keep = {key for key, flag in projection.items() if flag} | {"_id"}
            found = [{k: v for k, v in doc.items() if k in keep} for doc in found]
        return FakeCursor(copy.deepcopy(found))

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self.documents:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        for field in self.unique_fields:
            if any(existing.get(field) == document.get(field) for existing in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name}")
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]):
        for doc in self.documents:
            if _matches(doc, query):
                changes = update.get("$set", {})
                modified = any(doc.get(k) != v for k, v in changes.items())
                doc.update(copy.deepcopy(changes))
                return SimpleNamespace(
                    acknowledged=True, matched_count=1, modified_count=int(modified), upserted_id=None
                )
        return SimpleNamespace(acknowledged=True, matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query: Dict[str, Any]):
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                del self.documents[index]
                return SimpleNamespace(acknowledged=True, deleted_count=1)
        return SimpleNamespace(acknowledged=True, deleted_count=0)

    async def create_index(self, keys, unique: bool = False) -> str:
        if unique:
            self.unique_fields.update(field for field, _ in keys)
        return "_".join(f"{field}_{order}" for field, order in keys)


class FakeDatabase:
    def __init__(self, reachable: bool = True):
        self.reachable = reachable
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))

    async def command(self, name: str) -> Dict[str, Any]:
        if not self.reachable:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1}


class StubIdentityVerifier:
    """Accepts only the tokens it was given."""

    def __init__(self, tokens: Dict[str, str]):
        self.tokens = tokens

    async def verify(self, token: str) -> Identity:
        email = self.tokens.get(token)
        if email is None:
            raise AuthorizationError(context={"reason": "unknown test token"})
        return Identity(uid=f"uid-{email}", email=email, claims={"email": email})


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest_asyncio.fixture
async def gateway(fake_database) -> MongoGateway:
    gw = MongoGateway(fake_database)
    await gw.connect()
    return gw


@pytest.fixture
def identity_verifier() -> StubIdentityVerifier:
    return StubIdentityVerifier({ALICE_TOKEN: ALICE, BOB_TOKEN: BOB})


@pytest.fixture
def stripe_client() -> MagicMock:
    client = MagicMock()
    client.payment_intents.create_async = AsyncMock(
        return_value=SimpleNamespace(id="pi_123", client_secret="pi_123_secret_abc")
    )
    return client


@pytest.fixture
def payment_gateway(stripe_client) -> StripePaymentGateway:
    return StripePaymentGateway(api_key="sk_test_not_real", currency="usd", client=stripe_client)


@pytest.fixture
def app(gateway, identity_verifier, payment_gateway):
    from profast.main import create_app

    application = create_app()
    application.state.gateway = gateway
    application.state.identity_verifier = identity_verifier
    application.state.payment_gateway = payment_gateway
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_banner(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def alice_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ALICE_TOKEN}"}


@pytest.fixture
def bob_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {BOB_TOKEN}"}
