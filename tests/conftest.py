"""Shared test fixtures for SchoolFlow auth tests."""

import copy
from types import SimpleNamespace

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.password import hash_password
from schoolflow.config import settings
from schoolflow.dependencies import init_all_services
from schoolflow.services.logging.access_logger import AccessLogger


# ─────────────────────────────────────────────────────────────────
# In-memory collection double
# ─────────────────────────────────────────────────────────────────


def _matches_condition(value, condition) -> bool:
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        for op, operand in condition.items():
            if op == "$gt" and not (value is not None and value > operand):
                return False
            if op == "$gte" and not (value is not None and value >= operand):
                return False
            if op == "$lt" and not (value is not None and value < operand):
                return False
            if op == "$lte" and not (value is not None and value <= operand):
                return False
            if op == "$ne" and value == operand:
                return False
            if op == "$in" and value not in operand:
                return False
        return True
    return value == condition


def _matches(doc: dict, query: dict) -> bool:
    for key, condition in query.items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in condition):
                return False
        elif not _matches_condition(doc.get(key), condition):
            return False
    return True


class FakeCursor:
    """Synchronous-chaining cursor with an async ``to_list``, like Motor's."""

    def __init__(self, docs):
        self._docs = docs
        self._limit = None

    def sort(self, key, direction=1):
        self._docs = sorted(
            self._docs,
            key=lambda d: (d.get(key) is None, d.get(key)),
            reverse=direction < 0,
        )
        return self

    def limit(self, count):
        self._limit = count
        return self

    async def to_list(self, length=None):
        docs = self._docs
        if self._limit:
            docs = docs[:self._limit]
        if length:
            docs = docs[:length]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    """The subset of Motor's collection API the services use."""

    def __init__(self):
        self.docs = []
        self.indexes = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return "_".join(f"{k}_{d}" for k, d in keys)

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query):
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None):
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def update_one(self, query, update):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                for key in update.get("$unset", {}):
                    doc.pop(key, None)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for doc in self.docs:
            if _matches(doc, query):
                self.docs.remove(doc)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        kept = [d for d in self.docs if not _matches(d, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)

    async def count_documents(self, query):
        return len([d for d in self.docs if _matches(d, query)])


class FakeDatabase:
    """Hands out one FakeCollection per name."""

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection()
        return self.collections[name]


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────

PASSWORD = "Passw0rd123"


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock()
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture(scope="session")
def password_hash():
    # bcrypt is slow; hash once per run
    return hash_password(PASSWORD)


@pytest.fixture
def seeded_db(fake_db, password_hash):
    """A database with one principal of each kind, plus a suspended school admin."""
    fake_db["super_admins"].docs.append({
        "_id": ObjectId(),
        "name": "Platform Owner",
        "email": "owner@schoolflow.test",
        "password": password_hash,
        "adminRole": "owner",
        "status": "active",
    })
    fake_db["school_admins"].docs.append({
        "_id": ObjectId(),
        "name": "Grace Admin",
        "email": "admin@greenfield.test",
        "password": password_hash,
        "schoolId": "SCH-001",
        "status": "active",
    })
    fake_db["school_admins"].docs.append({
        "_id": ObjectId(),
        "name": "Sam Suspended",
        "email": "suspended@oakridge.test",
        "password": password_hash,
        "schoolId": "SCH-002",
        "status": "suspended",
    })
    fake_db["teachers"].docs.append({
        "_id": ObjectId(),
        "firstName": "Tara",
        "lastName": "Teacher",
        "email": "tara@greenfield.test",
        "password": password_hash,
        "schoolId": "SCH-001",
        "teacherId": "T-100",
        "status": "active",
    })
    return fake_db


# ─────────────────────────────────────────────────────────────────
# Application fixtures
# ─────────────────────────────────────────────────────────────────


def make_client(app, base_url: str = "http://testserver") -> httpx.AsyncClient:
    """HTTP client talking to the app in-process. One client is one browser."""
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=base_url)


@pytest.fixture
def access_logger():
    logger = MagicMock(spec=AccessLogger)
    logger.endpoint_path = "/api/logger"
    return logger


@pytest.fixture
def app(seeded_db, access_logger):
    """The API wired to the seeded in-memory database (lifespan is not run)."""
    from api import app as application

    init_all_services(seeded_db, settings=settings, access_logger=access_logger)
    return application
