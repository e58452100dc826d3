from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from auth import repository as auth_repository
from auth import tokens
from core.errors import Conflict, StorageError
from transactions import repository as transactions_repository

TEST_SECRET = "test-secret-with-enough-bytes-for-hs256!"


class InMemoryStore:
    """Stands in for the asyncpg-backed repositories."""

    def __init__(self) -> None:
        self.users: dict[uuid.UUID, dict] = {}
        self.transactions: list[dict] = []
        self.fail_writes = False
        self.fail_reads = False
        self._seq = itertools.count()

    async def create_user(self, *, user_id: str, email: str, password_hash: str) -> dict:
        if any(u["email"] == email for u in self.users.values()):
            raise Conflict("User with this email already exists")
        now = datetime.now(timezone.utc)
        row = {
            "id": uuid.UUID(user_id),
            "email": email,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        self.users[row["id"]] = row
        return dict(row)

    async def get_user_by_email(self, email: str) -> dict | None:
        for row in self.users.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def get_user_by_id(self, user_id: str) -> dict | None:
        try:
            key = uuid.UUID(str(user_id))
        except ValueError:
            return None
        row = self.users.get(key)
        return dict(row) if row is not None else None

    async def insert_transaction(self, **fields) -> dict:
        if self.fail_writes:
            raise StorageError("Database unavailable: connection refused")
        row = {
            "id": uuid.UUID(fields["transaction_id"]),
            "user_id": uuid.UUID(fields["user_id"]),
            "type": fields["type"],
            "endpoint": fields["endpoint"],
            "params": fields["params"],
            "description": fields["description"],
            "created_at": fields["created_at"],
            "_seq": next(self._seq),
        }
        self.transactions.append(row)
        return {k: v for k, v in row.items() if k != "_seq"}

    async def list_transactions_for_user(self, user_id: str) -> list[dict]:
        if self.fail_reads:
            raise StorageError("Database unavailable: connection refused")
        key = uuid.UUID(user_id)
        rows = [r for r in self.transactions if r["user_id"] == key]
        rows.sort(key=lambda r: (r["created_at"], r["_seq"]), reverse=True)
        return [{k: v for k, v in r.items() if k != "_seq"} for r in rows]


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    tokens.revocations.clear()
    yield
    tokens.revocations.clear()


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryStore:
    fake = InMemoryStore()
    monkeypatch.setattr(auth_repository, "create_user", fake.create_user)
    monkeypatch.setattr(auth_repository, "get_user_by_email", fake.get_user_by_email)
    monkeypatch.setattr(auth_repository, "get_user_by_id", fake.get_user_by_id)
    monkeypatch.setattr(transactions_repository, "insert_transaction", fake.insert_transaction)
    monkeypatch.setattr(
        transactions_repository,
        "list_transactions_for_user",
        fake.list_transactions_for_user,
    )
    return fake


@pytest.fixture
def client(store: InMemoryStore) -> TestClient:
    # Not used as a context manager: the lifespan (DB pool) must not start.
    from main import app

    return TestClient(app)
