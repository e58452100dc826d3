from __future__ import annotations

import json

import pytest

from core import overpass
from transactions import classifier
from transactions import service as transactions_service
from transactions.schemas import TransactionType

PASSWORD = "Secret123!"
EMAIL = "alice@example.com"


def _register(client, email: str = EMAIL, headers: dict | None = None):
    return client.post(
        "/auth/register",
        json={"email": email, "password": PASSWORD, "passwordConfirmation": PASSWORD},
        headers=headers or {},
    )


def _login(client, email: str = EMAIL) -> str:
    resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return resp.json()["data"]["token"]


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def overpass_elements(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    elements = [
        {
            "type": "node",
            "id": 419367357,
            "lat": 40.7167899,
            "lon": -73.9996711,
            "tags": {"name": "Nha Trang One", "cuisine": "vietnamese"},
        }
    ]

    async def fake_query_elements(**_: object) -> list[dict]:
        return elements

    monkeypatch.setattr(overpass, "query_elements", fake_query_elements)
    return elements


def test_register_twice_conflicts(client, store) -> None:
    first = _register(client)
    second = _register(client)

    assert first.status_code == 201
    assert "passwordHash" not in first.json()["data"]
    assert "password_hash" not in first.json()["data"]
    assert second.status_code == 409
    assert second.json()["success"] is False


def test_login_with_unknown_email_is_generic_and_unrecorded(client, store) -> None:
    resp = client.post("/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"
    assert store.transactions == []


def test_failed_login_is_not_recorded(client, store) -> None:
    _register(client)

    resp = client.post("/auth/login", json={"email": EMAIL, "password": "Wrong123!"})

    assert resp.status_code == 401
    assert store.transactions == []


def test_successful_login_is_recorded_without_password(client, store) -> None:
    user_id = _register(client).json()["data"]["id"]

    _login(client)

    assert len(store.transactions) == 1
    row = store.transactions[0]
    assert str(row["user_id"]) == user_id
    assert row["type"] == TransactionType.AUTH.value
    assert row["endpoint"] == "/auth/login"
    assert row["description"] == f"User login: {EMAIL}"
    assert PASSWORD not in row["params"]
    assert json.loads(row["params"])["body"]["password"] == "[REDACTED]"


def test_login_response_reaches_client_unchanged(client, store) -> None:
    _register(client)

    resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})

    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["email"] == EMAIL


def test_coordinate_search_records_one_search(client, store, overpass_elements) -> None:
    _register(client)
    token = _login(client)

    resp = client.get("/restaurants?lat=40.7128&lon=-74.0060", headers=_auth(token))

    assert resp.status_code == 200
    assert resp.json()["data"][0]["name"] == "Nha Trang One"
    searches = [r for r in store.transactions if r["type"] == TransactionType.SEARCH.value]
    assert len(searches) == 1
    assert "(40.7128, -74.006)" in searches[0]["description"]
    assert searches[0]["endpoint"] == "/restaurants"


def test_transactions_without_token_is_rejected_and_unrecorded(client, store) -> None:
    resp = client.get("/transactions")

    assert resp.status_code == 401
    assert store.transactions == []


def test_history_view_is_visible_in_same_listing(client, store) -> None:
    _register(client)
    token = _login(client)

    resp = client.get("/transactions", headers=_auth(token))

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [d["description"] for d in data] == ["Viewed transaction history", f"User login: {EMAIL}"]
    assert data[0]["type"] == "TRANSACTION"
    assert data[0]["params"] == "{}"
    assert data[0]["endpoint"] == "/transactions"


def test_profile_lookup_is_skipped(client, store) -> None:
    _register(client)
    token = _login(client)
    before = len(store.transactions)

    resp = client.get("/users/me", headers=_auth(token))

    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == EMAIL
    assert len(store.transactions) == before


def test_other_requests_use_method_and_path(client, store) -> None:
    user_id = _register(client).json()["data"]["id"]
    token = _login(client)

    resp = client.get(f"/users/{user_id}", headers=_auth(token))

    assert resp.status_code == 200
    assert store.transactions[-1]["description"] == f"GET request to /users/{user_id}"
    assert store.transactions[-1]["type"] == TransactionType.TRANSACTION.value


def test_authenticated_register_redacts_body(client, store) -> None:
    _register(client)
    token = _login(client)

    resp = _register(client, email="bob@example.com", headers=_auth(token))

    assert resp.status_code == 201
    row = store.transactions[-1]
    assert row["description"] == "User registration"
    assert PASSWORD not in row["params"]
    assert json.loads(row["params"])["body"]["email"] == "bob@example.com"


def test_logout_is_recorded_and_revoked_token_is_not(client, store) -> None:
    _register(client)
    token = _login(client)

    logout = client.post("/auth/logout", headers=_auth(token))
    profile = client.get("/auth/profile", headers=_auth(token))

    assert logout.status_code == 200
    assert store.transactions[-1]["description"] == "User logout"
    assert profile.status_code == 401
    assert profile.json()["message"] == "Token has been revoked"
    assert len(store.transactions) == 2


def test_profile_with_valid_token(client, store) -> None:
    _register(client)
    token = _login(client)

    resp = client.get("/auth/profile", headers=_auth(token))

    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == EMAIL
    assert store.transactions[-1]["description"] == "Accessed user profile"


def test_recording_failure_does_not_break_request(client, store, overpass_elements) -> None:
    _register(client)
    token = _login(client)
    store.fail_writes = True

    search = client.get("/restaurants?city=New York", headers=_auth(token))
    history = client.get("/transactions", headers=_auth(token))

    assert search.status_code == 200
    assert history.status_code == 200
    assert len(store.transactions) == 1


def test_request_without_token_is_not_recorded(client, store) -> None:
    resp = client.get("/restaurants?lat=1&lon=2")

    assert resp.status_code == 401
    assert store.transactions == []


def test_login_recording_failure_leaves_response_intact(client, store) -> None:
    _register(client)
    store.fail_writes = True

    resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["email"] == EMAIL
    assert body["data"]["token"]
    assert store.transactions == []


def test_classification_error_does_not_break_request(client, store, monkeypatch: pytest.MonkeyPatch) -> None:
    _register(client)
    token = _login(client)
    before = len(store.transactions)

    def broken_classify(_: object) -> None:
        raise RuntimeError("classifier exploded")

    monkeypatch.setattr(classifier, "classify", broken_classify)

    resp = client.get("/auth/profile", headers=_auth(token))

    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == EMAIL
    assert len(store.transactions) == before


def test_unexpected_recorder_error_is_swallowed(client, store, monkeypatch: pytest.MonkeyPatch) -> None:
    _register(client)
    token = _login(client)
    before = len(store.transactions)

    async def broken_record(**_: object) -> None:
        raise RuntimeError("recorder exploded")

    monkeypatch.setattr(transactions_service, "record", broken_record)

    profile = client.get("/auth/profile", headers=_auth(token))
    history = client.get("/transactions", headers=_auth(token))
    login = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})

    assert profile.status_code == 200
    assert history.status_code == 200
    assert login.status_code == 200
    assert len(store.transactions) == before


def test_repeated_query_keys_keep_every_value(client, store, overpass_elements) -> None:
    _register(client)
    token = _login(client)

    resp = client.get("/restaurants?lat=40.7128&lon=-74.0060&tag=thai&tag=pizza", headers=_auth(token))

    assert resp.status_code == 200
    params = json.loads(store.transactions[-1]["params"])
    assert params["query"] == {"lat": "40.7128", "lon": "-74.0060", "tag": ["thai", "pizza"]}
