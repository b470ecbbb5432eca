import json
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from accountflow.config import Settings
from accountflow.dependencies import build_account_service
from accountflow.infrastructure.storage.memory_kv_storage import InMemoryKeyValueStorage
from accountflow.main import create_app


class FakeClock:
    def __init__(self):
        self.current = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(clock):
    cfg = Settings(STORAGE_BACKEND="memory", EXPOSE_CODE_IN_RESPONSE=True)
    service = build_account_service(cfg, storage=InMemoryKeyValueStorage(), clock=clock)
    with TestClient(create_app(cfg, account_service=service)) as c:
        yield c


def send_code(client, phone="13800000001"):
    res = client.post("/auth/send-code", json={"phone": phone})
    assert res.status_code == 200
    return res.json()["data"]["code"]


def register(client, username="alice", phone="13800000001", email="a@x.com"):
    code = send_code(client, phone)
    return client.post("/auth/register", json={"username": username, "phone": phone, "email": email, "code": code})


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


def test_send_code_response(client):
    res = client.post("/auth/send-code", json={"phone": "13800000001"})
    body = res.json()
    assert body["success"] is True
    assert body["data"]["phone"] == "13800000001"
    assert body["data"]["expires_in"] == 300
    assert len(body["data"]["code"]) == 6


def test_send_code_hides_code_when_disabled(clock):
    cfg = Settings(STORAGE_BACKEND="memory", EXPOSE_CODE_IN_RESPONSE=False)
    service = build_account_service(cfg, storage=InMemoryKeyValueStorage(), clock=clock)
    with TestClient(create_app(cfg, account_service=service)) as c:
        res = c.post("/auth/send-code", json={"phone": "13800000001"})
    assert res.status_code == 200
    assert "code" not in res.json()["data"]


def test_send_code_invalid_phone(client):
    res = client.post("/auth/send-code", json={"phone": "12345"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["kind"] == "InvalidInput"
    assert "phone" in body["errors"]


def test_register_and_me(client):
    res = register(client)
    assert res.status_code == 201
    user = res.json()["data"]
    assert user["username"] == "alice"
    assert user["createdAt"] == "2024-01-01T12:00:00.000Z"

    me = client.get("/auth/me").json()
    assert me["data"] == user


def test_register_duplicate_phone(client):
    register(client)
    res = register(client, username="bob", email="b@y.com")
    assert res.status_code == 409
    body = res.json()
    assert body["kind"] == "DuplicatePhone"
    assert set(body["errors"]) == {"phone"}


def test_register_duplicate_email_reported_on_email_field(client):
    register(client)
    res = register(client, username="bob", phone="13800000002")
    assert res.status_code == 409
    assert res.json()["kind"] == "DuplicateEmail"
    assert set(res.json()["errors"]) == {"email"}


def test_register_field_errors(client):
    res = client.post("/auth/register", json={"username": "", "phone": "1", "email": "x", "code": ""})
    assert res.status_code == 400
    assert set(res.json()["errors"]) == {"username", "phone", "email", "code"}


def test_register_wrong_code(client):
    code = send_code(client)
    wrong = "000000" if code != "000000" else "111111"
    res = client.post("/auth/register", json={"username": "alice", "phone": "13800000001", "email": "a@x.com", "code": wrong})
    assert res.status_code == 400
    assert res.json()["kind"] == "CodeMismatch"
    assert set(res.json()["errors"]) == {"code"}


def test_login_logout_flow(client, clock):
    user = register(client).json()["data"]
    assert client.post("/auth/logout").json()["success"] is True
    assert client.get("/auth/me").json()["data"] is None

    code = send_code(client)
    res = client.post("/auth/login", json={"phone": "13800000001", "code": code})
    assert res.status_code == 200
    assert res.json()["data"] == user

    res = client.post("/auth/login", json={"phone": "13800000001", "code": code})
    assert res.json()["kind"] == "CodeAlreadyUsed"


def test_login_expired_code(client, clock):
    register(client)
    code = send_code(client)
    clock.advance(minutes=5, seconds=1)
    res = client.post("/auth/login", json={"phone": "13800000001", "code": code})
    assert res.status_code == 400
    assert res.json()["kind"] == "CodeExpired"


def test_login_unknown_user(client):
    code = send_code(client, "13900000009")
    res = client.post("/auth/login", json={"phone": "13900000009", "code": code})
    assert res.status_code == 404
    assert res.json()["kind"] == "UserNotFound"


class SlowStorage(InMemoryKeyValueStorage):
    def set_item(self, key, value):
        time.sleep(0.05)
        super().set_item(key, value)


def test_concurrent_registrations_keep_every_account(clock):
    cfg = Settings(STORAGE_BACKEND="memory", EXPOSE_CODE_IN_RESPONSE=True)
    storage = SlowStorage()
    service = build_account_service(cfg, storage=storage, clock=clock)
    phones = [f"1380000000{i}" for i in range(4)]
    with TestClient(create_app(cfg, account_service=service)) as c:
        codes = {phone: send_code(c, phone) for phone in phones}
        statuses = []

        def attempt(i, phone):
            res = c.post("/auth/register", json={"username": f"user{i}", "phone": phone, "email": f"u{i}@x.com", "code": codes[phone]})
            statuses.append(res.status_code)

        threads = [threading.Thread(target=attempt, args=(i, p)) for i, p in enumerate(phones)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert statuses == [201] * 4
    assert len(service.user_store.users) == 4
    assert len(json.loads(storage.get_item("users"))) == 4


def test_malformed_body_uses_error_envelope(client):
    res = client.post("/auth/send-code", json={"phone": None})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["kind"] == "InvalidInput"
    assert "phone" in body["errors"]
