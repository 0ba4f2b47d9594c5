# backend/tests/conftest.py
from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from househunt.clients import DemoBackend
from househunt.config import Settings
from househunt.main import create_app
from househunt.schemas import HomeCreate
from househunt.services import homes


def make_settings(**overrides) -> Settings:
    base = {"supabase_url": None, "supabase_anon_key": None}
    base.update(overrides)
    return Settings(_env_file=None, **base)


@pytest.fixture()
def cfg() -> Settings:
    return make_settings()


@pytest.fixture()
def backend():
    b = DemoBackend()
    yield b
    b.close()


@pytest.fixture()
def session(backend):
    return backend.sign_in_with_password("buyer@example.com", "pw").unwrap()


@pytest.fixture()
def home(backend, session):
    return homes.create_home(
        backend,
        session=session,
        payload=HomeCreate(address="12 Oak Ln", listing_url="https://example.com/12-oak", asking_price=Decimal("175000")),
    )


@pytest.fixture()
def client(cfg, backend):
    return TestClient(create_app(cfg, backend))


@pytest.fixture()
def auth_headers(client) -> dict[str, str]:
    r = client.post("/api/auth/login", json={"email": "buyer@example.com", "password": "pw"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
