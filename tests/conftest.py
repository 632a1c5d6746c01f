"""
Test configuration and fixtures for the test suite.
"""
import os

# 必须在导入 taskboard 之前设置
os.environ["ENVIRONMENT"] = "testing"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient

from taskboard.core.config import settings
from taskboard.core.redis_client import redis_client
from taskboard.main import app
from tests.fakes import FakeRedis, FakeStore

API = settings.API_V1_STR


@pytest.fixture
def fake_redis():
    fake = FakeRedis()
    redis_client.redis = fake
    yield fake
    redis_client.redis = None


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(tmp_path, monkeypatch, fake_redis):
    """TestClient backed by a temporary SQLite file and the in-memory redis fake."""
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    with TestClient(app) as test_client:
        # lifespan 关闭时会清空 redis_client.redis，这里在请求前重新挂上
        redis_client.redis = fake_redis
        yield test_client


def signup(client, name="Alice", email="alice@example.com", password="secret123"):
    return client.post(f"{API}/auth/signup", json={"name": name, "email": email, "password": password})


def login(client, email="alice@example.com", password="secret123"):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


@pytest.fixture
def auth_headers(client):
    assert signup(client).status_code == 201
    response = login(client)
    assert response.status_code == 200
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def project_id(client, auth_headers):
    response = client.post(
        f"{API}/projects",
        json={"name": "Apollo", "description": "Moon shot", "start_date": "2024-01-01", "end_date": "2024-03-01"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]
