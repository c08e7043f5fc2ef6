"""
Pytest fixtures for gift ledger tests.

Every test gets its own app pointed at a fresh data file under tmp_path,
so the seed dataset is materialized from scratch each time.

Seed facts the tests rely on:
- holder 1 emp001 (employee): gift 1 x5, gift 2 x10, gift 3 x8
- holder 2 emp002 (employee): gift 1 x3, gift 4 x6, gift 5 x4
- holder 3 mgr001 (manager): no inventory
- request 1: pending increase, holder 1, gift 2 x5
- request 2: pending transfer, holder 2 -> holder 1, gift 1 x2
"""

import pytest

from giftledger import create_app
from giftledger.extensions import store


SEED_PASSWORD = "Password123!"

EMP1, EMP2, MANAGER = 1, 2, 3
WATCH, COFFEE, TUMBLER, EARPHONES, PERFUME = 1, 2, 3, 4, 5


@pytest.fixture(scope="function")
def app(tmp_path):
    """Create application for testing."""
    app = create_app({
        "TESTING": True,
        "GIFTLEDGER_DATA_FILE": str(tmp_path / "giftSystemData.json"),
        "BCRYPT_ROUNDS": 4,
        "SEED_PASSWORD": SEED_PASSWORD,
    })
    with app.app_context():
        yield app


@pytest.fixture(scope="function")
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope="function")
def data_store(app):
    """The configured entity store with the seed dataset loaded."""
    store.snapshot()
    return store


def get_auth_token(client, username: str, password: str = SEED_PASSWORD) -> str | None:
    """Helper to get auth token for a holder."""
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    if response.status_code == 200:
        return response.json.get("token")
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def employee_headers(client):
    return auth_headers(get_auth_token(client, "emp001"))


@pytest.fixture(scope="function")
def employee2_headers(client):
    return auth_headers(get_auth_token(client, "emp002"))


@pytest.fixture(scope="function")
def manager_headers(client):
    return auth_headers(get_auth_token(client, "mgr001"))


def balance(holder_id: int, gift_id: int) -> int:
    record = store.snapshot().inventory_record(holder_id, gift_id)
    return record.quantity if record else 0
