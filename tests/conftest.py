import pytest
from fastapi.testclient import TestClient

from planeta_agua.app import create_app
from planeta_agua.core.config import Settings
from planeta_agua.core.dependencies import get_gateway, get_store
from planeta_agua.utils import password_utils

from .fakes import FakeGateway, InMemoryStore

TEST_PASSWORD = "secret1"


@pytest.fixture
def settings():
    return Settings(
        JWT_SECRET="test-secret-key-with-enough-length-0123456789",
        MERCADO_PAGO_ACCESS_TOKEN="TEST-token",
        STORE_BACKEND="sql",
        DATABASE_URL="sqlite://",
        FRONTEND_URL="https://shop.example",
        API_URL="https://api.example",
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(settings, store, gateway):
    """
    Builds the app with the in-memory store and fake gateway swapped in.
    """
    app = create_app(settings, store=store, gateway=gateway)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _make_user(store, name, email, phone=None):
    user = {
        "id": store.next_id("users"),
        "name": name,
        "email": email,
        "password_hash": password_utils.get_password_hash(TEST_PASSWORD),
        "phone": phone,
        "created_at": store.now(),
    }
    store.data.setdefault("users", []).append(user)
    return user


@pytest.fixture
def test_user(store):
    return _make_user(store, "Ana", "ana@x.com", phone="11987654321")


@pytest.fixture
def other_user(store):
    return _make_user(store, "Bruno", "bruno@x.com")


def _login(client, email):
    response = client.post("/login", json={"email": email, "password": TEST_PASSWORD})
    assert response.status_code == 200, "Failed to log in test user"
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client, test_user):
    """
    Logs in the `test_user` and returns valid authorization headers.
    """
    return _login(client, test_user["email"])


@pytest.fixture
def other_headers(client, other_user):
    return _login(client, other_user["email"])


@pytest.fixture
def products(store):
    rows = [
        {"id": 1, "name": "Garrafa", "price": 10.0, "image_url": "garrafa.png"},
        {"id": 2, "name": "Filtro", "price": 55.5, "image_url": "filtro.png"},
    ]
    store.data["products"] = [dict(r) for r in rows]
    return rows


@pytest.fixture
def address(store, test_user):
    row = {
        "id": store.next_id("addresses"),
        "user_id": test_user["id"],
        "street": "Rua A, 10",
        "neighborhood": "Centro",
        "city": "Curitiba",
        "state": "PR",
        "zip_code": "80000-000",
        "created_at": store.now(),
    }
    store.data.setdefault("addresses", []).append(row)
    return row
