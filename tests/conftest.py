import asyncio
import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from db.db_operation import mongo_conn
from models.user import UserCreate, Role
from services.user_service import create_user
from main import app

ADMIN_EMAIL = "admin@foodordering.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture(autouse=True)
def mock_db():
    """Every test gets its own empty in-memory database."""
    mongo_conn.bind(AsyncMongoMockClient(), db_name="food_ordering_test")
    yield mongo_conn


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client, email, password="secret123"):
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    asyncio.run(create_user(UserCreate(email=ADMIN_EMAIL, password=ADMIN_PASSWORD), role=Role.ADMIN))
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["access_token"])


@pytest.fixture
def customer_headers(client):
    return bearer(register(client, "customer@example.com")["access_token"])


@pytest.fixture
def other_customer_headers(client):
    return bearer(register(client, "someone.else@example.com")["access_token"])


@pytest.fixture
def menu(client, admin_headers):
    """Small catalog: name -> created item json."""
    items = {}
    for name, price, category, available in [
        ("Margherita Pizza", "12.99", "Pizza", True),
        ("Pepperoni Pizza", "14.99", "Pizza", True),
        ("Coca Cola", "2.99", "Drinks", True),
        ("Seasonal Soup", "6.50", "Soups", False),
    ]:
        resp = client.post(
            "/api/menu/items",
            json={"name": name, "price": price, "category": category, "available": available},
            headers=admin_headers,
        )
        assert resp.status_code == 201, resp.text
        items[name] = resp.json()
    return items
