import asyncio
from decimal import Decimal
from bson import ObjectId

from conftest import ADMIN_EMAIL
from db.db_operation import mongo_conn
from services import audit_service, menu_service


def test_list_menu_is_public(client, menu):
    resp = client.get("/api/menu/items")
    assert resp.status_code == 200
    names = [item["name"] for item in resp.json()]
    # category, then name
    assert names == ["Coca Cola", "Margherita Pizza", "Pepperoni Pizza", "Seasonal Soup"]


def test_list_menu_filters(client, menu):
    pizzas = client.get("/api/menu/items", params={"category": "Pizza"}).json()
    assert {item["name"] for item in pizzas} == {"Margherita Pizza", "Pepperoni Pizza"}

    available = client.get("/api/menu/items", params={"availableOnly": "true"}).json()
    assert "Seasonal Soup" not in {item["name"] for item in available}
    assert len(available) == 3

    none_left = client.get("/api/menu/items", params={"category": "Soups", "availableOnly": "true"}).json()
    assert none_left == []


def test_get_menu_item(client, menu):
    cola = menu["Coca Cola"]
    resp = client.get(f"/api/menu/items/{cola['id']}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Coca Cola"
    assert Decimal(body["price"]) == Decimal("2.99")
    assert body["category"] == "Drinks"
    assert body["available"] is True


def test_get_unknown_menu_item(client):
    for item_id in (str(ObjectId()), "nope"):
        resp = client.get(f"/api/menu/items/{item_id}")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"


def test_create_requires_admin(client, customer_headers):
    payload = {"name": "Fries", "price": "3.50", "category": "Sides"}
    assert client.post("/api/menu/items", json=payload).status_code == 401
    resp = client.post("/api/menu/items", json=payload, headers=customer_headers)
    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


def test_create_rejects_bad_payload(client, admin_headers):
    resp = client.post("/api/menu/items", json={"name": "", "price": "-1", "category": "Sides"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_FAILED"


def test_create_defaults_to_available(client, admin_headers):
    resp = client.post("/api/menu/items", json={"name": "Fries", "price": "3.50", "category": "Sides"}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["available"] is True
    assert resp.json()["id"]


def test_update_menu_item(client, admin_headers, menu):
    cola = menu["Coca Cola"]
    resp = client.put(
        f"/api/menu/items/{cola['id']}",
        json={"name": "Coca Cola Zero", "price": "3.19", "category": "Drinks", "available": False},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Coca Cola Zero"
    assert Decimal(body["price"]) == Decimal("3.19")
    assert body["available"] is False

    entries = asyncio.run(audit_service.list_entries("menu_item", cola["id"]))
    assert entries[0]["action"] == "update_menu_item"
    assert entries[0]["before"]["price"] == "2.99"
    assert entries[0]["after"]["price"] == "3.19"


def test_update_unknown_menu_item(client, admin_headers):
    resp = client.put(
        f"/api/menu/items/{ObjectId()}",
        json={"name": "Ghost", "price": "1.00", "category": "None"},
        headers=admin_headers,
    )
    assert resp.status_code == 404


def test_delete_menu_item(client, admin_headers, menu):
    pepperoni = menu["Pepperoni Pizza"]
    resp = client.delete(f"/api/menu/items/{pepperoni['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert client.get(f"/api/menu/items/{pepperoni['id']}").status_code == 404
    assert client.delete(f"/api/menu/items/{pepperoni['id']}", headers=admin_headers).status_code == 404


def test_toggle_availability_twice_restores_state(client, admin_headers, customer_headers, menu):
    cola = menu["Coca Cola"]
    order = client.post(
        "/api/orders",
        json={"items": [{"menu_item_id": cola["id"], "quantity": 2}]},
        headers=customer_headers,
    ).json()

    first = client.patch(f"/api/menu/items/{cola['id']}/availability", headers=admin_headers)
    assert first.status_code == 200
    assert first.json()["available"] is False
    second = client.patch(f"/api/menu/items/{cola['id']}/availability", headers=admin_headers)
    assert second.json()["available"] is True

    fetched = client.get(f"/api/orders/{order['id']}", headers=customer_headers).json()
    assert fetched["items"] == order["items"]
    assert fetched["total"] == order["total"]


def test_toggle_requires_admin(client, customer_headers, menu):
    resp = client.patch(f"/api/menu/items/{menu['Coca Cola']['id']}/availability", headers=customer_headers)
    assert resp.status_code == 403


def test_toggle_unknown_item(client, admin_headers):
    resp = client.patch(f"/api/menu/items/{ObjectId()}/availability", headers=admin_headers)
    assert resp.status_code == 404


def test_create_rejects_whitespace_only_fields(client, admin_headers):
    resp = client.post("/api/menu/items", json={"name": " ", "price": "1.00", "category": "  "}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_FAILED"
    assert client.get("/api/menu/items").json() == []


def test_create_strips_surrounding_whitespace(client, admin_headers):
    resp = client.post("/api/menu/items", json={"name": "  Fries ", "price": "3.50", "category": " Sides"}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["name"] == "Fries"
    assert resp.json()["category"] == "Sides"


def test_create_and_delete_are_audited(client, admin_headers):
    created = client.post("/api/menu/items", json={"name": "Fries", "price": "3.50", "category": "Sides"}, headers=admin_headers).json()
    assert client.delete(f"/api/menu/items/{created['id']}", headers=admin_headers).status_code == 200

    entries = asyncio.run(audit_service.list_entries("menu_item", created["id"]))
    assert [e["action"] for e in entries] == ["delete_menu_item", "create_menu_item"]
    deleted, made = entries
    assert made["actor_email"] == ADMIN_EMAIL
    assert made["before"] is None
    assert made["after"] == {"name": "Fries", "price": "3.50", "category": "Sides", "available": True}
    assert deleted["actor_email"] == ADMIN_EMAIL
    assert deleted["before"]["name"] == "Fries"
    assert deleted["after"] is None


def test_toggle_is_audited(client, admin_headers, menu):
    cola = menu["Coca Cola"]
    client.patch(f"/api/menu/items/{cola['id']}/availability", headers=admin_headers)

    entries = asyncio.run(audit_service.list_entries("menu_item", cola["id"]))
    assert entries[0]["action"] == "toggle_availability"
    assert entries[0]["actor_email"] == ADMIN_EMAIL
    assert entries[0]["before"] == {"available": True}
    assert entries[0]["after"] == {"available": False}


class StaleMenuReads:
    """Wraps the menu collection so the first find_one sees the opposite availability."""

    def __init__(self, collection):
        self._collection = collection
        self._served_stale = False

    async def find_one(self, *args, **kwargs):
        doc = await self._collection.find_one(*args, **kwargs)
        if doc is not None and not self._served_stale:
            self._served_stale = True
            doc = {**doc, "available": not doc.get("available", True)}
        return doc

    def __getattr__(self, name):
        return getattr(self._collection, name)


def test_concurrent_toggle_is_skipped_and_not_audited(client, menu, monkeypatch):
    cola = menu["Coca Cola"]
    monkeypatch.setattr(mongo_conn, "menu_items", StaleMenuReads(mongo_conn.menu_items))

    item = asyncio.run(menu_service.toggle_availability(cola["id"], ADMIN_EMAIL))
    assert item["available"] is True

    entries = asyncio.run(audit_service.list_entries("menu_item", cola["id"]))
    assert "toggle_availability" not in [e["action"] for e in entries]
