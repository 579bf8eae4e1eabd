from db.db_operation import mongo_conn
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from core.exceptions import NotFoundError
from services import audit_service
from utils.money import to_db, from_db
from utils.logger import get_logger

logger = get_logger("Menu_Service")

def _object_id(item_id: str) -> ObjectId:
    try:
        return ObjectId(item_id)
    except (InvalidId, TypeError):
        raise NotFoundError(f"Menu item not found with id: {item_id}")

def serialize_menu_item(d: dict) -> dict:
    return {
        "id": str(d["_id"]),
        "name": d["name"],
        "price": from_db(d["price"]),
        "category": d["category"],
        "available": d.get("available", True),
        "created_at": d.get("created_at"),
        "updated_at": d.get("updated_at")
    }

def _audit_view(d: dict) -> dict:
    return {
        "name": d["name"],
        "price": str(from_db(d["price"])),
        "category": d["category"],
        "available": d.get("available", True)
    }

async def list_menu_items(category: str | None = None, available_only: bool = False):
    q = {}
    if category:
        q["category"] = category
    if available_only:
        q["available"] = True

    cursor = mongo_conn.menu_items.find(q).sort([("category", 1), ("name", 1)])
    docs = await cursor.to_list(length=None)
    logger.info(f"Listed {len(docs)} menu items (category={category}, available_only={available_only})")
    return [serialize_menu_item(d) for d in docs]

async def get_menu_item(item_id: str):
    d = await mongo_conn.menu_items.find_one({"_id": _object_id(item_id)})
    if not d:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    return serialize_menu_item(d)

async def create_menu_item(payload, actor_email: str = None):
    now = datetime.utcnow()
    doc = {
        "name": payload.name,
        "price": to_db(payload.price),
        "category": payload.category,
        "available": bool(payload.available),
        "created_at": now,
        "updated_at": now
    }
    result = await mongo_conn.menu_items.insert_one(doc)
    item_id = str(result.inserted_id)
    await audit_service.record(actor_email, "create_menu_item", "menu_item", item_id, after=_audit_view(doc))
    logger.info(f"Menu item {item_id} created by {actor_email}")
    return serialize_menu_item({**doc, "_id": result.inserted_id})

async def update_menu_item(item_id: str, payload, actor_email: str = None):
    """Replace name, price, category and availability. Placed orders keep their snapshots."""
    oid = _object_id(item_id)
    existing = await mongo_conn.menu_items.find_one({"_id": oid})
    if not existing:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    update_doc = {
        "name": payload.name,
        "price": to_db(payload.price),
        "category": payload.category,
        "available": bool(payload.available),
        "updated_at": datetime.utcnow()
    }
    result = await mongo_conn.menu_items.update_one({"_id": oid}, {"$set": update_doc})
    if result.matched_count == 0:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    await audit_service.record(actor_email, "update_menu_item", "menu_item", item_id,
                               before=_audit_view(existing), after=_audit_view(update_doc))
    logger.info(f"Menu item {item_id} updated by {actor_email}")
    return await get_menu_item(item_id)

async def delete_menu_item(item_id: str, actor_email: str = None):
    oid = _object_id(item_id)
    existing = await mongo_conn.menu_items.find_one({"_id": oid})
    if not existing:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    result = await mongo_conn.menu_items.delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    await audit_service.record(actor_email, "delete_menu_item", "menu_item", item_id, before=_audit_view(existing))
    logger.info(f"Menu item {item_id} deleted by {actor_email}")
    return {"message": "Menu item deleted successfully", "item_id": item_id}

async def toggle_availability(item_id: str, actor_email: str = None):
    oid = _object_id(item_id)
    existing = await mongo_conn.menu_items.find_one({"_id": oid})
    if not existing:
        raise NotFoundError(f"Menu item not found with id: {item_id}")
    current = existing.get("available", True)
    # only flip from the value we read; a concurrent toggle makes this a no-op
    result = await mongo_conn.menu_items.update_one(
        {"_id": oid, "available": current},
        {"$set": {"available": not current, "updated_at": datetime.utcnow()}}
    )
    if result.modified_count == 0:
        logger.warning(f"Availability of {item_id} changed concurrently, toggle skipped")
    else:
        await audit_service.record(actor_email, "toggle_availability", "menu_item", item_id,
                                   before={"available": current}, after={"available": not current})
        logger.info(f"Menu item {item_id} availability {current} -> {not current}")
    return await get_menu_item(item_id)
