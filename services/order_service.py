from db.db_operation import mongo_conn
from datetime import datetime
from decimal import Decimal, Inexact, localcontext
from typing import List
from bson.objectid import ObjectId
from bson.errors import InvalidId
from models.order import OrderItemIn, OrderStatus, MAX_QUANTITY
from core.exceptions import NotFoundError, UnavailableError, ValidationFailedError, ForbiddenError
from services import audit_service
from utils.money import to_db, from_db
from utils.logger import get_logger

logger = get_logger("Order_Service")

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]

def _order_oid(order_id: str) -> ObjectId:
    try:
        return ObjectId(order_id)
    except (InvalidId, TypeError):
        raise NotFoundError(f"Order not found: {order_id}")

def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus[str(value).strip().upper()]
    except KeyError:
        raise ValidationFailedError(f"Invalid order status: {value}")

def serialize_order(order: dict) -> dict:
    return {
        "id": str(order["_id"]),
        "user_id": order["user_id"],
        "items": [
            {
                "id": line["id"],
                "menu_item_id": line["menu_item_id"],
                "menu_item_name": line["menu_item_name"],
                "quantity": line["quantity"],
                "unit_price": from_db(line["unit_price"]),
                "subtotal": from_db(line["subtotal"])
            } for line in order["items"]
        ],
        "total": from_db(order["total"]),
        "status": OrderStatus(order["status"]),
        "created_at": order["created_at"],
        "updated_at": order.get("updated_at")
    }

def price_lines(items: List[OrderItemIn], catalog: dict):
    """
    Build priced line snapshots in request order.
    catalog maps menu item id (str) -> menu item document as read at request time.
    Returns (lines, total); every subtotal is quantity * unit_price and total is their sum.
    """
    lines = []
    total = Decimal("0")
    for req in items:
        qty = int(req.quantity)
        if qty < 1 or qty > MAX_QUANTITY:
            raise ValidationFailedError(f"Quantity must be between 1 and {MAX_QUANTITY} for menu item {req.menu_item_id}")
        doc = catalog.get(req.menu_item_id)
        if doc is None:
            raise NotFoundError(f"Menu item not found: {req.menu_item_id}")
        if not doc.get("available", True):
            raise UnavailableError(f"Menu item is not available: {doc['name']}")
        unit_price = from_db(doc["price"])
        # money arithmetic must be exact; any rounding is rejected
        with localcontext() as ctx:
            ctx.traps[Inexact] = True
            try:
                subtotal = unit_price * qty
                total += subtotal
            except Inexact:
                raise ValidationFailedError(f"Order amount too large to price exactly for menu item {req.menu_item_id}")
        lines.append({
            "id": str(ObjectId()),
            "menu_item_id": req.menu_item_id,
            "menu_item_name": doc["name"],
            "quantity": qty,
            "unit_price": unit_price,
            "subtotal": subtotal
        })
    return lines, total

async def _load_catalog(items: List[OrderItemIn]) -> dict:
    item_ids = []
    for it in items:
        try:
            item_ids.append(ObjectId(it.menu_item_id))
        except (InvalidId, TypeError):
            raise NotFoundError(f"Menu item not found: {it.menu_item_id}")
    cursor = mongo_conn.menu_items.find({"_id": {"$in": item_ids}})
    found_items = await cursor.to_list(length=None)
    return {str(d["_id"]): d for d in found_items}

async def create_order(user_id: str, items: List[OrderItemIn]):
    """
    items: list of OrderItemIn(menu_item_id, quantity)
    Validations:
      - at least one item, every quantity in 1..MAX_QUANTITY
      - each item exists and is available
    Snapshots:
      - store item name and price at time of order (so later price changes don't affect historical orders)
    The order and its lines go in as one document, so nothing is stored unless every line validated.
    """
    if not items:
        raise ValidationFailedError("Order items cannot be empty")

    logger.info(f"Creating new order for user {user_id} with {len(items)} line(s)")
    catalog = await _load_catalog(items)
    lines, total = price_lines(items, catalog)

    now = datetime.utcnow()
    order_doc = {
        "user_id": user_id,
        "items": [
            {**line, "unit_price": to_db(line["unit_price"]), "subtotal": to_db(line["subtotal"])}
            for line in lines
        ],
        "total": to_db(total),
        "status": OrderStatus.PENDING.value,
        "created_at": now,
        "updated_at": now
    }

    # store errors propagate; the route logs them
    result = await mongo_conn.orders_collection.insert_one(order_doc)

    logger.info(f"Order {result.inserted_id} created for user {user_id}, total {total}")
    return serialize_order({**order_doc, "_id": result.inserted_id})

async def get_order(order_id: str, user_id: str):
    """Fetch one order; only its owner may read it."""
    order = await mongo_conn.orders_collection.find_one({"_id": _order_oid(order_id)})
    if not order:
        raise NotFoundError(f"Order not found: {order_id}")
    if order["user_id"] != user_id:
        logger.warning(f"User {user_id} denied access to order {order_id}")
        raise ForbiddenError(f"Access denied to order: {order_id}")
    return serialize_order(order)

async def list_user_orders(user_id: str):
    """Get all orders of the logged-in user, newest first"""
    cursor = mongo_conn.orders_collection.find({"user_id": user_id}).sort(NEWEST_FIRST)
    orders = await cursor.to_list(length=None)
    logger.info(f"Fetched {len(orders)} orders for user {user_id}")
    return [serialize_order(o) for o in orders]

async def list_all_orders():
    cursor = mongo_conn.orders_collection.find({}).sort(NEWEST_FIRST)
    orders = await cursor.to_list(length=None)
    logger.info(f"Fetched {len(orders)} orders")
    return [serialize_order(o) for o in orders]

async def update_order_status(order_id: str, new_status: str, actor_email: str = None):
    """Set the order status. Lines and total are never touched."""
    oid = _order_oid(order_id)
    target = parse_status(new_status)

    order = await mongo_conn.orders_collection.find_one({"_id": oid})
    if not order:
        raise NotFoundError(f"Order not found: {order_id}")
    current_status = order["status"]

    await mongo_conn.orders_collection.update_one(
        {"_id": oid},
        {"$set": {"status": target.value, "updated_at": datetime.utcnow()}}
    )
    await audit_service.record(actor_email, "update_order_status", "order", order_id,
                               before={"status": current_status}, after={"status": target.value})
    logger.info(f"Order {order_id} status updated from {current_status} -> {target.value}")

    updated_order = await mongo_conn.orders_collection.find_one({"_id": oid})
    return serialize_order(updated_order)
