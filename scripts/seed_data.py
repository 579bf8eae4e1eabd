# scripts/seed_data.py
import asyncio
from datetime import datetime
from decimal import Decimal
from db.db_operation import mongo_conn, create_indexes
from models.user import Role
from utils.hash import hash_password
from utils.money import to_db
from utils.logger import get_logger

logger = get_logger("Seed")

SEED_USERS = [
    ("admin@foodordering.com", "admin123", Role.ADMIN),
    ("customer@example.com", "customer123", Role.CUSTOMER),
]

SAMPLE_MENU = {
    "Pizza": [
        ("Margherita Pizza", "12.99"), ("Pepperoni Pizza", "14.99"), ("Vegetarian Pizza", "13.99"),
        ("Hawaiian Pizza", "15.99"), ("Meat Lovers Pizza", "17.99"), ("BBQ Chicken Pizza", "16.99"),
        ("Four Cheese Pizza", "15.49"), ("Supreme Pizza", "18.99"),
    ],
    "Burgers": [
        ("Classic Burger", "9.99"), ("Cheeseburger", "10.99"), ("Bacon Burger", "12.99"),
        ("Double Cheeseburger", "14.99"), ("Veggie Burger", "11.99"), ("BBQ Bacon Burger", "15.99"),
        ("Mushroom Swiss Burger", "13.99"), ("Spicy Jalapeno Burger", "13.49"),
    ],
    "Drinks": [
        ("Coca Cola", "2.99"), ("Pepsi", "2.99"), ("Orange Juice", "3.99"), ("Apple Juice", "3.99"),
        ("Water", "1.99"), ("Sparkling Water", "2.49"), ("Iced Tea", "2.79"), ("Coffee", "3.49"),
        ("Hot Chocolate", "3.99"), ("Milkshake - Vanilla", "4.99"), ("Milkshake - Chocolate", "4.99"),
        ("Milkshake - Strawberry", "4.99"),
    ],
}

async def seed_users():
    users = mongo_conn.users_collection
    created = 0
    for email, password, role in SEED_USERS:
        if await users.find_one({"email": email}):
            logger.info(f"User already exists: {email}")
            continue
        await users.insert_one({
            "email": email,
            "full_name": None,
            "password": hash_password(password),
            "role": role.value,
            "token_version": 0,
            "created_at": datetime.utcnow()
        })
        logger.info(f"Created {role.value} user: {email}")
        created += 1
    return created

async def seed_menu():
    menu_items = mongo_conn.menu_items
    if await menu_items.count_documents({}) > 0:
        logger.info("Menu already populated, skipping")
        return 0
    now = datetime.utcnow()
    docs = [
        {
            "name": name,
            "price": to_db(Decimal(price)),
            "category": category,
            "available": True,
            "created_at": now,
            "updated_at": now
        }
        for category, items in SAMPLE_MENU.items()
        for name, price in items
    ]
    await menu_items.insert_many(docs)
    logger.info(f"Sample menu items created with categories: {', '.join(SAMPLE_MENU)}")
    return len(docs)

async def seed():
    await mongo_conn.connect()
    await create_indexes()
    await seed_users()
    await seed_menu()

if __name__ == "__main__":
    asyncio.run(seed())
