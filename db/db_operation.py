from motor.motor_asyncio import AsyncIOMotorClient
from settings.config import settings
from utils.logger import get_logger

logger = get_logger("DB_OPERATION")

async def create_indexes():
    await mongo_conn.users_collection.create_index("email", unique=True)
    await mongo_conn.menu_items.create_index("category")
    orders_collection = mongo_conn.orders_collection
    await orders_collection.create_index("user_id")
    await orders_collection.create_index("created_at")
    logger.info("Indexes created")

class MongoConnection:
    def __init__(self, client=None):
        logger.info("Initializing MongoDB Connection")
        self.bind(client or AsyncIOMotorClient(settings.MONGO_URI))

    def bind(self, client, db_name: str | None = None):
        """Point every collection handle at `client`. Tests rebind to an in-memory client."""
        self.client = client
        self.db = self.client[db_name or settings.DB_NAME]
        self.users_collection = self.db["users"]
        self.menu_items = self.db["menu_items"]
        self.orders_collection = self.db["orders"]
        self.audit_logs = self.db["audit_logs"]

    async def connect(self):
        try:
            # Force an actual connection & authentication check
            await self.db.command("ping")
            logger.info("Successfully connected to MongoDB and authenticated.")
            logger.info(f"Using Database: {settings.DB_NAME}")
        except Exception as e:
            logger.error(f"Could not connect to MongoDB: {e}")
            raise e

# Create the instance
mongo_conn = MongoConnection()
