from db.db_operation import mongo_conn
from utils.hash import hash_password, verify_password
from models.user import UserCreate, Role
from core.exceptions import ConflictError
from pymongo.errors import DuplicateKeyError
from bson.objectid import ObjectId
from utils.logger import get_logger
from datetime import datetime


logger = get_logger("USER_SERVICE")

def serialize_user(user: dict) -> dict:
    return {
        "id": str(user["_id"]),
        "email": user["email"],
        "role": Role(user.get("role", Role.CUSTOMER.value)),
        "full_name": user.get("full_name"),
        "token_version": user.get("token_version", 0)
    }

async def create_user(user: UserCreate, role: Role = Role.CUSTOMER):
    logger.info(f"User create request received for email: {user.email}")
    users_collection = mongo_conn.users_collection
    if await users_collection.find_one({"email": user.email}):
        raise ConflictError("Email already exists")

    user_dict = {
        "email": user.email,
        "full_name": user.full_name,
        "password": hash_password(user.password),  # hashed password
        "role": Role(role).value,
        "token_version": 0,
        "created_at": datetime.utcnow()
    }
    try:
        result = await users_collection.insert_one(user_dict)
    except DuplicateKeyError:
        # lost a race with a concurrent registration
        raise ConflictError("Email already exists")
    logger.info(f"User inserted into database with id: {result.inserted_id}")
    return serialize_user({**user_dict, "_id": result.inserted_id})

async def authenticate_user(email: str, password: str):
    """Return the user for valid credentials, None otherwise."""
    db_user = await mongo_conn.users_collection.find_one({"email": email})
    if not db_user:
        logger.warning(f"Login failed: user not found {email}")
        return None
    if not verify_password(password, db_user["password"]):
        logger.warning(f"Login failed: wrong password {email}")
        return None
    return serialize_user(db_user)

async def revoke_sessions(user_id: str):
    """Bump token_version so every token issued so far stops validating."""
    result = await mongo_conn.users_collection.update_one(
        {"_id": ObjectId(user_id)},
        {"$inc": {"token_version": 1}, "$set": {"updated_at": datetime.utcnow()}}
    )
    logger.info(f"Sessions revoked for user {user_id} (matched={result.matched_count})")
