from fastapi import Depends, status
from fastapi.security import OAuth2PasswordBearer
from bson.objectid import ObjectId
from bson.errors import InvalidId
from typing import Optional
from pydantic import BaseModel
from db.db_operation import mongo_conn
from models.user import Role
from core.exceptions import AppException
from utils.jwt_handler import decode_access_token
from utils.logger import get_logger

logger = get_logger("Dependencies")

# tells fastapi to expect a token in the request header after login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")

class CurrentUser(BaseModel):
    """Identity and role of the caller, resolved once per request."""
    id: str
    email: str
    role: Role
    full_name: Optional[str] = None
    token_version: int = 0

def _unauthorized(detail: str):
    return AppException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        code="UNAUTHORIZED",
        headers={"WWW-Authenticate": "Bearer"}
    )

async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """
    Decode token, validate, fetch user from DB, and ensure token_version matches.
    Returns CurrentUser object.
    """
    try:
        payload = decode_access_token(token)
    except ValueError:
        logger.warning("JWT Error: Invalid token")
        raise _unauthorized("Invalid token")

    user_id = payload.get("id")
    tv = payload.get("token_version")
    if not user_id:
        logger.debug("User id not found in token")
        raise _unauthorized("Invalid token: no user id found")

    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        raise _unauthorized("Invalid token")

    user = await mongo_conn.users_collection.find_one({"_id": oid})
    if user is None:
        logger.warning(f"User not found for id: {user_id}")
        raise _unauthorized("User not authenticated")
    if user.get("token_version", 0) != tv:
        logger.warning(f"Token version mismatch for user: {user.get('email')}")
        raise _unauthorized("Session has ended")

    return CurrentUser(
        id=str(user["_id"]),
        email=user["email"],
        role=Role(user.get("role", Role.CUSTOMER.value)),
        full_name=user.get("full_name"),
        token_version=user.get("token_version", 0)
    )
