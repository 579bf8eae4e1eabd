from fastapi import APIRouter, Depends, status
from pymongo.errors import PyMongoError
from models.user import UserCreate, UserLogin, AuthResponse
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import AppException, ConflictError
from utils.jwt_handler import create_access_token
from services.user_service import create_user, authenticate_user, revoke_sessions
from utils.logger import get_logger

logger = get_logger("AUTH_ROUTE")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

def _session_response(user: dict, message: str) -> AuthResponse:
    access_token = create_access_token({
        "sub": user["email"],
        "id": user["id"],
        "role": user["role"].value,
        "token_version": user["token_version"]
    })
    return AuthResponse(
        id=user["id"],
        email=user["email"],
        role=user["role"],
        message=message,
        access_token=access_token,
        token_type="bearer"
    )

@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
async def register(user: UserCreate):
    logger.info(f"Attempting to register user with email: {user.email}")
    try:
        user_created = await create_user(user)
    except ConflictError as e:
        logger.warning(f"Registration rejected for {user.email}: {e.message}")
        raise AppException.from_service_error(e, status.HTTP_400_BAD_REQUEST)
    except PyMongoError as e:
        logger.error(f"Database error during user registration: {e}")
        raise AppException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error", code="INTERNAL_ERROR")
    logger.info(f"User created with email: {user.email}")
    return _session_response(user_created, "Registration successful")

@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(user: UserLogin):
    logger.info(f"Login attempt for: {user.email}")
    db_user = await authenticate_user(user.email, user.password)
    if not db_user:
        raise AppException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials", code="INVALID_CREDENTIALS")
    logger.info(f"Login successful: {user.email}")
    return _session_response(db_user, "Login successful")

@router.post("/logout", response_model=AuthResponse, response_model_exclude_none=True)
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    await revoke_sessions(current_user.id)
    logger.info(f"Logout: {current_user.email}")
    return AuthResponse(message="Logout successful")

@router.get("/me", response_model=AuthResponse, response_model_exclude_none=True)
async def me(current_user: CurrentUser = Depends(get_current_user)):
    return AuthResponse(
        id=current_user.id,
        email=current_user.email,
        role=current_user.role,
        message="User authenticated"
    )
