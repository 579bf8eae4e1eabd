# core/authorization.py
from fastapi import Depends, status
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import AppException
from models.user import Role
from utils.logger import get_logger

logger = get_logger("Authorization")

def require_role(*allowed_roles: Role):
    async def _dependency(current_user: CurrentUser = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            logger.warning(f"Forbidden: {current_user.email} role {current_user.role.value} not in allowed {[r.value for r in allowed_roles]}")
            raise AppException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: insufficient role", code="FORBIDDEN")
        return current_user
    return _dependency

require_admin = require_role(Role.ADMIN)
