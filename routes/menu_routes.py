from fastapi import APIRouter, Depends, status, Body, Query
from models.menu import MenuItemCreate, MenuItemOut
from services.menu_service import create_menu_item, list_menu_items, get_menu_item, update_menu_item, delete_menu_item, toggle_availability
from core.authorization import require_admin
from core.dependencies import CurrentUser
from core.exceptions import AppException, NotFoundError
from utils.logger import get_logger
from typing import List, Optional

logger = get_logger("Menu_Route")
router = APIRouter(prefix="/api/menu", tags=["Menu"])

def _not_found(e: NotFoundError):
    return AppException.from_service_error(e, status.HTTP_404_NOT_FOUND)

# Public: list menu items, optionally filtered
@router.get("/items", response_model=List[MenuItemOut])
async def api_list_menu(
    category: Optional[str] = Query(None),
    available_only: bool = Query(False, alias="availableOnly"),
):
    return await list_menu_items(category=category, available_only=available_only)

@router.get("/items/{item_id}", response_model=MenuItemOut)
async def api_get_menu_item(item_id: str):
    try:
        return await get_menu_item(item_id)
    except NotFoundError as e:
        raise _not_found(e)

@router.post("/items", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
async def api_create_menu_item(payload: MenuItemCreate = Body(...), current_user: CurrentUser = Depends(require_admin)):
    return await create_menu_item(payload, actor_email=current_user.email)

@router.put("/items/{item_id}", response_model=MenuItemOut)
async def api_update_menu_item(item_id: str, payload: MenuItemCreate = Body(...), current_user: CurrentUser = Depends(require_admin)):
    try:
        return await update_menu_item(item_id, payload, actor_email=current_user.email)
    except NotFoundError as e:
        raise _not_found(e)

@router.delete("/items/{item_id}")
async def api_delete_menu_item(item_id: str, current_user: CurrentUser = Depends(require_admin)):
    try:
        return await delete_menu_item(item_id, actor_email=current_user.email)
    except NotFoundError as e:
        raise _not_found(e)

@router.patch("/items/{item_id}/availability", response_model=MenuItemOut)
async def api_toggle_availability(item_id: str, current_user: CurrentUser = Depends(require_admin)):
    try:
        return await toggle_availability(item_id, actor_email=current_user.email)
    except NotFoundError as e:
        raise _not_found(e)
