from fastapi import APIRouter, Depends, status, Query
from pymongo.errors import PyMongoError
from models.order import OrderCreate, OrderOut
from services.order_service import create_order, get_order, list_user_orders, list_all_orders, update_order_status
from core.authorization import require_admin
from core.dependencies import get_current_user, CurrentUser
from core.exceptions import AppException, ServiceError
from typing import List
from utils.logger import get_logger

logger = get_logger("Order_Route")

router = APIRouter(prefix="/api/orders", tags=["Orders"])

# order failures are all reported as 400, with the service error code in the body
def _bad_request(e: ServiceError):
    return AppException.from_service_error(e, status.HTTP_400_BAD_REQUEST)

@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
async def place_order(order: OrderCreate, current_user: CurrentUser = Depends(get_current_user)):
    """Create a new order"""
    logger.info(f"Received request to create order by user: {current_user.email}")
    try:
        return await create_order(current_user.id, order.items)
    except ServiceError as e:
        raise _bad_request(e)
    except PyMongoError:
        logger.exception("Database error creating order")
        raise AppException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error creating order", code="INTERNAL_ERROR")

@router.get("/admin/all", response_model=List[OrderOut])
async def get_all_orders(current_user: CurrentUser = Depends(require_admin)):
    """List every order, newest first (admin only)"""
    return await list_all_orders()

@router.get("", response_model=List[OrderOut])
async def get_orders(current_user: CurrentUser = Depends(get_current_user)):
    """Fetch all orders for current user"""
    return await list_user_orders(current_user.id)

@router.get("/{order_id}", response_model=OrderOut)
async def get_one_order(order_id: str, current_user: CurrentUser = Depends(get_current_user)):
    try:
        return await get_order(order_id, current_user.id)
    except ServiceError as e:
        raise _bad_request(e)

@router.put("/{order_id}/status", response_model=OrderOut)
async def change_order_status(
    order_id: str,
    status_value: str = Query(..., alias="status"),
    current_user: CurrentUser = Depends(require_admin)
):
    """Set order status (PENDING, CONFIRMED, PREPARING, OUT_FOR_DELIVERY, DELIVERED, CANCELLED)"""
    logger.info(f"Received status update request for {order_id} -> {status_value} from {current_user.email}")
    try:
        return await update_order_status(order_id, status_value, actor_email=current_user.email)
    except ServiceError as e:
        raise _bad_request(e)
