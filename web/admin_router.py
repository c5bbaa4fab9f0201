import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from exceptions.authorization import AdminAuthorizationException
from exceptions.order import OrderNotFoundException
from services.order import OrderService
from utils.permission_utils import require_admin_key
from web.dependencies import client_ip, get_order_service

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_router.get("/verify-order/{order_id}")
async def verify_order(
    order_id: str,
    request: Request,
    x_admin_key: str | None = Header(None),
    order_service: OrderService = Depends(get_order_service)
):
    """
    Show whether an order was actually paid, with customer details.

    Returns:
        200: Order details, payment status and transaction id (no secrets)
        401: Missing or incorrect X-Admin-Key
        404: Order not found or expired
    """
    try:
        require_admin_key(x_admin_key, request.app.state.admin_secret_key)
    except AdminAuthorizationException as e:
        logger.warning(f"Admin request for order {order_id} rejected from {client_ip(request)}")
        raise HTTPException(status_code=e.http_status, detail=e.message)

    try:
        view = await order_service.get_admin_view(order_id)
    except OrderNotFoundException:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")

    return {
        "orderDetails": view.customer.model_dump(),
        "productTotal": str(view.amount),
        "status": view.status.value,
        "paymentVerified": view.payment_verified,
        "transactionId": view.transaction_id,
        "createdAt": view.created_at.isoformat(),
        "expiresAt": view.expires_at.isoformat()
    }
