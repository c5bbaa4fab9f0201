"""
API router for the storefront checkout flow.

Handles order creation, payment initiation and token-gated status reads.

Security:
- The order token is the only credential: no session, no cookie
- Unknown, expired and mismatched orders answer the same 401
- Tokens are never logged
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from exceptions.authorization import InvalidOrderTokenException
from exceptions.gateway import GatewayUnavailableException
from exceptions.order import OrderExpiredException, InvalidOrderStateException
from exceptions.validation import ValidationException
from models.order import CustomerDetails
from services.order import OrderService
from web.dependencies import generate_correlation_id, get_order_service

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])

# Answer for bodies FastAPI cannot parse into the payload models (see server.create_app)
MALFORMED_BODY_DETAILS = {
    "/api/create-order": "Missing required fields",
    "/api/process-payment": "Missing order details",
}


def to_epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


class CreateOrderPayload(BaseModel):
    """
    Storefront checkout form. Presence of required fields is checked by the service.

    Numeric contact fields (postal codes, phone numbers) are accepted as strings.
    """
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")
    email: str | None = None
    phone: str | None = None
    street: str | None = None
    apartment: str | None = None
    city: str | None = None
    state: str | None = None
    postal: str | None = None
    country: str | None = None
    delivery_instructions: str | None = Field(None, alias="deliveryInstructions")
    product_total: str | int | float | None = Field(None, alias="productTotal")

    def to_customer(self) -> CustomerDetails:
        return CustomerDetails(**self.model_dump(exclude={"product_total"}))


class ProcessPaymentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    order_id: str | None = Field(None, alias="orderId")
    order_token: str | None = Field(None, alias="orderToken")


@api_router.post("/create-order")
async def create_order(payload: CreateOrderPayload | None = None,
                       order_service: OrderService = Depends(get_order_service)):
    """
    Create an order and return its id and token.

    Returns:
        200: {"orderId", "orderToken", "expiresAt"} (expiresAt in epoch milliseconds)
        400: Missing body, missing required fields or invalid amount
    """
    if payload is None:
        payload = CreateOrderPayload()
    try:
        created = await order_service.create_order(payload.to_customer(), payload.product_total)
    except ValidationException as e:
        logger.warning(f"Order creation rejected: {e}")
        raise HTTPException(status_code=e.http_status, detail=e.message)

    return {
        "orderId": created.order_id,
        "orderToken": created.order_token,
        "expiresAt": to_epoch_millis(created.expires_at)
    }


@api_router.post("/process-payment")
async def process_payment(payload: ProcessPaymentPayload | None = None,
                          order_service: OrderService = Depends(get_order_service)):
    """
    Register a gateway deposit address for the order and return the payment URL.

    Returns:
        200: {"paymentUrl", "status": "pending"}
        400: Missing order details
        401: Invalid or expired order
        409: Order already completed or rejected
        500: Payment provider error
    """
    correlation_id = generate_correlation_id()
    if payload is None or not payload.order_id or not payload.order_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing order details")

    try:
        initiated = await order_service.initiate_payment(payload.order_id, payload.order_token)
    except (InvalidOrderTokenException, OrderExpiredException):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired order")
    except InvalidOrderStateException as e:
        logger.warning(f"[{correlation_id}] Payment initiation for order {payload.order_id} in state {e.current_state}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Order can no longer be paid")
    except GatewayUnavailableException as e:
        logger.error(f"[{correlation_id}] ❌ Gateway error for order {payload.order_id}: {e.reason}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Payment provider error")

    logger.info(f"[{correlation_id}] Payment initiated for order {payload.order_id}")
    return {"paymentUrl": initiated.payment_url, "status": "pending"}


@api_router.get("/order-status/{order_id}")
async def order_status(order_id: str, orderToken: str | None = None,
                       order_service: OrderService = Depends(get_order_service)):
    """
    Token-gated order status.

    Returns:
        200: {"status", "expiresAt"}
        400: Missing order information
        401: Invalid order information
    """
    if not orderToken:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing order information")

    try:
        view = await order_service.get_status(order_id, orderToken)
    except InvalidOrderTokenException:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid order information")

    return {"status": view.status.value, "expiresAt": to_epoch_millis(view.expires_at)}


@api_router.get("/health")
async def health_check():
    """Health check endpoint for container monitoring."""
    return {"status": "ok", "message": "API is running"}
