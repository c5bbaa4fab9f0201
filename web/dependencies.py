import uuid
from datetime import datetime

from fastapi import Request

from services.order import OrderService


def generate_correlation_id() -> str:
    """Generate unique correlation ID for request tracing."""
    return f"{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None
