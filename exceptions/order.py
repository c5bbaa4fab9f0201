"""
Order-related exceptions.
"""

from .base import CheckoutException


class OrderException(CheckoutException):
    """Base exception for order-related errors."""
    http_status = 404


class OrderNotFoundException(OrderException):
    """Raised when order is unknown or expired and no longer visible."""

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class OrderExpiredException(OrderException):
    """Raised when trying to process an expired order."""
    http_status = 401

    def __init__(self, order_id: str):
        super().__init__(
            f"Order {order_id} has expired",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""
    http_status = 409

    def __init__(self, order_id: str, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state
