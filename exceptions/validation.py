"""
Input validation exceptions (malformed or missing request data).
"""

from .base import CheckoutException


class ValidationException(CheckoutException):
    """Base exception for malformed or incomplete input."""
    http_status = 400


class MissingOrderFieldsException(ValidationException):
    """Raised when required storefront fields are missing on order creation."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            f"Missing required fields: {', '.join(missing_fields)}",
            details={'missing_fields': missing_fields}
        )
        self.missing_fields = missing_fields


class InvalidOrderAmountException(ValidationException):
    """Raised when the order total is not a positive number."""

    def __init__(self, amount):
        super().__init__(
            f"Invalid order amount: {amount!r}",
            details={'amount': str(amount)}
        )
        self.amount = amount


class MalformedCallbackException(ValidationException):
    """Raised when a payment callback lacks required parameters."""

    def __init__(self, order_id: str, missing_fields: list[str]):
        super().__init__(
            f"Malformed payment callback for order {order_id}: missing or invalid {', '.join(missing_fields)}",
            details={'order_id': order_id, 'missing_fields': missing_fields}
        )
        self.order_id = order_id
        self.missing_fields = missing_fields
