"""
Authorization exceptions for order tokens and the admin credential.
"""

from .base import CheckoutException


class AuthorizationException(CheckoutException):
    """Base exception for rejected credentials."""
    http_status = 401


class InvalidOrderTokenException(AuthorizationException):
    """
    Raised when an order token does not authorize the requested order.

    Unknown, expired and mismatched orders all raise this so callers cannot
    guess which order ids exist.
    """

    def __init__(self, order_id: str):
        super().__init__(
            "Invalid or expired order",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class AdminAuthorizationException(AuthorizationException):
    """Raised when the admin credential is missing or incorrect."""

    def __init__(self):
        super().__init__("Unauthorized")
