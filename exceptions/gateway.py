"""
Payment gateway (upstream) exceptions.
"""

from .base import CheckoutException


class GatewayException(CheckoutException):
    """Base exception for payment gateway errors."""
    http_status = 500


class GatewayUnavailableException(GatewayException):
    """
    Raised when the gateway is unreachable, times out, answers non-2xx or
    returns a body that cannot be used.

    Transient: order state is left untouched and the caller may retry.
    """

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Payment gateway unavailable during {operation}: {reason}",
            details={'operation': operation, 'reason': reason}
        )
        self.operation = operation
        self.reason = reason
