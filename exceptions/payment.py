"""
Payment verification exceptions.

Each one corresponds to a verification gate of the payment callback and is
terminal for the request that raised it.
"""

from decimal import Decimal

from .base import CheckoutException


class PaymentException(CheckoutException):
    """Base exception for payment-related errors."""
    http_status = 402


class PaymentNotCompletedException(PaymentException):
    """Raised when the gateway does not report the deposit as paid."""

    def __init__(self, order_id: str, gateway_status: str):
        super().__init__(
            f"Payment for order {order_id} not completed (gateway status: {gateway_status})",
            details={'order_id': order_id, 'gateway_status': gateway_status}
        )
        self.order_id = order_id
        self.gateway_status = gateway_status


class InsufficientPaymentException(PaymentException):
    """Raised when the gateway-reported amount is below the order amount."""

    def __init__(self, order_id: str, expected: Decimal, received: Decimal):
        super().__init__(
            f"Insufficient payment for order {order_id}: expected {expected}, received {received}",
            details={'order_id': order_id, 'expected': str(expected), 'received': str(received)}
        )
        self.order_id = order_id
        self.expected = expected
        self.received = received


class AddressMismatchException(PaymentException):
    """Raised when the callback claims a deposit address other than the registered one."""
    http_status = 403

    def __init__(self, order_id: str):
        super().__init__(
            f"Deposit address mismatch for order {order_id}",
            details={'order_id': order_id}
        )
        self.order_id = order_id
