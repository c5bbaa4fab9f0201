"""
Unit Tests for the checkout exception hierarchy

Tests cover:
- HTTP status carried by each exception class
- Message and details used by logs and the application-level handler
"""

from decimal import Decimal

import pytest

from exceptions import (
    CheckoutException,
    MissingOrderFieldsException,
    MalformedCallbackException,
    InvalidOrderTokenException,
    AdminAuthorizationException,
    OrderNotFoundException,
    OrderExpiredException,
    InvalidOrderStateException,
    PaymentNotCompletedException,
    InsufficientPaymentException,
    AddressMismatchException,
    GatewayUnavailableException
)


class TestHttpStatus:

    @pytest.mark.parametrize("exc, expected", [
        (MissingOrderFieldsException(["email"]), 400),
        (MalformedCallbackException("o-1", ["txid_out"]), 400),
        (InvalidOrderTokenException("o-1"), 401),
        (AdminAuthorizationException(), 401),
        (OrderNotFoundException("o-1"), 404),
        (OrderExpiredException("o-1"), 401),
        (InvalidOrderStateException("o-1", "VERIFIED", "CREATED"), 409),
        (PaymentNotCompletedException("o-1", "pending"), 402),
        (InsufficientPaymentException("o-1", Decimal("50.00"), Decimal("49.99")), 402),
        (AddressMismatchException("o-1"), 403),
        (GatewayUnavailableException("query_status", "timeout"), 500),
    ])
    def test_status_per_class(self, exc, expected):
        assert isinstance(exc, CheckoutException)
        assert exc.http_status == expected

    def test_base_defaults_to_server_error(self):
        assert CheckoutException("boom").http_status == 500


class TestMessageAndDetails:

    def test_str_is_message(self):
        exc = InsufficientPaymentException("o-1", Decimal("50.00"), Decimal("49.99"))
        assert str(exc) == "Insufficient payment for order o-1: expected 50.00, received 49.99"
        assert exc.details == {'order_id': "o-1", 'expected': "50.00", 'received': "49.99"}

    def test_repr_includes_details_and_status(self):
        exc = OrderNotFoundException("o-1")
        assert repr(exc) == "OrderNotFoundException('Order o-1 not found', order_id=o-1, http_status=404)"

    def test_repr_without_details(self):
        assert repr(AdminAuthorizationException()) == "AdminAuthorizationException('Unauthorized', http_status=401)"
