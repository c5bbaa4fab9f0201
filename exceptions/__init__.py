"""
Custom exceptions for the checkout broker.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
CheckoutException (base)
├── ValidationException (400)
│   ├── MissingOrderFieldsException
│   ├── InvalidOrderAmountException
│   └── MalformedCallbackException
├── AuthorizationException (401)
│   ├── InvalidOrderTokenException
│   └── AdminAuthorizationException
├── OrderException (404)
│   ├── OrderNotFoundException
│   ├── OrderExpiredException (401)
│   └── InvalidOrderStateException (409)
├── PaymentException (402)
│   ├── PaymentNotCompletedException
│   ├── InsufficientPaymentException
│   └── AddressMismatchException (403)
└── GatewayException (500)
    └── GatewayUnavailableException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id)

Routers catch the ones they expect and map them to HTTP status codes:
    try:
        result = await order_service.handle_callback(order_id, callback)
    except AddressMismatchException:
        raise HTTPException(status_code=403, detail="Invalid payment address")

Anything a router does not catch answers with the class's http_status
(shown in parentheses above) through the handler registered in server.create_app.
"""

from .base import CheckoutException
from .validation import (
    ValidationException,
    MissingOrderFieldsException,
    InvalidOrderAmountException,
    MalformedCallbackException
)
from .authorization import AuthorizationException, InvalidOrderTokenException, AdminAuthorizationException
from .order import OrderException, OrderNotFoundException, OrderExpiredException, InvalidOrderStateException
from .payment import (
    PaymentException,
    PaymentNotCompletedException,
    InsufficientPaymentException,
    AddressMismatchException
)
from .gateway import GatewayException, GatewayUnavailableException

__all__ = [
    # Base
    'CheckoutException',

    # Validation
    'ValidationException',
    'MissingOrderFieldsException',
    'InvalidOrderAmountException',
    'MalformedCallbackException',

    # Authorization
    'AuthorizationException',
    'InvalidOrderTokenException',
    'AdminAuthorizationException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'OrderExpiredException',
    'InvalidOrderStateException',

    # Payment
    'PaymentException',
    'PaymentNotCompletedException',
    'InsufficientPaymentException',
    'AddressMismatchException',

    # Gateway
    'GatewayException',
    'GatewayUnavailableException',
]
