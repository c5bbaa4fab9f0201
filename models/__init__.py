"""
Models Package

Pydantic models for orders, gateway exchanges and API read models.
"""

from models.order import Order, CustomerDetails, OrderCreated, PaymentInitiated, OrderStatusView, AdminOrderView
from models.payment import PaymentCallback, DepositRegistration, PaymentStatusReport, VerificationResult

__all__ = [
    'Order',
    'CustomerDetails',
    'OrderCreated',
    'PaymentInitiated',
    'OrderStatusView',
    'AdminOrderView',
    'PaymentCallback',
    'DepositRegistration',
    'PaymentStatusReport',
    'VerificationResult',
]
