from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from enums.order_status import OrderStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value) -> Decimal | None:
    """
    Parse a monetary amount coming from JSON or a query string.

    Floats are converted through str() so 50.1 stays 50.1 instead of the
    binary float expansion. Returns None for anything that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


class CustomerDetails(BaseModel):
    """
    Contact and shipping data collected by the storefront.

    Opaque to the checkout flow: only presence of the required fields is
    checked, the rest is passed through to the order notification.
    """
    model_config = ConfigDict(frozen=True)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "first_name", "last_name", "email", "street", "city", "state", "postal", "country"
    )

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    street: str | None = None
    apartment: str | None = None
    city: str | None = None
    state: str | None = None
    postal: str | None = None
    country: str | None = None
    delivery_instructions: str | None = None

    def missing_fields(self) -> list[str]:
        return [
            name for name in self.REQUIRED_FIELDS
            if not (getattr(self, name) or "").strip()
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Order(BaseModel):
    """
    A checkout order from token issuance to verified payment.

    Identity, token, customer data, amount and timestamps are frozen at creation.
    Gateway fields are attached once by payment initiation; status changes go
    through OrderStateMachine.
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)
    # None when tokens are signatures recomputed from the order's fields
    token: str | None = Field(default=None, frozen=True, repr=False)
    customer: CustomerDetails = Field(frozen=True)
    amount: Decimal = Field(frozen=True, gt=0)
    created_at: datetime = Field(frozen=True)
    expires_at: datetime = Field(frozen=True)
    status: OrderStatus = OrderStatus.CREATED
    gateway_address: str | None = None
    ipn_token: str | None = Field(default=None, repr=False)
    payment_url: str | None = None
    transaction_id: str | None = None
    verified_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @property
    def payment_initiated(self) -> bool:
        return self.gateway_address is not None


class OrderCreated(BaseModel):
    order_id: str
    order_token: str = Field(repr=False)
    expires_at: datetime


class PaymentInitiated(BaseModel):
    order_id: str
    payment_url: str


class OrderStatusView(BaseModel):
    order_id: str
    status: OrderStatus
    expires_at: datetime


class AdminOrderView(BaseModel):
    """Administrative read model, includes customer data but never secrets."""
    order_id: str
    customer: CustomerDetails
    amount: Decimal
    status: OrderStatus
    payment_verified: bool
    transaction_id: str | None = None
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_order(cls, order: Order) -> "AdminOrderView":
        return cls(
            order_id=order.id,
            customer=order.customer,
            amount=order.amount,
            status=order.status,
            payment_verified=order.status == OrderStatus.VERIFIED,
            transaction_id=order.transaction_id,
            created_at=order.created_at,
            expires_at=order.expires_at,
        )
