from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, Field

from enums.gateway_payment_status import GatewayPaymentStatus
from models.order import parse_amount


class PaymentCallback(BaseModel):
    """
    Query parameters of the gateway's payment callback.

    Attacker-controllable: anyone can call the callback URL. The values are
    only hints, payment is finalized on the gateway's own status record.
    """
    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("value_coin", "coin", "txid_in", "txid_out", "address_in")

    value_coin: str | None = None
    coin: str | None = None
    txid_in: str | None = None
    txid_out: str | None = None
    address_in: str | None = None

    def invalid_fields(self) -> list[str]:
        invalid = [name for name in self.REQUIRED_FIELDS if not (getattr(self, name) or "").strip()]
        if "value_coin" not in invalid and parse_amount(self.value_coin) is None:
            invalid.append("value_coin")
        return invalid


class DepositRegistration(BaseModel):
    """One-time deposit address issued by the gateway for a callback URL."""
    deposit_address: str
    ipn_token: str = Field(repr=False)


class PaymentStatusReport(BaseModel):
    """The gateway's authoritative record for a deposit."""
    status: GatewayPaymentStatus
    paid_amount: Decimal | None = None
    currency: str | None = None


class VerificationResult(BaseModel):
    order_id: str
    transaction_id: str
    # True when the order had already been verified by an earlier callback
    already_verified: bool = False
