from enum import Enum


class GatewayPaymentStatus(str, Enum):
    """
    Payment status as reported by the gateway's payment-status endpoint.

    Anything the gateway reports that is neither paid nor an explicit
    failure is treated as PENDING.
    """
    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"

    @classmethod
    def from_gateway(cls, raw: str | None) -> "GatewayPaymentStatus":
        value = (raw or "").strip().lower()
        if value == cls.PAID.value:
            return cls.PAID
        if value in ("failed", "expired", "cancelled", "canceled"):
            return cls.FAILED
        return cls.PENDING
