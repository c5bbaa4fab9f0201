from enum import Enum


class OrderStatus(str, Enum):
    CREATED = "CREATED"        # Token issued, payment not initiated yet
    INITIATED = "INITIATED"    # Deposit address registered with the gateway
    VERIFIED = "VERIFIED"      # Payment corroborated by the gateway (final)
    REJECTED = "REJECTED"      # Underpaid or address mismatch (final)
    EXPIRED = "EXPIRED"        # TTL passed before completion (final)
