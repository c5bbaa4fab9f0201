"""
Order identifiers and order tokens.

The order token is a bearer capability: whoever holds it may initiate payment
for and read the status of exactly one order. Two interchangeable issuers:

- RandomTokenIssuer: 256-bit random token stored on the order.
- SignedTokenIssuer: HMAC-SHA256 over the order's immutable fields. Nothing is
  stored, validity is recomputed on every request, so tokens stay valid across
  restarts as long as the signing secret does.
"""

import hashlib
import hmac
import secrets
import uuid
from datetime import datetime
from decimal import Decimal

from models.order import CustomerDetails, Order


class RandomTokenIssuer:
    stores_token = True

    def new_order_id(self) -> str:
        return str(uuid.uuid4())

    def new_token(self, order_id: str, customer: CustomerDetails, amount: Decimal, created_at: datetime) -> str:
        return secrets.token_hex(32)

    def verify(self, order: Order, token: str | None) -> bool:
        if not token or not order.token:
            return False
        return hmac.compare_digest(order.token.encode("utf-8"), token.encode("utf-8"))


class SignedTokenIssuer(RandomTokenIssuer):
    stores_token = False

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("SignedTokenIssuer requires a non-empty secret key")
        self._secret_key = secret_key.encode("utf-8")

    def _sign(self, order_id: str, email: str | None, amount: Decimal, created_at: datetime) -> str:
        message = "|".join([order_id, email or "", str(amount), created_at.isoformat()])
        return hmac.new(self._secret_key, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def new_token(self, order_id: str, customer: CustomerDetails, amount: Decimal, created_at: datetime) -> str:
        return self._sign(order_id, customer.email, amount, created_at)

    def verify(self, order: Order, token: str | None) -> bool:
        if not token:
            return False
        expected = self._sign(order.id, order.customer.email, order.amount, order.created_at)
        return hmac.compare_digest(expected.encode("utf-8"), token.encode("utf-8"))


def build_token_issuer(secret_key: str | None) -> RandomTokenIssuer:
    """Signed tokens when a secret is configured, random stored tokens otherwise."""
    if secret_key:
        return SignedTokenIssuer(secret_key)
    return RandomTokenIssuer()
