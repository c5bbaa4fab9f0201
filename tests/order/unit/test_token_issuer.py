"""
Unit Tests for order token issuers

Tests cover:
- Random tokens: 256-bit, unique, stored on the order
- Signed tokens: recomputed from immutable order fields, nothing stored
- Rejection of missing and mismatched tokens
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from models.order import Order
from services.token_issuer import RandomTokenIssuer, SignedTokenIssuer, build_token_issuer


def order_for(issuer, clock, customer, amount="50.00"):
    order_id = issuer.new_order_id()
    token = issuer.new_token(order_id, customer, Decimal(amount), clock())
    order = Order(
        id=order_id,
        token=token if issuer.stores_token else None,
        customer=customer,
        amount=Decimal(amount),
        created_at=clock(),
        expires_at=clock() + timedelta(hours=1)
    )
    return order, token


class TestRandomTokenIssuer:

    def test_token_is_256_bit_hex(self, clock, customer):
        _, token = order_for(RandomTokenIssuer(), clock, customer)
        assert len(token) == 64
        int(token, 16)

    def test_tokens_and_ids_unique(self, clock, customer):
        issuer = RandomTokenIssuer()
        tokens = {order_for(issuer, clock, customer)[1] for _ in range(50)}
        ids = {issuer.new_order_id() for _ in range(50)}
        assert len(tokens) == 50
        assert len(ids) == 50

    def test_verify(self, clock, customer):
        issuer = RandomTokenIssuer()
        order, token = order_for(issuer, clock, customer)

        assert issuer.verify(order, token) is True
        assert issuer.verify(order, "0" * 64) is False
        assert issuer.verify(order, None) is False
        assert issuer.verify(order, "") is False


class TestSignedTokenIssuer:

    def test_nothing_stored_on_order(self, clock, customer):
        issuer = SignedTokenIssuer("s" * 32)
        order, token = order_for(issuer, clock, customer)

        assert order.token is None
        assert issuer.verify(order, token) is True

    def test_token_bound_to_order_fields(self, clock, customer):
        issuer = SignedTokenIssuer("s" * 32)
        order, token = order_for(issuer, clock, customer)
        other, other_token = order_for(issuer, clock, customer, amount="49.99")

        assert issuer.verify(other, token) is False
        assert issuer.verify(order, other_token) is False

    def test_different_secret_rejects(self, clock, customer):
        order, token = order_for(SignedTokenIssuer("s" * 32), clock, customer)
        assert SignedTokenIssuer("x" * 32).verify(order, token) is False

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            SignedTokenIssuer("")


class TestBuildTokenIssuer:

    def test_signed_when_secret_configured(self):
        assert isinstance(build_token_issuer("s" * 32), SignedTokenIssuer)

    def test_random_without_secret(self):
        issuer = build_token_issuer("")
        assert type(issuer) is RandomTokenIssuer
        assert type(build_token_issuer(None)) is RandomTokenIssuer
