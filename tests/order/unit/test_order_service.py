"""
Unit Tests for OrderService

Tests cover:
- Order creation: required fields, amount validation, TTL
- Payment initiation: token checks, deposit registration, idempotent re-initiation
- Gateway failure and expiry during registration leave the order untouched
- Token-gated status reads (expired orders rejected before the sweep) and the admin view
- Sweeping expired orders releases their notification dedupe keys
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import DEPOSIT_ADDRESS, IPN_TOKEN
from enums.order_status import OrderStatus
from exceptions.authorization import InvalidOrderTokenException
from exceptions.gateway import GatewayUnavailableException
from exceptions.order import OrderExpiredException, InvalidOrderStateException, OrderNotFoundException
from exceptions.validation import MissingOrderFieldsException, InvalidOrderAmountException
from models.order import CustomerDetails


class TestCreateOrder:

    @pytest.mark.asyncio
    async def test_create_order(self, order_service, customer, clock):
        created = await order_service.create_order(customer, "50.00")

        assert created.order_id
        assert len(created.order_token) == 64
        assert created.expires_at == clock() + timedelta(minutes=60)

        order = await order_service.repository.get(created.order_id)
        assert order.status == OrderStatus.CREATED
        assert order.amount == Decimal("50.00")
        assert order.gateway_address is None

    @pytest.mark.asyncio
    async def test_numeric_amount_accepted(self, order_service, customer):
        created = await order_service.create_order(customer, 19.99)
        order = await order_service.repository.get(created.order_id)
        assert order.amount == Decimal("19.99")

    @pytest.mark.asyncio
    async def test_missing_fields_listed(self, order_service):
        customer = CustomerDetails(first_name="Jane", email="jane@example.com", city="  ")

        with pytest.raises(MissingOrderFieldsException) as exc_info:
            await order_service.create_order(customer, None)

        assert exc_info.value.missing_fields == [
            "last_name", "street", "city", "state", "postal", "country", "amount"
        ]
        assert len(order_service.repository) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "NaN", "Infinity", True])
    async def test_invalid_amount(self, order_service, customer, amount):
        with pytest.raises(InvalidOrderAmountException):
            await order_service.create_order(customer, amount)
        assert len(order_service.repository) == 0

    @pytest.mark.asyncio
    async def test_orders_are_independent(self, order_service, customer):
        first = await order_service.create_order(customer, "10")
        second = await order_service.create_order(customer, "10")

        assert first.order_id != second.order_id
        assert first.order_token != second.order_token
        with pytest.raises(InvalidOrderTokenException):
            await order_service.get_status(first.order_id, second.order_token)


class TestInitiatePayment:

    @pytest.mark.asyncio
    async def test_initiate_payment(self, order_service, customer, gateway):
        created = await order_service.create_order(customer, "50.00")

        initiated = await order_service.initiate_payment(created.order_id, created.order_token)

        assert gateway.register_calls == [(
            "0xMerchantWallet000000000000000000000000001",
            f"https://checkout.example.com/payment-callback/{created.order_id}"
        )]
        assert initiated.payment_url.startswith(
            f"https://checkout.paygate.test/process-payment.php?address={DEPOSIT_ADDRESS}&"
        )
        assert "amount=50.00" in initiated.payment_url
        assert "email=jane%40example.com" in initiated.payment_url

        order = await order_service.repository.get(created.order_id)
        assert order.status == OrderStatus.INITIATED
        assert order.gateway_address == DEPOSIT_ADDRESS
        assert order.ipn_token == IPN_TOKEN

    @pytest.mark.asyncio
    async def test_repeated_initiation_returns_same_url(self, order_service, customer, gateway):
        created = await order_service.create_order(customer, "50.00")

        first = await order_service.initiate_payment(created.order_id, created.order_token)
        second = await order_service.initiate_payment(created.order_id, created.order_token)

        assert first.payment_url == second.payment_url
        assert len(gateway.register_calls) == 1

    @pytest.mark.asyncio
    async def test_wrong_token(self, order_service, customer, gateway):
        created = await order_service.create_order(customer, "50.00")

        with pytest.raises(InvalidOrderTokenException):
            await order_service.initiate_payment(created.order_id, "0" * 64)
        assert gateway.register_calls == []

    @pytest.mark.asyncio
    async def test_unknown_order_same_error_as_wrong_token(self, order_service):
        with pytest.raises(InvalidOrderTokenException) as exc_info:
            await order_service.initiate_payment("missing", "0" * 64)
        assert exc_info.value.message == "Invalid or expired order"

    @pytest.mark.asyncio
    async def test_expired_order(self, order_service, customer, clock, gateway):
        created = await order_service.create_order(customer, "50.00")
        clock.advance(minutes=61)

        with pytest.raises(InvalidOrderTokenException):
            await order_service.initiate_payment(created.order_id, created.order_token)
        assert gateway.register_calls == []

    @pytest.mark.asyncio
    async def test_gateway_failure_leaves_order_created(self, order_service, customer, gateway):
        created = await order_service.create_order(customer, "50.00")
        gateway.register_error = GatewayUnavailableException("register_deposit", "HTTP 502")

        with pytest.raises(GatewayUnavailableException):
            await order_service.initiate_payment(created.order_id, created.order_token)

        order = await order_service.repository.get(created.order_id)
        assert order.status == OrderStatus.CREATED
        assert order.gateway_address is None

        # Retry succeeds once the gateway is back
        gateway.register_error = None
        await order_service.initiate_payment(created.order_id, created.order_token)
        assert order.status == OrderStatus.INITIATED

    @pytest.mark.asyncio
    async def test_expiry_during_registration(self, order_service, customer, gateway, clock):
        created = await order_service.create_order(customer, "50.00")
        order = await order_service.repository.get(created.order_id)
        gateway.before_register = lambda: clock.advance(minutes=61)

        with pytest.raises(OrderExpiredException):
            await order_service.initiate_payment(created.order_id, created.order_token)

        assert order.status == OrderStatus.CREATED
        assert order.gateway_address is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("final_status", [OrderStatus.VERIFIED, OrderStatus.REJECTED])
    async def test_completed_order_cannot_be_reinitiated(self, order_service, initiated_order, final_status):
        created, order = initiated_order
        order.status = final_status

        with pytest.raises(InvalidOrderStateException):
            await order_service.initiate_payment(created.order_id, created.order_token)


class TestStatusReads:

    @pytest.mark.asyncio
    async def test_get_status(self, order_service, customer):
        created = await order_service.create_order(customer, "50.00")

        view = await order_service.get_status(created.order_id, created.order_token)

        assert view.status == OrderStatus.CREATED
        assert view.expires_at == created.expires_at

    @pytest.mark.asyncio
    async def test_get_status_rejects_missing_token(self, order_service, customer):
        created = await order_service.create_order(customer, "50.00")
        with pytest.raises(InvalidOrderTokenException):
            await order_service.get_status(created.order_id, None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("final_status", [OrderStatus.CREATED, OrderStatus.VERIFIED])
    async def test_get_status_rejects_expired_order_before_sweep(self, order_service, customer, clock,
                                                                 final_status):
        created = await order_service.create_order(customer, "50.00")
        order = await order_service.repository.get(created.order_id)
        order.status = final_status
        clock.advance(minutes=61)

        with pytest.raises(InvalidOrderTokenException):
            await order_service.get_status(created.order_id, created.order_token)
        assert len(order_service.repository) == 1  # still stored, just no longer readable

    @pytest.mark.asyncio
    async def test_admin_view(self, order_service, initiated_order):
        created, _ = initiated_order

        view = await order_service.get_admin_view(created.order_id)

        assert view.status == OrderStatus.INITIATED
        assert view.payment_verified is False
        assert view.customer.email == "jane@example.com"
        assert "token" not in view.model_dump()

    @pytest.mark.asyncio
    async def test_admin_view_unknown_order(self, order_service):
        with pytest.raises(OrderNotFoundException):
            await order_service.get_admin_view("missing")

    def test_callback_url_strips_trailing_slash(self, order_service):
        assert order_service.callback_url("abc") == "https://checkout.example.com/payment-callback/abc"


class TestSweep:

    @pytest.mark.asyncio
    async def test_sweep_drops_notification_keys_of_removed_orders(self, order_service, customer, dispatcher,
                                                                   paid_callback, clock):
        for _ in range(3):
            created = await order_service.create_order(customer, "50.00")
            await order_service.initiate_payment(created.order_id, created.order_token)
            await order_service.handle_callback(created.order_id, paid_callback)
        assert dispatcher.fired_count == 3

        clock.advance(minutes=30)
        fresh = await order_service.create_order(customer, "50.00")
        await order_service.initiate_payment(fresh.order_id, fresh.order_token)
        await order_service.handle_callback(fresh.order_id, paid_callback)

        clock.advance(minutes=31)
        assert await order_service.sweep_expired() == 3

        assert len(order_service.repository) == 1
        assert dispatcher.fired_count == 1
        assert dispatcher.was_fired((fresh.order_id, "VERIFIED"))

    @pytest.mark.asyncio
    async def test_sweep_without_expired_orders(self, order_service, initiated_order, dispatcher):
        assert await order_service.sweep_expired() == 0
        assert len(order_service.repository) == 1
