"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Minimal configuration required by config.py, set before anything imports it
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("WALLET_ADDRESS", "0xMerchantWallet000000000000000000000000001")
os.environ.setdefault("CALLBACK_BASE_URL", "https://checkout.example.com")
os.environ.setdefault("PAYGATE_API_URL", "https://api.paygate.test")
os.environ.setdefault("PAYGATE_CHECKOUT_URL", "https://checkout.paygate.test")
os.environ.setdefault("ADMIN_SECRET_KEY", "test_admin_secret_key_0123456789abcdef")

from enums.gateway_payment_status import GatewayPaymentStatus
from models.order import CustomerDetails
from models.payment import DepositRegistration, PaymentCallback, PaymentStatusReport
from repositories.order import OrderRepository
from services.notification import NotificationDispatcher
from services.order import OrderService
from services.payment_gateway import PaygateClient
from services.payment_verifier import CallbackVerifier
from services.token_issuer import RandomTokenIssuer

# URL-encoded the way the gateway issues it
DEPOSIT_ADDRESS = "0xDeposit%2FAddress000000000000000000000000000001"
IPN_TOKEN = "ipn-token-secret-0001"
ADMIN_KEY = "test_admin_secret_key_0123456789abcdef"


# ============================================================================
# Test doubles
# ============================================================================

class FakeClock:
    """Controllable replacement for utcnow()."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeGateway(PaygateClient):
    """PaygateClient with the two network calls replaced by canned answers."""

    def __init__(self):
        super().__init__(
            api_url="https://api.paygate.test",
            checkout_url="https://checkout.paygate.test",
            provider="wert",
            currency="USD",
            timeout_seconds=1
        )
        self.registration = DepositRegistration(deposit_address=DEPOSIT_ADDRESS, ipn_token=IPN_TOKEN)
        self.report = PaymentStatusReport(status=GatewayPaymentStatus.PAID, paid_amount=Decimal("50.00"),
                                          currency="polygon_usdc")
        self.register_error: Exception | None = None
        self.status_error: Exception | None = None
        self.register_calls: list[tuple[str, str]] = []
        self.status_calls: list[str] = []
        self.before_register = None

    async def register_deposit(self, wallet_address: str, callback_url: str) -> DepositRegistration:
        self.register_calls.append((wallet_address, callback_url))
        if self.before_register is not None:
            self.before_register()
        if self.register_error is not None:
            raise self.register_error
        return self.registration

    async def query_status(self, ipn_token: str) -> PaymentStatusReport:
        self.status_calls.append(ipn_token)
        if self.status_error is not None:
            raise self.status_error
        return self.report

    def pays(self, amount: str, status: GatewayPaymentStatus = GatewayPaymentStatus.PAID) -> None:
        self.report = PaymentStatusReport(status=status, paid_amount=Decimal(amount), currency="polygon_usdc")


class RecordingSink:
    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.payloads: list[dict] = []
        self.texts: list[str] = []
        self.closed = False

    async def send(self, payload: dict) -> None:
        self.payloads.append(payload)
        if self.fail:
            raise RuntimeError("sink down")

    async def send_text(self, message: str) -> None:
        self.texts.append(message)

    async def close(self) -> None:
        self.closed = True


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def dispatcher(sink):
    return NotificationDispatcher([sink])


@pytest.fixture
def repository(clock):
    return OrderRepository(clock=clock)


@pytest.fixture
def verifier(repository, gateway, dispatcher, clock):
    return CallbackVerifier(repository, gateway, dispatcher, clock=clock)


@pytest.fixture
def order_service(repository, gateway, verifier, clock):
    return OrderService(
        repository=repository,
        token_issuer=RandomTokenIssuer(),
        gateway=gateway,
        verifier=verifier,
        wallet_address="0xMerchantWallet000000000000000000000000001",
        callback_base_url="https://checkout.example.com/",
        order_ttl=timedelta(minutes=60),
        clock=clock
    )


@pytest.fixture
def customer():
    return CustomerDetails(
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        phone="555-0100",
        street="1 Main St",
        apartment="4B",
        city="Springfield",
        state="IL",
        postal="62701",
        country="US",
        delivery_instructions="Leave at the door"
    )


@pytest.fixture
def paid_callback():
    """Callback parameters as the gateway sends them (address_in decoded)."""
    return PaymentCallback(
        value_coin="50.00",
        coin="polygon_usdc",
        txid_in="0xin0001",
        txid_out="0xout0001",
        address_in="0xDeposit/Address000000000000000000000000000001"
    )


@pytest_asyncio.fixture
async def initiated_order(order_service, customer):
    """A 50.00 order with a registered deposit address."""
    created = await order_service.create_order(customer, "50.00")
    await order_service.initiate_payment(created.order_id, created.order_token)
    order = await order_service.repository.get(created.order_id)
    return created, order
