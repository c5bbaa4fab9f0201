import logging
from urllib.parse import urlencode

import config
from crypto_api.CryptoApiWrapper import CryptoApiWrapper
from enums.gateway_payment_status import GatewayPaymentStatus
from exceptions.gateway import GatewayUnavailableException
from models.order import Order, parse_amount
from models.payment import DepositRegistration, PaymentStatusReport

logger = logging.getLogger(__name__)


class PaygateClient:
    """
    Adapter for the PayGate crypto payment gateway.

    - register_deposit: asks for a one-time deposit address bound to a callback URL
    - query_status: reads the gateway's own record for a deposit (IPN token)
    - build_payment_url: hosted checkout page the storefront redirects to
    """

    def __init__(
        self,
        api_url: str = config.PAYGATE_API_URL,
        checkout_url: str = config.PAYGATE_CHECKOUT_URL,
        provider: str = config.PAYGATE_PROVIDER,
        currency: str = config.PAYGATE_CURRENCY,
        timeout_seconds: float = config.GATEWAY_TIMEOUT_SECONDS
    ):
        self.api_url = api_url.rstrip("/")
        self.checkout_url = checkout_url.rstrip("/")
        self.provider = provider
        self.currency = currency
        self.timeout_seconds = timeout_seconds

    async def register_deposit(self, wallet_address: str, callback_url: str) -> DepositRegistration:
        """
        Register a deposit address that forwards to our wallet and calls back on payment.

        Raises:
            GatewayUnavailableException: On network error, timeout, non-2xx or missing fields
        """
        body = await CryptoApiWrapper.fetch_api_request(
            f"{self.api_url}/control/wallet.php",
            operation="register_deposit",
            params={"address": wallet_address, "callback": callback_url},
            timeout_seconds=self.timeout_seconds
        )
        deposit_address = body.get("address_in")
        ipn_token = body.get("ipn_token")
        if not deposit_address or not ipn_token:
            raise GatewayUnavailableException("register_deposit", "response missing address_in or ipn_token")
        return DepositRegistration(deposit_address=deposit_address, ipn_token=ipn_token)

    async def query_status(self, ipn_token: str) -> PaymentStatusReport:
        """
        Query the authoritative payment status for a deposit.

        Raises:
            GatewayUnavailableException: On transport errors, or when a paid
                status comes without a usable paid amount
        """
        body = await CryptoApiWrapper.fetch_api_request(
            f"{self.api_url}/control/payment-status.php",
            operation="query_status",
            params={"ipn_token": ipn_token},
            timeout_seconds=self.timeout_seconds
        )
        if "status" not in body:
            raise GatewayUnavailableException("query_status", "response missing status")

        status = GatewayPaymentStatus.from_gateway(str(body.get("status")))
        paid_amount = parse_amount(body.get("value_coin"))
        if status == GatewayPaymentStatus.PAID and paid_amount is None:
            raise GatewayUnavailableException("query_status", "paid status without value_coin")

        return PaymentStatusReport(status=status, paid_amount=paid_amount, currency=body.get("coin"))

    def build_payment_url(self, order: Order) -> str:
        query = urlencode({
            "amount": str(order.amount),
            "provider": self.provider,
            "email": order.customer.email,
            "currency": self.currency,
        })
        # address_in is issued already URL-encoded and goes back unchanged
        return f"{self.checkout_url}/process-payment.php?address={order.gateway_address}&{query}"
