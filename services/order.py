import logging
from datetime import datetime, timedelta
from typing import Callable

import config
from enums.order_status import OrderStatus
from exceptions.authorization import InvalidOrderTokenException
from exceptions.order import OrderNotFoundException, OrderExpiredException, InvalidOrderStateException
from exceptions.validation import MissingOrderFieldsException, InvalidOrderAmountException
from models.order import (
    Order,
    CustomerDetails,
    OrderCreated,
    PaymentInitiated,
    OrderStatusView,
    AdminOrderView,
    parse_amount,
    utcnow
)
from models.payment import PaymentCallback, VerificationResult
from repositories.order import OrderRepository
from services.payment_gateway import PaygateClient
from services.payment_verifier import CallbackVerifier
from services.token_issuer import RandomTokenIssuer
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderService:
    """
    Checkout orchestration: order creation, payment initiation, callback
    verification and token-gated status reads.

    There is no session: every token-gated operation re-checks the order
    token and the order's expiry before touching state.
    """

    def __init__(
        self,
        repository: OrderRepository,
        token_issuer: RandomTokenIssuer,
        gateway: PaygateClient,
        verifier: CallbackVerifier,
        wallet_address: str = config.WALLET_ADDRESS,
        callback_base_url: str = config.CALLBACK_BASE_URL,
        order_ttl: timedelta = timedelta(minutes=config.ORDER_TTL_MINUTES),
        clock: Callable[[], datetime] = utcnow
    ):
        self.repository = repository
        self.token_issuer = token_issuer
        self.gateway = gateway
        self.verifier = verifier
        self.wallet_address = wallet_address
        self.callback_base_url = callback_base_url.rstrip("/")
        self.order_ttl = order_ttl
        self.clock = clock

    async def create_order(self, customer: CustomerDetails, amount) -> OrderCreated:
        """
        Create an order and issue its token.

        Raises:
            MissingOrderFieldsException: Required contact fields or amount missing
            InvalidOrderAmountException: Amount is not a positive number
        """
        missing_fields = customer.missing_fields()
        if amount is None or str(amount).strip() == "":
            missing_fields.append("amount")
        if missing_fields:
            raise MissingOrderFieldsException(missing_fields)

        parsed_amount = parse_amount(amount)
        if parsed_amount is None or parsed_amount <= 0:
            raise InvalidOrderAmountException(amount)

        order_id = self.token_issuer.new_order_id()
        created_at = self.clock()
        token = self.token_issuer.new_token(order_id, customer, parsed_amount, created_at)
        order = Order(
            id=order_id,
            token=token if self.token_issuer.stores_token else None,
            customer=customer,
            amount=parsed_amount,
            created_at=created_at,
            expires_at=created_at + self.order_ttl,
        )
        await self.repository.put(order)
        logger.info(f"Order {order_id} created: amount={parsed_amount}, expires_at={order.expires_at.isoformat()}")
        return OrderCreated(order_id=order_id, order_token=token, expires_at=order.expires_at)

    async def _authorize(self, order_id: str, order_token: str | None) -> Order:
        # Unknown, expired and mismatched orders are indistinguishable to the caller
        order = await self.repository.get(order_id)
        if order is None or not self.token_issuer.verify(order, order_token):
            logger.warning(f"Rejected order token for order {order_id}")
            raise InvalidOrderTokenException(order_id)
        return order

    def callback_url(self, order_id: str) -> str:
        return f"{self.callback_base_url}/payment-callback/{order_id}"

    async def initiate_payment(self, order_id: str, order_token: str | None) -> PaymentInitiated:
        """
        Register a deposit address with the gateway and return the hosted payment URL.

        Initiating an already initiated order returns the same URL without
        registering a second deposit address.

        Raises:
            InvalidOrderTokenException: Unknown/expired order or token mismatch
            OrderExpiredException: Order expired while the gateway was registering
            InvalidOrderStateException: Order already verified or rejected
            GatewayUnavailableException: Registration failed, order left untouched
        """
        await self._authorize(order_id, order_token)

        async with self.repository.lock(order_id):
            order = await self._authorize(order_id, order_token)

            if order.status == OrderStatus.INITIATED:
                logger.info(f"Order {order_id} already initiated, returning existing payment URL")
                return PaymentInitiated(order_id=order_id, payment_url=order.payment_url)
            if order.status != OrderStatus.CREATED:
                raise InvalidOrderStateException(order_id, order.status.value, OrderStatus.CREATED.value)

            registration = await self.gateway.register_deposit(self.wallet_address, self.callback_url(order_id))

            if order.is_expired(self.clock()):
                logger.warning(f"Order {order_id} expired during deposit registration")
                raise OrderExpiredException(order_id)

            order.gateway_address = registration.deposit_address
            order.ipn_token = registration.ipn_token
            order.payment_url = self.gateway.build_payment_url(order)
            OrderStateMachine.transition(order, OrderStatus.INITIATED)
            return PaymentInitiated(order_id=order_id, payment_url=order.payment_url)

    async def handle_callback(self, order_id: str, callback: PaymentCallback,
                              client_ip: str | None = None) -> VerificationResult:
        return await self.verifier.verify(order_id, callback, client_ip=client_ip)

    async def get_status(self, order_id: str, order_token: str | None) -> OrderStatusView:
        order = await self._authorize(order_id, order_token)
        return OrderStatusView(order_id=order.id, status=order.status, expires_at=order.expires_at)

    async def get_admin_view(self, order_id: str) -> AdminOrderView:
        """Administrative read; the caller is responsible for checking the admin credential."""
        order = await self.repository.get(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return AdminOrderView.from_order(order)

    async def sweep_expired(self) -> int:
        """
        Remove expired orders and their notification dedupe keys.

        A removed order can never be verified again, so its key is no longer needed.
        """
        removed = await self.repository.sweep_expired()
        for order_id in removed:
            self.verifier.dispatcher.forget(CallbackVerifier.notification_key(order_id))
        if removed:
            logger.info(f"Swept {len(removed)} expired orders")
        return len(removed)
