import logging
from datetime import datetime
from typing import Callable
from urllib.parse import unquote

from enums.gateway_payment_status import GatewayPaymentStatus
from enums.order_status import OrderStatus
from exceptions.order import OrderNotFoundException, InvalidOrderStateException
from exceptions.payment import (
    PaymentNotCompletedException,
    InsufficientPaymentException,
    AddressMismatchException
)
from exceptions.validation import MalformedCallbackException
from models.order import Order, utcnow
from models.payment import PaymentCallback, VerificationResult
from repositories.order import OrderRepository
from services.notification import NotificationDispatcher
from services.order_formatter import build_order_completed_payload
from services.payment_gateway import PaygateClient
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


def _same_address(registered: str, claimed: str) -> bool:
    # The gateway issues address_in URL-encoded, the callback delivers it decoded
    return unquote(registered) == unquote(claimed)


class CallbackVerifier:
    """
    Validates the gateway's payment callback and moves the order to its final status.

    Callback parameters are untrusted: anybody can call the callback URL. The
    payment is finalized only when the gateway's own status record, fetched
    with the IPN token we hold privately, agrees.

    Gates, in order (each one rejects the request on failure):
    1. order exists and is INITIATED (an already VERIFIED order short-circuits
       to the stored success result)
    2. callback carries every required parameter
    3. gateway reports the deposit as paid
    4. gateway-reported amount >= order amount            -> REJECTED
    5. claimed deposit address == registered address      -> REJECTED
    6. record transaction, VERIFIED, notify exactly once

    Failures at gates 1-3 leave the order untouched so a retried callback can
    still succeed. Gates 1-6 run under the order's lock, so two concurrent
    callbacks for the same order cannot both reach gate 6. The notification
    itself is sent once the lock is released: a slow sink never holds up a
    retried callback for the same order.
    """

    def __init__(
        self,
        repository: OrderRepository,
        gateway: PaygateClient,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = utcnow
    ):
        self.repository = repository
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.clock = clock

    async def verify(self, order_id: str, callback: PaymentCallback,
                     client_ip: str | None = None) -> VerificationResult:
        # Unknown ids are rejected before a lock is allocated for them
        if await self.repository.get(order_id) is None:
            logger.warning(f"Payment callback for unknown or expired order {order_id}")
            raise OrderNotFoundException(order_id)

        async with self.repository.lock(order_id):
            order = await self.repository.get(order_id)
            if order is None:
                raise OrderNotFoundException(order_id)

            if order.status == OrderStatus.VERIFIED:
                logger.info(f"Order {order_id} already verified, acknowledging repeated callback")
                return VerificationResult(order_id=order.id, transaction_id=order.transaction_id,
                                          already_verified=True)

            if order.status != OrderStatus.INITIATED or not order.payment_initiated:
                logger.warning(f"Payment callback for order {order_id} in state {order.status.value}")
                raise InvalidOrderStateException(order_id, order.status.value, OrderStatus.INITIATED.value)

            invalid_fields = callback.invalid_fields()
            if invalid_fields:
                logger.warning(f"Malformed payment callback for order {order_id}: {invalid_fields}")
                raise MalformedCallbackException(order_id, invalid_fields)

            report = await self.gateway.query_status(order.ipn_token)
            logger.info(f"Gateway status for order {order_id}: {report.status.value}")
            if report.status != GatewayPaymentStatus.PAID:
                raise PaymentNotCompletedException(order_id, report.status.value)

            if report.paid_amount < order.amount:
                logger.warning(
                    f"Underpayment for order {order_id}: required {order.amount}, paid {report.paid_amount}"
                )
                self._reject(order)
                raise InsufficientPaymentException(order_id, order.amount, report.paid_amount)

            if not _same_address(order.gateway_address, callback.address_in):
                logger.warning(f"Deposit address mismatch for order {order_id}, possible spoofed callback")
                self._reject(order)
                raise AddressMismatchException(order_id)

            if report.paid_amount > order.amount:
                logger.info(f"Overpayment for order {order_id}: required {order.amount}, paid {report.paid_amount}")

            order.transaction_id = callback.txid_out
            order.verified_at = self.clock()
            OrderStateMachine.transition(order, OrderStatus.VERIFIED)
            payload = build_order_completed_payload(order, client_ip=client_ip, sent_at=order.verified_at)

        # Sinks are awaited after the lock is released; the dedupe key keeps it at most once
        await self.dispatcher.notify_once(self.notification_key(order.id), payload)
        return VerificationResult(order_id=order.id, transaction_id=order.transaction_id)

    @staticmethod
    def notification_key(order_id: str) -> tuple[str, str]:
        return order_id, OrderStatus.VERIFIED.value

    @staticmethod
    def _reject(order: Order) -> None:
        OrderStateMachine.transition(order, OrderStatus.REJECTED)
