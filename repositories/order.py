import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from enums.order_status import OrderStatus
from models.order import Order, utcnow
from utils.order_state_machine import OrderStateMachine

logger = logging.getLogger(__name__)


class OrderRepository:
    """
    In-process order table keyed by order id.

    Orders live for the lifetime of the process only. Expired orders are
    invisible to readers as soon as their TTL passes and are physically removed
    by sweep_expired(), which runs on its own schedule.

    The repository also owns one asyncio.Lock per order. Every mutation of an
    order happens under its lock, and the sweep skips locked orders so it never
    removes an order in the middle of a request.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._orders: Dict[str, Order] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._clock = clock

    async def put(self, order: Order) -> None:
        self._orders[order.id] = order

    async def get(self, order_id: str) -> Optional[Order]:
        """
        Return the order, or None if it is unknown or already expired.

        Expiry is checked at read time so a record the sweep has not reached
        yet is never handed out.
        """
        order = self._orders.get(order_id)
        if order is None or order.is_expired(self._clock()):
            return None
        return order

    async def delete(self, order_id: str) -> None:
        self._orders.pop(order_id, None)
        self._locks.pop(order_id, None)

    def lock(self, order_id: str) -> asyncio.Lock:
        """Per-order mutual exclusion guard, created on first use."""
        return self._locks.setdefault(order_id, asyncio.Lock())

    async def sweep_expired(self) -> list[str]:
        """
        Remove every order whose expires_at has passed, regardless of status.

        Orders whose lock is held are left for the next sweep.

        Returns:
            Ids of the removed orders
        """
        now = self._clock()
        removed = []
        for order_id, order in list(self._orders.items()):
            if order.expires_at >= now:
                continue
            lock = self._locks.get(order_id)
            if lock is not None and lock.locked():
                logger.info(f"Order {order_id} expired but busy, deferring to next sweep")
                continue
            if not OrderStateMachine.is_final_status(order.status):
                OrderStateMachine.transition(order, OrderStatus.EXPIRED)
            await self.delete(order_id)
            removed.append(order_id)
        return removed

    def __len__(self) -> int:
        return len(self._orders)
