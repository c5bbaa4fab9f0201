"""
Order State Machine for validating order status transitions and maintaining consistency.

This module implements a finite state machine to ensure valid order status transitions
and provide audit logging for all status changes.
"""

import logging
from typing import Dict, List, Set

from enums.order_status import OrderStatus
from exceptions.order import InvalidOrderStateException
from models.order import Order

logger = logging.getLogger(__name__)


class OrderStatusTransition:
    """Represents a valid status transition with metadata"""

    def __init__(self, from_status: OrderStatus, to_status: OrderStatus, description: str = ""):
        self.from_status = from_status
        self.to_status = to_status
        self.description = description

    def __repr__(self):
        return f"{self.from_status.value} -> {self.to_status.value}"


class OrderStateMachine:
    """
    Finite state machine for order status transitions with validation and audit logging.

    Valid status transitions:
    - CREATED -> INITIATED (deposit address registered with the gateway)
    - INITIATED -> VERIFIED (payment corroborated by the gateway)
    - INITIATED -> REJECTED (underpayment or deposit address mismatch)
    - CREATED / INITIATED -> EXPIRED (TTL passed, applied by the sweep)

    Invalid transitions (will be rejected):
    - VERIFIED, REJECTED, EXPIRED -> any status (final states)
    - CREATED -> VERIFIED / REJECTED (callback before initiation)
    """

    VALID_TRANSITIONS: List[OrderStatusTransition] = [
        # From CREATED
        OrderStatusTransition(
            OrderStatus.CREATED,
            OrderStatus.INITIATED,
            description="Deposit address registered with payment gateway"
        ),
        OrderStatusTransition(
            OrderStatus.CREATED,
            OrderStatus.EXPIRED,
            description="Order expired before payment was initiated"
        ),

        # From INITIATED
        OrderStatusTransition(
            OrderStatus.INITIATED,
            OrderStatus.VERIFIED,
            description="Payment confirmed by gateway status query"
        ),
        OrderStatusTransition(
            OrderStatus.INITIATED,
            OrderStatus.REJECTED,
            description="Payment rejected (insufficient amount or address mismatch)"
        ),
        OrderStatusTransition(
            OrderStatus.INITIATED,
            OrderStatus.EXPIRED,
            description="Order expired before payment was verified"
        ),
    ]

    FINAL_STATUSES: Set[OrderStatus] = {OrderStatus.VERIFIED, OrderStatus.REJECTED, OrderStatus.EXPIRED}

    # Build transition map for fast lookup
    _transition_map: Dict[OrderStatus, Set[OrderStatus]] = {}
    _transition_descriptions: Dict[tuple, str] = {}

    @classmethod
    def _build_transition_map(cls):
        """Build internal transition maps for performance"""
        if cls._transition_map:
            return  # Already built

        for transition in cls.VALID_TRANSITIONS:
            cls._transition_map.setdefault(transition.from_status, set()).add(transition.to_status)
            cls._transition_descriptions[(transition.from_status, transition.to_status)] = transition.description

    @classmethod
    def is_valid_transition(cls, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """
        Check if a status transition is valid according to the state machine.

        Unlike a no-op update, staying in the same status is not a transition:
        every accepted transition moves the order forward.

        Args:
            from_status: Current order status
            to_status: Desired new status

        Returns:
            True if transition is valid, False otherwise
        """
        cls._build_transition_map()
        return to_status in cls._transition_map.get(from_status, set())

    @classmethod
    def get_valid_transitions(cls, from_status: OrderStatus) -> List[OrderStatus]:
        """Get all valid next statuses from the current status."""
        cls._build_transition_map()
        return sorted(cls._transition_map.get(from_status, set()), key=lambda status: status.value)

    @classmethod
    def get_transition_description(cls, from_status: OrderStatus, to_status: OrderStatus) -> str:
        cls._build_transition_map()
        return cls._transition_descriptions.get(
            (from_status, to_status),
            f"Transition from {from_status.value} to {to_status.value}"
        )

    @classmethod
    def is_final_status(cls, status: OrderStatus) -> bool:
        """Check if a status is final (no transitions allowed from it)."""
        return status in cls.FINAL_STATUSES

    @classmethod
    def transition(cls, order: Order, to_status: OrderStatus) -> None:
        """
        Move an order to a new status and write an audit log entry.

        Args:
            order: Order to transition (mutated in place)
            to_status: Desired new status

        Raises:
            InvalidOrderStateException: If the transition is not allowed
        """
        from_status = order.status
        if not cls.is_valid_transition(from_status, to_status):
            logger.error(f"Invalid status transition for order {order.id}: {from_status.value} -> {to_status.value}")
            allowed_sources = "|".join(
                t.from_status.value for t in cls.VALID_TRANSITIONS if t.to_status == to_status
            )
            raise InvalidOrderStateException(order.id, from_status.value, allowed_sources)

        order.status = to_status
        logger.info(
            f"ORDER_STATUS_TRANSITION: Order {order.id} {from_status.value} -> {to_status.value}: "
            f"{cls.get_transition_description(from_status, to_status)}"
        )
