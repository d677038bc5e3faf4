# orders/services/order_lifecycle.py

"""
ORDER LIFECYCLE DOMAIN RULES

    active  <-> pending          (pending = sent to the kitchen)
    active | pending -> completed | cancelled
    completed, cancelled: terminal

Every successful change sends orders.signals.order_status_changed.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from orders.models import Order
from orders.services.exceptions import InvalidOrderTransitionError, NoActiveOrderError, OrderError
from orders.signals import order_status_changed

logger = logging.getLogger("orders")

S = Order.Status

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    S.COMPLETED,
    S.CANCELLED,
}

ALLOWED_TRANSITIONS = {
    S.ACTIVE: {S.PENDING, S.COMPLETED, S.CANCELLED},
    S.PENDING: {S.ACTIVE, S.COMPLETED, S.CANCELLED},
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderTransitionError(
            f"Order {order.id} cannot transition from "
            f"'{order.status}' to '{target_status}'"
        )


# ============================================================
# QUERIES
# ============================================================


def get_active_order(table) -> Order | None:
    """The table's current non-terminal order, if any."""
    return (
        Order.objects.filter(table=table, status__in=Order.OPEN_STATUSES)
        .select_related("table")
        .order_by("-created_at")
        .first()
    )


# ============================================================
# COMMANDS
# ============================================================


def open_order(*, table, customer_name: str | None = None, actor=None) -> tuple[Order, bool]:
    """
    Return (order, created): the table's open order, or a fresh one.
    """
    if not table.is_active:
        raise OrderError(f"Table {table.number} is not active")

    existing = get_active_order(table)
    if existing is not None:
        return existing, False

    try:
        with transaction.atomic():
            order = Order.objects.create(
                table=table,
                customer_name=(customer_name or "").strip() or None,
                status=S.ACTIVE,
                payment_status=Order.PaymentStatus.PENDING,
                created_by=actor if getattr(actor, "is_authenticated", False) else None,
            )
    except IntegrityError:
        # another terminal opened the tab first
        existing = get_active_order(table)
        if existing is None:
            raise
        return existing, False

    logger.info(
        "Order opened",
        extra={"order_id": str(order.pk), "table_id": str(table.pk), "table_number": table.number},
    )
    return order, True


def change_status(*, order: Order, target_status: str, actor=None) -> Order:
    with transaction.atomic():
        locked = Order.objects.select_for_update().select_related("table").get(pk=order.pk)
        validate_transition(order=locked, target_status=target_status)

        previous = locked.status
        locked.status = target_status
        locked.save(update_fields=["status", "updated_at"])

    order.status = locked.status
    order.updated_at = locked.updated_at

    logger.info(
        "Order status changed",
        extra={"order_id": str(locked.pk), "from": previous, "to": target_status},
    )

    order_status_changed.send(
        sender=Order,
        order=locked,
        previous_status=previous,
        status=target_status,
        actor=actor,
    )
    return locked


def set_customer_name(*, table, customer_name: str | None, actor=None) -> Order:
    """
    Name (or un-name, with None/blank) the customer on the table's open tab.
    """
    with transaction.atomic():
        order = (
            Order.objects.select_for_update()
            .filter(table=table, status__in=Order.OPEN_STATUSES)
            .order_by("-created_at")
            .first()
        )
        if order is None:
            raise NoActiveOrderError(f"Table {table.number} has no open order")

        order.customer_name = (customer_name or "").strip() or None
        order.save(update_fields=["customer_name", "updated_at"])

    logger.info(
        "Order customer name changed",
        extra={"order_id": str(order.pk), "table_number": table.number},
    )
    return order
