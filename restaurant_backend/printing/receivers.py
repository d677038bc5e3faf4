# printing/receivers.py

"""
Kitchen auto-print.

When an order is sent to the kitchen (status -> pending) and AUTO_KITCHEN_PRINT
is on, unprinted lines go to the kitchen printers and the order returns to
active so the table can keep ordering.

RULES:
- printing runs after the status change has committed (transaction.on_commit)
- nothing raised while printing reaches the caller of change_status; it is
  logged and the order stays pending
- the caller still waits for the print round-trip: at most
  PRINT_TIMEOUT_SECONDS per kitchen printer
"""

import logging
from functools import partial

from django.conf import settings
from django.db import transaction

from orders.models import Order

logger = logging.getLogger("printing")


def print_when_sent_to_kitchen(sender, order, previous_status, status, actor=None, **kwargs):
    if not getattr(settings, "AUTO_KITCHEN_PRINT", False):
        return
    if status != Order.Status.PENDING:
        return

    transaction.on_commit(partial(_print_and_release, order=order, actor=actor))


def _print_and_release(*, order, actor=None):
    from orders.services.order_lifecycle import change_status
    from orders.services.exceptions import OrderError
    from printing.services.dispatch import print_pending_items

    try:
        outcome = print_pending_items(order)
        if not outcome.printed_items:
            logger.warning(
                "Order sent to kitchen but nothing was printed",
                extra={"order_id": str(order.pk), "printers": outcome.printers},
            )
            return

        try:
            change_status(order=order, target_status=Order.Status.ACTIVE, actor=actor)
        except OrderError as exc:
            logger.warning(
                "Order could not return to active after printing",
                extra={"order_id": str(order.pk), "reason": str(exc)},
            )
    except Exception:
        logger.exception("Kitchen auto-print failed", extra={"order_id": str(order.pk)})
