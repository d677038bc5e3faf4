# orders/services/pricing.py

"""
======================================================
PATH: orders/services/pricing.py
======================================================
ORDER PRICING ENGINE

Subtotal / service fee / total for an order, and item-level dedup.

RULES:
- unit_price = product.price + sum(extra.price)   (snapshot at add-time)
- line_total = unit_price * quantity
- subtotal   = sum(line_total)
- fee        = subtotal * SERVICE_FEE_PERCENT / 100
- total      = subtotal + fee
- full precision while summing, ROUND_HALF_UP to 2dp once when persisted
- every item mutation recomputes totals in the same transaction
- identical (product, observation, extras set) merges into one line
- paid or finished orders are locked (OrderLockedError)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable

from django.conf import settings
from django.db import transaction

from cash_register.services.money import money, to_decimal
from orders.models import Order, OrderItem
from orders.services.exceptions import (
    InvalidQuantityError,
    OrderItemNotFoundError,
    OrderLockedError,
    ProductUnavailableError,
)

logger = logging.getLogger("orders")

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    service_fee: Decimal
    total: Decimal


# ============================================================
# PURE HELPERS
# ============================================================


def service_fee_percent() -> Decimal:
    return to_decimal(getattr(settings, "SERVICE_FEE_PERCENT", "10"))


def _normalize_observation(observation) -> str | None:
    text = (observation or "").strip() if isinstance(observation, str) else observation
    return text or None


def parse_extras(raw) -> list[dict]:
    """
    Normalize a stored extras payload into [{"id", "name", "price"}].

    Accepts a list, a JSON string or a single object. Anything malformed
    degrades to "no extras" so historical orders stay readable.
    """
    if raw is None or raw == "":
        return []

    data = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Malformed extras payload ignored", extra={"raw": str(raw)[:200]})
            return []

    if isinstance(data, dict):
        data = [data]

    if not isinstance(data, list):
        logger.warning("Unexpected extras payload type", extra={"type": type(data).__name__})
        return []

    out: list[dict] = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("id"):
            logger.warning("Malformed extra entry ignored", extra={"entry": str(entry)[:200]})
            continue
        try:
            price = money(entry.get("price"))
        except (InvalidOperation, ValueError, TypeError):
            logger.warning("Extra with invalid price ignored", extra={"entry": str(entry)[:200]})
            continue
        out.append(
            {
                "id": str(entry["id"]),
                "name": str(entry.get("name") or ""),
                "price": price,
            }
        )
    return out


def item_dedup_key(product_id, observation, extras) -> tuple:
    """
    (product_id, observation, sorted extra ids). Empty observation == None.
    """
    extra_ids = []
    for e in extras or []:
        eid = e.get("id") if isinstance(e, dict) else getattr(e, "id", None)
        if eid is not None:
            extra_ids.append(str(eid))

    return (
        str(product_id) if product_id else None,
        _normalize_observation(observation),
        tuple(sorted(extra_ids)),
    )


def compute_totals(items: Iterable, service_fee_percent_value=None) -> Totals:
    """
    items: anything with unit_price and quantity (OrderItem or similar).
    """
    pct = service_fee_percent() if service_fee_percent_value is None else to_decimal(service_fee_percent_value)

    subtotal = Decimal("0")
    for item in items:
        subtotal += to_decimal(item.unit_price) * int(item.quantity)

    fee = subtotal * pct / HUNDRED

    subtotal_q = money(subtotal)
    fee_q = money(fee)
    return Totals(subtotal=subtotal_q, service_fee=fee_q, total=subtotal_q + fee_q)


# ============================================================
# GUARDS
# ============================================================


def _ensure_mutable(order: Order) -> None:
    if order.is_paid:
        raise OrderLockedError("Order is already paid; items can no longer change")
    if not order.is_open:
        raise OrderLockedError(f"Order is {order.status}; items can no longer change")


def _lock_order(order: Order) -> Order:
    locked = Order.objects.select_for_update().select_related("table").get(pk=order.pk)
    _ensure_mutable(locked)
    return locked


def _positive_quantity(quantity) -> int:
    if isinstance(quantity, bool):
        raise InvalidQuantityError("Quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError) as exc:
        raise InvalidQuantityError("Quantity must be a whole number") from exc
    if qty != quantity and not isinstance(quantity, str):
        raise InvalidQuantityError("Quantity must be a whole number")
    return qty


def _sync(order: Order, locked: Order) -> None:
    for field in ("subtotal_amount", "service_fee", "total_amount", "updated_at"):
        setattr(order, field, getattr(locked, field))


# ============================================================
# COMMANDS
# ============================================================


def recompute_totals(order: Order, service_fee_percent_value=None, *, save: bool = True) -> Totals:
    """
    Recompute from the current lines and write subtotal, fee and total.
    Running it twice without mutations in between changes nothing.

    save=False only refreshes the in-memory instance (dry runs).
    """
    totals = compute_totals(
        OrderItem.objects.filter(order=order).only("unit_price", "quantity"),
        service_fee_percent_value,
    )

    order.subtotal_amount = totals.subtotal
    order.service_fee = totals.service_fee
    order.total_amount = totals.total
    if save:
        order.save(update_fields=["subtotal_amount", "service_fee", "total_amount", "updated_at"])
    return totals


@transaction.atomic
def add_item(
    *,
    order: Order,
    product,
    quantity=1,
    observation: str | None = None,
    extras: Iterable = (),
) -> OrderItem:
    """
    Add a product (with optional extras) to the order and return the line.

    If a line with the same product, observation and extras set exists, its
    quantity is incremented instead of inserting a duplicate.
    """
    qty = _positive_quantity(quantity)
    if qty <= 0:
        raise InvalidQuantityError("Quantity must be at least 1")

    locked = _lock_order(order)
    restaurant_id = locked.table.restaurant_id

    if not product.is_active or product.restaurant_id != restaurant_id:
        raise ProductUnavailableError(f"Product '{product.name}' is not available here")

    extras = list(extras or [])
    for extra in extras:
        if not extra.is_active or extra.restaurant_id != restaurant_id:
            raise ProductUnavailableError(f"Extra '{extra.name}' is not available here")

    snapshot = [
        {"id": str(e.id), "name": e.name, "price": str(money(e.price))}
        for e in sorted(extras, key=lambda e: str(e.id))
    ]
    obs = _normalize_observation(observation)
    key = item_dedup_key(product.id, obs, snapshot)

    line = None
    for existing in OrderItem.objects.select_for_update().filter(order=locked, product=product):
        if item_dedup_key(existing.product_id, existing.observation, parse_extras(existing.extras)) == key:
            line = existing
            break

    if line is not None:
        line.quantity = int(line.quantity) + qty
        line.save(update_fields=["quantity"])
    else:
        unit_price = to_decimal(product.price) + sum(
            (to_decimal(e.price) for e in extras), Decimal("0")
        )
        line = OrderItem.objects.create(
            order=locked,
            product=product,
            name=product.name,
            unit_price=money(unit_price),
            quantity=qty,
            observation=obs,
            extras=snapshot,
        )

    recompute_totals(locked)
    _sync(order, locked)

    logger.info(
        "Order item added",
        extra={
            "order_id": str(locked.pk),
            "item_id": str(line.pk),
            "product_id": str(product.pk),
            "quantity": line.quantity,
            "merged": line.quantity != qty,
        },
    )
    return line


@transaction.atomic
def remove_item(*, order: Order, item_id) -> None:
    """
    Delete the line. An order left with no lines is kept (not cancelled).
    """
    locked = _lock_order(order)

    deleted, _ = OrderItem.objects.filter(order=locked, pk=item_id).delete()
    if not deleted:
        raise OrderItemNotFoundError("Item not found on this order")

    recompute_totals(locked)
    _sync(order, locked)

    logger.info("Order item removed", extra={"order_id": str(locked.pk), "item_id": str(item_id)})


@transaction.atomic
def change_quantity(*, order: Order, item_id, quantity) -> OrderItem | None:
    """
    quantity <= 0 removes the line (returns None); otherwise updates in place.
    """
    qty = _positive_quantity(quantity)
    if qty <= 0:
        remove_item(order=order, item_id=item_id)
        return None

    locked = _lock_order(order)

    try:
        line = OrderItem.objects.select_for_update().get(order=locked, pk=item_id)
    except OrderItem.DoesNotExist as exc:
        raise OrderItemNotFoundError("Item not found on this order") from exc

    line.quantity = qty
    line.save(update_fields=["quantity"])

    recompute_totals(locked)
    _sync(order, locked)
    return line
