# cash_register/services/register_lifecycle.py

"""
CASH REGISTER LIFECYCLE

States:
    (no register) --open--> OPEN --close--> CLOSED (terminal)

A new open always creates a fresh CashRegister; closed registers keep
their ledger entries forever.

DESIGN PRINCIPLES:
- AlreadyOpenError is checked in code AND backed by the conditional unique
  constraint "one open register per restaurant"
- Close reports the counted-vs-expected difference but never blocks on it;
  the tolerance only decides whether the caller should ask for confirmation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from cash_register.models import CashRegister
from cash_register.services.exceptions import (
    AlreadyOpenError,
    InvalidAmountError,
    NotOpenError,
)
from cash_register.services.money import money
from cash_register.services.reconciliation import expected_balance

logger = logging.getLogger("cash_register")


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    CashRegister.Status.CLOSED,
}

ALLOWED_TRANSITIONS = {
    CashRegister.Status.OPEN: {
        CashRegister.Status.CLOSED,
    },
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


# ============================================================
# CLOSE RESULT
# ============================================================


@dataclass(frozen=True)
class CloseResult:
    register: CashRegister
    expected_balance: Decimal
    counted_balance: Decimal
    difference: Decimal
    has_difference: bool
    requires_confirmation: bool

    def as_dict(self) -> dict:
        return {
            "register_id": str(self.register.pk),
            "expected_balance": self.expected_balance,
            "counted_balance": self.counted_balance,
            "difference": self.difference,
            "has_difference": self.has_difference,
            "requires_confirmation": self.requires_confirmation,
        }


def close_tolerance() -> Decimal:
    return money(getattr(settings, "REGISTER_CLOSE_TOLERANCE", "1.00"))


def _amount(value, *, field: str) -> Decimal:
    try:
        return money(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmountError(f"Invalid {field}: {value!r}") from exc


def _build_close_result(register: CashRegister, counted_balance, tolerance) -> CloseResult:
    counted = _amount(counted_balance, field="counted balance")
    tol = close_tolerance() if tolerance is None else money(tolerance)

    expected = expected_balance(register)
    difference = money(counted - expected)

    return CloseResult(
        register=register,
        expected_balance=expected,
        counted_balance=counted,
        difference=difference,
        has_difference=difference != Decimal("0.00"),
        requires_confirmation=abs(difference) > tol,
    )


# ============================================================
# QUERIES
# ============================================================


def current_open_register(restaurant) -> CashRegister | None:
    restaurant_id = getattr(restaurant, "pk", restaurant)
    return (
        CashRegister.objects.filter(
            restaurant_id=restaurant_id,
            status=CashRegister.Status.OPEN,
        )
        .order_by("-opened_at")
        .first()
    )


def register_history(restaurant):
    restaurant_id = getattr(restaurant, "pk", restaurant)
    return (
        CashRegister.objects.filter(restaurant_id=restaurant_id)
        .select_related("opened_by", "closed_by")
        .order_by("-opened_at")
    )


# ============================================================
# COMMANDS
# ============================================================


def open_register(*, restaurant, opening_balance, notes: str = "", actor=None) -> CashRegister:
    opening = _amount(opening_balance, field="opening balance")
    if opening < Decimal("0.00"):
        raise InvalidAmountError("Opening balance cannot be negative")

    if current_open_register(restaurant) is not None:
        raise AlreadyOpenError("A cash register is already open for this restaurant")

    try:
        with transaction.atomic():
            register = CashRegister.objects.create(
                restaurant=restaurant,
                status=CashRegister.Status.OPEN,
                opening_balance=opening,
                opening_notes=notes or "",
                opened_by=actor if getattr(actor, "is_authenticated", False) else None,
                opened_at=timezone.now(),
            )
    except IntegrityError as exc:
        # lost the race against a concurrent open
        raise AlreadyOpenError("A cash register is already open for this restaurant") from exc

    logger.info(
        "Cash register opened",
        extra={
            "register_id": str(register.pk),
            "restaurant_id": str(register.restaurant_id),
            "opening_balance": str(opening),
        },
    )
    return register


def preview_close(register: CashRegister, counted_balance, tolerance=None) -> CloseResult:
    """
    Same numbers as close_register, nothing persisted.
    """
    if not register.is_open:
        raise NotOpenError("Cash register is not open")
    return _build_close_result(register, counted_balance, tolerance)


@transaction.atomic
def close_register(
    *,
    register: CashRegister,
    counted_balance,
    notes: str | None = None,
    actor=None,
    tolerance=None,
) -> CloseResult:
    locked = CashRegister.objects.select_for_update().get(pk=register.pk)

    if not can_transition(from_status=locked.status, to_status=CashRegister.Status.CLOSED):
        raise NotOpenError("Cash register is not open")

    result = _build_close_result(locked, counted_balance, tolerance)

    locked.status = CashRegister.Status.CLOSED
    locked.closing_balance = result.counted_balance
    locked.closing_notes = notes or None
    locked.closed_by = actor if getattr(actor, "is_authenticated", False) else None
    locked.closed_at = timezone.now()
    locked.save(
        update_fields=["status", "closing_balance", "closing_notes", "closed_by", "closed_at"]
    )

    log = logger.warning if result.requires_confirmation else logger.info
    log(
        "Cash register closed",
        extra={
            "register_id": str(locked.pk),
            "expected_balance": str(result.expected_balance),
            "counted_balance": str(result.counted_balance),
            "difference": str(result.difference),
        },
    )

    # refresh the caller's instance
    for field in ("status", "closing_balance", "closing_notes", "closed_by_id", "closed_at"):
        setattr(register, field, getattr(locked, field))

    return result
