# cash_register/services/ledger_service.py

"""
======================================================
PATH: cash_register/services/ledger_service.py
======================================================
REGISTER LEDGER SERVICE (WRITE CHOKE-POINT)

The ONLY place where LedgerEntry rows are created.

RULES:
- amount > 0, always; direction comes from entry_type
- register must be OPEN (else RegisterClosedError)
- running balance is DERIVED: last entry's balance by sequence, or the
  register's opening_balance when there are no entries yet
- no second balance counter exists anywhere
- appends lock the register row, so sequence/balance are computed from a
  stable prior state
- a rejected append leaves no partial rows behind
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from cash_register.models import CashRegister, LedgerEntry
from cash_register.services.exceptions import (
    InvalidAmountError,
    InvalidMovementTypeError,
    RegisterClosedError,
)
from cash_register.services.money import money

logger = logging.getLogger("cash_register")

MANUAL_MOVEMENT_TYPES = {
    LedgerEntry.EntryType.DEPOSIT,
    LedgerEntry.EntryType.WITHDRAWAL,
}


def _positive_amount(amount) -> Decimal:
    try:
        amt = money(amount)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from exc

    if amt <= Decimal("0.00"):
        raise InvalidAmountError("Amount must be > 0")
    return amt


def _last_entry_values(register_id):
    return (
        LedgerEntry.objects.filter(register_id=register_id)
        .order_by("-sequence")
        .values("sequence", "balance")
        .first()
    )


def current_running_balance(register: CashRegister) -> Decimal:
    """
    Most recent entry's balance snapshot, or opening_balance if none exist.
    """
    last = _last_entry_values(register.pk)
    if last is None:
        return money(register.opening_balance)
    return money(last["balance"])


@transaction.atomic
def append_entry(
    *,
    register: CashRegister,
    entry_type: str,
    amount,
    payment_method=None,
    order=None,
    order_payment=None,
    notes: str = "",
    actor=None,
) -> LedgerEntry:
    """
    Append one movement to an open register and return the persisted entry.

    PAYMENT / DEPOSIT add to the running balance, WITHDRAWAL subtracts.
    A cash PaymentMethod is stored as NULL (absent means cash).
    """
    if entry_type not in LedgerEntry.EntryType.values:
        raise InvalidMovementTypeError(f"Unknown entry type: {entry_type!r}")

    amt = _positive_amount(amount)

    locked = CashRegister.objects.select_for_update().get(pk=register.pk)
    if not locked.is_open:
        logger.warning(
            "Append rejected on closed register",
            extra={"register_id": str(locked.pk), "entry_type": entry_type, "amount": str(amt)},
        )
        raise RegisterClosedError("Cash register is closed; no further movements are allowed")

    last = _last_entry_values(locked.pk)
    if last is None:
        prior_balance = money(locked.opening_balance)
        sequence = 1
    else:
        prior_balance = money(last["balance"])
        sequence = int(last["sequence"]) + 1

    if entry_type == LedgerEntry.EntryType.WITHDRAWAL:
        new_balance = prior_balance - amt
    else:
        new_balance = prior_balance + amt

    if payment_method is not None and payment_method.is_cash:
        payment_method = None

    entry = LedgerEntry(
        register=locked,
        sequence=sequence,
        entry_type=entry_type,
        amount=amt,
        balance=new_balance,
        payment_method=payment_method,
        order=order,
        order_payment=order_payment,
        notes=notes or "",
        created_by=actor if getattr(actor, "is_authenticated", False) else None,
    )
    entry.save()

    logger.info(
        "Ledger entry appended",
        extra={
            "register_id": str(locked.pk),
            "entry_id": str(entry.pk),
            "sequence": sequence,
            "entry_type": entry_type,
            "amount": str(amt),
            "balance": str(new_balance),
        },
    )
    return entry


def record_cash_movement(
    *,
    register: CashRegister,
    entry_type: str,
    amount,
    notes: str = "",
    actor=None,
) -> LedgerEntry:
    """
    Manual till deposit or withdrawal.

    Payments are never recorded here; they come from the payment splitter.
    Withdrawals are not capped by the current balance.
    """
    if entry_type not in MANUAL_MOVEMENT_TYPES:
        raise InvalidMovementTypeError("Only deposits and withdrawals can be recorded manually")

    return append_entry(
        register=register,
        entry_type=entry_type,
        amount=amount,
        notes=notes,
        actor=actor,
    )
