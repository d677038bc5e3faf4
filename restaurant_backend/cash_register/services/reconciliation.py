# cash_register/services/reconciliation.py

"""
REGISTER RECONCILIATION (READ-ONLY)

Summarizes a register's ledger for the close-confirmation view and the
historical register view.

RULES:
- READ-ONLY: no writes, ever
- LedgerEntry is the single source of truth
- expected balance is computed by summation AND cross-checked against the
  last stored running-balance snapshot
- entries with no payment_method are cash
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db.models import Case, Count, F, Q, Sum, When
from django.db.models.functions import Coalesce

from cash_register.models import CashRegister, LedgerEntry
from cash_register.models.payment_method import PaymentMethod
from cash_register.services.exceptions import LedgerIntegrityError
from cash_register.services.money import ZERO, money

logger = logging.getLogger("cash_register")

ET = LedgerEntry.EntryType


def _sum_when(condition: Q):
    return Coalesce(
        Sum(Case(When(condition, then=F("amount")))),
        ZERO,
    )


def _totals(register: CashRegister) -> dict:
    return LedgerEntry.objects.filter(register=register).aggregate(
        payments=_sum_when(Q(entry_type=ET.PAYMENT)),
        cash_payments=_sum_when(Q(entry_type=ET.PAYMENT, payment_method__isnull=True)),
        deposits=_sum_when(Q(entry_type=ET.DEPOSIT)),
        withdrawals=_sum_when(Q(entry_type=ET.WITHDRAWAL)),
        entry_count=Count("id"),
    )


def _last_snapshot(register: CashRegister):
    return (
        LedgerEntry.objects.filter(register=register)
        .order_by("-sequence")
        .values_list("balance", flat=True)
        .first()
    )


def expected_balance(register: CashRegister) -> Decimal:
    """
    opening + payments + deposits - withdrawals.

    Must equal the most recent entry's balance snapshot; a disagreement is
    a LedgerIntegrityError, never silently resolved in either direction.
    """
    t = _totals(register)
    expected = money(register.opening_balance) + t["payments"] + t["deposits"] - t["withdrawals"]
    expected = money(expected)

    snapshot = _last_snapshot(register)
    if snapshot is not None and money(snapshot) != expected:
        logger.error(
            "Register ledger sum disagrees with running balance snapshot",
            extra={
                "register_id": str(register.pk),
                "expected": str(expected),
                "snapshot": str(snapshot),
            },
        )
        raise LedgerIntegrityError(
            f"Ledger sum {expected} does not match last running balance {money(snapshot)}"
        )

    return expected


def cash_only_balance(register: CashRegister) -> Decimal:
    """
    Cash expected in the drawer:
    opening + cash payments + deposits - withdrawals.
    """
    t = _totals(register)
    return money(
        money(register.opening_balance)
        + t["cash_payments"]
        + t["deposits"]
        - t["withdrawals"]
    )


def totals_by_method(register: CashRegister) -> dict[str, Decimal]:
    """
    Payment totals keyed by payment method code; NULL method is "cash".
    """
    rows = (
        LedgerEntry.objects.filter(register=register, entry_type=ET.PAYMENT)
        .values("payment_method__code")
        .annotate(total=Coalesce(Sum("amount"), ZERO))
        .order_by("payment_method__code")
    )

    out: dict[str, Decimal] = {}
    for r in rows:
        code = r["payment_method__code"] or PaymentMethod.CASH_CODE
        out[code] = money(out.get(code, ZERO) + r["total"])
    return out


def summary_report(register: CashRegister) -> dict:
    """
    Structure rendered by the close-confirmation and register history views.
    """
    t = _totals(register)
    return {
        "register_id": str(register.pk),
        "status": register.status,
        "opening_balance": money(register.opening_balance),
        "income_total": money(t["payments"] + t["deposits"]),
        "expense_total": money(t["withdrawals"]),
        "cash_only_balance": cash_only_balance(register),
        "grand_total_balance": expected_balance(register),
        "by_method": totals_by_method(register),
        "entry_count": t["entry_count"],
        "closing_balance": (
            money(register.closing_balance) if register.closing_balance is not None else None
        ),
    }


def verify_running_balances(register: CashRegister) -> list[int]:
    """
    Replay every entry in sequence order from opening_balance.

    Returns the sequence numbers whose stored balance (or position) does not
    match the replay. Empty list means the ledger is consistent.
    """
    running = money(register.opening_balance)
    bad: list[int] = []

    entries = (
        LedgerEntry.objects.filter(register=register)
        .order_by("sequence")
        .values_list("sequence", "entry_type", "amount", "balance")
    )

    for expected_seq, (seq, entry_type, amount, balance) in enumerate(entries, start=1):
        if entry_type == ET.WITHDRAWAL:
            running -= amount
        else:
            running += amount

        if seq != expected_seq or money(balance) != money(running):
            bad.append(seq)

    if bad:
        logger.error(
            "Running balance replay mismatch",
            extra={"register_id": str(register.pk), "sequences": bad},
        )
    return bad
