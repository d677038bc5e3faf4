# orders/services/payment_splitter.py

"""
======================================================
PATH: orders/services/payment_splitter.py
======================================================
PAYMENT SPLITTER (APPLICATION SERVICE)

Collects one or more payment-method allocations against an order's payable
total, works out change for cash, and on completion materializes
OrderPayment rows + register ledger entries.

Session states:
    collecting --(remaining == 0)--> fully_covered --complete()--> completed
         \______________________ abandon() ______________________> abandoned

Allocation rules:
- amount > 0
- non-cash: amount must fit in remaining (else ExceedsRemainingError,
  nothing changes)
- cash: the tendered amount may exceed remaining; only min(amount,
  remaining) is allocated and the rest is change. Change is never a
  ledger amount.
- one allocation per method: repeated methods merge

Completion (one DB transaction):
- remaining must be 0 (IncompletePaymentError)
- an open register must exist for the restaurant (NoOpenRegisterError)
- per allocation: OrderPayment -> ledger PAYMENT entry -> bind entry back
- order.payment_status = paid, order.cash_register = register,
  order.service_fee = fee or 0 when the fee was excluded
- LedgerEntry.order_payment is unique, so a retried step cannot double-insert
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from cash_register.models import LedgerEntry, PaymentMethod
from cash_register.services.exceptions import NoOpenRegisterError
from cash_register.services.ledger_service import append_entry
from cash_register.services.money import ZERO, money
from cash_register.services.register_lifecycle import current_open_register
from orders.models import Order, OrderPayment
from orders.services.exceptions import (
    ExceedsRemainingError,
    IncompletePaymentError,
    InvalidPaymentAmountError,
    OrderAlreadyPaidError,
    OrderChangedError,
    OrderLockedError,
    PaymentSessionClosedError,
)
from orders.services.pricing import recompute_totals

logger = logging.getLogger("payments")


def payable_total(order: Order, include_service_fee: bool = True) -> Decimal:
    total = money(order.total_amount or ZERO)
    if include_service_fee:
        return total
    return money(total - money(order.service_fee or ZERO))


def _amount(value) -> Decimal:
    try:
        amt = money(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidPaymentAmountError(f"Invalid amount: {value!r}") from exc
    if amt <= ZERO:
        raise InvalidPaymentAmountError("Amount must be > 0")
    return amt


@dataclass
class Allocation:
    payment_method: PaymentMethod
    amount: Decimal = ZERO
    tendered: Decimal = ZERO
    change: Decimal = ZERO

    @property
    def is_cash(self) -> bool:
        return self.payment_method.is_cash


@dataclass(frozen=True)
class PaymentResult:
    order: Order
    register: object
    payments: list
    entries: list
    change: Decimal


@dataclass
class PaymentSession:
    COLLECTING = "collecting"
    FULLY_COVERED = "fully_covered"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

    order: Order
    include_service_fee: bool = True
    _allocations: dict = field(default_factory=dict)
    _closed_as: str | None = None

    # -----------------------------
    # Derived values
    # -----------------------------
    @property
    def payable_total(self) -> Decimal:
        return payable_total(self.order, self.include_service_fee)

    @property
    def allocated(self) -> Decimal:
        return money(sum((a.amount for a in self._allocations.values()), ZERO))

    @property
    def remaining(self) -> Decimal:
        return money(self.payable_total - self.allocated)

    @property
    def change(self) -> Decimal:
        return money(sum((a.change for a in self._allocations.values()), ZERO))

    @property
    def allocations(self) -> list[Allocation]:
        return list(self._allocations.values())

    @property
    def state(self) -> str:
        if self._closed_as:
            return self._closed_as
        if self._allocations and self.remaining == ZERO:
            return self.FULLY_COVERED
        return self.COLLECTING

    def _ensure_open(self) -> None:
        if self._closed_as:
            raise PaymentSessionClosedError(f"Payment session is {self._closed_as}")

    # -----------------------------
    # Allocation commands
    # -----------------------------
    def add_allocation(self, payment_method: PaymentMethod, amount, *, tendered=None) -> Allocation:
        """
        Non-cash: amount is what goes on the method; tendered is ignored.

        Cash, one argument: amount IS the tendered cash.
            recorded = min(amount, remaining)
            change   = amount - recorded   (== max(0, amount - remaining))

        Cash, with tendered: amount is the part of the bill the customer
        wants to settle in cash (the rest goes on other methods) and
        tendered is the cash handed over (tendered >= amount).
            recorded = min(amount, remaining)
            change   = tendered - recorded

        Paying 40.00 of a 100.00 bill in cash with a 50.00 note gives
        change 10.00; max(0, tendered - remaining) would give 0.00 and keep
        the customer's money. Change accumulates across cash allocations.
        """
        self._ensure_open()

        amt = _amount(amount)
        remaining = self.remaining

        if payment_method.is_cash:
            handed = _amount(tendered) if tendered is not None else amt
            if handed < amt:
                raise InvalidPaymentAmountError("Tendered cash cannot be less than the amount")
            if remaining <= ZERO:
                raise ExceedsRemainingError("Nothing left to pay")
            recorded = min(amt, remaining)
            change = money(handed - recorded)
        else:
            if amt > remaining:
                raise ExceedsRemainingError(
                    f"{payment_method.name}: {amt} exceeds remaining {remaining}"
                )
            recorded = amt
            handed = amt
            change = ZERO

        key = str(payment_method.pk)
        alloc = self._allocations.get(key)
        if alloc is None:
            alloc = Allocation(payment_method=payment_method)
            self._allocations[key] = alloc

        alloc.amount = money(alloc.amount + recorded)
        alloc.tendered = money(alloc.tendered + handed)
        alloc.change = money(alloc.change + change)
        return alloc

    def remove_allocation(self, payment_method) -> None:
        self._ensure_open()
        key = str(getattr(payment_method, "pk", payment_method))
        self._allocations.pop(key, None)

    def set_include_service_fee(self, include: bool) -> None:
        self._ensure_open()
        new_payable = payable_total(self.order, bool(include))
        if self.allocated > new_payable:
            raise ExceedsRemainingError(
                f"Allocated {self.allocated} exceeds payable total {new_payable}"
            )
        self.include_service_fee = bool(include)

    def abandon(self) -> None:
        self._ensure_open()
        self._closed_as = self.ABANDONED
        logger.info("Payment session abandoned", extra={"order_id": str(self.order.pk)})

    # -----------------------------
    # Completion
    # -----------------------------
    def complete(self, *, actor=None) -> PaymentResult:
        self._ensure_open()

        if not self._allocations:
            raise IncompletePaymentError("No payment allocations")
        if self.remaining != ZERO:
            raise IncompletePaymentError(f"Remaining {self.remaining} must be 0 to complete")

        with transaction.atomic():
            order = Order.objects.select_for_update().select_related("table").get(pk=self.order.pk)

            if order.is_paid:
                raise OrderAlreadyPaidError("Order is already paid")
            if money(order.total_amount or ZERO) != money(self.order.total_amount or ZERO):
                raise OrderChangedError("Order total changed; start the payment again")

            register = current_open_register(order.table.restaurant_id)
            if register is None:
                raise NoOpenRegisterError("Open the cash register before accepting payment")

            user = actor if getattr(actor, "is_authenticated", False) else None
            payments: list[OrderPayment] = []
            entries: list[LedgerEntry] = []

            for alloc in self._allocations.values():
                payment = OrderPayment.objects.create(
                    order=order,
                    payment_method=alloc.payment_method,
                    amount=alloc.amount,
                    include_service_fee=self.include_service_fee,
                    created_by=user,
                )
                entry = append_entry(
                    register=register,
                    entry_type=LedgerEntry.EntryType.PAYMENT,
                    amount=alloc.amount,
                    payment_method=alloc.payment_method,
                    order=order,
                    order_payment=payment,
                    notes=f"Mesa {order.table.number} - {alloc.payment_method.name}",
                    actor=user,
                )
                payment.cash_register_transaction = entry
                payment.save(update_fields=["cash_register_transaction"])

                payments.append(payment)
                entries.append(entry)

            stored_fee = money(order.service_fee or ZERO)
            subtotal = money(order.total_amount or ZERO) - stored_fee
            fee = stored_fee if self.include_service_fee else ZERO

            order.subtotal_amount = subtotal
            order.service_fee = fee
            order.total_amount = subtotal + fee
            order.payment_status = Order.PaymentStatus.PAID
            order.cash_register = register
            order.paid_at = timezone.now()
            order.save(
                update_fields=[
                    "subtotal_amount",
                    "service_fee",
                    "total_amount",
                    "payment_status",
                    "cash_register",
                    "paid_at",
                    "updated_at",
                ]
            )

        self._closed_as = self.COMPLETED
        self.order = order

        logger.info(
            "Order payment completed",
            extra={
                "order_id": str(order.pk),
                "register_id": str(register.pk),
                "amount": str(order.total_amount),
                "allocations": len(payments),
                "change": str(self.change),
            },
        )

        return PaymentResult(
            order=order,
            register=register,
            payments=payments,
            entries=entries,
            change=self.change,
        )


def start_payment(order: Order, *, include_service_fee: bool = True, persist: bool = True) -> PaymentSession:
    """
    Open a payment session on an unpaid order with freshly computed totals.

    persist=False computes the totals on the instance only and leaves the
    order row untouched (payment previews).
    """
    order.refresh_from_db(fields=["status", "payment_status"])
    if order.is_paid:
        raise OrderAlreadyPaidError("Order is already paid")
    if not order.is_open:
        raise OrderLockedError(f"Order is {order.status}; it cannot be paid")

    recompute_totals(order, save=persist)
    return PaymentSession(order=order, include_service_fee=include_service_fee)
