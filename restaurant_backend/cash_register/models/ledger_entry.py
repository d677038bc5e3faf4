# cash_register/models/ledger_entry.py

"""
======================================================
PATH: cash_register/models/ledger_entry.py
======================================================
CASH REGISTER LEDGER ENTRY

Append-only movement against a register's balance.

Guarantees:
- Immutable once created (no updates, no deletes)
- Amount is always positive; direction is via entry_type
    PAYMENT / DEPOSIT   -> add
    WITHDRAWAL          -> subtract
- balance is the running balance snapshot taken at insertion time and is
  never recomputed retroactively
- sequence is 1..N per register and defines "most recent entry"
- payment_method NULL means cash
- order_payment is unique: one OrderPayment binds to at most one entry

Entries are created ONLY through cash_register.services.ledger_service.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class LedgerEntry(models.Model):
    class EntryType(models.TextChoices):
        PAYMENT = "payment", "Payment"
        WITHDRAWAL = "withdrawal", "Withdrawal"
        DEPOSIT = "deposit", "Deposit"

    INCOME_TYPES = (EntryType.PAYMENT, EntryType.DEPOSIT)
    EXPENSE_TYPES = (EntryType.WITHDRAWAL,)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    register = models.ForeignKey(
        "cash_register.CashRegister",
        on_delete=models.PROTECT,
        related_name="entries",
    )

    sequence = models.PositiveIntegerField()

    entry_type = models.CharField(max_length=12, choices=EntryType.choices)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )

    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Running balance right after this entry",
    )

    payment_method = models.ForeignKey(
        "cash_register.PaymentMethod",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_entries",
    )

    order_payment = models.OneToOneField(
        "orders.OrderPayment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="ledger_entry",
    )

    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="register_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["register", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["register", "sequence"],
                name="uniq_ledger_sequence_per_register",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="ledger_entry_amount_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["register", "entry_type"], name="cash_led_reg_type_idx"),
            models.Index(fields=["created_at"], name="cash_led_created_idx"),
        ]

    def __str__(self):
        return f"#{self.sequence} {self.entry_type} {self.amount} → {self.balance}"

    @property
    def signed_amount(self) -> Decimal:
        if self.entry_type == self.EntryType.WITHDRAWAL:
            return -self.amount
        return self.amount

    def clean(self):
        if self.entry_type not in self.EntryType.values:
            raise ValidationError("Invalid entry_type")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

        if self.entry_type != self.EntryType.PAYMENT and (self.order_id or self.order_payment_id):
            raise ValidationError("Only payment entries may reference an order")

    def save(self, *args, **kwargs):
        # UUID pk is set before insert, so rely on _state instead of pk.
        if not self._state.adding:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
