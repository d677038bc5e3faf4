# cash_register/models/register.py

"""
======================================================
PATH: cash_register/models/register.py
======================================================
CASH REGISTER (TILL SESSION)

One bounded session of cash-drawer custody, from open to close.

GUARANTEES:
- At most one OPEN register per restaurant (conditional unique constraint)
- Closing fields are written exactly once, by register_lifecycle.close_register
- Never deleted: closed registers are the historical record
- No running-balance column: the balance is derived from the ledger
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class CashRegister(models.Model):
    class Status(models.TextChoices):
        OPEN = "open", "Open"
        CLOSED = "closed", "Closed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.PROTECT,
        related_name="cash_registers",
    )

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True,
    )

    # -----------------------------
    # Opening
    # -----------------------------
    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="opened_registers",
    )
    opening_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    opening_notes = models.TextField(blank=True, default="")
    opened_at = models.DateTimeField(default=timezone.now)

    # -----------------------------
    # Closing (null until closed)
    # -----------------------------
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="closed_registers",
    )
    closing_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Counted cash declared at close.",
    )
    closing_notes = models.TextField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-opened_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant"],
                condition=Q(status="open"),
                name="uniq_open_register_per_restaurant",
            ),
        ]
        indexes = [
            models.Index(fields=["restaurant", "status"], name="cash_reg_rest_status_idx"),
            models.Index(fields=["restaurant", "opened_at"], name="cash_reg_rest_opened_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.OPEN

    def delete(self, *args, **kwargs):
        raise ValidationError("Cash registers are historical records and cannot be deleted")

    def __str__(self):
        return f"{self.restaurant} | {self.opened_at:%Y-%m-%d %H:%M} | {self.status}"
