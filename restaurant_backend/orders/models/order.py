# orders/models/order.py

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q


class Order(models.Model):
    """
    A single table's open tab.

    GUARANTEES:
    - total_amount == subtotal_amount + service_fee (written together by
      orders.services.pricing.recompute_totals and by payment completion)
    - at most one non-terminal (active / pending) order per table
    - payment binds the order to the register that was open at that moment
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        PENDING = "pending", "Sent to kitchen"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"

    OPEN_STATUSES = (Status.ACTIVE, Status.PENDING)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    table = models.ForeignKey(
        "restaurants.DiningTable",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    customer_name = models.CharField(max_length=255, null=True, blank=True)

    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    payment_status = models.CharField(
        max_length=12,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )

    # Null until first computed
    subtotal_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    service_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    cash_register = models.ForeignKey(
        "cash_register.CashRegister",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Register that was open when the order was paid.",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["table"],
                condition=Q(status__in=["active", "pending"]),
                name="uniq_open_order_per_table",
            ),
        ]
        indexes = [
            models.Index(fields=["table", "status"], name="orders_table_status_idx"),
        ]

    @property
    def restaurant_id(self):
        return self.table.restaurant_id

    @property
    def restaurant(self):
        return self.table.restaurant

    @property
    def is_open(self) -> bool:
        return self.status in self.OPEN_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PaymentStatus.PAID

    def __str__(self):
        return f"Order {str(self.id)[:8]} | table {self.table.number} | {self.status}"
