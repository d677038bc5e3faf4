# orders/models/order_payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class OrderPayment(models.Model):
    """
    One payment-method allocation toward an order's payable total.

    RULES:
    - Created only by orders.services.payment_splitter on completion
    - Sum(amount) for an order equals its payable total
    - cash_register_transaction is bound right after the ledger entry exists
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    payment_method = models.ForeignKey(
        "cash_register.PaymentMethod",
        on_delete=models.PROTECT,
        related_name="order_payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    include_service_fee = models.BooleanField(default=True)

    cash_register_transaction = models.OneToOneField(
        "cash_register.LedgerEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bound_order_payment",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_payments",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order"], name="orders_payment_order_idx"),
        ]

    def __str__(self):
        return f"{self.order_id} | {self.payment_method} | {self.amount}"
