# orders/models/order_item.py

import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q


class OrderItem(models.Model):
    """
    One line of an order.

    name, unit_price and extras are snapshots taken at add-time; unit_price
    already includes the per-unit cost of the selected extras.
    extras: [{"id": "...", "name": "...", "price": "2.50"}, ...]
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "menu.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    observation = models.TextField(null=True, blank=True)
    extras = models.JSONField(default=list, blank=True)

    printed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name="order_item_quantity_positive",
            ),
        ]

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity}x {self.name}"
