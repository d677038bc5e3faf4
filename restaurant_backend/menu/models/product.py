# menu/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    A sellable menu item.

    Order lines copy name and price at add-time, so editing a product
    never rewrites historical orders.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)

    price = models.DecimalField(max_digits=12, decimal_places=2)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["restaurant", "is_active"], name="menu_product_active_idx"),
        ]

    def clean(self):
        if self.price is None or self.price < Decimal("0"):
            raise ValidationError({"price": "Price must be non-negative."})

    def __str__(self):
        return self.name


class ProductExtra(models.Model):
    """
    An add-on (extra cheese, bacon...) selectable on any product of the
    restaurant. Its price is added per unit to the order line.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="product_extras",
    )

    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        if self.price is None or self.price < Decimal("0"):
            raise ValidationError({"price": "Price must be non-negative."})

    def __str__(self):
        return f"{self.name} (+{self.price})"
