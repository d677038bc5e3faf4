# restaurants/models/table.py

import uuid

from django.db import models


class DiningTable(models.Model):
    """
    A numbered table on the floor.

    A table has no stored occupancy flag: it is occupied while it has a
    non-terminal order (see orders.services.order_lifecycle.get_active_order).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="tables",
    )

    number = models.PositiveIntegerField()
    name = models.CharField(max_length=100, blank=True)
    seats = models.PositiveSmallIntegerField(default=4)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["restaurant", "number"]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "number"],
                name="uniq_table_number_per_restaurant",
            ),
        ]

    @property
    def label(self) -> str:
        return self.name or f"Mesa {self.number}"

    def __str__(self):
        return f"{self.label} | {self.restaurant}"
