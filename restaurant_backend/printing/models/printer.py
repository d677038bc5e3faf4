# printing/models/printer.py

import uuid

from django.db import models


class PrinterConfig(models.Model):
    """
    A thermal printer reachable through the local print daemon.

    printer_name is the name the daemon knows the device by.
    host (ip address or base URL) and endpoint are optional; without a host
    the global PRINT_SERVER_URL is used.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    restaurant = models.ForeignKey(
        "restaurants.Restaurant",
        on_delete=models.CASCADE,
        related_name="printers",
    )

    display_name = models.CharField(max_length=100)
    printer_name = models.CharField(max_length=255)

    host = models.CharField(max_length=255, blank=True, default="")
    endpoint = models.CharField(max_length=100, blank=True, default="/print")

    is_kitchen = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["display_name"]

    def __str__(self):
        return f"{self.display_name} ({self.printer_name})"
