# cash_register/models/payment_method.py

import uuid

from django.db import models


class PaymentMethod(models.Model):
    """
    A way of paying (cash, credit, debit, pix...).

    The method with code "cash" is special: ledger entries produced for it
    carry no payment_method reference (absent means cash).
    """

    CASH_CODE = "cash"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.SlugField(max_length=32, unique=True)
    name = models.CharField(max_length=100)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    @property
    def is_cash(self) -> bool:
        return self.code == self.CASH_CODE

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().lower()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.name
