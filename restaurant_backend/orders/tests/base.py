# orders/tests/base.py

"""
Shared seeding for order tests:
- one restaurant with table 4
- a burger (30.00), a soda (5.00) and a bacon extra (4.00)
- the seeded payment methods
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase

from cash_register.models import PaymentMethod
from menu.models import Product, ProductExtra
from orders.services.order_lifecycle import open_order
from restaurants.models import DiningTable, Restaurant

User = get_user_model()


class OrderBaseTestCase(TestCase):
    def setUp(self):
        self.restaurant = Restaurant.objects.create(name="Cantina")
        self.table = DiningTable.objects.create(restaurant=self.restaurant, number=4)

        self.cashier = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            role="cashier",
            restaurant=self.restaurant,
        )

        self.burger = Product.objects.create(
            restaurant=self.restaurant,
            name="X-Burger",
            category="Lanches",
            price=Decimal("30.00"),
        )
        self.soda = Product.objects.create(
            restaurant=self.restaurant,
            name="Refrigerante",
            category="Bebidas",
            price=Decimal("5.00"),
        )
        self.bacon = ProductExtra.objects.create(
            restaurant=self.restaurant,
            name="Bacon",
            price=Decimal("4.00"),
        )

        self.cash = _method("cash", "Dinheiro")
        self.credit = _method("credit", "Cartão de Crédito")
        self.debit = _method("debit", "Cartão de Débito")
        self.pix = _method("pix", "PIX")

    def _open_order(self, **kwargs):
        order, _ = open_order(table=self.table, actor=self.cashier, **kwargs)
        return order


def _method(code: str, name: str) -> PaymentMethod:
    method, _ = PaymentMethod.objects.get_or_create(code=code, defaults={"name": name})
    return method
