# menu/tests/test_menu.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from menu.models import Product, ProductExtra
from restaurants.models import Restaurant


class MenuModelTests(TestCase):
    def setUp(self):
        self.restaurant = Restaurant.objects.create(name="Cantina")

    def test_negative_product_price_rejected(self):
        product = Product(restaurant=self.restaurant, name="Erro", price=Decimal("-1.00"))
        with self.assertRaises(ValidationError):
            product.full_clean()

    def test_free_extra_is_valid(self):
        extra = ProductExtra(restaurant=self.restaurant, name="Gelo")
        extra.full_clean()
        self.assertEqual(extra.price, Decimal("0.00"))

    def test_negative_extra_price_rejected(self):
        extra = ProductExtra(restaurant=self.restaurant, name="Desconto", price=Decimal("-0.50"))
        with self.assertRaises(ValidationError):
            extra.full_clean()
