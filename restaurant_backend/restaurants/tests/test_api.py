# restaurants/tests/test_api.py

"""
FLOOR (TABLES) API TESTS

Run with:
    python manage.py test restaurants -v 2
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.services.order_lifecycle import change_status, open_order
from restaurants.models import DiningTable, Restaurant

User = get_user_model()


class TableAPITestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.restaurant = Restaurant.objects.create(name="Cantina")
        self.other = Restaurant.objects.create(name="Boteco")

        self.manager = User.objects.create_user(
            email="manager@example.com", password="pass", role="manager", restaurant=self.restaurant
        )
        self.waiter = User.objects.create_user(
            email="waiter@example.com", password="pass", role="waiter", restaurant=self.restaurant
        )

        self.table_2 = DiningTable.objects.create(restaurant=self.restaurant, number=2)
        self.table_1 = DiningTable.objects.create(restaurant=self.restaurant, number=1, name="Varanda")
        DiningTable.objects.create(restaurant=self.other, number=1)


class TableCrudTests(TableAPITestCase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.manager)

    def test_list_is_scoped_and_ordered_by_number(self):
        response = self.client.get(reverse("table-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual([row["number"] for row in response.data["results"]], [1, 2])
        self.assertEqual(response.data["results"][0]["label"], "Varanda")
        self.assertEqual(response.data["results"][1]["label"], "Mesa 2")

    def test_create_uses_request_restaurant(self):
        response = self.client.post(reverse("table-list"), {"number": 3, "seats": 6}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        table = DiningTable.objects.get(pk=response.data["id"])
        self.assertEqual(table.restaurant, self.restaurant)
        self.assertEqual(table.seats, 6)

    def test_duplicate_number_rejected(self):
        response = self.client.post(reverse("table-list"), {"number": 2}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("number", response.data)

    def test_same_number_allowed_when_renaming_in_place(self):
        response = self.client.patch(
            reverse("table-detail", args=[self.table_2.pk]),
            {"number": 2, "name": "Janela"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["label"], "Janela")

    def test_delete_unused_table(self):
        response = self.client.delete(reverse("table-detail", args=[self.table_2.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DiningTable.objects.filter(pk=self.table_2.pk).exists())

    def test_delete_table_with_history_conflicts(self):
        order, _ = open_order(table=self.table_2)
        change_status(order=order, target_status=Order.Status.CANCELLED)

        response = self.client.delete(reverse("table-detail", args=[self.table_2.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "TABLE_IN_USE")
        self.assertTrue(DiningTable.objects.filter(pk=self.table_2.pk).exists())


class TablePermissionTests(TableAPITestCase):
    def test_waiter_reads_floor_but_cannot_edit(self):
        self.client.force_authenticate(user=self.waiter)

        self.assertEqual(self.client.get(reverse("table-list")).status_code, status.HTTP_200_OK)
        created = self.client.post(reverse("table-list"), {"number": 8}, format="json")
        self.assertEqual(created.status_code, status.HTTP_403_FORBIDDEN)
        deleted = self.client.delete(reverse("table-detail", args=[self.table_2.pk]))
        self.assertEqual(deleted.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_rejected(self):
        response = self.client.get(reverse("table-list"))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class TableCustomerNameTests(TableAPITestCase):
    def setUp(self):
        super().setUp()
        self.client.force_authenticate(user=self.waiter)
        self.url = reverse("table-customer-name", args=[self.table_1.pk])

    def test_names_the_open_tab(self):
        order, _ = open_order(table=self.table_1)

        response = self.client.post(self.url, {"customer_name": "  Ana  "}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], str(order.pk))
        order.refresh_from_db()
        self.assertEqual(order.customer_name, "Ana")

    def test_blank_name_clears_it(self):
        order, _ = open_order(table=self.table_1, customer_name="Ana")

        response = self.client.post(self.url, {"customer_name": ""}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertIsNone(order.customer_name)

    def test_table_without_open_order_conflicts(self):
        response = self.client.post(self.url, {"customer_name": "Ana"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "NO_ACTIVE_ORDER")
