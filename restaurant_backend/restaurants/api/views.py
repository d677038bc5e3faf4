# restaurants/api/views.py

"""
PATH: restaurants/api/views.py

FLOOR (TABLES) API

    GET    /api/tables/?restaurant_id=&is_active=
    POST   /api/tables/                          {number, name, seats, restaurant_id}
    GET    /api/tables/<id>/
    PATCH  /api/tables/<id>/
    DELETE /api/tables/<id>/                     only tables that never had an order
    POST   /api/tables/<id>/customer-name/       {customer_name} on the open tab

Security:
- reading the floor and naming the customer: orders.take
- creating, editing and removing tables: restaurant.configure
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet

from backend.errors import domain_error_response, error_response
from orders.api.serializers import OrderSerializer
from orders.services.exceptions import OrderError
from orders.services.order_lifecycle import set_customer_name
from permissions.roles import CAP_ORDERS_TAKE, CAP_RESTAURANT_CONFIGURE, HasCapability
from restaurants.api.serializers import CustomerNameInputSerializer, DiningTableSerializer
from restaurants.context import RESTAURANT_PARAM, resolve_restaurant_from_request
from restaurants.models import DiningTable


@extend_schema(tags=["tables"])
class DiningTableViewSet(ModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    serializer_class = DiningTableSerializer
    filterset_fields = ["is_active"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    action_capabilities = {
        "list": CAP_ORDERS_TAKE,
        "retrieve": CAP_ORDERS_TAKE,
        "customer_name": CAP_ORDERS_TAKE,
        "create": CAP_RESTAURANT_CONFIGURE,
        "partial_update": CAP_RESTAURANT_CONFIGURE,
        "destroy": CAP_RESTAURANT_CONFIGURE,
    }

    def get_required_capability(self):
        return self.action_capabilities.get(self.action)

    def get_queryset(self):
        qs = DiningTable.objects.select_related("restaurant")
        if self.action == "list":
            restaurant = resolve_restaurant_from_request(request=self.request)
            qs = qs.filter(restaurant=restaurant)
        return qs.order_by("number")

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.action == "create" and not getattr(self, "swagger_fake_view", False):
            context["restaurant"] = resolve_restaurant_from_request(request=self.request)
        return context

    @extend_schema(parameters=[RESTAURANT_PARAM])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(restaurant=serializer.context["restaurant"])

    def destroy(self, request, *args, **kwargs):
        table = self.get_object()
        if table.orders.exists():
            return error_response(
                code="TABLE_IN_USE",
                message=f"Table {table.number} has orders; deactivate it instead.",
                http_status=status.HTTP_409_CONFLICT,
            )
        table.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=CustomerNameInputSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["post"], url_path="customer-name")
    def customer_name(self, request, pk=None):
        table = self.get_object()
        s = CustomerNameInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            order = set_customer_name(
                table=table,
                customer_name=s.validated_data.get("customer_name"),
                actor=request.user,
            )
        except OrderError as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)
