# printing/api/views.py

"""
PATH: printing/api/views.py

PRINTER CONFIG API

    GET    /api/printers/?restaurant_id=&is_kitchen=&is_active=
    POST   /api/printers/
    GET    /api/printers/<id>/
    PATCH  /api/printers/<id>/
    DELETE /api/printers/<id>/

Security:
- restaurant.configure for every action
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ModelViewSet

from permissions.roles import CAP_RESTAURANT_CONFIGURE, HasCapability
from printing.api.serializers import PrinterConfigSerializer
from printing.models import PrinterConfig
from restaurants.context import RESTAURANT_PARAM, resolve_restaurant_from_request


@extend_schema(tags=["printers"])
class PrinterConfigViewSet(ModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_RESTAURANT_CONFIGURE
    serializer_class = PrinterConfigSerializer
    filterset_fields = ["is_kitchen", "is_active"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = PrinterConfig.objects.select_related("restaurant")
        if self.action == "list":
            restaurant = resolve_restaurant_from_request(request=self.request)
            qs = qs.filter(restaurant=restaurant)
        return qs.order_by("display_name")

    @extend_schema(parameters=[RESTAURANT_PARAM])
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(restaurant=resolve_restaurant_from_request(request=self.request))
