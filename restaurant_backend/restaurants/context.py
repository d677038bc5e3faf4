# restaurants/context.py

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter
from rest_framework import serializers

from restaurants.models import Restaurant

RESTAURANT_PARAM = OpenApiParameter(
    name="restaurant_id",
    type=str,
    required=False,
    description="Restaurant UUID. Defaults to the user's restaurant.",
)


def resolve_restaurant_from_request(*, request) -> Restaurant:
    """
    Resolve the restaurant context for till, order board and floor actions.

    Priority:
    1) request.query_params.restaurant_id
    2) request.data.restaurant_id
    3) request.user.restaurant_id
    """
    raw = (request.query_params.get("restaurant_id") or "").strip()
    if not raw:
        data = request.data if isinstance(request.data, dict) else {}
        raw = str(data.get("restaurant_id") or "").strip()

    if not raw:
        user_restaurant_id = getattr(request.user, "restaurant_id", None)
        if user_restaurant_id:
            return get_object_or_404(Restaurant, id=user_restaurant_id, is_active=True)

    if not raw:
        raise serializers.ValidationError(
            {"restaurant_id": "restaurant_id is required (no default restaurant on the user)."}
        )

    try:
        return get_object_or_404(Restaurant, id=raw, is_active=True)
    except DjangoValidationError as exc:
        raise serializers.ValidationError({"restaurant_id": "Invalid restaurant_id."}) from exc
