# printing/api/serializers.py

from urllib.parse import urlsplit

from rest_framework import serializers

from printing.models import PrinterConfig
from printing.services.dispatch import print_url


class PrinterConfigSerializer(serializers.ModelSerializer):
    print_url = serializers.SerializerMethodField()

    class Meta:
        model = PrinterConfig
        fields = [
            "id",
            "restaurant",
            "display_name",
            "printer_name",
            "host",
            "endpoint",
            "is_kitchen",
            "is_active",
            "print_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "restaurant", "print_url", "created_at", "updated_at"]

    def get_print_url(self, obj) -> str:
        return print_url(obj)

    def validate_host(self, value):
        value = (value or "").strip()
        if not value:
            return ""

        base = value if "://" in value else f"https://{value}"
        try:
            parts = urlsplit(base)
            parts.port  # raises on a non-numeric or out-of-range port
        except ValueError as exc:
            raise serializers.ValidationError("Invalid printer host.") from exc
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise serializers.ValidationError("Invalid printer host.")
        return value

    def validate_endpoint(self, value):
        value = (value or "").strip()
        if not value:
            return "/print"
        if any(ch.isspace() for ch in value):
            raise serializers.ValidationError("Endpoint cannot contain spaces.")
        return value if value.startswith("/") else f"/{value}"
