# restaurants/api/serializers.py

from rest_framework import serializers

from restaurants.models import DiningTable


class DiningTableSerializer(serializers.ModelSerializer):
    """
    Table numbers are unique per restaurant. The restaurant comes from the
    request context on create (serializer context "restaurant") and never
    changes afterwards.
    """

    label = serializers.CharField(read_only=True)

    class Meta:
        model = DiningTable
        fields = [
            "id",
            "restaurant",
            "number",
            "name",
            "label",
            "seats",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "restaurant", "label", "created_at"]

    def validate_number(self, value):
        restaurant = self.instance.restaurant if self.instance else self.context.get("restaurant")
        qs = DiningTable.objects.filter(restaurant=restaurant, number=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(f"Table {value} already exists in this restaurant.")
        return value


class CustomerNameInputSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=255, allow_blank=True, allow_null=True)
