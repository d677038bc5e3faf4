import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("restaurants", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PrinterConfig",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("display_name", models.CharField(max_length=100)),
                ("printer_name", models.CharField(max_length=255)),
                ("host", models.CharField(blank=True, default="", max_length=255)),
                ("endpoint", models.CharField(blank=True, default="/print", max_length=100)),
                ("is_kitchen", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="printers",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "ordering": ["display_name"],
            },
        ),
    ]
