from django.db import migrations

DEFAULT_METHODS = [
    ("cash", "Dinheiro"),
    ("credit", "Cartão de Crédito"),
    ("debit", "Cartão de Débito"),
    ("pix", "PIX"),
]


def seed_payment_methods(apps, schema_editor):
    PaymentMethod = apps.get_model("cash_register", "PaymentMethod")
    for code, name in DEFAULT_METHODS:
        PaymentMethod.objects.get_or_create(code=code, defaults={"name": name})


class Migration(migrations.Migration):

    dependencies = [
        ("cash_register", "0002_ledgerentry_order_links"),
    ]

    operations = [
        migrations.RunPython(seed_payment_methods, migrations.RunPython.noop),
    ]
