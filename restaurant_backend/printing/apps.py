# printing/apps.py

from django.apps import AppConfig


class PrintingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "printing"
    verbose_name = "Printing"

    def ready(self):
        from orders.signals import order_status_changed
        from printing.receivers import print_when_sent_to_kitchen

        order_status_changed.connect(
            print_when_sent_to_kitchen,
            dispatch_uid="printing.print_when_sent_to_kitchen",
        )
