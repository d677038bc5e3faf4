# printing/admin.py

from django.contrib import admin

from printing.models import PrinterConfig


@admin.register(PrinterConfig)
class PrinterConfigAdmin(admin.ModelAdmin):
    list_display = ("display_name", "printer_name", "restaurant", "host", "is_kitchen", "is_active")
    list_filter = ("restaurant", "is_kitchen", "is_active")
    search_fields = ("display_name", "printer_name", "host")
