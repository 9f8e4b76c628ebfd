from django.contrib import admin

from registration_fees.models import RegistrationFee


@admin.register(RegistrationFee)
class RegistrationFeeAdmin(admin.ModelAdmin):
    list_display = [
        "name",
        "conference",
        "valid_from",
        "valid_to",
        "price_gross",
        "currency",
        "capacity",
        "is_active",
        "display_order",
    ]
    list_filter = ["conference", "is_active"]
    search_fields = ["name"]
    ordering = ["conference", "display_order"]
