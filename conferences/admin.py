from django.contrib import admin

from conferences.models import Conference, Registration


@admin.register(Conference)
class ConferenceAdmin(admin.ModelAdmin):
    list_display = ["name", "slug", "currency", "created_at"]
    search_fields = ["name", "slug"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["reference", "conference", "registration_fee", "status", "price_gross"]
    list_filter = ["status", "conference"]
    search_fields = ["reference"]
