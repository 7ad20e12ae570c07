from __future__ import annotations

from django.contrib import admin

from .models import Athlete


@admin.register(Athlete)
class AthleteAdmin(admin.ModelAdmin):
    list_display = ("display_name", "shooter_id", "gender", "division", "team", "nsca_class", "ata_class", "nssa_class")
    list_filter = ("gender", "division_override", "team")
    search_fields = ("first_name", "last_name", "shooter_id", "user__username", "user__email")
    raw_id_fields = ("user", "team")

    def division(self, obj: Athlete) -> str:
        return obj.division
    division.short_description = "División"
