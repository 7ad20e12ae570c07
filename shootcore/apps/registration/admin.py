from __future__ import annotations

from django.contrib import admin

from .models import Registration


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ("athlete", "tournament", "team", "disciplines_list", "created_at")
    list_filter = ("tournament",)
    search_fields = ("athlete__first_name", "athlete__last_name", "athlete__shooter_id")
    raw_id_fields = ("athlete", "tournament", "team")
    filter_horizontal = ("disciplines",)

    def disciplines_list(self, obj: Registration) -> str:
        return ", ".join(td.discipline.name for td in obj.disciplines.select_related("discipline"))
    disciplines_list.short_description = "Disciplinas"
