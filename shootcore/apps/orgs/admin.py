from __future__ import annotations

from django.contrib import admin

from .models import JoinRequest, Team, TeamCoach


class TeamCoachInline(admin.TabularInline):
    model = TeamCoach
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "affiliation", "is_individual_team", "tournament", "members_count", "created_at")
    list_filter = ("is_individual_team", "affiliation")
    search_fields = ("name",)
    raw_id_fields = ("tournament",)
    inlines = [TeamCoachInline]

    def members_count(self, obj: Team) -> int:
        return obj.athletes.count()
    members_count.short_description = "Miembros"


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ("athlete", "team", "status", "created_at", "responded_at")
    list_filter = ("status",)
    raw_id_fields = ("athlete", "team")
