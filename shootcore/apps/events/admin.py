from __future__ import annotations

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from shootcore.apps.core.exceptions import ShootCoreError

from .models import Discipline, Squad, SquadMember, TimeSlot, Tournament, TournamentDiscipline
from .services.squads import auto_assign_squads

# -----------------------------
# Discipline
# -----------------------------
@admin.register(Discipline)
class DisciplineAdmin(admin.ModelAdmin):
    list_display = ("name", "display_name", "governing_body")
    search_fields = ("name", "display_name")


# -----------------------------
# Tournament (+ disciplinas ofrecidas)
# -----------------------------
class TournamentDisciplineInline(admin.TabularInline):
    model = TournamentDiscipline
    extra = 0


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "start_date", "end_date", "location")
    search_fields = ("name", "slug")
    list_filter = ("status",)
    inlines = [TournamentDisciplineInline]
    actions = ["action_auto_assign"]

    @admin.action(description=_("Armar squads automáticamente (ronda 1, todas las disciplinas)"))
    def action_auto_assign(self, request, queryset):
        for t in queryset:
            for td in t.tournament_disciplines.select_related("discipline"):
                try:
                    r = auto_assign_squads(t, td.discipline, 1)
                except ShootCoreError as e:
                    self.message_user(request, f"{t} · {td.discipline}: {e.detail}", level=messages.ERROR)
                    continue
                self.message_user(
                    request,
                    f"{t} · {td.discipline}: {r['assignments']} asignaciones, {r['squads_created']} squads nuevos.",
                    level=messages.SUCCESS,
                )


# -----------------------------
# TimeSlot
# -----------------------------
@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    list_display = ("tournament", "start_time", "end_time", "discipline", "capacity", "field_number")
    list_filter = ("tournament", "discipline")
    ordering = ("tournament", "start_time")


# -----------------------------
# Squad (+ miembros)
# -----------------------------
class SquadMemberInline(admin.TabularInline):
    model = SquadMember
    extra = 0
    raw_id_fields = ["athlete"]
    fields = ["athlete", "position"]
    ordering = ("position",)


@admin.register(Squad)
class SquadAdmin(admin.ModelAdmin):
    list_display = ("name", "tournament", "discipline", "round_number", "time_slot", "capacity", "team_only")
    list_filter = ("tournament", "discipline", "round_number")
    search_fields = ("name",)
    raw_id_fields = ("time_slot",)
    inlines = [SquadMemberInline]
