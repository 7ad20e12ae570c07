from __future__ import annotations

from django.contrib import admin

from .models import ImportedScore, Score, ScoreCorrection, Shoot


class ScoreInline(admin.TabularInline):
    model = Score
    extra = 0
    fields = ["round_number", "station", "targets_thrown", "targets_hit", "breakdown", "is_final"]
    readonly_fields = fields
    can_delete = False


@admin.register(Shoot)
class ShootAdmin(admin.ModelAdmin):
    list_display = ("athlete", "tournament", "discipline", "date")
    list_filter = ("tournament", "discipline")
    raw_id_fields = ("athlete",)
    inlines = [ScoreInline]


@admin.register(Score)
class ScoreAdmin(admin.ModelAdmin):
    list_display = ("shoot", "round_number", "station", "targets_hit", "targets_thrown", "is_final", "updated_at")
    list_filter = ("is_final", "shoot__tournament", "shoot__discipline")
    # los cambios a un score final van por correct_score (deja auditoría)
    readonly_fields = ("shoot", "round_number", "station", "targets_thrown", "targets_hit", "breakdown", "source_key")


@admin.register(ScoreCorrection)
class ScoreCorrectionAdmin(admin.ModelAdmin):
    list_display = ("score", "previous_hit", "new_hit", "corrected_by", "created_at")
    readonly_fields = [f.name for f in ScoreCorrection._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ImportedScore)
class ImportedScoreAdmin(admin.ModelAdmin):
    list_display = ("shooter_name", "tournament", "discipline", "round_number", "targets_hit", "targets_thrown")
    list_filter = ("tournament", "discipline")
    search_fields = ("shooter_name", "team_name")
