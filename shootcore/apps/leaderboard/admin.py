from django.contrib import admin

from .models import LeaderboardSnapshot


@admin.register(LeaderboardSnapshot)
class LeaderboardSnapshotAdmin(admin.ModelAdmin):
    list_display = ("tournament", "discipline", "group_by", "computed_at")
    list_filter = ("tournament", "discipline")
    readonly_fields = ("rows", "computed_at")
