from __future__ import annotations

from django.db import models

from shootcore.apps.events.models import Discipline, Tournament


class LeaderboardSnapshot(models.Model):
    """Leaderboard materializado; se recalcula con refresh_snapshot, nunca se edita a mano."""
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="leaderboard_snapshots")
    discipline = models.ForeignKey(Discipline, on_delete=models.CASCADE)
    group_by = models.CharField(max_length=64, help_text="Claves de agrupación separadas por coma.")
    rows = models.JSONField(default=list)
    computed_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("tournament", "discipline", "group_by")
        constraints = [
            models.UniqueConstraint(fields=("tournament", "discipline", "group_by"), name="uniq_leaderboard_snapshot"),
        ]

    def __str__(self) -> str:
        return f"{self.tournament} · {self.discipline} · [{self.group_by}]"
