from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models
from django.db.models import F, Q

from shootcore.apps.events.models import Discipline, Tournament


class Shoot(models.Model):
    """Participación de un atleta en una disciplina de un torneo; los Scores cuelgan de aquí."""
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="shoots")
    athlete = models.ForeignKey("accounts.Athlete", on_delete=models.CASCADE, related_name="shoots")
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT)
    date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("tournament", "athlete", "discipline"),)
        ordering = ("tournament", "discipline", "athlete")

    def __str__(self) -> str:
        return f"{self.athlete} · {self.discipline} · {self.tournament}"


class Score(models.Model):
    """
    Resultado de una ronda/estación. Clave (shoot, round_number, station):
    reescribir la misma clave es un upsert, no un duplicado.
    Una vez final solo cambia vía ScoreCorrection.
    """
    shoot = models.ForeignKey(Shoot, on_delete=models.CASCADE, related_name="scores")
    round_number = models.PositiveIntegerField()
    station = models.PositiveIntegerField(default=1, help_text="Estación o grupo de estaciones.")
    targets_thrown = models.PositiveIntegerField()
    targets_hit = models.PositiveIntegerField()
    breakdown = models.JSONField(default=list, blank=True, help_text="Aciertos por estación, ej. [5, 5, 4, 4, 5].")
    field = models.CharField(max_length=32, blank=True)
    time = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)
    is_final = models.BooleanField(default=True)
    source_key = models.CharField(max_length=120, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("shoot", "round_number", "station")
        constraints = [
            models.UniqueConstraint(fields=("shoot", "round_number", "station"), name="uniq_score_round_station"),
            models.CheckConstraint(condition=Q(targets_hit__lte=F("targets_thrown")), name="score_hit_lte_thrown"),
        ]

    def __str__(self) -> str:
        return f"{self.shoot} · R{self.round_number} E{self.station} = {self.targets_hit}/{self.targets_thrown}"


class ScoreCorrection(models.Model):
    """Auditoría append-only: cada corrección guarda el valor anterior y el nuevo."""
    score = models.ForeignKey(Score, on_delete=models.CASCADE, related_name="corrections")
    previous_thrown = models.PositiveIntegerField()
    previous_hit = models.PositiveIntegerField()
    previous_breakdown = models.JSONField(default=list, blank=True)
    new_thrown = models.PositiveIntegerField()
    new_hit = models.PositiveIntegerField()
    new_breakdown = models.JSONField(default=list, blank=True)
    reason = models.TextField()
    corrected_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("score", "created_at", "id")

    def __str__(self) -> str:
        return f"{self.score_id}: {self.previous_hit}/{self.previous_thrown} → {self.new_hit}/{self.new_thrown}"


class ImportedScore(models.Model):
    """
    Foto desnormalizada de una fila importada (para mostrar/exportar).
    Se deriva de Score; nunca es la fuente de verdad.
    """
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="imported_scores")
    athlete = models.ForeignKey("accounts.Athlete", on_delete=models.CASCADE, related_name="imported_scores")
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT)
    round_number = models.PositiveIntegerField()
    station = models.PositiveIntegerField(default=1)

    shooter_name = models.CharField(max_length=160)
    team_name = models.CharField(max_length=160, blank=True)
    gender = models.CharField(max_length=8, blank=True)
    division = models.CharField(max_length=32, blank=True)
    targets_thrown = models.PositiveIntegerField()
    targets_hit = models.PositiveIntegerField()
    station_breakdown = models.CharField(max_length=200, blank=True)
    field = models.CharField(max_length=32, blank=True)
    time = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)
    imported_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("tournament", "discipline", "shooter_name", "round_number", "station")
        constraints = [
            models.UniqueConstraint(
                fields=("tournament", "athlete", "discipline", "round_number", "station"),
                name="uniq_imported_score_key",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.shooter_name} · {self.discipline} R{self.round_number} = {self.targets_hit}/{self.targets_thrown}"
