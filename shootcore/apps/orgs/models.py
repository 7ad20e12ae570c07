from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q


class Team(models.Model):
    """
    Equipo real o pseudo-equipo "Individual" (uno por torneo, creado a demanda
    para atletas sin equipo). El equipo no es dueño de la identidad del atleta.
    """
    name = models.CharField(max_length=160)
    affiliation = models.CharField(max_length=80, blank=True)
    is_individual_team = models.BooleanField(default=False)
    tournament = models.ForeignKey(
        "events.Tournament", on_delete=models.CASCADE, null=True, blank=True, related_name="individual_teams"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name", "id")
        constraints = [
            # Nombre único entre equipos reales
            models.UniqueConstraint(
                fields=("name",), condition=Q(is_individual_team=False), name="uniq_team_name"
            ),
            # A lo sumo un equipo Individual por torneo
            models.UniqueConstraint(
                fields=("tournament",), condition=Q(is_individual_team=True), name="uniq_individual_team_per_tournament"
            ),
            models.CheckConstraint(
                condition=Q(is_individual_team=False) | Q(tournament__isnull=False),
                name="individual_team_has_tournament",
            ),
        ]

    def __str__(self) -> str:
        if self.is_individual_team:
            return f"Individual · {self.tournament}"
        return self.name


class TeamCoach(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="coaches")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="coached_teams")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("team", "user"),)

    def __str__(self) -> str:
        return f"{self.user} · {self.team}"


class JoinRequest(models.Model):
    STATUS_CHOICES = (
        ("PENDING", "Pendiente"),
        ("APPROVED", "Aprobada"),
        ("REJECTED", "Rechazada"),
    )

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="join_requests")
    athlete = models.ForeignKey("accounts.Athlete", on_delete=models.CASCADE, related_name="join_requests")
    message = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="PENDING")
    created_at = models.DateTimeField(auto_now_add=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(
                fields=("team", "athlete"), condition=Q(status="PENDING"), name="uniq_pending_join_request"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.athlete} → {self.team} ({self.status})"
