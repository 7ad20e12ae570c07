from __future__ import annotations

from django.db import models

from shootcore.apps.events.models import Tournament, TournamentDiscipline


class Registration(models.Model):
    """
    Inscripción de un atleta en un torneo para un conjunto de disciplinas.
    Requisito previo para que el atleta aparezca en un squad de ese torneo.
    """
    athlete = models.ForeignKey("accounts.Athlete", on_delete=models.CASCADE, related_name="registrations")
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="registrations")
    disciplines = models.ManyToManyField(TournamentDiscipline, related_name="registrations")
    # Equipo con el que compite (real o el Individual del torneo)
    team = models.ForeignKey("orgs.Team", on_delete=models.SET_NULL, null=True, blank=True, related_name="registrations")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("athlete", "tournament"),)
        ordering = ("-created_at",)

    def __str__(self) -> str:
        return f"{self.athlete} · {self.tournament}"
