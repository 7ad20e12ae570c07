from __future__ import annotations

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils.text import slugify

from shootcore.apps.accounts.models import GOVERNING_BODIES


class Discipline(models.Model):
    """Formato de tiro (skeet, trap, ...). Global, no pertenece a un torneo."""
    name = models.SlugField(max_length=40, unique=True)
    display_name = models.CharField(max_length=80)
    governing_body = models.CharField(max_length=8, choices=GOVERNING_BODIES, blank=True)

    class Meta:
        ordering = ("display_name",)

    def __str__(self) -> str:
        return self.display_name


class Tournament(models.Model):
    STATUS_CHOICES = (
        ("upcoming", "Próximo"),
        ("active", "En curso"),
        ("completed", "Finalizado"),
    )

    name = models.CharField(max_length=160)
    slug = models.SlugField(unique=True)
    location = models.CharField(max_length=160, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="upcoming")
    disciplines = models.ManyToManyField(Discipline, through="TournamentDiscipline", related_name="tournaments")
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-start_date", "name")
        constraints = [
            models.CheckConstraint(condition=Q(start_date__lte=models.F("end_date")), name="tournament_dates_ordered"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("end_date no puede ser anterior a start_date")

    def save(self, *args, **kwargs):
        if not self.slug:
            base = slugify(self.name) or "torneo"
            slug = base
            i = 2
            while Tournament.objects.filter(slug=slug).exclude(pk=self.pk).exists():
                slug = f"{base}-{i}"
                i += 1
            self.slug = slug
        super().save(*args, **kwargs)

    def rounds_for(self, discipline) -> int | None:
        """Cantidad de rondas ofrecidas para la disciplina, o None si no se ofrece."""
        td = self.tournament_disciplines.filter(discipline=discipline).first()
        return td.rounds if td else None


class TournamentDiscipline(models.Model):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="tournament_disciplines")
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT)
    rounds = models.PositiveIntegerField(default=1)

    class Meta:
        unique_together = (("tournament", "discipline"),)
        ordering = ("tournament", "discipline__display_name")

    def __str__(self) -> str:
        return f"{self.tournament} · {self.discipline} ({self.rounds} rondas)"


class TimeSlot(models.Model):
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="time_slots")
    # Opcional: si se define, solo recibe squads de esa disciplina
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT, null=True, blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    capacity = models.PositiveIntegerField(help_text="Máximo de atletas entre todos sus squads.")
    field_number = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ("start_time", "id")
        constraints = [
            models.CheckConstraint(condition=Q(capacity__gt=0), name="timeslot_capacity_positive"),
        ]

    def __str__(self) -> str:
        where = f" · {self.field_number}" if self.field_number else ""
        return f"{self.tournament} · {self.start_time:%Y-%m-%d %H:%M}{where}"

    def occupancy(self) -> int:
        return SquadMember.objects.filter(squad__time_slot=self).count()


class Squad(models.Model):
    """
    Grupo de atletas que tira una (disciplina, ronda) en un TimeSlot.
    Estados: unscheduled (sin slot) → scheduled → moved → dissolved (borrado).
    """
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="squads")
    # RESTRICT: no se puede borrar un slot con squads, salvo que se borre el torneo entero
    time_slot = models.ForeignKey(
        TimeSlot, on_delete=models.RESTRICT, null=True, blank=True, related_name="squads"
    )
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT)
    round_number = models.PositiveIntegerField(default=1)
    name = models.CharField(max_length=80)
    capacity = models.PositiveIntegerField(default=5)
    team_only = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    moved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("tournament", "name", "id")
        constraints = [
            models.CheckConstraint(condition=Q(capacity__gt=0), name="squad_capacity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.name} · {self.discipline} R{self.round_number}"

    @property
    def status(self) -> str:
        if self.time_slot_id is None:
            return "unscheduled"
        if self.moved_at is not None:
            return "moved"
        return "scheduled"

    def clean(self):
        if self.time_slot_id and self.time_slot.tournament_id != self.tournament_id:
            raise ValidationError("El TimeSlot no pertenece al torneo del squad.")


class SquadMember(models.Model):
    """
    Atleta dentro de un squad. (tournament, discipline, round_number) se copian
    del squad para que la BD garantice que nadie tenga dos lugares en la
    misma disciplina-ronda.
    """
    squad = models.ForeignKey(Squad, on_delete=models.CASCADE, related_name="members")
    athlete = models.ForeignKey("accounts.Athlete", on_delete=models.CASCADE, related_name="squad_memberships")
    position = models.PositiveIntegerField(null=True, blank=True)
    tournament = models.ForeignKey(Tournament, on_delete=models.CASCADE, related_name="+")
    discipline = models.ForeignKey(Discipline, on_delete=models.PROTECT, related_name="+")
    round_number = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("squad", "position", "id")
        constraints = [
            models.UniqueConstraint(
                fields=("athlete", "tournament", "discipline", "round_number"),
                name="uniq_athlete_discipline_round",
            ),
            models.UniqueConstraint(fields=("squad", "athlete"), name="uniq_squad_athlete"),
        ]

    def __str__(self) -> str:
        return f"{self.squad} · {self.athlete}"

    def save(self, *args, **kwargs):
        self.tournament_id = self.squad.tournament_id
        self.discipline_id = self.squad.discipline_id
        self.round_number = self.squad.round_number
        super().save(*args, **kwargs)
