from __future__ import annotations

from django.contrib.auth.models import User
from django.db import models

from .divisions import DIVISION_CHOICES, effective_division

GOVERNING_BODIES = (
    ("NSCA", "NSCA (sporting clays)"),
    ("ATA", "ATA (trap)"),
    ("NSSA", "NSSA (skeet)"),
)

CLASS_FIELDS = {
    "NSCA": "nsca_class",
    "ATA": "ata_class",
    "NSSA": "nssa_class",
}


class Athlete(models.Model):
    GENDER_CHOICES = (
        ("M", "Masculino"),
        ("F", "Femenino"),
    )
    CLASS_CHOICES = tuple((c, c) for c in ("A", "B", "C", "D", "E"))

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="athlete")
    first_name = models.CharField(max_length=80, blank=True)
    last_name = models.CharField(max_length=80, blank=True)
    shooter_id = models.CharField(max_length=32, unique=True, null=True, blank=True)
    gender = models.CharField(max_length=1, choices=GENDER_CHOICES, null=True, blank=True)
    grade = models.CharField(max_length=16, blank=True)
    division_override = models.CharField(max_length=32, choices=DIVISION_CHOICES, blank=True)
    team = models.ForeignKey(
        "orgs.Team", on_delete=models.SET_NULL, null=True, blank=True, related_name="athletes"
    )

    # Clasificación por organismo (la escribe la política de clasificación)
    nsca_class = models.CharField(max_length=1, choices=CLASS_CHOICES, blank=True)
    ata_class = models.CharField(max_length=1, choices=CLASS_CHOICES, blank=True)
    nssa_class = models.CharField(max_length=1, choices=CLASS_CHOICES, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("last_name", "first_name", "id")

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        if full:
            return full
        return self.user.get_full_name() or self.user.username

    @property
    def division(self) -> str:
        return effective_division(self.grade, self.division_override)

    def class_for(self, governing_body: str) -> str:
        field = CLASS_FIELDS.get((governing_body or "").upper())
        return getattr(self, field, "") if field else ""
