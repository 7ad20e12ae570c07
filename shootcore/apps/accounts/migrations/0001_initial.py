from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

CLASS_CHOICES = [("A", "A"), ("B", "B"), ("C", "C"), ("D", "D"), ("E", "E")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Athlete",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(blank=True, max_length=80)),
                ("last_name", models.CharField(blank=True, max_length=80)),
                ("shooter_id", models.CharField(blank=True, max_length=32, null=True, unique=True)),
                (
                    "gender",
                    models.CharField(
                        blank=True, choices=[("M", "Masculino"), ("F", "Femenino")], max_length=1, null=True
                    ),
                ),
                ("grade", models.CharField(blank=True, max_length=16)),
                (
                    "division_override",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Novice", "Novice"),
                            ("Intermediate", "Intermediate"),
                            ("Junior Varsity", "Junior Varsity"),
                            ("Varsity", "Varsity"),
                            ("Collegiate", "Collegiate"),
                            ("Open", "Open"),
                            ("Unassigned", "Unassigned"),
                        ],
                        max_length=32,
                    ),
                ),
                ("nsca_class", models.CharField(blank=True, choices=CLASS_CHOICES, max_length=1)),
                ("ata_class", models.CharField(blank=True, choices=CLASS_CHOICES, max_length=1)),
                ("nssa_class", models.CharField(blank=True, choices=CLASS_CHOICES, max_length=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="athlete",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ("last_name", "first_name", "id"),
            },
        ),
    ]
