from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Shoot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="shoots", to="accounts.athlete"
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="events.discipline"),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="shoots", to="events.tournament"
                    ),
                ),
            ],
            options={
                "ordering": ("tournament", "discipline", "athlete"),
                "unique_together": {("tournament", "athlete", "discipline")},
            },
        ),
        migrations.CreateModel(
            name="Score",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round_number", models.PositiveIntegerField()),
                ("station", models.PositiveIntegerField(default=1, help_text="Estación o grupo de estaciones.")),
                ("targets_thrown", models.PositiveIntegerField()),
                ("targets_hit", models.PositiveIntegerField()),
                (
                    "breakdown",
                    models.JSONField(blank=True, default=list, help_text="Aciertos por estación, ej. [5, 5, 4, 4, 5]."),
                ),
                ("field", models.CharField(blank=True, max_length=32)),
                ("time", models.CharField(blank=True, max_length=32)),
                ("notes", models.TextField(blank=True)),
                ("is_final", models.BooleanField(default=True)),
                ("source_key", models.CharField(blank=True, max_length=120)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "shoot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="scores", to="scoring.shoot"
                    ),
                ),
            ],
            options={
                "ordering": ("shoot", "round_number", "station"),
                "constraints": [
                    models.UniqueConstraint(fields=("shoot", "round_number", "station"), name="uniq_score_round_station"),
                    models.CheckConstraint(
                        condition=models.Q(("targets_hit__lte", models.F("targets_thrown"))),
                        name="score_hit_lte_thrown",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ScoreCorrection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_thrown", models.PositiveIntegerField()),
                ("previous_hit", models.PositiveIntegerField()),
                ("previous_breakdown", models.JSONField(blank=True, default=list)),
                ("new_thrown", models.PositiveIntegerField()),
                ("new_hit", models.PositiveIntegerField()),
                ("new_breakdown", models.JSONField(blank=True, default=list)),
                ("reason", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "corrected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "score",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="corrections", to="scoring.score"
                    ),
                ),
            ],
            options={"ordering": ("score", "created_at", "id")},
        ),
        migrations.CreateModel(
            name="ImportedScore",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round_number", models.PositiveIntegerField()),
                ("station", models.PositiveIntegerField(default=1)),
                ("shooter_name", models.CharField(max_length=160)),
                ("team_name", models.CharField(blank=True, max_length=160)),
                ("gender", models.CharField(blank=True, max_length=8)),
                ("division", models.CharField(blank=True, max_length=32)),
                ("targets_thrown", models.PositiveIntegerField()),
                ("targets_hit", models.PositiveIntegerField()),
                ("station_breakdown", models.CharField(blank=True, max_length=200)),
                ("field", models.CharField(blank=True, max_length=32)),
                ("time", models.CharField(blank=True, max_length=32)),
                ("notes", models.TextField(blank=True)),
                ("imported_at", models.DateTimeField(auto_now=True)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="imported_scores",
                        to="accounts.athlete",
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="events.discipline"),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="imported_scores",
                        to="events.tournament",
                    ),
                ),
            ],
            options={
                "ordering": ("tournament", "discipline", "shooter_name", "round_number", "station"),
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tournament", "athlete", "discipline", "round_number", "station"),
                        name="uniq_imported_score_key",
                    ),
                ],
            },
        ),
    ]
