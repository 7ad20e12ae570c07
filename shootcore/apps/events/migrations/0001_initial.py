from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Discipline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.SlugField(max_length=40, unique=True)),
                ("display_name", models.CharField(max_length=80)),
                (
                    "governing_body",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("NSCA", "NSCA (sporting clays)"),
                            ("ATA", "ATA (trap)"),
                            ("NSSA", "NSSA (skeet)"),
                        ],
                        max_length=8,
                    ),
                ),
            ],
            options={"ordering": ("display_name",)},
        ),
        migrations.CreateModel(
            name="Tournament",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("slug", models.SlugField(unique=True)),
                ("location", models.CharField(blank=True, max_length=160)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("upcoming", "Próximo"), ("active", "En curso"), ("completed", "Finalizado")],
                        default="upcoming",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ("-start_date", "name")},
        ),
        migrations.CreateModel(
            name="TournamentDiscipline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rounds", models.PositiveIntegerField(default=1)),
                (
                    "discipline",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="events.discipline"),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tournament_disciplines",
                        to="events.tournament",
                    ),
                ),
            ],
            options={
                "ordering": ("tournament", "discipline__display_name"),
                "unique_together": {("tournament", "discipline")},
            },
        ),
        migrations.AddField(
            model_name="tournament",
            name="disciplines",
            field=models.ManyToManyField(
                related_name="tournaments", through="events.TournamentDiscipline", to="events.discipline"
            ),
        ),
        migrations.AddConstraint(
            model_name="tournament",
            constraint=models.CheckConstraint(
                condition=models.Q(("start_date__lte", models.F("end_date"))), name="tournament_dates_ordered"
            ),
        ),
        migrations.CreateModel(
            name="TimeSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("capacity", models.PositiveIntegerField(help_text="Máximo de atletas entre todos sus squads.")),
                ("field_number", models.CharField(blank=True, max_length=32)),
                ("notes", models.TextField(blank=True)),
                (
                    "discipline",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, to="events.discipline"
                    ),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="time_slots", to="events.tournament"
                    ),
                ),
            ],
            options={
                "ordering": ("start_time", "id"),
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("capacity__gt", 0)), name="timeslot_capacity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Squad",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("round_number", models.PositiveIntegerField(default=1)),
                ("name", models.CharField(max_length=80)),
                ("capacity", models.PositiveIntegerField(default=5)),
                ("team_only", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("moved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "discipline",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="events.discipline"),
                ),
                (
                    "time_slot",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="squads",
                        to="events.timeslot",
                    ),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="squads", to="events.tournament"
                    ),
                ),
            ],
            options={
                "ordering": ("tournament", "name", "id"),
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("capacity__gt", 0)), name="squad_capacity_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SquadMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField(blank=True, null=True)),
                ("round_number", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "athlete",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="squad_memberships",
                        to="accounts.athlete",
                    ),
                ),
                (
                    "discipline",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to="events.discipline"
                    ),
                ),
                (
                    "squad",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="members", to="events.squad"
                    ),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="+", to="events.tournament"
                    ),
                ),
            ],
            options={
                "ordering": ("squad", "position", "id"),
                "constraints": [
                    models.UniqueConstraint(
                        fields=("athlete", "tournament", "discipline", "round_number"),
                        name="uniq_athlete_discipline_round",
                    ),
                    models.UniqueConstraint(fields=("squad", "athlete"), name="uniq_squad_athlete"),
                ],
            },
        ),
    ]
