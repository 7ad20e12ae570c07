from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="LeaderboardSnapshot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("group_by", models.CharField(help_text="Claves de agrupación separadas por coma.", max_length=64)),
                ("rows", models.JSONField(default=list)),
                ("computed_at", models.DateTimeField(auto_now=True)),
                (
                    "discipline",
                    models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="events.discipline"),
                ),
                (
                    "tournament",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="leaderboard_snapshots",
                        to="events.tournament",
                    ),
                ),
            ],
            options={
                "ordering": ("tournament", "discipline", "group_by"),
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tournament", "discipline", "group_by"), name="uniq_leaderboard_snapshot"
                    ),
                ],
            },
        ),
    ]
