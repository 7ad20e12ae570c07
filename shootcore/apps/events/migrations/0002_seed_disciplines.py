from django.db import migrations

DISCIPLINES = [
    ("skeet", "Skeet", "NSSA"),
    ("trap", "Trap", "ATA"),
    ("sporting_clays", "Sporting Clays", "NSCA"),
]


def seed_disciplines(apps, schema_editor):
    Discipline = apps.get_model("events", "Discipline")
    db = schema_editor.connection.alias
    for name, display_name, body in DISCIPLINES:
        Discipline.objects.using(db).get_or_create(
            name=name, defaults={"display_name": display_name, "governing_body": body}
        )


class Migration(migrations.Migration):

    dependencies = [
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_disciplines, migrations.RunPython.noop),
    ]
