from __future__ import annotations

import random
from datetime import date, time, timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.text import slugify

from shootcore.apps.accounts.models import Athlete
from shootcore.apps.events.models import Discipline, Squad, Tournament
from shootcore.apps.events.services.schedule import generate_time_slots
from shootcore.apps.events.services.squads import auto_assign_squads, move_squad
from shootcore.apps.events.services.tournaments import create_tournament
from shootcore.apps.orgs.models import Team
from shootcore.apps.orgs.services import create_team
from shootcore.apps.registration.services import register
from shootcore.apps.scoring.services.ledger import record_score

GRADES = ["6", "7", "8", "9", "10", "11", "12", "college"]
TEAM_NAMES = ["Eagle Ridge", "Pine Valley", "Red Rock", "Stone Creek"]


def ensure_demo_user(username: str, email: str):
    User = get_user_model()
    user, _ = User.objects.get_or_create(username=username, defaults={"email": email})
    if not user.has_usable_password():
        user.set_password("Pass1234!")
        user.save()
    return user


class Command(BaseCommand):
    help = "Crea un torneo DEMO con equipos, atletas inscritos, TimeSlots y squads armados (y scores opcionales)."

    def add_arguments(self, parser):
        parser.add_argument("--name", type=str, default="Demo Clay Classic")
        parser.add_argument("--start", type=str, default="", help="Fecha de inicio YYYY-MM-DD (por defecto: +7 días)")
        parser.add_argument("--athletes-per-team", type=int, default=6)
        parser.add_argument("--individuals", type=int, default=3, help="Atletas sin equipo")
        parser.add_argument("--slot-capacity", type=int, default=10)
        parser.add_argument("--rounds", type=int, default=2)
        parser.add_argument("--seed-scores", action="store_true")

    @transaction.atomic
    def handle(self, *args, **opts):
        name: str = opts["name"]
        if Tournament.objects.filter(slug=slugify(name)).exists():
            raise CommandError(f"Ya existe un torneo con slug='{slugify(name)}'")
        start = date.fromisoformat(opts["start"]) if opts["start"] else date.today() + timedelta(days=7)
        rounds: int = opts["rounds"]

        disciplines = list(Discipline.objects.order_by("name"))
        if not disciplines:
            raise CommandError("No hay disciplinas cargadas; corre las migraciones primero.")

        # 1) Torneo
        t = create_tournament(
            name,
            start_date=start,
            end_date=start + timedelta(days=1),
            disciplines={d: rounds for d in disciplines},
            location="Demo Range",
        )
        self.stdout.write(self.style.SUCCESS(f"✓ Torneo creado: {t.slug}"))

        # 2) Equipos y atletas
        athletes: list[Athlete] = []
        rng = random.Random(42)
        teams = []
        for team_name in TEAM_NAMES:
            candidate = team_name
            n = 2
            while Team.objects.filter(is_individual_team=False, name__iexact=candidate).exists():
                candidate = f"{team_name} {n}"
                n += 1
            teams.append(create_team(candidate, affiliation="Demo"))
        for team in teams:
            for i in range(1, opts["athletes_per_team"] + 1):
                uname = f"ath_{t.slug}_{team.pk}_{i}"
                user = ensure_demo_user(uname, f"{uname}@example.com")
                athletes.append(Athlete.objects.create(
                    user=user,
                    first_name=f"Shooter{i}",
                    last_name=team.name.split()[0],
                    gender=rng.choice(["M", "F"]),
                    grade=rng.choice(GRADES),
                    team=team,
                ))
        for i in range(1, opts["individuals"] + 1):
            uname = f"ind_{t.slug}_{i}"
            user = ensure_demo_user(uname, f"{uname}@example.com")
            athletes.append(Athlete.objects.create(
                user=user, first_name=f"Solo{i}", last_name="Demo", gender=rng.choice(["M", "F"]), grade="college"
            ))
        self.stdout.write(self.style.SUCCESS(f"✓ {len(teams)} equipos y {len(athletes)} atletas"))

        # 3) Inscripciones (todas las disciplinas)
        for a in athletes:
            register(a, t, disciplines)
        self.stdout.write(self.style.SUCCESS("✓ Inscripciones creadas"))

        # 4) TimeSlots por disciplina y squads
        for d in disciplines:
            slots = generate_time_slots(
                t, start, time(8, 0), time(17, 0), 60, opts["slot_capacity"], discipline=d
            )
            slot_iter = iter(slots)
            for rn in range(1, rounds + 1):
                auto_assign_squads(t, d, rn)
                for squad in Squad.objects.filter(tournament=t, discipline=d, round_number=rn).order_by("id"):
                    slot = next(slot_iter, None)
                    if slot is None:
                        self.stdout.write(self.style.WARNING(f"• Sin TimeSlots libres para {squad}"))
                        break
                    move_squad(squad.pk, slot.pk)
        self.stdout.write(self.style.SUCCESS("✓ Squads armados y agendados"))

        # 5) Scores (si aplica)
        if opts["seed_scores"]:
            created = 0
            for d in disciplines:
                for rn in range(1, rounds + 1):
                    for a in athletes:
                        hit = rng.randint(12, 25)
                        record_score(a, t, d, rn, targets_thrown=25, targets_hit=hit)
                        created += 1
            self.stdout.write(self.style.SUCCESS(f"✓ {created} scores cargados"))

        self.stdout.write(self.style.SUCCESS("Listo."))
