from datetime import date, time, timedelta

from django.test import TestCase

from shootcore.apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from shootcore.apps.core.tests import factories as f
from shootcore.apps.events.models import TimeSlot, Tournament
from shootcore.apps.events.services.schedule import create_time_slot, delete_time_slot, generate_time_slots
from shootcore.apps.events.services.squads import create_squad
from shootcore.apps.events.services.tournaments import (
    create_tournament,
    resolve_discipline,
    set_status,
    update_tournament_dates,
)


class TournamentTests(TestCase):
    def test_create_tournament(self):
        t = create_tournament(
            "Spring Open", start_date=date(2025, 4, 5), end_date=date(2025, 4, 6), disciplines={"skeet": 3, "trap": 1}
        )
        self.assertEqual(t.slug, "spring-open")
        self.assertEqual(t.rounds_for(f.discipline("skeet")), 3)
        self.assertIsNone(t.rounds_for(f.discipline("sporting_clays")))

        again = create_tournament("Spring Open", start_date=date(2025, 4, 5), end_date=date(2025, 4, 5), disciplines=["trap"])
        self.assertEqual(again.slug, "spring-open-2")

    def test_create_tournament_rejects_bad_input(self):
        start = date(2025, 4, 5)
        with self.assertRaises(ValidationError):
            create_tournament("", start_date=start, end_date=start, disciplines=["skeet"])
        with self.assertRaises(ValidationError):
            create_tournament("X", start_date=start, end_date=start - timedelta(days=1), disciplines=["skeet"])
        with self.assertRaises(ValidationError):
            create_tournament("X", start_date=start, end_date=start, disciplines=[])
        with self.assertRaises(ValidationError):
            create_tournament("X", start_date=start, end_date=start, disciplines={"skeet": 0})
        self.assertFalse(Tournament.objects.filter(name="X").exists())

    def test_resolve_discipline_variants(self):
        clays = f.discipline("sporting_clays")
        self.assertEqual(resolve_discipline("Sporting Clays"), clays)
        self.assertEqual(resolve_discipline("sporting-clays"), clays)
        self.assertEqual(resolve_discipline(str(clays.pk)), clays)
        with self.assertRaises(ValidationError):
            resolve_discipline("bowling")

    def test_dates_frozen_once_squads_exist(self):
        t = f.tournament()
        t = update_tournament_dates(t, start_date=t.start_date, end_date=t.end_date + timedelta(days=1))
        create_squad(t, f.discipline(), 1)
        with self.assertRaises(ConflictError):
            update_tournament_dates(t, start_date=t.start_date, end_date=t.end_date + timedelta(days=1))

    def test_set_status(self):
        t = f.tournament()
        self.assertEqual(set_status(t, "active").status, "active")
        with self.assertRaises(ValidationError):
            set_status(t, "paused")


class TimeSlotTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.trap = f.discipline("trap")
        cls.t = f.tournament(disciplines={cls.skeet: 2})

    def test_create_slot_in_range(self):
        slot = create_time_slot(self.t, f.at(self.t, 9), 10, end_time=f.at(self.t, 10), field_number="F1")
        self.assertEqual(slot.capacity, 10)
        self.assertEqual(slot.occupancy(), 0)

    def test_slot_validation(self):
        with self.assertRaises(ValidationError):
            create_time_slot(self.t, f.at(self.t, 9), 0)
        with self.assertRaises(ValidationError):
            create_time_slot(self.t, f.at(self.t, 9, day_offset=5), 10)
        with self.assertRaises(ValidationError):
            create_time_slot(self.t, f.at(self.t, 9), 10, end_time=f.at(self.t, 8))
        with self.assertRaises(ValidationError):
            create_time_slot(self.t, f.at(self.t, 9), 10, discipline=self.trap)

    def test_generate_fills_only_whole_slots(self):
        slots = generate_time_slots(self.t, self.t.start_date, time(8, 0), time(10, 30), 60, 6, discipline=self.skeet)
        self.assertEqual(len(slots), 2)
        self.assertEqual([s.start_time for s in slots], [f.at(self.t, 8), f.at(self.t, 9)])
        self.assertTrue(all(s.discipline == self.skeet for s in slots))

    def test_generate_is_all_or_nothing(self):
        # el segundo día queda fuera del torneo
        with self.assertRaises(ValidationError):
            generate_time_slots(self.t, self.t.end_date + timedelta(days=1), time(8, 0), time(10, 0), 60, 6)
        with self.assertRaises(ValidationError):
            generate_time_slots(self.t, self.t.start_date, time(10, 0), time(8, 0), 60, 6)
        self.assertEqual(TimeSlot.objects.filter(tournament=self.t).count(), 0)

    def test_delete_slot(self):
        slot = create_time_slot(self.t, f.at(self.t, 9), 10)
        busy = create_time_slot(self.t, f.at(self.t, 10), 10)
        create_squad(self.t, self.skeet, 1, time_slot=busy)

        delete_time_slot(slot.pk)
        self.assertFalse(TimeSlot.objects.filter(pk=slot.pk).exists())
        with self.assertRaises(ConflictError):
            delete_time_slot(busy.pk)
        with self.assertRaises(NotFoundError):
            delete_time_slot(slot.pk)
