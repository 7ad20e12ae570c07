from unittest import mock

from django.test import TestCase

from shootcore.apps.core.exceptions import ConflictError, ConsistencyError, NotFoundError, ValidationError
from shootcore.apps.core.tests import factories as f
from shootcore.apps.events.models import Squad, SquadMember
from shootcore.apps.events.services import squads
from shootcore.apps.events.services.schedule import create_time_slot
from shootcore.apps.events.services.squads import (
    assign_athlete_to_squad,
    auto_assign_squads,
    create_squad,
    dissolve_squad,
    move_squad,
    remove_athlete_from_squad,
    squad_payload,
)
from shootcore.apps.orgs.services import create_team
from shootcore.apps.registration.models import Registration
from shootcore.apps.registration.services import register


def squad_with(tournament, discipline, athletes, *, round_number=1, time_slot=None, **kwargs):
    squad = create_squad(tournament, discipline, round_number, time_slot=time_slot, **kwargs)
    for a in athletes:
        assign_athlete_to_squad(a.pk, squad.pk)
    return squad


class MoveSquadTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.t = f.tournament(disciplines={cls.skeet: 2})
        cls.athletes = [f.athlete() for _ in range(8)]
        for a in cls.athletes:
            register(a, cls.t, [cls.skeet])
        cls.t1 = create_time_slot(cls.t, f.at(cls.t, 9), 5)
        cls.t2 = create_time_slot(cls.t, f.at(cls.t, 10), 5)
        cls.s1 = squad_with(cls.t, cls.skeet, cls.athletes[:5], time_slot=cls.t1)
        cls.s2 = squad_with(cls.t, cls.skeet, cls.athletes[5:7])

    def test_move_into_empty_slot_then_overflow_is_rejected(self):
        payload = move_squad(self.s1.pk, self.t2.pk)
        self.assertEqual(payload["time_slot"]["id"], self.t2.pk)
        self.assertEqual(payload["status"], "moved")
        self.assertEqual(self.t2.occupancy(), 5)
        self.assertEqual(self.t1.occupancy(), 0)

        with self.assertRaises(ConflictError):
            move_squad(self.s2.pk, self.t2.pk)

        # T2 no cambió y S2 sigue sin slot
        self.assertEqual(list(Squad.objects.filter(time_slot=self.t2)), [self.s1])
        self.assertEqual(self.t2.occupancy(), 5)
        self.s2.refresh_from_db()
        self.assertIsNone(self.s2.time_slot_id)

    def test_first_placement_is_scheduled_not_moved(self):
        payload = move_squad(self.s2.pk, self.t2.pk)
        self.assertEqual(payload["status"], "scheduled")

    def test_move_to_same_slot_is_noop(self):
        before = Squad.objects.get(pk=self.s1.pk).moved_at
        move_squad(self.s1.pk, self.t1.pk)
        self.assertEqual(Squad.objects.get(pk=self.s1.pk).moved_at, before)

    def test_cross_tournament_move_is_inconsistent(self):
        other = f.tournament(disciplines={self.skeet: 1})
        foreign_slot = create_time_slot(other, f.at(other, 9), 50)
        with self.assertRaises(ConsistencyError):
            move_squad(self.s1.pk, foreign_slot.pk)
        self.s1.refresh_from_db()
        self.assertEqual(self.s1.time_slot_id, self.t1.pk)

    def test_slot_reserved_for_other_discipline(self):
        trap = f.discipline("trap")
        self.t.tournament_disciplines.create(discipline=trap, rounds=1)
        trap_slot = create_time_slot(self.t, f.at(self.t, 11), 10, discipline=trap)
        with self.assertRaises(ValidationError):
            move_squad(self.s2.pk, trap_slot.pk)

    def test_missing_entities(self):
        with self.assertRaises(NotFoundError):
            move_squad(999999, self.t2.pk)
        with self.assertRaises(NotFoundError):
            move_squad(self.s1.pk, 999999)
        with self.assertRaises(NotFoundError):
            move_squad(self.s1.pk, "abc")

    def test_both_slots_are_locked_in_pk_order(self):
        locked = squads._lock_time_slots(self.t2.pk, None, self.t1.pk)
        self.assertEqual(list(locked), sorted([self.t1.pk, self.t2.pk]))

        with mock.patch.object(squads, "_lock_time_slots", wraps=squads._lock_time_slots) as lock:
            move_squad(self.s1.pk, self.t2.pk)
        lock.assert_called_once_with(self.t1.pk, self.t2.pk)


class AssignTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.trap = f.discipline("trap")
        cls.t = f.tournament(disciplines={cls.skeet: 2, cls.trap: 1})
        cls.team_a = create_team("Eagle Ridge")
        cls.team_b = create_team("Pine Valley")
        cls.a1 = f.athlete(team=cls.team_a)
        cls.a2 = f.athlete(team=cls.team_a)
        cls.b1 = f.athlete(team=cls.team_b)
        cls.solo = f.athlete()
        for a in (cls.a1, cls.a2, cls.b1, cls.solo):
            register(a, cls.t, [cls.skeet])

    def test_unregistered_athlete_is_inconsistent(self):
        squad = create_squad(self.t, self.trap, 1)
        with self.assertRaises(ConsistencyError):
            assign_athlete_to_squad(self.a1.pk, squad.pk)

    def test_no_double_booking_in_same_round(self):
        s1 = create_squad(self.t, self.skeet, 1)
        s2 = create_squad(self.t, self.skeet, 1)
        s3 = create_squad(self.t, self.skeet, 2)
        assign_athlete_to_squad(self.a1.pk, s1.pk)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.a1.pk, s1.pk)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.a1.pk, s2.pk)
        # otra ronda sí
        assign_athlete_to_squad(self.a1.pk, s3.pk)
        self.assertEqual(SquadMember.objects.filter(athlete=self.a1).count(), 2)

    def test_squad_capacity(self):
        squad = create_squad(self.t, self.skeet, 1, capacity=2)
        assign_athlete_to_squad(self.a1.pk, squad.pk)
        assign_athlete_to_squad(self.a2.pk, squad.pk)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.b1.pk, squad.pk)

    def test_time_slot_capacity_counts_all_squads(self):
        slot = create_time_slot(self.t, f.at(self.t, 9), 2)
        s1 = squad_with(self.t, self.skeet, [self.a1, self.a2], time_slot=slot)
        s2 = create_squad(self.t, self.skeet, 1, time_slot=slot)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.b1.pk, s2.pk)
        self.assertEqual(s1.members.count(), 2)

    def test_team_only_squad(self):
        squad = create_squad(self.t, self.skeet, 1, team_only=True)
        assign_athlete_to_squad(self.a1.pk, squad.pk)
        assign_athlete_to_squad(self.a2.pk, squad.pk)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.b1.pk, squad.pk)
        with self.assertRaises(ConflictError):
            assign_athlete_to_squad(self.solo.pk, squad.pk)

    def test_round_must_be_offered(self):
        with self.assertRaises(ValidationError):
            create_squad(self.t, self.trap, 2)
        with self.assertRaises(ValidationError):
            create_squad(self.t, f.discipline("sporting_clays"), 1)
        with self.assertRaises(ValidationError):
            create_squad(self.t, self.skeet, 1, capacity=0)

    def test_remove_and_dissolve(self):
        squad = squad_with(self.t, self.skeet, [self.a1, self.a2])
        remove_athlete_from_squad(self.a1.pk, squad.pk)
        with self.assertRaises(NotFoundError):
            remove_athlete_from_squad(self.a1.pk, squad.pk)
        self.assertEqual(dissolve_squad(squad.pk), 1)
        self.assertFalse(Squad.objects.filter(pk=squad.pk).exists())
        # la inscripción sobrevive
        self.assertTrue(Registration.objects.filter(athlete=self.a2, tournament=self.t).exists())

    def test_payload_lists_members_in_position_order(self):
        squad = create_squad(self.t, self.skeet, 1)
        assign_athlete_to_squad(self.a2.pk, squad.pk, position=2)
        assign_athlete_to_squad(self.a1.pk, squad.pk, position=1)
        payload = squad_payload(squad)
        self.assertEqual([m["athlete"]["id"] for m in payload["members"]], [self.a1.pk, self.a2.pk])
        self.assertEqual(payload["status"], "unscheduled")


class AutoAssignTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.t = f.tournament(disciplines={cls.skeet: 1})
        team = create_team("Red Rock")
        cls.athletes = [f.athlete(team=team) for _ in range(4)] + [f.athlete() for _ in range(3)]
        for a in cls.athletes:
            register(a, cls.t, [cls.skeet])

    def test_fills_existing_then_creates(self):
        existing = squad_with(self.t, self.skeet, [self.athletes[0]], capacity=3)
        result = auto_assign_squads(self.t, self.skeet, 1, squad_capacity=3)
        self.assertEqual(result["assignments"], 6)
        self.assertEqual(result["squads_created"], 2)
        self.assertEqual(existing.members.count(), 3)
        self.assertEqual(
            SquadMember.objects.filter(tournament=self.t, discipline=self.skeet, round_number=1).count(), 7
        )

    def test_is_idempotent(self):
        auto_assign_squads(self.t, self.skeet, 1)
        again = auto_assign_squads(self.t, self.skeet, 1)
        self.assertEqual(again["assignments"], 0)
        self.assertEqual(again["squads_created"], 0)

    def test_teammates_stay_together(self):
        auto_assign_squads(self.t, self.skeet, 1, squad_capacity=4)
        first = Squad.objects.filter(tournament=self.t).order_by("id").first()
        team_ids = set(first.members.values_list("athlete__team_id", flat=True))
        self.assertEqual(len(team_ids), 1)

    def test_respects_slot_capacity_of_existing_squads(self):
        slot = create_time_slot(self.t, f.at(self.t, 9), 2)
        existing = create_squad(self.t, self.skeet, 1, capacity=5, time_slot=slot)
        auto_assign_squads(self.t, self.skeet, 1, squad_capacity=5)
        self.assertEqual(existing.members.count(), 2)
