import json
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from shootcore.apps.core.management.commands.diagnose_project import check_invariants
from shootcore.apps.events.models import Squad, SquadMember
from shootcore.apps.events.services.squads import assign_athlete_to_squad, create_squad
from shootcore.apps.registration.services import register
from shootcore.apps.scoring.services.ledger import record_score

from . import factories as f


class DiagnoseTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.t = f.tournament(disciplines={cls.skeet: 1})
        cls.squad = create_squad(cls.t, cls.skeet, 1, capacity=3)
        cls.athletes = [f.athlete() for _ in range(2)]
        for a in cls.athletes:
            register(a, cls.t, [cls.skeet])
            assign_athlete_to_squad(a.pk, cls.squad.pk)
        record_score(cls.athletes[0], cls.t, cls.skeet, 1, targets_thrown=25, targets_hit=20)

    def test_clean_database_has_no_findings(self):
        findings = check_invariants()
        self.assertEqual(set(findings), {
            "time_slot_over_capacity",
            "squad_over_capacity",
            "cross_tournament_squad",
            "member_key_mismatch",
            "member_not_registered",
            "score_without_squad",
        })
        self.assertTrue(all(v == [] for v in findings.values()))

    def test_detects_violations_written_behind_the_services(self):
        Squad.objects.filter(pk=self.squad.pk).update(capacity=1)
        self.assertEqual(len(check_invariants()["squad_over_capacity"]), 1)

        SquadMember.objects.filter(athlete=self.athletes[0]).delete()
        SquadMember.objects.filter(athlete=self.athletes[1]).update(round_number=7)
        findings = check_invariants()
        self.assertEqual(findings["squad_over_capacity"], [])
        self.assertEqual(len(findings["score_without_squad"]), 1)
        self.assertEqual(len(findings["member_key_mismatch"]), 1)

    def test_command_json(self):
        out = StringIO()
        call_command("diagnose_project", "--json", stdout=out)
        data = json.loads(out.getvalue())
        self.assertEqual(data["problems"], 0)
        self.assertIn("api/tournaments/<int:tournament_id>/squads/", data["urls"])
        self.assertIn("events.Squad", data["models"])
