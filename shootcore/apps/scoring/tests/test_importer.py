from datetime import date

from django.test import TestCase

from shootcore.apps.core.tests import factories as f
from shootcore.apps.orgs.services import create_team
from shootcore.apps.registration.services import register
from shootcore.apps.scoring.models import ImportedScore, Score
from shootcore.apps.scoring.services.importer import canonical_row, import_scores, normalize_key

from .test_ledger import squadded


class HeaderTests(TestCase):
    def test_normalize_key(self):
        self.assertEqual(normalize_key("Targets Hit"), "targets_hit")
        self.assertEqual(normalize_key(" targets-HIT "), "targets_hit")
        self.assertEqual(normalize_key("Número"), "numero")
        self.assertEqual(normalize_key(None), "")

    def test_canonical_row(self):
        row = canonical_row({
            "First Name": " Ana ", "Last Name": "Reyes", "Event": "Skeet", "Score": 23, "Targets": 25, "Extra": "x",
        })
        self.assertEqual(row["shooter_name"], "Ana Reyes")
        self.assertEqual(row["discipline"], "Skeet")
        self.assertEqual((row["targets_hit"], row["targets_thrown"]), (23, 25))
        self.assertNotIn("extra", row)


class ImportScoresTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.trap = f.discipline("trap")
        cls.t = f.tournament(disciplines={cls.skeet: 2, cls.trap: 1})
        team = create_team("Eagle Ridge")
        cls.ana = f.athlete("Ana", "Reyes", gender="F", team=team, shooter_id="NS-1")
        cls.bo = f.athlete("Bo", "Diaz", gender=None)
        for a in (cls.ana, cls.bo):
            register(a, cls.t, [cls.skeet, cls.trap])
        squadded(cls.t, cls.skeet, [cls.ana, cls.bo], rounds=(1, 2))
        squadded(cls.t, cls.trap, [cls.ana, cls.bo])

    def rows(self):
        return [
            {"Shooter ID": "NS-1", "Event": "skeet", "Round": 1, "Targets Thrown": 25, "Targets Hit": 23,
             "Station Breakdown": "5,5,4,4,5", "Date": "06/14/2025"},
            {"Shooter": "bo diaz", "Event": "Trap", "Round": 1, "Targets Thrown": 25, "Targets Hit": 21},
            {"Shooter ID": "NS-1", "Event": "skeet", "Round": 2, "Targets Thrown": 25, "Targets Hit": 24},
        ]

    def test_reimport_is_unchanged(self):
        first = import_scores(self.t, self.rows())
        self.assertEqual((first["ok"], first["errors"], first["created"]), (3, 0, 3))

        again = import_scores(self.t, self.rows())
        self.assertEqual((again["ok"], again["unchanged"], again["created"]), (3, 3, 0))
        self.assertEqual(Score.objects.count(), 3)
        self.assertEqual(ImportedScore.objects.count(), 3)

    def test_snapshot_row_is_denormalized(self):
        import_scores(self.t, self.rows())
        snap = ImportedScore.objects.get(athlete=self.ana, round_number=1)
        self.assertEqual(snap.team_name, "Eagle Ridge")
        self.assertEqual(snap.station_breakdown, "5,5,4,4,5")
        self.assertEqual(snap.division, "Varsity")
        self.assertEqual(ImportedScore.objects.get(athlete=self.bo).gender, "")
        self.assertEqual(Score.objects.get(shoot__athlete=self.ana, round_number=1).shoot.date, date(2025, 6, 14))

    def test_bad_rows_are_reported_not_fatal(self):
        rows = self.rows() + [
            {"Shooter": "Nadie Nunca", "Event": "skeet", "Targets Thrown": 25, "Targets Hit": 20},
            {"Shooter ID": "NS-1", "Event": "skeet", "Round": 1, "Targets Thrown": 25, "Targets Hit": 30},
            {"Shooter ID": "NS-1", "Event": "trap", "Round": 1, "Targets Thrown": 25},
            {"Shooter ID": "NS-1", "Event": "trap", "Round": 9, "Targets Thrown": 25, "Targets Hit": 20},
            # un 0 explícito no se confunde con la celda vacía
            {"Shooter ID": "NS-1", "Event": "skeet", "Round": 0, "Targets Thrown": 25, "Targets Hit": 20},
            {"Shooter ID": "NS-1", "Event": "skeet", "Round": 1, "Station": 0, "Targets Thrown": 25, "Targets Hit": 20},
        ]
        result = import_scores(self.t, rows, first_row=2)
        self.assertEqual((result["total"], result["ok"], result["errors"]), (9, 3, 6))
        errors = [r for r in result["rows"] if r["status"] == "ERROR"]
        self.assertEqual([r["row"] for r in errors], [5, 6, 7, 8, 9, 10])
        self.assertTrue(all(r["error"] == "validation_error" for r in errors))
        self.assertEqual(Score.objects.count(), 3)

    def test_changed_final_row_is_a_conflict(self):
        import_scores(self.t, self.rows())
        changed = self.rows()[:1]
        changed[0]["Targets Hit"] = 22
        changed[0]["Station Breakdown"] = ""
        result = import_scores(self.t, changed)
        self.assertEqual(result["rows"][0]["error"], "conflict")
        self.assertEqual(Score.objects.get(shoot__athlete=self.ana, round_number=1).targets_hit, 23)
