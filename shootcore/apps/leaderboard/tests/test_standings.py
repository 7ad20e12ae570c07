from fractions import Fraction

from django.test import TestCase

from shootcore.apps.core.exceptions import ValidationError
from shootcore.apps.core.tests import factories as f
from shootcore.apps.leaderboard.models import LeaderboardSnapshot
from shootcore.apps.leaderboard.services.standings import (
    compute_leaderboard,
    get_snapshot,
    leaderboard_payload,
    normalize_group_by,
    refresh_snapshot,
)
from shootcore.apps.registration.services import register
from shootcore.apps.scoring.services.ledger import record_score
from shootcore.apps.scoring.tests.test_ledger import squadded


class GroupByTests(TestCase):
    def test_normalize(self):
        self.assertEqual(normalize_group_by(None), ("division", "gender"))
        self.assertEqual(normalize_group_by("gender, classification"), ("gender", "classification"))
        self.assertEqual(normalize_group_by(""), ())
        with self.assertRaises(ValidationError):
            normalize_group_by("team")
        with self.assertRaises(ValidationError):
            normalize_group_by(["gender", "gender"])


class RankingTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.t = f.tournament(disciplines={cls.skeet: 2})
        # mismo grupo: Varsity / M
        cls.y = f.athlete("Yara", "Ames")
        cls.x = f.athlete("xavier", "Ames")
        cls.w = f.athlete("Will", "Boyd")
        cls.p = f.athlete("Pat", "Cruz")
        cls.q = f.athlete("Quinn", "Cruz")
        cls.z = f.athlete("Zed", "Dunn")
        everyone = [cls.y, cls.x, cls.w, cls.p, cls.q, cls.z]
        for a in everyone:
            register(a, cls.t, [cls.skeet])
        squadded(cls.t, cls.skeet, everyone, rounds=(1, 2))

        def shoot(a, thrown, hit, rn=1, **kw):
            record_score(a, cls.t, cls.skeet, rn, targets_thrown=thrown, targets_hit=hit, **kw)

        shoot(cls.x, 25, 23)
        shoot(cls.y, 25, 23)
        shoot(cls.w, 25, 20)
        shoot(cls.p, 12, 11)
        shoot(cls.p, 12, 11, rn=2)  # 22/24
        shoot(cls.q, 12, 11)        # 11/12, mismo ratio que P
        shoot(cls.z, 0, 0)
        # los borradores no cuentan
        shoot(cls.w, 25, 25, rn=2, finalize=False)

    def rows(self, group_by=("division", "gender")):
        return list(compute_leaderboard(self.t, self.skeet, group_by))

    def test_shared_rank_and_name_order(self):
        rows = self.rows()
        self.assertEqual([r.name for r in rows[:2]], ["xavier Ames", "Yara Ames"])
        self.assertEqual([r.rank for r in rows[:2]], [1, 1])
        self.assertEqual(rows[0].hit_ratio, Fraction(23, 25))

    def test_ratio_then_hits_then_rank_gap(self):
        ranks = {r.name: r.rank for r in self.rows()}
        self.assertEqual(ranks["Pat Cruz"], 3)
        self.assertEqual(ranks["Quinn Cruz"], 4)
        self.assertEqual(ranks["Will Boyd"], 5)

    def test_no_thrown_goes_last(self):
        last = self.rows()[-1]
        self.assertEqual(last.name, "Zed Dunn")
        self.assertIsNone(last.hit_ratio)
        self.assertIsNone(last.as_dict(("division", "gender"))["hit_ratio"])

    def test_drafts_are_ignored(self):
        w = next(r for r in self.rows() if r.athlete_id == self.w.pk)
        self.assertEqual((w.total_hit, w.total_thrown), (20, 25))

    def test_deterministic(self):
        self.assertEqual(self.rows(), self.rows())

    def test_groups_are_split_and_sorted(self):
        self.z.gender = "F"
        self.z.save()
        self.x.grade = "8"
        self.x.save()
        payload = leaderboard_payload(iter(self.rows()), ("division", "gender"))
        groups = [(g["group"]["division"], g["group"]["gender"]) for g in payload]
        self.assertEqual(groups, [("Intermediate", "M"), ("Varsity", "F"), ("Varsity", "M")])
        varsity_m = payload[2]["rows"]
        self.assertEqual((varsity_m[0]["name"], varsity_m[0]["rank"]), ("Yara Ames", 1))

    def test_classification_grouping(self):
        self.x.nssa_class = "A"
        self.x.save()
        groups = {r.group for r in self.rows(("classification",))}
        self.assertEqual(groups, {("A",), ("",)})

    def test_snapshot_roundtrip(self):
        self.assertIsNone(get_snapshot(self.t, self.skeet))
        snap = refresh_snapshot(self.t, self.skeet)
        self.assertEqual(snap.group_by, "division,gender")
        self.assertEqual(snap.rows[0]["rows"][0]["name"], "xavier Ames")
        refresh_snapshot(self.t, self.skeet)
        self.assertEqual(LeaderboardSnapshot.objects.count(), 1)
        self.assertEqual(get_snapshot(self.t, self.skeet, "division,gender").pk, snap.pk)


class LeaderboardApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.skeet = f.discipline("skeet")
        cls.t = f.tournament(disciplines={cls.skeet: 1})
        cls.a = f.athlete("Ann", "Lee")
        register(cls.a, cls.t, [cls.skeet])
        squadded(cls.t, cls.skeet, [cls.a])
        record_score(cls.a, cls.t, cls.skeet, 1, targets_thrown=25, targets_hit=22)
        cls.coach = f.user("coach_l", coach=True)

    def test_public_live_leaderboard(self):
        r = self.client.get(f"/api/tournaments/{self.t.pk}/leaderboard/skeet/?group_by=gender")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["group_by"], ["gender"])
        self.assertEqual(body["groups"][0]["rows"][0]["hit_ratio"], 0.88)

    def test_bad_group_by(self):
        r = self.client.get(f"/api/tournaments/{self.t.pk}/leaderboard/skeet/?group_by=shoe_size")
        self.assertEqual(r.status_code, 400)

    def test_snapshot_flow(self):
        url = f"/api/tournaments/{self.t.pk}/leaderboard/skeet/"
        self.assertEqual(self.client.get(url + "?snapshot=1").status_code, 404)
        self.assertEqual(self.client.post(url + "refresh/").status_code, 403)

        self.client.force_login(self.coach)
        r = self.client.post(url + "refresh/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["groups"], 1)

        r = self.client.get(url + "?snapshot=1")
        self.assertEqual(r.status_code, 200)
        self.assertIsNotNone(r.json()["computed_at"])
