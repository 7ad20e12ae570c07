from django.test import SimpleTestCase, TestCase

from shootcore.apps.accounts.divisions import (
    COLLEGIATE,
    INTERMEDIATE,
    NOVICE,
    OPEN,
    UNASSIGNED,
    VARSITY,
    division_for_grade,
    effective_division,
)
from shootcore.apps.accounts.roster import athlete_for_user, athlete_payload, find_athlete, get_athlete
from shootcore.apps.core.exceptions import NotFoundError
from shootcore.apps.core.tests import factories as f


class DivisionTableTests(SimpleTestCase):
    def test_grades(self):
        self.assertEqual(division_for_grade("6"), NOVICE)
        self.assertEqual(division_for_grade(" 8 "), INTERMEDIATE)
        self.assertEqual(division_for_grade("12"), VARSITY)
        self.assertEqual(division_for_grade("College"), COLLEGIATE)
        self.assertIsNone(division_for_grade(""))
        self.assertIsNone(division_for_grade("adult"))

    def test_override_wins(self):
        self.assertEqual(effective_division("10", OPEN), OPEN)
        self.assertEqual(effective_division("10", ""), VARSITY)
        self.assertEqual(effective_division(None, None), UNASSIGNED)


class RosterTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.ana = f.athlete("Ana", "Reyes", gender="F", grade="9", shooter_id="NS-100")
        cls.twin1 = f.athlete("Sam", "Cole")
        cls.twin2 = f.athlete("Sam", "Cole")

    def test_get_athlete(self):
        self.assertEqual(get_athlete(self.ana.pk), self.ana)
        with self.assertRaises(NotFoundError):
            get_athlete(999999)
        with self.assertRaises(NotFoundError):
            get_athlete("abc")

    def test_find_by_shooter_id_then_unique_name(self):
        self.assertEqual(find_athlete(shooter_id=" NS-100 "), self.ana)
        self.assertEqual(find_athlete(name="ana   REYES"), self.ana)
        # nombre ambiguo → None
        self.assertIsNone(find_athlete(name="Sam Cole"))
        self.assertIsNone(find_athlete(shooter_id="nope"))

    def test_name_lookup_filters_in_the_database(self):
        mary = f.athlete("Mary Ann", "Smith")
        solo = f.athlete("Prince")
        solo.last_name = ""
        solo.save(update_fields=["last_name"])
        for _ in range(5):
            f.athlete()
        with self.assertNumQueries(1):
            self.assertEqual(find_athlete(name="mary ann  smith"), mary)
        self.assertEqual(find_athlete(name="PRINCE"), solo)
        self.assertIsNone(find_athlete(name="Mary Smith"))

    def test_athlete_for_user(self):
        self.assertEqual(athlete_for_user(self.ana.user), self.ana)
        with self.assertRaises(NotFoundError):
            athlete_for_user(f.user())

    def test_payload(self):
        p = athlete_payload(self.ana)
        self.assertEqual(p["name"], "Ana Reyes")
        self.assertEqual(p["division"], "Junior Varsity")
        self.assertIsNone(p["team"])
        self.assertEqual(p["classes"], {"NSCA": None, "ATA": None, "NSSA": None})


class AccountApiTests(TestCase):
    def test_me(self):
        self.assertEqual(self.client.get("/api/me/").status_code, 403)
        a = f.athlete("Rae", "Sun", grade="college")
        self.client.force_login(a.user)
        r = self.client.get("/api/me/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["division"], "Collegiate")

        self.client.force_login(f.user())
        self.assertEqual(self.client.get("/api/me/").status_code, 404)

    def test_athlete_detail(self):
        a = f.athlete("Ola", "Berg")
        self.assertEqual(self.client.get(f"/api/athletes/{a.pk}/").json()["name"], "Ola Berg")
        self.assertEqual(self.client.get("/api/athletes/999999/").status_code, 404)
