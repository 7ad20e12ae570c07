from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase

from shootcore.apps.core.exceptions import UnauthorizedError
from shootcore.apps.core.permissions import (
    ROLE_ADMIN,
    ROLE_ATHLETE,
    ROLE_COACH,
    check_capability,
    has_capability,
    require_capability,
    role_for,
)

from . import factories as f


class RoleTests(TestCase):
    def test_roles(self):
        self.assertIsNone(role_for(AnonymousUser()))
        self.assertEqual(role_for(f.user()), ROLE_ATHLETE)
        self.assertEqual(role_for(f.user(coach=True)), ROLE_COACH)
        self.assertEqual(role_for(f.user(staff=True)), ROLE_ADMIN)

    def test_capability_table(self):
        athlete, coach, admin = f.user(), f.user(coach=True), f.user(staff=True)
        self.assertTrue(has_capability(athlete, "registrations.manage"))
        self.assertFalse(has_capability(athlete, "squads.manage"))
        self.assertTrue(has_capability(coach, "squads.manage"))
        self.assertFalse(has_capability(coach, "scores.correct"))
        self.assertTrue(has_capability(admin, "scores.correct"))
        self.assertFalse(has_capability(AnonymousUser(), "registrations.manage"))

    def test_check_capability_raises(self):
        with self.assertRaises(UnauthorizedError):
            check_capability(f.user(), "scores.import")
        with self.assertRaises(KeyError):
            check_capability(f.user(staff=True), "nope.unknown")


class DecoratorTests(TestCase):
    def test_require_capability_blocks_and_passes(self):
        calls = []

        @require_capability("squads.manage")
        def view(request):
            calls.append(request.user.username)
            return "ok"

        rf = RequestFactory()
        req = rf.get("/")
        req.user = f.user("plain")
        with self.assertRaises(UnauthorizedError):
            view(req)

        req.user = f.user("boss", coach=True)
        self.assertEqual(view(req), "ok")
        self.assertEqual(calls, ["boss"])
        self.assertEqual(view.capability, "squads.manage")

    def test_unknown_capability_fails_at_import_time(self):
        with self.assertRaises(KeyError):
            require_capability("does.not.exist")
