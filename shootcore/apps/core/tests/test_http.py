import json

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import JsonResponse
from django.test import RequestFactory, SimpleTestCase

from shootcore.apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from shootcore.apps.core.http import as_date, as_datetime, as_int, json_endpoint, read_json, require_fields


class JsonEndpointTests(SimpleTestCase):
    def setUp(self):
        self.rf = RequestFactory()

    def _call(self, exc):
        @json_endpoint
        def view(request):
            raise exc

        resp = view(self.rf.post("/x/"))
        return resp.status_code, json.loads(resp.content)

    def test_error_kinds_map_to_status(self):
        self.assertEqual(self._call(ValidationError("bad")), (400, {"error": "validation_error", "detail": "bad"}))
        self.assertEqual(self._call(NotFoundError("nf"))[0], 404)
        self.assertEqual(self._call(ConflictError("full")), (409, {"error": "conflict", "detail": "full"}))

    def test_django_validation_error_becomes_400(self):
        status, body = self._call(DjangoValidationError("fechas"))
        self.assertEqual(status, 400)
        self.assertEqual(body["error"], "validation_error")

    def test_unexpected_errors_propagate(self):
        @json_endpoint
        def view(request):
            raise RuntimeError("db down")

        with self.assertRaises(RuntimeError):
            view(self.rf.get("/"))

    def test_success_passes_through(self):
        @json_endpoint
        def view(request):
            return JsonResponse({"ok": True})

        self.assertEqual(view(self.rf.get("/")).status_code, 200)


class ParsingTests(SimpleTestCase):
    def test_read_json(self):
        rf = RequestFactory()
        req = rf.post("/", data='{"a": 1}', content_type="application/json")
        self.assertEqual(read_json(req), {"a": 1})
        with self.assertRaises(ValidationError):
            read_json(rf.post("/", data="{nope", content_type="application/json"))
        with self.assertRaises(ValidationError):
            read_json(rf.post("/", data="[1, 2]", content_type="application/json"))

    def test_require_fields(self):
        require_fields({"a": 1, "b": "x"}, "a", "b")
        with self.assertRaisesMessage(ValidationError, "b"):
            require_fields({"a": 1, "b": ""}, "a", "b")

    def test_scalars(self):
        self.assertEqual(as_int("7", "n"), 7)
        with self.assertRaises(ValidationError):
            as_int("siete", "n")
        self.assertEqual(as_date("2025-06-14", "d").day, 14)
        with self.assertRaises(ValidationError):
            as_date("2025-02-30", "d")
        self.assertIsNotNone(as_datetime("2025-06-14T09:00:00", "t").tzinfo)
