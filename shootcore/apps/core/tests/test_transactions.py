from unittest import mock

from django.db import IntegrityError, OperationalError, transaction
from django.test import TestCase, TransactionTestCase, override_settings

from shootcore.apps.core.exceptions import ConflictError
from shootcore.apps.core.transactions import atomic_with_retry


@override_settings(SHOOTCORE={"TX_RETRIES": 3})
class AtomicWithRetryTests(TransactionTestCase):
    def test_retries_serialization_failures_then_succeeds(self):
        attempts = mock.Mock(side_effect=[OperationalError("deadlock"), OperationalError("deadlock"), "done"])

        @atomic_with_retry
        def op():
            return attempts()

        self.assertEqual(op(), "done")
        self.assertEqual(attempts.call_count, 3)

    def test_exhausted_retries_surface_as_conflict(self):
        attempts = mock.Mock(side_effect=OperationalError("could not serialize access"))

        @atomic_with_retry
        def op():
            return attempts()

        with self.assertRaises(ConflictError):
            op()
        self.assertEqual(attempts.call_count, 3)

    def test_integrity_error_is_conflict_without_retry(self):
        attempts = mock.Mock(side_effect=IntegrityError("unique"))

        @atomic_with_retry
        def op():
            return attempts()

        with self.assertRaises(ConflictError):
            op()
        self.assertEqual(attempts.call_count, 1)


class NestedAtomicTests(TestCase):
    def test_no_retry_inside_outer_transaction(self):
        attempts = mock.Mock(side_effect=OperationalError("deadlock"))

        @atomic_with_retry
        def op():
            return attempts()

        with transaction.atomic():
            with self.assertRaises(OperationalError):
                op()
        self.assertEqual(attempts.call_count, 1)
