from unittest.mock import MagicMock

from django.db import OperationalError
from django.test import SimpleTestCase, override_settings

from .exceptions import BookingConflict, BookingNotFound
from .retry import retry_on_db_error


@override_settings(READ_RETRY_ATTEMPTS=3, READ_RETRY_BACKOFF=0)
class RetryOnDbErrorTestCase(SimpleTestCase):
    def test_returns_first_successful_result(self):
        query = MagicMock(side_effect=[OperationalError("database is locked"), ['row']])
        query.__name__ = 'query'
        self.assertEqual(retry_on_db_error()(query)(), ['row'])
        self.assertEqual(query.call_count, 2)

    def test_gives_up_after_all_attempts(self):
        query = MagicMock(side_effect=OperationalError("connection refused"))
        query.__name__ = 'query'
        with self.assertRaises(OperationalError):
            retry_on_db_error()(query)()
        self.assertEqual(query.call_count, 3)

    def test_explicit_attempts(self):
        query = MagicMock(side_effect=OperationalError("connection refused"))
        query.__name__ = 'query'
        with self.assertRaises(OperationalError):
            retry_on_db_error(attempts=1)(query)()
        self.assertEqual(query.call_count, 1)

    def test_other_errors_are_not_retried(self):
        query = MagicMock(side_effect=ValueError("bad input"))
        query.__name__ = 'query'
        with self.assertRaises(ValueError):
            retry_on_db_error()(query)()
        self.assertEqual(query.call_count, 1)

    def test_arguments_are_passed_through(self):
        query = MagicMock(return_value=42)
        query.__name__ = 'query'
        self.assertEqual(retry_on_db_error()(query)('B1', vintage=True), 42)
        query.assert_called_once_with('B1', vintage=True)


class ExceptionsTestCase(SimpleTestCase):
    def test_booking_conflict_is_409(self):
        self.assertEqual(BookingConflict.status_code, 409)
        self.assertEqual(BookingConflict().get_codes(), 'booking_conflict')

    def test_booking_not_found_is_404(self):
        self.assertEqual(BookingNotFound.status_code, 404)
