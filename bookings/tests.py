import threading
import time
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

from django.db import IntegrityError, connection
from django.test import SimpleTestCase, TransactionTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from common.exceptions import BookingNotFound
from delegations.models import DelegationModel
from vehicles.models import VehicleModel
from .models import BookingModel
from .utils import ranges_overlap, calculate_duration_days, calculate_total_price, cancel_booking


class PricingTestCase(SimpleTestCase):
    def test_single_day_costs_one_daily_rate(self):
        booking = SimpleNamespace(start_date=date(2025, 3, 1), end_date=date(2025, 3, 1))
        vehicle = SimpleNamespace(daily_rate=Decimal('42.50'))
        self.assertEqual(calculate_total_price(booking, vehicle), Decimal('42.50'))

    def test_both_ends_are_billed(self):
        booking = SimpleNamespace(start_date=date(2025, 1, 10), end_date=date(2025, 1, 12))
        vehicle = SimpleNamespace(daily_rate=Decimal('50'))
        self.assertEqual(calculate_duration_days(booking.start_date, booking.end_date), 3)
        self.assertEqual(calculate_total_price(booking, vehicle), Decimal('150'))

    def test_range_across_month_end(self):
        self.assertEqual(calculate_duration_days(date(2024, 2, 27), date(2024, 3, 1)), 4)

    def test_price_does_not_touch_inputs(self):
        booking = SimpleNamespace(start_date=date(2025, 1, 10), end_date=date(2025, 1, 12))
        vehicle = SimpleNamespace(daily_rate=Decimal('50'))
        calculate_total_price(booking, vehicle)
        calculate_total_price(booking, vehicle)
        self.assertEqual(vehicle.daily_rate, Decimal('50'))
        self.assertEqual(booking.end_date, date(2025, 1, 12))

    def test_ranges_overlap(self):
        start, end = date(2025, 1, 10), date(2025, 1, 12)
        self.assertTrue(ranges_overlap(start, end, date(2025, 1, 11), date(2025, 1, 13)))
        self.assertTrue(ranges_overlap(start, end, date(2025, 1, 12), date(2025, 1, 14)))
        self.assertTrue(ranges_overlap(start, end, date(2025, 1, 8), date(2025, 1, 10)))
        self.assertTrue(ranges_overlap(start, end, date(2025, 1, 1), date(2025, 1, 31)))
        self.assertFalse(ranges_overlap(start, end, date(2025, 1, 13), date(2025, 1, 15)))
        self.assertFalse(ranges_overlap(start, end, date(2025, 1, 1), date(2025, 1, 9)))


class BookingTestCase(APITestCase):
    def setUp(self):
        """Set up test dependencies"""
        self.delegation = DelegationModel.objects.create(
            delegation_id="B1", name="Barcelona Sants", city="Barcelona"
        )
        self.other_delegation = DelegationModel.objects.create(
            delegation_id="M1", name="Madrid Atocha", city="Madrid"
        )
        self.vehicle = VehicleModel.objects.create(
            delegation=self.delegation, make="Seat", model="Leon", year=2020, daily_rate=Decimal("50.00")
        )
        self.other_vehicle = VehicleModel.objects.create(
            delegation=self.other_delegation, make="Renault", model="Clio", year=2021, daily_rate=Decimal("40.00")
        )
        self.list_url = reverse('booking-list')
        self.cancel_url = reverse('booking-cancel')

        self.valid_payload = {
            "vehicle": self.vehicle.id,
            "delegation": self.delegation.pk,
            "user_id": "U1",
            "start_date": "2025-01-10",
            "end_date": "2025-01-12"
        }

    def book(self, **overrides):
        return self.client.post(self.list_url, data=dict(self.valid_payload, **overrides), format='json')

    # -----------------------------
    # Create
    # -----------------------------

    def test_create_booking(self):
        """Test booking a free vehicle returns the priced booking"""
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(BookingModel.objects.count(), 1)
        self.assertEqual(response.data['duration_days'], 3)
        self.assertEqual(response.data['total_price'], '150.00')
        self.assertEqual(response.data['user_id'], 'U1')
        self.assertTrue(response.data['booking_id'])

    def test_create_booking_missing_fields(self):
        response = self.client.post(self.list_url, data={"user_id": "U1"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('vehicle', response.data)
        self.assertIn('start_date', response.data)

    def test_create_booking_blank_user(self):
        response = self.book(user_id="")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('user_id', response.data)

    def test_create_booking_end_before_start(self):
        response = self.book(start_date="2025-01-12", end_date="2025-01-10")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_create_booking_malformed_date(self):
        response = self.book(start_date="10/01/2025")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_date', response.data)

    def test_create_booking_unknown_vehicle(self):
        response = self.book(vehicle=9999)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('vehicle', response.data)

    def test_create_booking_vehicle_of_other_delegation(self):
        response = self.book(vehicle=self.other_vehicle.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('vehicle', response.data)

    def test_create_overlapping_booking_conflicts(self):
        """Test a second booking overlapping the first is refused with 409"""
        self.assertEqual(self.book().status_code, status.HTTP_201_CREATED)
        response = self.book(user_id="U2", start_date="2025-01-12", end_date="2025-01-14")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['detail'].code, 'booking_conflict')
        self.assertEqual(BookingModel.objects.count(), 1)

    def test_create_same_start_conflicts(self):
        self.book()
        response = self.book(user_id="U2", end_date="2025-01-10")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_create_adjacent_booking(self):
        """Test the day after a booking ends can be booked"""
        self.book()
        response = self.book(user_id="U2", start_date="2025-01-13", end_date="2025-01-15")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(BookingModel.objects.count(), 2)

    def test_database_constraint_reports_conflict(self):
        """Test an insert rejected by the database surfaces as a conflict"""
        with patch('bookings.utils.BookingModel.objects.create', side_effect=IntegrityError):
            response = self.book()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_booking_makes_vehicle_unavailable(self):
        self.book()
        response = self.client.get(reverse('vehicle-available'), {
            'delegation': 'B1', 'start_date': '2025-01-11', 'end_date': '2025-01-13'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    # -----------------------------
    # Read
    # -----------------------------

    def test_list_bookings(self):
        self.book()
        self.book(user_id="U2", start_date="2025-02-01", end_date="2025-02-02")
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_list_bookings_by_user(self):
        self.book()
        self.book(user_id="U2", start_date="2025-02-01", end_date="2025-02-02")
        response = self.client.get(self.list_url, {'user_id': 'U2'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['user_id'] for b in response.data], ['U2'])

    def test_retrieve_booking(self):
        booking_id = self.book().data['booking_id']
        response = self.client.get(reverse('booking-detail', kwargs={'pk': booking_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_price'], '150.00')

    def test_bookings_cannot_be_edited(self):
        booking_id = self.book().data['booking_id']
        response = self.client.put(
            reverse('booking-detail', kwargs={'pk': booking_id}), data=self.valid_payload, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    # -----------------------------
    # Cancel
    # -----------------------------

    def test_cancel_booking(self):
        booking_id = self.book().data['booking_id']
        response = self.client.delete(reverse('booking-detail', kwargs={'pk': booking_id}))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_cancel_frees_the_dates(self):
        booking_id = self.book().data['booking_id']
        self.client.delete(reverse('booking-detail', kwargs={'pk': booking_id}))
        response = self.book(user_id="U2")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_cancel_unknown_booking(self):
        response = self.client.delete(
            reverse('booking-detail', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cancel_malformed_booking_id(self):
        """Test an id shaped like a UUID but not parseable is reported as not found"""
        self.book()
        response = self.client.delete("/bookings/1234567812341234123412345678901-/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(BookingModel.objects.count(), 1)

    def test_cancel_booking_rejects_malformed_id(self):
        with self.assertRaises(BookingNotFound):
            cancel_booking("not-a-booking-id")

    def test_cancel_by_vehicle_and_start(self):
        self.book()
        response = self.client.post(
            self.cancel_url, data={"vehicle": self.vehicle.id, "start_date": "2025-01-10"}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_cancel_by_vehicle_and_start_not_found(self):
        self.book()
        response = self.client.post(
            self.cancel_url, data={"vehicle": self.vehicle.id, "start_date": "2025-01-11"}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(BookingModel.objects.count(), 1)

    def test_cancel_by_vehicle_and_start_invalid(self):
        response = self.client.post(self.cancel_url, data={"vehicle": 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_date', response.data)


class ConcurrentBookingTestCase(TransactionTestCase):
    def setUp(self):
        delegation = DelegationModel.objects.create(
            delegation_id="B1", name="Barcelona Sants", city="Barcelona"
        )
        self.vehicle = VehicleModel.objects.create(
            delegation=delegation, make="Seat", model="Leon", year=2020, daily_rate=Decimal("50.00")
        )
        self.payload = {"vehicle": self.vehicle.id, "delegation": "B1", "user_id": "U1"}

    def test_overlapping_bookings_at_the_same_time(self):
        """Test two overlapping bookings racing for one vehicle: one wins, the other conflicts"""
        inserting = threading.Event()
        results = []
        create = BookingModel.objects.create

        def slow_create(**kwargs):
            if not inserting.is_set():
                inserting.set()
                # Keep the first transaction open while the second request comes in
                time.sleep(0.5)
            return create(**kwargs)

        def book(start_date, end_date):
            try:
                response = APIClient().post(
                    reverse('booking-list'),
                    data=dict(self.payload, start_date=start_date, end_date=end_date),
                    format='json'
                )
                results.append(response.status_code)
            finally:
                connection.close()

        with patch('bookings.utils.BookingModel.objects.create', side_effect=slow_create):
            first = threading.Thread(target=book, args=("2025-01-10", "2025-01-12"))
            second = threading.Thread(target=book, args=("2025-01-11", "2025-01-13"))
            first.start()
            self.assertTrue(inserting.wait(timeout=10))
            second.start()
            first.join(timeout=30)
            second.join(timeout=30)

        self.assertEqual(sorted(results), [status.HTTP_201_CREATED, status.HTTP_409_CONFLICT])
        self.assertEqual(BookingModel.objects.count(), 1)
