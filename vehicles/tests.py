from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch, MagicMock

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from bookings.models import BookingModel
from delegations.models import DelegationModel
from vehicles.models import VehicleModel
from vehicles.serializers import VehicleSerializer
from vehicles.tasks import sync_rented_flags_task
from vehicles.utils import find_available_vehicles


class VehicleTestCase(TestCase):
    def setUp(self):
        """Set up test dependencies"""
        self.client = APIClient()

        self.delegation = DelegationModel.objects.create(
            delegation_id="B1",
            name="Barcelona Sants",
            city="Barcelona"
        )
        self.other_delegation = DelegationModel.objects.create(
            delegation_id="M1",
            name="Madrid Atocha",
            city="Madrid"
        )

        self.vehicle1 = VehicleModel.objects.create(
            delegation=self.delegation,
            operation_id="car#1",
            make="Toyota",
            model="Corolla",
            year=2018,
            color="White",
            daily_rate=Decimal("30.00")
        )
        self.vehicle2 = VehicleModel.objects.create(
            delegation=self.other_delegation,
            operation_id="car#2",
            make="Honda",
            model="Civic",
            year=2020,
            color="Blue",
            daily_rate=Decimal("35.00"),
            rented=True
        )

        self.list_url = reverse('vehicle-list')
        self.detail_url = reverse('vehicle-detail', kwargs={'pk': self.vehicle1.id})
        self.set_rented_url = reverse('vehicle-set-rented', kwargs={'pk': self.vehicle1.id})

        self.valid_payload = {
            "delegation": self.delegation.pk,
            "make": "Ford",
            "model": "Focus",
            "year": 2021,
            "color": "Grey",
            "daily_rate": "25.50"
        }

        self.invalid_payload = {
            "delegation": None,
            "make": "",
            "model": "",
            "year": 1700,
            "daily_rate": -10.0
        }

    # -----------------------------
    # CRUD Tests
    # -----------------------------

    def test_list_all_vehicles(self):
        """Test listing every vehicle"""
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), VehicleModel.objects.count())

    def test_list_vehicles_by_delegation(self):
        """Test narrowing the list down to one delegation"""
        response = self.client.get(self.list_url, {'delegation': 'M1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v['id'] for v in response.data], [self.vehicle2.id])

    def test_retrieve_vehicle_detail(self):
        response = self.client.get(self.detail_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        serializer = VehicleSerializer(VehicleModel.objects.get(id=self.vehicle1.id))
        self.assertEqual(response.data, serializer.data)

    def test_create_vehicle(self):
        """Test creating a vehicle generates its operation id"""
        response = self.client.post(self.list_url, data=self.valid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(VehicleModel.objects.count(), 3)
        self.assertEqual(response.data['make'], "Ford")
        self.assertTrue(response.data['operation_id'].startswith('car#'))
        self.assertFalse(response.data['rented'])

    def test_create_vehicle_duplicate_operation_id(self):
        """Test the operation id is unique within a delegation"""
        payload = dict(self.valid_payload, operation_id="car#1")
        response = self.client.post(self.list_url, data=payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('operation_id', response.data)

    def test_same_operation_id_in_other_delegation(self):
        """Test the same operation id may be reused by another delegation"""
        payload = dict(self.valid_payload, operation_id="car#2")
        response = self.client.post(self.list_url, data=payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_update_vehicle(self):
        """Test updating an existing vehicle"""
        updated_data = {
            "delegation": self.delegation.pk,
            "operation_id": "car#1",
            "make": "Toyota",
            "model": "Corolla Hybrid",
            "year": 2018,
            "daily_rate": "32.00"
        }
        response = self.client.put(self.detail_url, data=updated_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.vehicle1.refresh_from_db()
        self.assertEqual(self.vehicle1.model, "Corolla Hybrid")
        self.assertEqual(self.vehicle1.daily_rate, Decimal("32.00"))

    def test_partial_update_vehicle(self):
        response = self.client.patch(self.detail_url, data={"daily_rate": "28.00"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.vehicle1.refresh_from_db()
        self.assertEqual(self.vehicle1.daily_rate, Decimal("28.00"))

    def test_vehicle_cannot_change_delegation(self):
        """Test a vehicle stays at the delegation its bookings were made at"""
        response = self.client.patch(
            self.detail_url, data={"delegation": self.other_delegation.pk}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('delegation', response.data)
        self.vehicle1.refresh_from_db()
        self.assertEqual(self.vehicle1.delegation_id, "B1")

    def test_delete_vehicle_cascades_to_bookings(self):
        """Test deleting a vehicle removes its bookings"""
        BookingModel.objects.create(
            vehicle=self.vehicle1, delegation=self.delegation, user_id="user-1",
            start_date=date(2025, 1, 10), end_date=date(2025, 1, 12)
        )
        response = self.client.delete(self.detail_url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(VehicleModel.objects.count(), 1)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_list_vehicle_bookings(self):
        booking = BookingModel.objects.create(
            vehicle=self.vehicle1, delegation=self.delegation, user_id="user-1",
            start_date=date(2025, 1, 10), end_date=date(2025, 1, 12)
        )
        response = self.client.get(reverse('vehicle-bookings', kwargs={'pk': self.vehicle1.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['booking_id'] for b in response.data], [str(booking.booking_id)])

    # -----------------------------
    # Rented Flag Tests
    # -----------------------------

    def test_set_rented_flag(self):
        response = self.client.post(self.set_rented_url, data={"rented": True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.vehicle1.refresh_from_db()
        self.assertTrue(self.vehicle1.rented)

    def test_set_rented_with_invalid_data(self):
        response = self.client.post(self.set_rented_url, data={"rented": "maybe"}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('rented', response.data)

    def test_set_rented_requires_post_method(self):
        response = self.client.get(self.set_rented_url)
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_rented_flag_does_not_affect_availability(self):
        """Test availability is derived from bookings, not from the advisory flag"""
        self.vehicle1.rented = True
        self.vehicle1.save()
        available = find_available_vehicles("B1", date(2025, 1, 1), date(2025, 1, 2))
        self.assertEqual(available, [self.vehicle1])

    def test_sync_rented_flags_task(self):
        """Test the task flags vehicles booked today and releases the others"""
        today = timezone.localdate()
        BookingModel.objects.create(
            vehicle=self.vehicle1, delegation=self.delegation, user_id="user-1",
            start_date=today - timedelta(days=1), end_date=today + timedelta(days=1)
        )
        result = sync_rented_flags_task()
        self.assertEqual(result, {'flagged': 1, 'released': 1})
        self.vehicle1.refresh_from_db()
        self.vehicle2.refresh_from_db()
        self.assertTrue(self.vehicle1.rented)
        self.assertFalse(self.vehicle2.rented)

    @patch('vehicles.views.sync_rented_flags_task.delay')
    def test_sync_rented_endpoint_queues_task(self, mock_delay):
        mock_delay.return_value = MagicMock(id='task-123')
        response = self.client.post(reverse('vehicle-sync-rented'), format='json')
        self.assertEqual(response.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(response.data, {'task_id': 'task-123'})
        mock_delay.assert_called_once_with()

    # -----------------------------
    # Serializer Tests
    # -----------------------------

    def test_serializer_valid_data(self):
        serializer = VehicleSerializer(data=self.valid_payload)
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_serializer_invalid_data(self):
        serializer = VehicleSerializer(data=self.invalid_payload)
        self.assertFalse(serializer.is_valid())
        self.assertIn('delegation', serializer.errors)
        self.assertIn('make', serializer.errors)
        self.assertIn('model', serializer.errors)
        self.assertIn('year', serializer.errors)
        self.assertIn('daily_rate', serializer.errors)

    def test_vehicle_str_method(self):
        self.assertEqual(str(self.vehicle1), "Toyota Corolla (2018)")


class AvailabilityTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.available_url = reverse('vehicle-available')

        self.delegation = DelegationModel.objects.create(
            delegation_id="B1", name="Barcelona Sants", city="Barcelona"
        )
        self.other_delegation = DelegationModel.objects.create(
            delegation_id="B2", name="Girona Centre", city="Girona"
        )
        self.v1 = VehicleModel.objects.create(
            delegation=self.delegation, make="Seat", model="Leon", year=2020, daily_rate=50
        )
        self.v2 = VehicleModel.objects.create(
            delegation=self.delegation, make="Seat", model="600", year=1965, daily_rate=80
        )
        self.v3 = VehicleModel.objects.create(
            delegation=self.other_delegation, make="Fiat", model="Panda", year=2015, daily_rate=30
        )
        BookingModel.objects.create(
            vehicle=self.v1, delegation=self.delegation, user_id="U1",
            start_date=date(2025, 1, 10), end_date=date(2025, 1, 12)
        )

    def query(self, **params):
        return self.client.get(self.available_url, params)

    def test_overlapping_range_excludes_vehicle(self):
        """Test a search overlapping an existing booking excludes the vehicle"""
        response = self.query(delegation="B1", start_date="2025-01-11", end_date="2025-01-13")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v['id'] for v in response.data], [self.v2.id])

    def test_range_after_booking_includes_vehicle(self):
        """Test the day after the booking ends is free"""
        response = self.query(delegation="B1", start_date="2025-01-13", end_date="2025-01-15")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertCountEqual([v['id'] for v in response.data], [self.v1.id, self.v2.id])

    def test_touching_last_day_overlaps(self):
        """Test a search starting on the booking's last day excludes the vehicle"""
        available = find_available_vehicles("B1", date(2025, 1, 12), date(2025, 1, 14))
        self.assertNotIn(self.v1, available)

    def test_touching_first_day_overlaps(self):
        available = find_available_vehicles("B1", date(2025, 1, 5), date(2025, 1, 10))
        self.assertNotIn(self.v1, available)

    def test_range_containing_booking_overlaps(self):
        available = find_available_vehicles("B1", date(2025, 1, 1), date(2025, 1, 31))
        self.assertNotIn(self.v1, available)

    def test_range_inside_booking_overlaps(self):
        available = find_available_vehicles("B1", date(2025, 1, 11), date(2025, 1, 11))
        self.assertNotIn(self.v1, available)

    def test_overlap_matches_definition(self):
        """Test exclusion holds exactly when start <= query end and end >= query start"""
        booking_start, booking_end = date(2025, 1, 10), date(2025, 1, 12)
        for offset in range(-5, 6):
            query_start = date(2025, 1, 8) + timedelta(days=offset)
            for length in range(0, 4):
                query_end = query_start + timedelta(days=length)
                overlaps = booking_start <= query_end and booking_end >= query_start
                available = find_available_vehicles("B1", query_start, query_end)
                self.assertEqual(self.v1 not in available, overlaps, (query_start, query_end))

    def test_other_delegation_bookings_do_not_leak(self):
        available = find_available_vehicles("B2", date(2025, 1, 10), date(2025, 1, 12))
        self.assertEqual(available, [self.v3])

    def test_unknown_delegation_returns_empty_list(self):
        response = self.query(delegation="nowhere", start_date="2025-01-01", end_date="2025-01-02")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_end_before_start_is_rejected(self):
        response = self.query(delegation="B1", start_date="2025-01-13", end_date="2025-01-11")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start_rejected_by_utility(self):
        with self.assertRaises(ValidationError):
            find_available_vehicles("B1", date(2025, 1, 13), date(2025, 1, 11))

    def test_malformed_date_is_rejected(self):
        response = self.query(delegation="B1", start_date="2025-13-45", end_date="2025-01-11")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_date', response.data)

    def test_missing_delegation_is_rejected(self):
        response = self.query(start_date="2025-01-01", end_date="2025-01-02")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('delegation', response.data)

    def test_vintage_mode_keeps_old_cars(self):
        response = self.query(delegation="B1", start_date="2025-02-01", end_date="2025-02-02", vintage="true")
        self.assertEqual([v['id'] for v in response.data], [self.v2.id])

    def test_modern_mode_keeps_recent_cars(self):
        response = self.query(delegation="B1", start_date="2025-02-01", end_date="2025-02-02", vintage="false")
        self.assertEqual([v['id'] for v in response.data], [self.v1.id])

    @override_settings(VINTAGE_CUTOFF_YEAR=2021)
    def test_vintage_cutoff_is_configurable(self):
        available = find_available_vehicles("B1", date(2025, 2, 1), date(2025, 2, 2), vintage=True)
        self.assertCountEqual(available, [self.v1, self.v2])
