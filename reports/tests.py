from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from bookings.models import BookingModel
from delegations.models import DelegationModel
from vehicles.models import VehicleModel
from .utils import compute_delegation_statistics, top_delegation_by_revenue, compute_dashboard_summary

TAX_RATE = Decimal('0.21')


def vehicle(id, delegation_id, daily_rate, rented=False):
    return SimpleNamespace(id=id, delegation_id=delegation_id, daily_rate=Decimal(daily_rate), rented=rented)


def booking(vehicle_id, start_date, end_date, user_id='U1'):
    return SimpleNamespace(vehicle_id=vehicle_id, start_date=start_date, end_date=end_date, user_id=user_id)


class DelegationStatisticsTestCase(SimpleTestCase):
    def setUp(self):
        self.vehicles = [
            vehicle(1, 'B1', '50', rented=True),
            vehicle(2, 'B1', '30'),
            vehicle(3, 'B2', '40'),
        ]
        self.bookings = [
            booking(1, date(2025, 1, 10), date(2025, 1, 12)),
        ]

    def test_statistics_per_delegation(self):
        statistics = compute_delegation_statistics(self.vehicles, self.bookings, TAX_RATE)
        self.assertEqual(statistics, [
            {
                'delegation': 'B1',
                'total_vehicles': 2,
                'rented_vehicles': 1,
                'available_vehicles': 1,
                'total_reservations': 1,
                'total_revenue': Decimal('181.50'),
            },
            {
                'delegation': 'B2',
                'total_vehicles': 1,
                'rented_vehicles': 0,
                'available_vehicles': 1,
                'total_reservations': 0,
                'total_revenue': Decimal('0.00'),
            },
        ])

    def test_vehicle_counts_add_up(self):
        statistics = compute_delegation_statistics(self.vehicles, self.bookings, TAX_RATE)
        for entry in statistics:
            self.assertEqual(entry['rented_vehicles'] + entry['available_vehicles'], entry['total_vehicles'])
            self.assertGreaterEqual(entry['total_revenue'], 0)
        self.assertEqual(sum(e['total_vehicles'] for e in statistics), len(self.vehicles))

    def test_zero_tax_rate(self):
        statistics = compute_delegation_statistics(self.vehicles, self.bookings, Decimal('0'))
        self.assertEqual(statistics[0]['total_revenue'], Decimal('150.00'))

    def test_bookings_of_unknown_vehicles_are_ignored(self):
        bookings = self.bookings + [booking(99, date(2025, 1, 1), date(2025, 1, 5))]
        statistics = compute_delegation_statistics(self.vehicles, bookings, TAX_RATE)
        self.assertEqual(sum(e['total_reservations'] for e in statistics), 1)

    def test_empty_fleet(self):
        self.assertEqual(compute_delegation_statistics([], [], TAX_RATE), [])

    def test_top_delegation(self):
        statistics = compute_delegation_statistics(self.vehicles, self.bookings, TAX_RATE)
        self.assertEqual(top_delegation_by_revenue(statistics)['delegation'], 'B1')

    def test_top_delegation_tie_keeps_first(self):
        bookings = [
            booking(2, date(2025, 1, 1), date(2025, 1, 4)),
            booking(3, date(2025, 1, 1), date(2025, 1, 3)),
        ]
        statistics = compute_delegation_statistics(self.vehicles, bookings, TAX_RATE)
        self.assertEqual(statistics[0]['total_revenue'], statistics[1]['total_revenue'])
        self.assertEqual(top_delegation_by_revenue(statistics)['delegation'], 'B1')

    def test_statistics_sorted_by_delegation(self):
        """Test entries follow delegation ids, whatever the vehicle order"""
        vehicles = [vehicle(3, 'B2', '40'), vehicle(1, 'B1', '50'), vehicle(4, 'A9', '20')]
        statistics = compute_delegation_statistics(vehicles, [], TAX_RATE)
        self.assertEqual([e['delegation'] for e in statistics], ['A9', 'B1', 'B2'])
        self.assertEqual(top_delegation_by_revenue(statistics)['delegation'], 'A9')

    def test_top_delegation_of_nothing(self):
        self.assertIsNone(top_delegation_by_revenue([]))


class DashboardSummaryTestCase(SimpleTestCase):
    def test_summary(self):
        today = date(2025, 1, 11)
        vehicles = [vehicle(1, 'B1', '50'), vehicle(2, 'B1', '30'), vehicle(3, 'B2', '40')]
        bookings = [
            booking(1, date(2025, 1, 10), date(2025, 1, 12), user_id='U1'),
            booking(2, date(2025, 1, 11), date(2025, 1, 11), user_id='U2'),
            booking(3, date(2025, 2, 1), date(2025, 2, 4), user_id='U1'),
        ]
        summary = compute_dashboard_summary(vehicles, bookings, today)
        self.assertEqual(summary['total_bookings'], 3)
        self.assertEqual(summary['active_bookings'], 2)
        self.assertEqual(summary['average_booking_duration'], Decimal('2.67'))
        self.assertEqual(summary['active_users'], 2)
        self.assertEqual(summary['top_users'], [
            {'user_id': 'U1', 'bookings': 2},
            {'user_id': 'U2', 'bookings': 1},
        ])
        self.assertEqual(summary['vehicles_per_delegation'], {'B1': 2, 'B2': 1})

    def test_top_users_are_capped(self):
        bookings = [booking(1, date(2025, 1, d), date(2025, 1, d), user_id=f'U{d}') for d in range(1, 9)]
        summary = compute_dashboard_summary([], bookings, date(2025, 3, 1))
        self.assertEqual(len(summary['top_users']), 5)
        self.assertEqual(summary['top_users'][0]['user_id'], 'U1')
        self.assertEqual(summary['active_bookings'], 0)

    def test_empty_summary(self):
        summary = compute_dashboard_summary([], [], date(2025, 1, 1))
        self.assertEqual(summary['total_bookings'], 0)
        self.assertEqual(summary['average_booking_duration'], Decimal('0.00'))
        self.assertEqual(summary['top_users'], [])
        self.assertEqual(summary['vehicles_per_delegation'], {})


class ReportViewsTestCase(APITestCase):
    def setUp(self):
        self.delegation = DelegationModel.objects.create(delegation_id="B1", name="Barcelona Sants", city="Barcelona")
        self.other_delegation = DelegationModel.objects.create(delegation_id="B2", name="Girona", city="Girona")
        self.vehicle = VehicleModel.objects.create(
            delegation=self.delegation, make="Seat", model="Leon", year=2020, daily_rate=Decimal("50.00"), rented=True
        )
        VehicleModel.objects.create(
            delegation=self.other_delegation, make="Fiat", model="Panda", year=2015, daily_rate=Decimal("30.00")
        )
        today = timezone.localdate()
        BookingModel.objects.create(
            vehicle=self.vehicle, delegation=self.delegation, user_id="U1",
            start_date=today, end_date=today + timedelta(days=2)
        )

    @override_settings(RENTAL_TAX_RATE=Decimal('0.21'))
    def test_delegation_statistics(self):
        response = self.client.get(reverse('delegation-statistics'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['delegations']), 2)
        by_delegation = {entry['delegation']: entry for entry in response.data['delegations']}
        self.assertEqual(by_delegation['B1']['total_revenue'], '181.50')
        self.assertEqual(by_delegation['B1']['rented_vehicles'], 1)
        self.assertEqual(by_delegation['B2']['total_revenue'], '0.00')
        self.assertEqual(response.data['top_delegation']['delegation'], 'B1')

    def test_statistics_without_fleet(self):
        VehicleModel.objects.all().delete()
        response = self.client.get(reverse('delegation-statistics'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['delegations'], [])
        self.assertIsNone(response.data['top_delegation'])

    def test_dashboard(self):
        response = self.client.get(reverse('dashboard'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_bookings'], 1)
        self.assertEqual(response.data['active_bookings'], 1)
        self.assertEqual(response.data['average_booking_duration'], '3.00')
        self.assertEqual(response.data['vehicles_per_delegation'], {'B1': 1, 'B2': 1})

    def test_response_envelope(self):
        response = self.client.get(reverse('dashboard'))
        body = response.json()
        self.assertEqual(body['code'], 200)
        self.assertEqual(body['data']['total_bookings'], 1)
        self.assertEqual(body['metadata']['path'], reverse('dashboard'))
