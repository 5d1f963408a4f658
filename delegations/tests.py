from datetime import date

from rest_framework import status
from rest_framework.test import APITestCase

from bookings.models import BookingModel
from vehicles.models import VehicleModel
from .models import DelegationModel
from .serializers import DelegationSerializer


class DelegationTestCase(APITestCase):
    def setUp(self):
        """Set up test dependencies"""
        self.delegation = DelegationModel.objects.create(
            delegation_id="B1",
            name="Barcelona Sants",
            city="Barcelona",
            address="Plaça dels Països Catalans 1",
            manager="Marta Puig",
            phone="934000000",
            latitude=41.379,
            longitude=2.140,
            car_count=2
        )
        self.other_delegation = DelegationModel.objects.create(
            delegation_id="M1",
            name="Madrid Atocha",
            city="Madrid"
        )
        self.vehicle = VehicleModel.objects.create(
            delegation=self.delegation,
            make="Seat",
            model="Ibiza",
            year=2019,
            color="Red",
            daily_rate=45
        )

        self.valid_payload = {
            "name": "Girona Centre",
            "city": "Girona",
            "address": "Carrer Nou 3",
            "manager": "Jordi Vila",
            "phone": "972000000",
            "latitude": 41.9794,
            "longitude": 2.8214,
            "car_count": 5
        }

        self.invalid_payload = {
            "name": "",
            "city": "",
            "latitude": "invalid_latitude",
            "longitude": 200
        }

    def test_get_delegations(self):
        """Test retrieving a list of delegations"""
        response = self.client.get("/delegations/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), DelegationModel.objects.count())

    def test_filter_delegations_by_city(self):
        """Test narrowing the list down to one city"""
        response = self.client.get("/delegations/", {"city": "madrid"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([d["delegation_id"] for d in response.data], ["M1"])

    def test_get_delegation_detail(self):
        """Test retrieving a single delegation's details"""
        response = self.client.get(f"/delegations/{self.delegation.pk}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], self.delegation.name)
        self.assertEqual(response.data["car_count"], 2)

    def test_create_delegation(self):
        """Test creating a new delegation gets a generated id"""
        response = self.client.post("/delegations/", data=self.valid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(DelegationModel.objects.count(), 3)
        self.assertEqual(response.data["name"], self.valid_payload["name"])
        self.assertTrue(response.data["delegation_id"])

    def test_create_delegation_invalid(self):
        """Test creating a new delegation with invalid data"""
        response = self.client.post("/delegations/", data=self.invalid_payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(DelegationModel.objects.count(), 2)

    def test_create_delegation_duplicate_name(self):
        """Test delegation names are unique"""
        payload = dict(self.valid_payload, name=self.delegation.name)
        response = self.client.post("/delegations/", data=payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", response.data)

    def test_update_delegation(self):
        """Test updating an existing delegation"""
        updated_data = {
            "name": "Barcelona Sants Estació",
            "city": "Barcelona",
            "latitude": 41.3790,
            "longitude": 2.1400
        }
        response = self.client.put(f"/delegations/{self.delegation.pk}/", data=updated_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.delegation.refresh_from_db()
        self.assertEqual(self.delegation.name, updated_data["name"])

    def test_update_keeps_own_name(self):
        """Test an update may keep the delegation's current name"""
        response = self.client.patch(
            f"/delegations/{self.delegation.pk}/",
            data={"name": self.delegation.name, "phone": "934111111"},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.delegation.refresh_from_db()
        self.assertEqual(self.delegation.phone, "934111111")

    def test_delete_delegation_cascades(self):
        """Test deleting a delegation removes its vehicles and their bookings"""
        BookingModel.objects.create(
            vehicle=self.vehicle,
            delegation=self.delegation,
            user_id="user-1",
            start_date=date(2025, 1, 10),
            end_date=date(2025, 1, 12)
        )
        response = self.client.delete(f"/delegations/{self.delegation.pk}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DelegationModel.objects.filter(pk="B1").exists())
        self.assertEqual(VehicleModel.objects.count(), 0)
        self.assertEqual(BookingModel.objects.count(), 0)

    def test_list_delegation_vehicles(self):
        """Test listing the vehicles of one delegation"""
        VehicleModel.objects.create(
            delegation=self.other_delegation, make="Renault", model="Clio", year=2021, daily_rate=40
        )
        response = self.client.get(f"/delegations/{self.delegation.pk}/vehicles/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([v["id"] for v in response.data], [self.vehicle.id])

    def test_list_vehicles_of_unknown_delegation(self):
        """Test an unknown delegation simply has no vehicles"""
        response = self.client.get("/delegations/unknown/vehicles/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_get_unknown_delegation(self):
        response = self.client.get("/delegations/unknown/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_serializer_valid_data(self):
        """Test serializer with valid data"""
        serializer = DelegationSerializer(data=self.valid_payload)
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_serializer_invalid_data(self):
        """Test serializer with invalid data"""
        serializer = DelegationSerializer(data=self.invalid_payload)
        self.assertFalse(serializer.is_valid())
        self.assertIn("name", serializer.errors)
        self.assertIn("city", serializer.errors)
        self.assertIn("latitude", serializer.errors)
        self.assertIn("longitude", serializer.errors)

    def test_delegation_str_method(self):
        self.assertEqual(str(self.delegation), "Barcelona Sants (Barcelona)")
