import uuid

from django.db import models


def generate_delegation_id():
    return uuid.uuid4().hex


class DelegationModel(models.Model):
    delegation_id = models.CharField(
        primary_key=True,
        max_length=64,
        default=generate_delegation_id,
        editable=False
    )
    name = models.CharField(max_length=100, unique=True, db_index=True)
    city = models.CharField(max_length=100, db_index=True)
    address = models.CharField(max_length=255, blank=True)
    manager = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    # Declared fleet size, kept by hand; not derived from the vehicle rows
    car_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['city'], name='delegation_city_idx'),
            models.Index(fields=['latitude', 'longitude'], name='delegation_coords_idx'),
        ]

    def __str__(self):
        return f'{self.name} ({self.city})'
