import uuid

from django.db import models


def generate_operation_id():
    return f'car#{uuid.uuid4()}'


class VehicleModel(models.Model):
    delegation = models.ForeignKey(
        'delegations.DelegationModel',
        on_delete=models.CASCADE,
        related_name='vehicles',
        db_index=True
    )
    # Business key of the car inside its delegation
    operation_id = models.CharField(max_length=64, default=generate_operation_id)
    make = models.CharField(max_length=50, db_index=True)
    model = models.CharField(max_length=50)
    year = models.PositiveSmallIntegerField(db_index=True)
    color = models.CharField(max_length=30, blank=True)
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2)
    # Advisory only: availability is always computed from bookings
    rented = models.BooleanField(default=False, db_index=True)
    engine = models.CharField(max_length=50, blank=True)
    horsepower = models.CharField(max_length=20, blank=True)
    transmission = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['make', 'model']
        constraints = [
            models.UniqueConstraint(
                fields=['delegation', 'operation_id'],
                name='unique_vehicle_operation_per_delegation'
            ),
        ]
        indexes = [
            models.Index(fields=['delegation', 'year'], name='vehicle_delegation_year_idx'),
        ]

    def __str__(self):
        return f'{self.make} {self.model} ({self.year})'
