import uuid

from django.db import models

from delegations.models import DelegationModel
from vehicles.models import VehicleModel


class BookingModel(models.Model):
    booking_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    vehicle = models.ForeignKey(
        VehicleModel, on_delete=models.CASCADE, related_name='bookings', db_index=True
    )
    delegation = models.ForeignKey(
        DelegationModel, on_delete=models.CASCADE, related_name='bookings', db_index=True
    )
    user_id = models.CharField(max_length=64, db_index=True)
    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            # Also the legacy cancellation key
            models.UniqueConstraint(
                fields=['vehicle', 'start_date'],
                name='unique_booking_vehicle_start'
            ),
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F('start_date')),
                name='booking_end_not_before_start'
            ),
        ]
        indexes = [
            models.Index(fields=['vehicle', 'start_date', 'end_date'], name='booking_vehicle_range_idx'),
            models.Index(fields=['delegation', 'start_date'], name='booking_delegation_start_idx'),
        ]

    def __str__(self):
        return f"Booking {self.booking_id} - {self.user_id} - {self.vehicle}"

