import logging

from celery import shared_task
from django.db import transaction
from django.utils import timezone

from bookings.models import BookingModel
from .models import VehicleModel

logger = logging.getLogger(__name__)


@shared_task
def sync_rented_flags_task():
    """
    Recompute the advisory ``rented`` flag of every vehicle from the bookings
    covering today.
    :return: Number of vehicles flagged and released
    """
    today = timezone.localdate()
    active_vehicle_ids = set(
        BookingModel.objects.filter(start_date__lte=today, end_date__gte=today)
        .values_list('vehicle_id', flat=True)
    )
    with transaction.atomic():
        flagged = VehicleModel.objects.filter(pk__in=active_vehicle_ids, rented=False).update(rented=True)
        released = VehicleModel.objects.exclude(pk__in=active_vehicle_ids).filter(rented=True).update(rented=False)
    logger.info("Rented flags synchronised for %s: %d flagged, %d released", today, flagged, released)
    return {'flagged': flagged, 'released': released}
