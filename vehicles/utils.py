import logging

from django.conf import settings
from django.db.models import Exists, OuterRef

from bookings.models import BookingModel
from bookings.utils import validate_date_range
from common.retry import retry_on_db_error
from .models import VehicleModel

logger = logging.getLogger(__name__)


@retry_on_db_error()
def find_available_vehicles(delegation_id, start_date, end_date, vintage=None):
    """
    Vehicles of a delegation with no booking overlapping [start_date, end_date].

    A booking overlaps when it starts on or before end_date and ends on or
    after start_date, so touching days count as taken.
    :param delegation_id: Delegation primary key; unknown ids give an empty list
    :param start_date: First day of the requested stay
    :param end_date: Last day of the requested stay
    :param vintage: True keeps cars built before VINTAGE_CUTOFF_YEAR, False the
        rest, None keeps all
    :return: List of available VehicleModel instances
    """
    validate_date_range(start_date, end_date)

    vehicles = VehicleModel.objects.filter(delegation_id=delegation_id)
    if vintage is True:
        vehicles = vehicles.filter(year__lt=settings.VINTAGE_CUTOFF_YEAR)
    elif vintage is False:
        vehicles = vehicles.filter(year__gte=settings.VINTAGE_CUTOFF_YEAR)

    overlapping = BookingModel.objects.filter(
        vehicle=OuterRef('pk'),
        start_date__lte=end_date,
        end_date__gte=start_date
    )
    available = list(vehicles.filter(~Exists(overlapping)))
    logger.info("Availability search in delegation %s from %s to %s: %d vehicles",
                delegation_id, start_date, end_date, len(available))
    return available
