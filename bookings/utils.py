import logging
import uuid

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from common.exceptions import BookingConflict, BookingNotFound
from common.retry import retry_on_db_error
from vehicles.models import VehicleModel
from .models import BookingModel

logger = logging.getLogger(__name__)


def ranges_overlap(start_a, end_a, start_b, end_b):
    """
    Two inclusive date ranges overlap when they share at least one calendar day.
    Touching ranges (end_a == start_b) count as overlapping.
    """
    return start_a <= end_b and end_a >= start_b


def calculate_duration_days(start_date, end_date):
    """
    Number of billed days, counting both the first and the last day.
    """
    return (end_date - start_date).days + 1


def calculate_total_price(booking, vehicle):
    """
    Total price of a booking: the vehicle's daily rate times the stay length.
    :param booking: Anything with ``start_date`` and ``end_date``
    :param vehicle: Anything with ``daily_rate``
    :return: Price in the vehicle's rate unit
    """
    return vehicle.daily_rate * calculate_duration_days(booking.start_date, booking.end_date)


def validate_date_range(start_date, end_date):
    if start_date is None or end_date is None:
        raise ValidationError("Both start_date and end_date are required.")
    if end_date < start_date:
        raise ValidationError("End date must not be earlier than start date.")


def create_booking(vehicle, delegation, user_id, start_date, end_date):
    """
    Book a vehicle for an inclusive date range.

    The vehicle row is locked while the overlap check and the insert run, so
    two concurrent requests for the same dates cannot both succeed; the loser
    gets a BookingConflict.
    """
    validate_date_range(start_date, end_date)
    if not user_id:
        raise ValidationError("A user ID is required to book a vehicle.")
    if vehicle.delegation_id != delegation.pk:
        raise ValidationError("The vehicle does not belong to this delegation.")

    try:
        with transaction.atomic():
            locked_vehicle = VehicleModel.objects.select_for_update().get(pk=vehicle.pk)
            if BookingModel.objects.filter(
                vehicle=locked_vehicle,
                start_date__lte=end_date,
                end_date__gte=start_date
            ).exists():
                logger.warning("Booking conflict for vehicle %s between %s and %s",
                               locked_vehicle.pk, start_date, end_date)
                raise BookingConflict()
            booking = BookingModel.objects.create(
                vehicle=locked_vehicle,
                delegation=delegation,
                user_id=user_id,
                start_date=start_date,
                end_date=end_date
            )
    except IntegrityError:
        # The (vehicle, start_date) constraint caught a race the lock could not
        logger.warning("Booking for vehicle %s starting %s rejected by the database",
                       vehicle.pk, start_date)
        raise BookingConflict()

    logger.info("Booking %s created for vehicle %s (%s to %s) by user %s",
                booking.booking_id, vehicle.pk, start_date, end_date, user_id)
    return booking


def cancel_booking(booking_id):
    try:
        booking_id = uuid.UUID(str(booking_id))
    except ValueError:
        raise BookingNotFound()
    with transaction.atomic():
        deleted, _ = BookingModel.objects.filter(booking_id=booking_id).delete()
    if not deleted:
        raise BookingNotFound()
    logger.info("Booking %s cancelled", booking_id)


def cancel_booking_by_start(vehicle_id, start_date):
    """
    Cancel the booking of a vehicle that starts on ``start_date``.
    Legacy key; unique thanks to the (vehicle, start_date) constraint.
    """
    with transaction.atomic():
        deleted, _ = BookingModel.objects.filter(vehicle_id=vehicle_id, start_date=start_date).delete()
    if not deleted:
        raise BookingNotFound(f"No booking for vehicle {vehicle_id} starting on {start_date}.")
    logger.info("Booking of vehicle %s starting %s cancelled", vehicle_id, start_date)


@retry_on_db_error()
def list_bookings(user_id=None, vehicle_id=None):
    bookings = BookingModel.objects.select_related('vehicle', 'delegation')
    if user_id:
        bookings = bookings.filter(user_id=user_id)
    if vehicle_id is not None:
        bookings = bookings.filter(vehicle_id=vehicle_id)
    return list(bookings)
