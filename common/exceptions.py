from rest_framework import status
from rest_framework.exceptions import APIException, NotFound


class BookingConflict(APIException):
    """
    Raised when the requested dates overlap a booking that already holds the vehicle.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This vehicle is no longer available for the selected dates.'
    default_code = 'booking_conflict'


class BookingNotFound(NotFound):
    default_detail = 'No booking matches the given key.'
    default_code = 'booking_not_found'
