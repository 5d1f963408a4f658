from django.utils.decorators import method_decorator
from django.views.decorators.gzip import gzip_page
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import BookingModel
from .serializers import BookingSerializer, BookingCancelSerializer
from .utils import create_booking, cancel_booking, cancel_booking_by_start, list_bookings


@method_decorator(gzip_page, name='dispatch')
class BookingViewSet(viewsets.ModelViewSet):
    """
    A viewset for creating, listing and cancelling bookings.
    Bookings are never edited: cancel and book again instead.
    """
    serializer_class = BookingSerializer
    queryset = BookingModel.objects.select_related('vehicle', 'delegation').all()
    http_method_names = ['get', 'post', 'delete', 'head', 'options']
    lookup_value_regex = '[0-9a-fA-F-]{32,36}'

    @swagger_auto_schema(
        operation_id="list_bookings",
        operation_summary="List bookings",
        operation_description="All bookings, or only those of one user with ``?user_id=``.",
        manual_parameters=[
            openapi.Parameter('user_id', openapi.IN_QUERY, type=openapi.TYPE_STRING, required=False),
        ],
        responses={200: BookingSerializer(many=True)}
    )
    def list(self, request, *args, **kwargs):
        bookings = list_bookings(user_id=request.query_params.get('user_id'))
        return Response(self.get_serializer(bookings, many=True).data, status=status.HTTP_200_OK)

    @swagger_auto_schema(
        operation_id="create_booking",
        operation_summary="Book a vehicle",
        operation_description="Book a vehicle for an inclusive date range. "
                              "Fails with 409 when the dates overlap an existing booking.",
        request_body=BookingSerializer,
        responses={
            201: BookingSerializer(),
            400: 'Bad Request',
            409: 'Conflict'
        }
    )
    def create(self, request, *args, **kwargs):
        """
        1. Validate the payload.
        2. Lock the vehicle, check for overlaps and insert in one transaction.
        """
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = create_booking(
            vehicle=serializer.validated_data['vehicle'],
            delegation=serializer.validated_data['delegation'],
            user_id=serializer.validated_data['user_id'],
            start_date=serializer.validated_data['start_date'],
            end_date=serializer.validated_data['end_date']
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_id="cancel_booking",
        operation_summary="Cancel a booking",
        responses={204: 'No Content', 404: 'Not Found'}
    )
    def destroy(self, request, *args, **kwargs):
        booking = self.get_object()
        cancel_booking(booking.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @swagger_auto_schema(
        methods=['post'],
        operation_id="cancel_booking_by_start",
        operation_summary="Cancel a booking by vehicle and start date",
        operation_description="Legacy cancellation key. Prefer DELETE /bookings/{booking_id}/.",
        request_body=BookingCancelSerializer,
        responses={204: 'No Content', 400: 'Bad Request', 404: 'Not Found'}
    )
    @action(detail=False, methods=['post'], url_path='cancel')
    def cancel(self, request):
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cancel_booking_by_start(serializer.validated_data['vehicle'], serializer.validated_data['start_date'])
        return Response(status=status.HTTP_204_NO_CONTENT)
