import logging

from django.utils.decorators import method_decorator
from django.views.decorators.gzip import gzip_page
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from bookings.serializers import BookingSerializer
from bookings.utils import list_bookings
from .models import VehicleModel
from .serializers import VehicleSerializer, VehicleRentedSerializer, AvailabilityQuerySerializer
from .tasks import sync_rented_flags_task
from .utils import find_available_vehicles

logger = logging.getLogger(__name__)


@method_decorator(gzip_page, name='dispatch')
class VehicleViewSet(viewsets.ModelViewSet):
    """
    A viewset for viewing and editing vehicle instances.
    """
    serializer_class = VehicleSerializer
    queryset = VehicleModel.objects.select_related('delegation').all()

    def get_queryset(self):
        """
        Optionally narrow the list down to one delegation with ``?delegation=``.
        """
        queryset = self.queryset
        delegation_id = self.request.query_params.get('delegation')
        if delegation_id:
            queryset = queryset.filter(delegation_id=delegation_id)
        return queryset

    def perform_create(self, serializer):
        vehicle = serializer.save()
        logger.info("Vehicle %s (%s) added to delegation %s", vehicle.pk, vehicle, vehicle.delegation_id)

    def perform_update(self, serializer):
        vehicle = serializer.save()
        logger.info("Vehicle %s updated", vehicle.pk)

    def perform_destroy(self, instance):
        """
        Deleting a vehicle cascades to its bookings.
        """
        logger.info("Deleting vehicle %s with %d bookings", instance.pk, instance.bookings.count())
        instance.delete()

    @swagger_auto_schema(
        operation_id="available_vehicles",
        operation_summary="Search available vehicles",
        operation_description="Vehicles of a delegation with no booking overlapping the requested dates.",
        query_serializer=AvailabilityQuerySerializer,
        responses={
            200: VehicleSerializer(many=True),
            400: 'Bad Request'
        }
    )
    @action(detail=False, methods=['get'], url_path='available')
    def available(self, request):
        query = AvailabilityQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        vehicles = find_available_vehicles(
            query.validated_data['delegation'],
            query.validated_data['start_date'],
            query.validated_data['end_date'],
            vintage=query.validated_data['vintage']
        )
        return Response(VehicleSerializer(vehicles, many=True).data, status=status.HTTP_200_OK)

    @swagger_auto_schema(
        operation_id="vehicle_bookings",
        operation_summary="List bookings of a vehicle",
        responses={
            200: BookingSerializer(many=True),
            404: 'Not Found'
        }
    )
    @action(detail=True, methods=['get'], url_path='bookings')
    def bookings(self, request, pk=None):
        vehicle = self.get_object()
        serializer = BookingSerializer(list_bookings(vehicle_id=vehicle.pk), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @swagger_auto_schema(
        operation_id="set_vehicle_rented",
        operation_summary="Set the rented flag",
        operation_description="Set the advisory rented flag of a vehicle. Availability searches ignore it.",
        request_body=VehicleRentedSerializer,
        responses={
            200: VehicleRentedSerializer(),
            400: 'Bad Request'
        }
    )
    @action(detail=True, methods=['post'], url_path='set-rented')
    def set_rented(self, request, pk=None):
        vehicle = self.get_object()
        serializer = VehicleRentedSerializer(vehicle, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_200_OK)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @swagger_auto_schema(
        operation_id="sync_rented_flags",
        operation_summary="Synchronise rented flags",
        operation_description="Queue a recomputation of every rented flag from today's bookings.",
        request_body=openapi.Schema(type=openapi.TYPE_OBJECT, properties={}),
        responses={202: openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={
                'task_id': openapi.Schema(type=openapi.TYPE_STRING),
            }
        )}
    )
    @action(detail=False, methods=['post'], url_path='sync-rented')
    def sync_rented(self, request):
        result = sync_rented_flags_task.delay()
        return Response({'task_id': result.id}, status=status.HTTP_202_ACCEPTED)
