import logging

from django.utils.decorators import method_decorator
from django.views.decorators.gzip import gzip_page
from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from vehicles.models import VehicleModel
from vehicles.serializers import VehicleSerializer
from .models import DelegationModel
from .serializers import DelegationSerializer

logger = logging.getLogger(__name__)


@method_decorator(gzip_page, name='dispatch')
class DelegationViewSet(viewsets.ModelViewSet):
    """
    A viewset for viewing and editing delegation (branch) instances.
    """
    serializer_class = DelegationSerializer
    queryset = DelegationModel.objects.all()

    def get_queryset(self):
        """
        Optionally narrow the list down to one city with ``?city=``.
        """
        queryset = self.queryset
        city = self.request.query_params.get('city')
        if city:
            queryset = queryset.filter(city__iexact=city)
        return queryset

    def perform_create(self, serializer):
        delegation = serializer.save()
        logger.info("Delegation %s (%s) created", delegation.pk, delegation.name)

    def perform_destroy(self, instance):
        """
        Deleting a delegation cascades to its vehicles and their bookings.
        """
        logger.info("Deleting delegation %s with %d vehicles", instance.pk, instance.vehicles.count())
        instance.delete()

    @swagger_auto_schema(
        operation_id="list_delegation_vehicles",
        operation_summary="List vehicles of a delegation",
        operation_description="Every vehicle owned by the delegation, booked or not. "
                              "An unknown delegation has no vehicles.",
        responses={200: VehicleSerializer(many=True)}
    )
    @action(detail=True, methods=['get'], url_path='vehicles')
    def vehicles(self, request, pk=None):
        vehicles = VehicleModel.objects.filter(delegation_id=pk)
        serializer = VehicleSerializer(vehicles, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
