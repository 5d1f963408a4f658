from django.conf import settings
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views.decorators.gzip import gzip_page
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.utils import list_bookings
from common.retry import retry_on_db_error
from vehicles.models import VehicleModel
from .serializers import DelegationStatisticsReportSerializer, DashboardSerializer
from .utils import compute_delegation_statistics, top_delegation_by_revenue, compute_dashboard_summary


@retry_on_db_error()
def list_vehicles():
    return list(VehicleModel.objects.all())


@method_decorator(gzip_page, name='dispatch')
class DelegationStatisticsView(APIView):

    @swagger_auto_schema(
        tags=['Reports'],
        operation_id='Delegation statistics',
        operation_summary='Delegation statistics',
        operation_description='Fleet usage, reservations and taxed revenue per delegation',
        responses={200: DelegationStatisticsReportSerializer()}
    )
    def get(self, request):
        tax_rate = settings.RENTAL_TAX_RATE
        statistics = compute_delegation_statistics(list_vehicles(), list_bookings(), tax_rate)
        serializer = DelegationStatisticsReportSerializer({
            'tax_rate': tax_rate,
            'delegations': statistics,
            'top_delegation': top_delegation_by_revenue(statistics),
        })
        return Response(serializer.data, status=status.HTTP_200_OK)


@method_decorator(gzip_page, name='dispatch')
class DashboardView(APIView):

    @swagger_auto_schema(
        tags=['Reports'],
        operation_id='Dashboard',
        operation_summary='Dashboard',
        operation_description='Booking activity summary for the back-office',
        responses={200: DashboardSerializer()}
    )
    def get(self, request):
        summary = compute_dashboard_summary(list_vehicles(), list_bookings(), timezone.localdate())
        return Response(DashboardSerializer(summary).data, status=status.HTTP_200_OK)
