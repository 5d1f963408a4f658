from django.urls import path, include
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework.permissions import AllowAny

schema_view = get_schema_view(
    openapi.Info(
        title="Renting API",
        default_version='v1',
        description="Car rental reservations: delegations, vehicles, bookings and reports",
    ),
    public=True,
    permission_classes=[AllowAny],
)

urlpatterns = [
    path('delegations/', include('delegations.urls')),
    path('vehicles/', include('vehicles.urls')),
    path('bookings/', include('bookings.urls')),
    path('reports/', include('reports.urls')),

    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
