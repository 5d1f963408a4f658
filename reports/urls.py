from django.urls import path
from .views import DelegationStatisticsView, DashboardView

urlpatterns = [
    path('statistics/', DelegationStatisticsView.as_view(), name='delegation-statistics'),
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
]
