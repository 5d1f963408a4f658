from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import DelegationViewSet

router = SimpleRouter()
router.register(r'', DelegationViewSet, basename='delegation')

urlpatterns = [
    path('', include(router.urls)),
]
