from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rides_api.views import DriverViewSet, QuoteView, RideViewSet

router = DefaultRouter()
router.register(r'rides', RideViewSet, basename='ride')
router.register(r'drivers', DriverViewSet, basename='driver')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include(router.urls)),
    path('api/v1/quotes/', QuoteView.as_view(), name='quote'),
]
