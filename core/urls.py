from django.urls import path
from rest_framework.routers import DefaultRouter
from .views import ClassroomViewSet, SchoolSettingsView, SystemInfoView

router = DefaultRouter()
router.register(r"classes", ClassroomViewSet, basename="classes")

urlpatterns = [
    path("settings/", SchoolSettingsView.as_view(), name="school-settings"),
    path("system/info/", SystemInfoView.as_view(), name="system-info"),
] + router.urls
