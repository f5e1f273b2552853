from django.urls import path
from .views import class_stats, school_stats

urlpatterns = [
    path("analytics/classes/<str:class_name>/stats/", class_stats, name="class-stats"),
    path("statistics/", school_stats, name="school-stats"),
]
