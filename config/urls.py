from django.contrib import admin
from django.urls import path, include

from reports.urls import verify_urlpatterns

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("core.urls")),
    path("api/", include("subjects.urls")),
    path("api/", include("enrollments.urls")),
    path("api/", include("assessments.urls")),
    path("api/", include("grading.urls")),
    path("api/", include("reports.urls")),
    path("api/", include("analytics.urls")),
] + verify_urlpatterns
