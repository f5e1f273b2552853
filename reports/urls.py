from django.urls import path
from .views import (
    ReportCardView, ReportCardPDFView, ClassReportCardsPDFView,
    GradeReportView, PVRView, ReportVerifyPage,
)

urlpatterns = [
    path("reports/card/", ReportCardView.as_view(), name="report-card"),
    path("reports/card/pdf/", ReportCardPDFView.as_view(), name="report-card-pdf"),
    path("reports/cards/pdf/", ClassReportCardsPDFView.as_view(), name="report-cards-pdf"),
    path("reports/grades/", GradeReportView.as_view(), name="report-grades"),
    path("reports/pvr/", PVRView.as_view(), name="report-pvr"),
]

# page publique, hors /api/
verify_urlpatterns = [
    path("reports/verify/<uuid:uid>/", ReportVerifyPage.as_view(), name="report-verify"),
]
