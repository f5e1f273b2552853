import io, logging, zipfile
from django.http import HttpResponse, Http404
from django.urls import reverse
from django.views.generic import TemplateView
from django.template.loader import render_to_string

from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

from enrollments.models import Student
from grading.repository import OrmGradeRepository
from grading.services import compute_class_term_results
from grading.sessions import parse_term, sessions_for_pvr, SESSION_CODES
from .models import ReportToken
from .services import (
    build_report_card, build_grade_report, build_pvr, build_report_card_html,
    render_pdf_from_html, sha1_bytes, TIMES_STACK,
)

logger = logging.getLogger(__name__)


def _wants_html(request):
    return request.query_params.get("output") == "html"


def _html_response(template, payload):
    return HttpResponse(render_to_string(template, {"p": payload, "TIMES_STACK": TIMES_STACK}))


def _pdf_filename(payload):
    return f"{payload['student']['matricule']}_{payload['classroom']['name']}_T{payload['term']}.pdf".replace(" ", "_")


def issue_report_card_pdf(request, snapshot, matricule, term, results=None):
    """Bulletin PDF + jeton de vérification (QR)."""
    payload = build_report_card(snapshot, matricule, term, results)
    student = Student.objects.get(matricule=payload["student"]["matricule"])
    token = ReportToken.objects.create(
        student=student, class_name=snapshot.class_name, term=str(payload["term"]), payload=payload,
    )
    verify_url = request.build_absolute_uri(reverse("report-verify", args=[str(token.uid)]))
    pdf = render_pdf_from_html(build_report_card_html(payload, verify_url))
    token.pdf_sha1 = sha1_bytes(pdf)
    token.save(update_fields=["pdf_sha1"])
    logger.info("Issued report card %s for %s (term %s)", token.uid, student.matricule, token.term)
    return payload, pdf


class ReportCardView(APIView):
    """Bulletin d'un élève (JSON, ou HTML avec ?output=html)."""
    permission_classes = [AllowAny]

    def get(self, request):
        class_name = request.query_params.get("classroom")
        matricule = request.query_params.get("matricule")
        if not class_name or not matricule:
            return Response({"detail": "classroom and matricule are required"}, status=status.HTTP_400_BAD_REQUEST)
        term = parse_term(request.query_params.get("term", "1"))

        snapshot = OrmGradeRepository().snapshot(class_name)
        payload = build_report_card(snapshot, matricule, term)
        if _wants_html(request):
            return HttpResponse(build_report_card_html(payload))
        return Response(payload)


class ReportCardPDFView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        class_name = request.query_params.get("classroom")
        matricule = request.query_params.get("matricule")
        if not class_name or not matricule:
            return Response({"detail": "classroom and matricule are required"}, status=status.HTTP_400_BAD_REQUEST)
        term = parse_term(request.query_params.get("term", "1"))

        snapshot = OrmGradeRepository().snapshot(class_name)
        payload, pdf = issue_report_card_pdf(request, snapshot, matricule, term)

        resp = HttpResponse(pdf, content_type="application/pdf")
        resp["Content-Disposition"] = f'inline; filename="{_pdf_filename(payload)}"'
        return resp


class ClassReportCardsPDFView(APIView):
    """Tous les bulletins d'une classe dans un zip."""
    permission_classes = [AllowAny]

    def get(self, request):
        class_name = request.query_params.get("classroom")
        if not class_name:
            return Response({"detail": "classroom is required"}, status=status.HTTP_400_BAD_REQUEST)
        term = parse_term(request.query_params.get("term", "1"))

        snapshot = OrmGradeRepository().snapshot(class_name)
        if not snapshot.roster:
            return Response({"detail": "No students found in this class"}, status=status.HTTP_404_NOT_FOUND)
        results = compute_class_term_results(snapshot, term)

        memzip = io.BytesIO()
        with zipfile.ZipFile(memzip, "w", zipfile.ZIP_DEFLATED) as zf:
            for student in snapshot.roster:
                payload, pdf = issue_report_card_pdf(request, snapshot, student.matricule, term, results)
                zf.writestr(_pdf_filename(payload), pdf)

        memzip.seek(0)
        resp = HttpResponse(memzip.getvalue(), content_type="application/zip")
        fname = f"{snapshot.class_name}_T{term}.zip".replace(" ", "_")
        resp["Content-Disposition"] = f'attachment; filename="{fname}"'
        return resp


class GradeReportView(APIView):
    """Relevé de notes d'une matière pour une classe."""
    permission_classes = [AllowAny]

    def get(self, request):
        class_name = request.query_params.get("classroom")
        subject = request.query_params.get("subject")
        if not class_name or not subject:
            return Response({"detail": "classroom and subject are required"}, status=status.HTTP_400_BAD_REQUEST)
        term = parse_term(request.query_params.get("term", "1"))
        include_all = request.query_params.get("all_sessions", "0") in ("1", "true")

        snapshot = OrmGradeRepository().snapshot(class_name, sessions=SESSION_CODES)
        payload = build_grade_report(snapshot, subject, term, include_all_sessions=include_all)
        if _wants_html(request):
            return _html_response("reports/grade_report.html", payload)
        return Response(payload)


class PVRView(APIView):
    """Procès-verbal de la classe (session_type: cc, ds ou all)."""
    permission_classes = [AllowAny]

    def get(self, request):
        class_name = request.query_params.get("classroom")
        if not class_name:
            return Response({"detail": "classroom is required"}, status=status.HTTP_400_BAD_REQUEST)
        term = parse_term(request.query_params.get("term", "1"))
        session_type = request.query_params.get("session_type", "")

        snapshot = OrmGradeRepository().snapshot(class_name, sessions=sessions_for_pvr(term, session_type))
        payload = build_pvr(snapshot, term, session_type)
        if _wants_html(request):
            return _html_response("reports/pvr.html", payload)
        return Response(payload)


class ReportVerifyPage(TemplateView):
    template_name = "reports/verify.html"

    def get(self, request, uid):
        try:
            token = ReportToken.objects.select_related("student").get(uid=uid)
        except ReportToken.DoesNotExist:
            raise Http404("Unknown report UID")
        totals = token.payload or {}
        ctx = {
            "valid": token.valid,
            "student": {
                "matricule": token.student.matricule,
                "name": token.student.name,
            },
            "classroom": token.class_name,
            "year": (totals.get("school") or {}).get("academic_year", ""),
            "term": token.term,
            "average": totals.get("term_average20"),
            "rank": totals.get("rank"),
            "out_of": totals.get("out_of"),
            "created_at": token.created_at,
            "pdf_sha1": token.pdf_sha1,
        }
        return self.render_to_response(ctx)
