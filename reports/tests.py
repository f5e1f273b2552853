import io
import zipfile

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.models import Classroom, SchoolSettings
from enrollments.models import Student
from subjects.models import Subject
from assessments.models import GradeEntry, Mark
from .models import ReportToken


class ReportsTestMixin:

    def setUp(self):
        self.client = APIClient()
        self.classroom = Classroom.objects.get(name="FORM 4 SCE")
        self.x = Student.objects.create(matricule="X1", name="ALPHA", sex="M", classroom=self.classroom)
        self.y = Student.objects.create(matricule="Y1", name="BETA", sex="F", classroom=self.classroom)
        self.math = Subject.objects.get(code="MATH")
        self.eng = Subject.objects.get(code="ENG")
        self.add_marks(self.math, "cc1", {self.x: "15", self.y: "8"}, teacher="Mr. Mathematics")
        self.add_marks(self.math, "ds1", {self.x: "16", self.y: None})
        self.add_marks(self.eng, "cc1", {self.x: "10", self.y: "9"})

    def add_marks(self, subject, session, values, teacher=""):
        entry = GradeEntry.objects.create(classroom=self.classroom, subject=subject, session=session, teacher=teacher)
        for student, value in values.items():
            Mark.objects.create(entry=entry, student=student, value=value, absent=value is None)
        return entry


class ReportCardTest(ReportsTestMixin, TestCase):
    """Bulletins : JSON, HTML, PDF et vérification."""

    def test_report_card_payload(self):
        """Lines grouped by subject group with session cells."""
        resp = self.client.get("/api/reports/card/", {"classroom": "FORM 4 SCE", "matricule": "X1", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        p = resp.data
        self.assertEqual(p["term_average20"], 12.75)
        self.assertEqual(p["rank"], 1)
        self.assertEqual(p["out_of"], 2)
        self.assertEqual(p["sessions"], ["CC1", "DS1", "CC2", "DS2"])
        self.assertEqual(p["classroom"], {"name": "FORM 4 SCE", "level": "OL", "roll": 2})
        group1 = p["groups"][0]
        self.assertEqual([line["code"] for line in group1["lines"]], ["MATH"])
        self.assertEqual([c["mark"] for c in group1["lines"][0]["sessions"]], [15.0, 16.0, None, None])
        self.assertEqual(p["groups"][1]["lines"][0]["letter_grade"], "C")
        self.assertEqual(p["class_stats"]["best"], 12.75)
        self.assertEqual(p["school"]["name"], SchoolSettings.load().name)

    def test_absent_cell(self):
        resp = self.client.get("/api/reports/card/", {"classroom": "FORM 4 SCE", "matricule": "Y1", "term": "1"})
        cells = resp.data["groups"][0]["lines"][0]["sessions"]
        self.assertEqual(cells[0]["mark"], 8.0)
        self.assertTrue(cells[1]["absent"])

    def test_report_card_html(self):
        resp = self.client.get("/api/reports/card/",
                               {"classroom": "FORM 4 SCE", "matricule": "X1", "term": "1", "output": "html"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("REPORT CARD", resp.content.decode())
        self.assertIn("PASSABLE", resp.content.decode())

    def test_missing_params(self):
        resp = self.client.get("/api/reports/card/", {"classroom": "FORM 4 SCE"})
        self.assertEqual(resp.status_code, 400)

    def test_unknown_student(self):
        resp = self.client.get("/api/reports/card/", {"classroom": "FORM 4 SCE", "matricule": "NOPE"})
        self.assertEqual(resp.status_code, 404)

    def test_pdf_issues_token(self):
        """Each PDF gets a verification token with the PDF hash."""
        resp = self.client.get("/api/reports/card/pdf/", {"classroom": "FORM 4 SCE", "matricule": "X1", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "application/pdf")
        self.assertTrue(resp.content.startswith(b"%PDF"))

        token = ReportToken.objects.get()
        self.assertEqual(token.student, self.x)
        self.assertEqual(token.term, "1")
        self.assertEqual(len(token.pdf_sha1), 40)

        page = self.client.get(reverse("report-verify", args=[str(token.uid)]))
        self.assertEqual(page.status_code, 200)
        self.assertIn("authentic", page.content.decode())

        token.valid = False
        token.save()
        page = self.client.get(reverse("report-verify", args=[str(token.uid)]))
        self.assertIn("revoked", page.content.decode())

    def test_verify_unknown_uid(self):
        page = self.client.get("/reports/verify/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(page.status_code, 404)

    def test_class_batch_zip(self):
        """One PDF per student in the archive."""
        resp = self.client.get("/api/reports/cards/pdf/", {"classroom": "FORM 4 SCE", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        names = zipfile.ZipFile(io.BytesIO(resp.content)).namelist()
        self.assertEqual(sorted(names), ["X1_FORM_4_SCE_T1.pdf", "Y1_FORM_4_SCE_T1.pdf"])
        self.assertEqual(ReportToken.objects.count(), 2)

    def test_class_batch_empty_class(self):
        resp = self.client.get("/api/reports/cards/pdf/", {"classroom": "FORM 1", "term": "1"})
        self.assertEqual(resp.status_code, 404)


class GradeReportTest(ReportsTestMixin, TestCase):
    """Relevé de notes d'une matière."""

    def test_grade_report(self):
        resp = self.client.get("/api/reports/grades/", {"classroom": "FORM 4 SCE", "subject": "math", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        p = resp.data
        rows = {r["matricule"]: r for r in p["student_grades"]}
        self.assertEqual(rows["X1"]["average20"], 15.5)
        self.assertEqual(rows["X1"]["average100"], 77.5)
        self.assertEqual(rows["X1"]["letter_grade"], "A")
        self.assertEqual(rows["X1"]["count"], 2)
        self.assertEqual(rows["Y1"]["count"], 1)
        self.assertEqual(p["rank_map"], {"X1": 1, "Y1": 2})
        self.assertEqual(p["teacher"], "Mr. Mathematics")
        self.assertEqual(p["statistics"]["passed"], 1)
        self.assertNotIn("cumulative_average", rows["X1"])

    def test_all_sessions(self):
        self.add_marks(self.math, "cc3", {self.y: "20"})
        resp = self.client.get("/api/reports/grades/",
                               {"classroom": "FORM 4 SCE", "subject": "MATH", "term": "1", "all_sessions": "1"})
        rows = {r["matricule"]: r for r in resp.data["student_grades"]}
        self.assertEqual(len(resp.data["sessions"]), 10)
        self.assertEqual(rows["Y1"]["cumulative_average"], 14.0)
        self.assertEqual(resp.data["rank_map"]["Y1"], 2)

    def test_student_without_marks_counts_as_zero(self):
        """Statistics treat a student with no mark in the subject as 0."""
        tech = Subject.objects.create(code="TECH", name="TECHNICAL DRAWING", group=3, coefficient=1)
        self.add_marks(tech, "cc1", {self.x: "16"})
        resp = self.client.get("/api/reports/grades/", {"classroom": "FORM 4 SCE", "subject": "TECH", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        rows = {r["matricule"]: r for r in resp.data["student_grades"]}
        self.assertIsNone(rows["Y1"]["average20"])
        self.assertEqual(resp.data["rank_map"], {"X1": 1, "Y1": 2})
        stats = resp.data["statistics"]
        self.assertEqual(stats["overall_average"], 8.0)
        self.assertEqual((stats["highest"], stats["lowest"]), (16.0, 0.0))
        self.assertEqual(stats["failed"], 1)
        self.assertEqual(stats["letter_distribution"]["NC"], 1)

    def test_grade_report_html(self):
        resp = self.client.get("/api/reports/grades/",
                               {"classroom": "FORM 4 SCE", "subject": "MATH", "output": "html"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("GRADE REPORT", resp.content.decode())

    def test_unknown_subject(self):
        resp = self.client.get("/api/reports/grades/", {"classroom": "FORM 4 SCE", "subject": "NOPE"})
        self.assertEqual(resp.status_code, 404)


class PVRTest(ReportsTestMixin, TestCase):
    """Procès-verbal."""

    def test_pvr_all_sessions_of_term(self):
        resp = self.client.get("/api/reports/pvr/", {"classroom": "FORM 4 SCE", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        students = {s["matricule"]: s for s in resp.data["students"]}
        # moyenne simple des matières notées : (15.5 + 10) / 2
        self.assertEqual(students["X1"]["overall_average20"], 12.75)
        self.assertEqual(students["Y1"]["overall_average20"], 8.5)
        self.assertEqual(students["X1"]["rank"], 1)

    def test_pvr_session_type(self):
        resp = self.client.get("/api/reports/pvr/", {"classroom": "FORM 4 SCE", "term": "1", "session_type": "ds"})
        self.assertEqual(resp.data["sessions"], ["DS1", "DS2"])
        students = {s["matricule"]: s for s in resp.data["students"]}
        self.assertEqual(students["X1"]["overall_average20"], 16.0)
        # aucune note DS : dernier rang
        self.assertIsNone(students["Y1"]["overall_average20"])
        self.assertEqual(students["Y1"]["rank"], 2)

    def test_pvr_bad_session_type(self):
        resp = self.client.get("/api/reports/pvr/", {"classroom": "FORM 4 SCE", "session_type": "exam"})
        self.assertEqual(resp.status_code, 400)

    def test_pvr_html(self):
        resp = self.client.get("/api/reports/pvr/", {"classroom": "FORM 4 SCE", "term": "1", "output": "html"})
        self.assertIn("PROCES-VERBAL", resp.content.decode())

    def test_pvr_averages_rounded_subject_averages(self):
        """The overall average is taken over subject averages rounded to 2 decimals."""
        classroom = Classroom.objects.get(name="FORM 3")
        w = Student.objects.create(matricule="W1", name="GAMMA", sex="F", classroom=classroom)
        for subject, session, value in (
            (self.math, "cc1", "13"), (self.math, "ds1", "14"), (self.math, "cc2", "14"),
            (self.eng, "cc1", "10"),
        ):
            entry = GradeEntry.objects.create(classroom=classroom, subject=subject, session=session)
            Mark.objects.create(entry=entry, student=w, value=value)

        resp = self.client.get("/api/reports/pvr/", {"classroom": "FORM 3", "term": "1"})
        self.assertEqual(resp.status_code, 200)
        row = resp.data["students"][0]
        # (13.67 + 10) / 2 = 11.835, et non 11.8333...
        self.assertEqual(row["overall_average20"], 11.84)
