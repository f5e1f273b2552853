from django.test import TestCase
from rest_framework.test import APIClient

from core.models import Classroom
from enrollments.models import Student
from subjects.models import Subject
from assessments.models import GradeEntry, Mark


class AnalyticsApiTest(TestCase):
    """Statistiques de classe et d'établissement."""

    def setUp(self):
        self.client = APIClient()
        f4 = Classroom.objects.get(name="FORM 4 SCE")
        l6 = Classroom.objects.get(name="L6 SC")
        self.a = Student.objects.create(matricule="A", name="A", sex="M", classroom=f4)
        self.b = Student.objects.create(matricule="B", name="B", sex="F", classroom=f4)
        self.c = Student.objects.create(matricule="C", name="C", sex="F", classroom=l6)
        math = Subject.objects.get(code="MATH")
        eng = Subject.objects.get(code="ENG")

        e = GradeEntry.objects.create(classroom=f4, subject=math, session="cc1")
        Mark.objects.create(entry=e, student=self.a, value="16")
        Mark.objects.create(entry=e, student=self.b, value="8")
        e = GradeEntry.objects.create(classroom=f4, subject=eng, session="cc3")
        Mark.objects.create(entry=e, student=self.a, value="12")
        Mark.objects.create(entry=e, student=self.b, absent=True)
        e = GradeEntry.objects.create(classroom=l6, subject=math, session="cc1")
        Mark.objects.create(entry=e, student=self.c, value="10")

    def test_class_stats_term(self):
        """Term statistics over the ranked averages."""
        resp = self.client.get("/api/analytics/classes/FORM%204%20SCE/stats/", {"term": "1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["class_name"], "FORM 4 SCE")
        self.assertEqual(resp.data["total_students"], 2)
        self.assertEqual(resp.data["overall_average"], 12.0)
        self.assertEqual(resp.data["passed"], 1)
        self.assertEqual(resp.data["distribution"]["excellent"], 1)

    def test_class_stats_subject(self):
        """Per-subject statistics default to all sessions."""
        resp = self.client.get("/api/analytics/classes/FORM%204%20SCE/stats/", {"subject": "eng"})
        self.assertEqual(resp.status_code, 200)
        # B absent, sans note : compté à 0
        self.assertEqual(resp.data["total_students"], 2)
        self.assertEqual(resp.data["overall_average"], 6.0)
        self.assertEqual(resp.data["lowest"], 0.0)
        self.assertEqual(resp.data["failed"], 1)

    def test_class_stats_errors(self):
        resp = self.client.get("/api/analytics/classes/FORM%209/stats/")
        self.assertEqual(resp.status_code, 404)
        resp = self.client.get("/api/analytics/classes/FORM%204%20SCE/stats/", {"term": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_school_stats(self):
        """Enrollment and individual marks across the school."""
        resp = self.client.get("/api/statistics/")
        self.assertEqual(resp.status_code, 200)
        by_class = {c["class_name"]: c for c in resp.data["enrollment"]}
        self.assertEqual(by_class["FORM 4 SCE"], {"class_name": "FORM 4 SCE", "level": "OL",
                                                  "total": 2, "male": 1, "female": 1})
        self.assertEqual(by_class["FORM 1"]["total"], 0)
        self.assertEqual(resp.data["total_students"], 3)

        marks = resp.data["marks"]
        self.assertEqual(marks["count"], 4)
        self.assertEqual(marks["mean"], 11.5)
        self.assertEqual(marks["mean100"], 57.5)
        self.assertEqual((marks["highest"], marks["lowest"]), (16.0, 8.0))

        self.assertEqual(resp.data["distribution"]["excellent"], 1)
        self.assertEqual(resp.data["distribution"]["passable"], 1)
        self.assertEqual(resp.data["ol_letter_distribution"]["A"], 1)
        self.assertEqual(resp.data["ol_letter_distribution"]["D"], 1)
        self.assertEqual(resp.data["ol_letter_distribution"]["B"], 1)
        self.assertEqual(resp.data["al_letter_distribution"]["D"], 1)
        self.assertIsNotNone(resp.data["last_updated"])
