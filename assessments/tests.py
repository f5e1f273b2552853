from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from core.models import Classroom
from enrollments.models import Student
from subjects.models import Subject
from .models import GradeEntry, Mark


class GradeEntryApiTest(TestCase):
    """Saisie des notes par séance."""

    def setUp(self):
        self.client = APIClient()
        self.classroom = Classroom.objects.get(name="FORM 4 SCE")
        self.a = Student.objects.create(matricule="E21S40001", name="ABENA", sex="F", classroom=self.classroom)
        self.b = Student.objects.create(matricule="E21S40002", name="BELLO", sex="M", classroom=self.classroom)
        self.other = Student.objects.create(
            matricule="E21S10001", name="OTHER", sex="M", classroom=Classroom.objects.get(name="FORM 1"),
        )

    def post_bulk(self, marks, session="cc1", subject="MATH", **extra):
        body = {"classroom": "form 4 sce", "subject": subject, "session": session,
                "coefficient": 2, "teacher": "Mr. Mathematics", "date": "2024-09-15", "marks": marks}
        body.update(extra)
        return self.client.post("/api/grades/bulk/", body, format="json")

    def test_bulk_creates_entry(self):
        """First save creates the entry and its marks."""
        resp = self.post_bulk([
            {"matricule": "E21S40001", "mark": "15"},
            {"matricule": "E21S40002", "mark": "", "absent": True},
        ])
        self.assertEqual(resp.status_code, 201)
        self.assertTrue(resp.data["created"])
        self.assertEqual(resp.data["saved"], ["E21S40001", "E21S40002"])
        entry = GradeEntry.objects.get(classroom=self.classroom, subject__code="MATH", session="cc1")
        self.assertEqual(entry.teacher, "Mr. Mathematics")
        self.assertEqual(entry.marks.get(student=self.a).value, Decimal("15"))
        self.assertTrue(entry.marks.get(student=self.b).absent)

    def test_bulk_replaces_marks(self):
        """Saving the same key again replaces the whole list."""
        self.post_bulk([{"matricule": "E21S40001", "mark": "15"}, {"matricule": "E21S40002", "mark": "9"}])
        resp = self.post_bulk([{"matricule": "E21S40002", "mark": "11"}], coefficient=3)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.data["created"])
        entry = GradeEntry.objects.get(classroom=self.classroom, subject__code="MATH", session="cc1")
        self.assertEqual(entry.coefficient, 3)
        self.assertEqual(list(entry.marks.values_list("student__matricule", flat=True)), ["E21S40002"])
        self.assertEqual(GradeEntry.objects.count(), 1)

    def test_bulk_skips_unknown_students(self):
        """Matricules outside the class are reported, not saved."""
        resp = self.post_bulk([
            {"matricule": "E21S40001", "mark": "12"},
            {"matricule": "E21S10001", "mark": "12"},
            {"matricule": "GHOST", "mark": "12"},
        ])
        self.assertEqual(resp.status_code, 201)
        self.assertEqual([s["matricule"] for s in resp.data["skipped"]], ["E21S10001", "GHOST"])
        self.assertFalse(Mark.objects.filter(student=self.other).exists())

    def test_bulk_rejects_bad_marks(self):
        """Out of range or non numeric marks reject the request."""
        for bad in ("21", "abc", "-2"):
            resp = self.post_bulk([{"matricule": "E21S40001", "mark": bad}])
            self.assertEqual(resp.status_code, 400, bad)
        self.assertEqual(GradeEntry.objects.count(), 0)

    def test_bulk_rejects_extra_decimals(self):
        """Marks are stored with 2 decimals; more precision is refused, not rounded."""
        resp = self.post_bulk([{"matricule": "E21S40001", "mark": "12.345"}])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(GradeEntry.objects.count(), 0)

        resp = self.post_bulk([{"matricule": "E21S40001", "mark": "12.50"}])
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Mark.objects.get(student__matricule="E21S40001").value, Decimal("12.5"))

    def test_bulk_rejects_bad_session(self):
        resp = self.post_bulk([], session="cc9")
        self.assertEqual(resp.status_code, 400)

    def test_bulk_unknown_subject(self):
        resp = self.post_bulk([], subject="ZZZ")
        self.assertEqual(resp.status_code, 404)

    def test_lookup(self):
        """Lookup returns the entry, or an empty object."""
        resp = self.client.get("/api/grades/lookup/", {"classroom": "FORM 4 SCE", "subject": "MATH", "session": "cc1"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {})

        self.post_bulk([{"matricule": "E21S40001", "mark": "14.5", "observation": "Good"}])
        resp = self.client.get("/api/grades/lookup/", {"classroom": "FORM 4 SCE", "subject": "math", "session": "CC1"})
        self.assertEqual(resp.data["subject"], "MATH")
        self.assertEqual(resp.data["marks"][0]["value"], 14.5)
        self.assertEqual(resp.data["marks"][0]["observation"], "Good")

    def test_lookup_requires_params(self):
        resp = self.client.get("/api/grades/lookup/", {"classroom": "FORM 4 SCE"})
        self.assertEqual(resp.status_code, 400)

    def test_student_history(self):
        """History is ordered by session."""
        self.post_bulk([{"matricule": "E21S40001", "mark": "16"}], session="ds1")
        self.post_bulk([{"matricule": "E21S40001", "mark": "15"}], session="cc1")
        resp = self.client.get("/api/grades/student-history/",
                               {"classroom": "FORM 4 SCE", "subject": "MATH", "matricule": "E21S40001"})
        self.assertEqual([(r["session"], r["mark"]) for r in resp.data], [("cc1", 15.0), ("ds1", 16.0)])

    def test_ranking(self):
        """Subject ranking over all sessions, or one term."""
        self.post_bulk([{"matricule": "E21S40001", "mark": "10"}, {"matricule": "E21S40002", "mark": "12"}])
        self.post_bulk([{"matricule": "E21S40001", "mark": "20"}], session="cc3")

        resp = self.client.get("/api/grades/ranking/", {"classroom": "FORM 4 SCE", "subject": "MATH"})
        self.assertEqual([(r["matricule"], r["rank"], r["average"]) for r in resp.data],
                         [("E21S40001", 1, 15.0), ("E21S40002", 2, 12.0)])

        resp = self.client.get("/api/grades/ranking/", {"classroom": "FORM 4 SCE", "subject": "MATH", "term": "1"})
        self.assertEqual(resp.data[0]["matricule"], "E21S40002")

    def test_ranking_unknown_subject(self):
        resp = self.client.get("/api/grades/ranking/", {"classroom": "FORM 4 SCE", "subject": "NOPE"})
        self.assertEqual(resp.status_code, 404)

    def test_by_term(self):
        """Entries of a class inside the term window."""
        self.post_bulk([{"matricule": "E21S40001", "mark": "10"}])
        self.post_bulk([{"matricule": "E21S40001", "mark": "10"}], session="ds3")
        resp = self.client.get("/api/grades/by-term/", {"classroom": "FORM 4 SCE", "term": "1"})
        self.assertEqual([e["session"] for e in resp.data], ["cc1"])
        resp = self.client.get("/api/grades/by-term/", {"classroom": "FORM 9", "term": "1"})
        self.assertEqual(resp.status_code, 404)

    def test_inactive_subject_left_out_of_averages(self):
        """Deactivated subjects drop out of the active catalog."""
        self.post_bulk([{"matricule": "E21S40001", "mark": "10"}])
        Subject.objects.filter(code="MATH").update(is_active=False)
        resp = self.client.get("/api/grades/ranking/", {"classroom": "FORM 4 SCE", "subject": "MATH"})
        self.assertEqual(resp.status_code, 404)
