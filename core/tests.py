from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from enrollments.models import Student
from assessments.models import GradeEntry
from .models import Classroom, SchoolSettings


class ClassroomModelTest(TestCase):
    """Tests for Classroom model."""

    def test_default_classes_seeded(self):
        """The default class list is created by migrations."""
        self.assertEqual(Classroom.objects.count(), 11)
        self.assertTrue(Classroom.objects.filter(name="U6 SC").exists())

    def test_name_upper_cased(self):
        """Names are stored upper-case."""
        c = Classroom.objects.create(name="form 4 tech")
        self.assertEqual(c.name, "FORM 4 TECH")
        self.assertEqual(c.level, "OL")

    def test_level(self):
        self.assertEqual(Classroom.objects.get(name="FORM 2").level, "JS")
        self.assertEqual(Classroom.objects.get(name="L6 ART").level, "AL")


class ClassroomApiTest(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_list_exposes_level(self):
        resp = self.client.get("/api/classes/")
        self.assertEqual(resp.status_code, 200)
        levels = {c["name"]: c["level"] for c in resp.data}
        self.assertEqual(levels["FORM 5 SCE"], "OL")
        self.assertEqual(levels["FORM 1"], "JS")

    def test_create(self):
        """New classes are upper-cased and must be unique."""
        resp = self.client.post("/api/classes/", {"name": "l6 tech"}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["name"], "L6 TECH")
        self.assertEqual(resp.data["level"], "AL")

        resp = self.client.post("/api/classes/", {"name": "form 1"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_filter_by_name(self):
        resp = self.client.get("/api/classes/", {"name": "FORM 3"})
        self.assertEqual([c["name"] for c in resp.data], ["FORM 3"])


class SchoolSettingsTest(TestCase):
    """Paramètres de l'établissement."""

    def setUp(self):
        self.client = APIClient()

    @override_settings(SCHOOL_NAME="LYCEE TEST", ACADEMIC_YEAR="2030-2031")
    def test_defaults_from_settings(self):
        """The singleton is created from the Django settings."""
        s = SchoolSettings.load()
        self.assertEqual(s.pk, 1)
        self.assertEqual(s.name, "LYCEE TEST")
        self.assertEqual(s.academic_year, "2030-2031")

    def test_single_row(self):
        SchoolSettings.load()
        SchoolSettings(name="Other", academic_year="2025-2026").save()
        self.assertEqual(SchoolSettings.objects.count(), 1)
        self.assertEqual(SchoolSettings.load().name, "Other")

    def test_get_and_put(self):
        resp = self.client.get("/api/settings/")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("academic_year", resp.data)

        resp = self.client.put("/api/settings/", {"show_rank": False, "academic_year": "2025-2026"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(SchoolSettings.load().show_rank)
        self.assertEqual(SchoolSettings.load().academic_year, "2025-2026")

    def test_system_info(self):
        resp = self.client.get("/api/system/info/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data_size"]["classes"], 11)
        self.assertEqual(resp.data["data_size"]["subjects"], 21)
        self.assertIn("server_time", resp.data)


class SeedDemoCommandTest(TestCase):
    """Tests for the seed_demo management command."""

    def test_seed_demo(self):
        out = StringIO()
        call_command("seed_demo", stdout=out)
        self.assertIn("Successfully seeded demo data", out.getvalue())
        self.assertEqual(Student.objects.count(), 22)
        self.assertEqual(GradeEntry.objects.count(), 2)

        ds1 = GradeEntry.objects.get(session="ds1")
        self.assertEqual(ds1.coefficient, 3)
        self.assertEqual(ds1.marks.get(student__matricule="E21S40001").observation, "Excellent work")

    def test_seed_demo_is_repeatable(self):
        """Second run keeps existing entries unless --force."""
        call_command("seed_demo", stdout=StringIO())
        out = StringIO()
        call_command("seed_demo", stdout=out)
        self.assertIn("already exists", out.getvalue())
        self.assertEqual(Student.objects.count(), 22)

        out = StringIO()
        call_command("seed_demo", "--force", stdout=out)
        self.assertIn("Saved FORM 4 SCE MATH cc1", out.getvalue())
        self.assertEqual(GradeEntry.objects.count(), 2)


class TermResultsCommandTest(TestCase):
    """Tests for the term_results management command."""

    def test_prints_ranking(self):
        call_command("seed_demo", stdout=StringIO())
        out = StringIO()
        call_command("term_results", "form 4 sce", "1", "--details", stdout=out)
        lines = out.getvalue().splitlines()
        self.assertIn("FORM 4 SCE (OL) - term 1", lines[0])
        self.assertIn("E21S40001", lines[1])
        self.assertIn("15.50", lines[1])
        self.assertIn("MATH", lines[2])
        self.assertIn("success rate 100.00%", out.getvalue())

    def test_unknown_class(self):
        with self.assertRaises(CommandError):
            call_command("term_results", "FORM 9", stdout=StringIO())

    def test_bad_term(self):
        with self.assertRaises(CommandError):
            call_command("term_results", "FORM 1", "first", stdout=StringIO())
