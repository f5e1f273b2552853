from django.test import TestCase
from rest_framework.test import APIClient

from .models import Subject


class SubjectApiTest(TestCase):
    """Catalogue des matières."""

    def setUp(self):
        self.client = APIClient()

    def test_default_catalog(self):
        """21 default subjects are seeded."""
        self.assertEqual(Subject.objects.count(), 21)
        math = Subject.objects.get(code="MATH")
        self.assertEqual((math.group, math.coefficient), (1, 2))

    def test_create_upper_cases_code(self):
        resp = self.client.post("/api/subjects/", {"code": "tech", "name": "TECHNICAL DRAWING",
                                                   "group": 3, "coefficient": 1}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["code"], "TECH")

    def test_duplicate_code(self):
        resp = self.client.post("/api/subjects/", {"code": "math", "name": "X", "group": 1, "coefficient": 1},
                                format="json")
        self.assertEqual(resp.status_code, 400)

    def test_invalid_group_and_coefficient(self):
        resp = self.client.post("/api/subjects/", {"code": "ZZ", "name": "Z", "group": 4, "coefficient": 0},
                                format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("group", resp.data)
        self.assertIn("coefficient", resp.data)

    def test_lookup_by_code(self):
        """Detail routes accept any case."""
        resp = self.client.get("/api/subjects/eng/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["name"], "ENGLISH")

        resp = self.client.patch("/api/subjects/eng/", {"is_active": False}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Subject.objects.get(code="ENG").is_active)

    def test_filters(self):
        resp = self.client.get("/api/subjects/", {"group": 3})
        self.assertEqual(sorted(s["code"] for s in resp.data), ["MAN", "SPORT"])
        resp = self.client.get("/api/subjects/", {"search": "biology"})
        self.assertEqual(sorted(s["code"] for s in resp.data), ["BIO", "HBIO"])
