from django.test import TestCase
from rest_framework.test import APIClient

from core.models import Classroom
from .models import Student


class StudentApiTest(TestCase):
    """Élèves : CRUD par matricule et filtres par classe."""

    def setUp(self):
        self.client = APIClient()
        self.f4 = Classroom.objects.get(name="FORM 4 SCE")
        self.f1 = Classroom.objects.get(name="FORM 1")
        Student.objects.create(matricule="E21S40001", name="Robert Thomas", sex="M", classroom=self.f4)
        Student.objects.create(matricule="E21S40002", name="Sophia Garcia", sex="F", classroom=self.f4)
        Student.objects.create(matricule="E24F10001", name="John Smith", sex="M", classroom=self.f1)

    def test_create_with_class_name(self):
        """The class is given by name, in any case."""
        resp = self.client.post("/api/students/", {
            "matricule": "E19LS6001", "name": "Charles Lopez", "sex": "M",
            "classroom": "l6 sc", "birth_date": "2003-05-17",
        }, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["classroom"], "L6 SC")
        self.assertEqual(resp.data["level"], "AL")

    def test_unknown_class_rejected(self):
        resp = self.client.post("/api/students/", {
            "matricule": "X", "name": "X", "sex": "M", "classroom": "FORM 9",
        }, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_filter_by_classroom(self):
        resp = self.client.get("/api/students/", {"classroom": "form 4 sce"})
        self.assertEqual([s["matricule"] for s in resp.data], ["E21S40001", "E21S40002"])
        resp = self.client.get("/api/students/", {"classroom": str(self.f1.id)})
        self.assertEqual([s["matricule"] for s in resp.data], ["E24F10001"])

    def test_search(self):
        resp = self.client.get("/api/students/", {"search": "garcia"})
        self.assertEqual([s["matricule"] for s in resp.data], ["E21S40002"])

    def test_retrieve_and_update(self):
        resp = self.client.patch("/api/students/E24F10001/", {"phone": "677000000"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Student.objects.get(matricule="E24F10001").phone, "677000000")

    def test_by_class(self):
        resp = self.client.get("/api/students/by-class/FORM%204%20SCE/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data), 2)
        resp = self.client.get("/api/students/by-class/FORM%209/")
        self.assertEqual(resp.status_code, 404)
