from django.db import models
from core.models import Classroom


class Student(models.Model):
    SEX_CHOICES = (("M", "M"), ("F", "F"))
    matricule = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=128)
    sex = models.CharField(max_length=1, choices=SEX_CHOICES)
    classroom = models.ForeignKey(Classroom, on_delete=models.PROTECT, related_name="students")
    birth_date = models.DateField(null=True, blank=True)
    birth_place = models.CharField(max_length=64, blank=True)
    parent = models.CharField(max_length=128, blank=True)
    phone = models.CharField(max_length=32, blank=True)

    class Meta:
        # ordre d'inscription = ordre de départage des ex aequo
        ordering = ["id"]

    def __str__(self):
        return f"{self.matricule} - {self.name}"
