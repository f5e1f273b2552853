from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator

from core.models import Classroom
from subjects.models import Subject
from enrollments.models import Student
from grading.sessions import SESSION_CODES


class GradeEntry(models.Model):
    """
    Une saisie de notes = (classe, matière, séance). Réenregistrer la même
    clé remplace toute la liste de notes.
    """
    SESSION_CHOICES = [(code, code.upper()) for code in SESSION_CODES]

    classroom = models.ForeignKey(Classroom, on_delete=models.CASCADE, related_name="grade_entries")
    subject = models.ForeignKey(Subject, on_delete=models.PROTECT, related_name="grade_entries")
    session = models.CharField(max_length=4, choices=SESSION_CHOICES)
    # conservé tel quel, non utilisé dans les moyennes
    coefficient = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    teacher = models.CharField(max_length=128, blank=True)
    date = models.DateField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("classroom", "subject", "session"),)
        ordering = ["classroom", "subject", "id"]

    def __str__(self):
        return f"{self.classroom.name} | {self.subject.code} | {self.session}"


class Mark(models.Model):
    entry = models.ForeignKey(GradeEntry, on_delete=models.CASCADE, related_name="marks")
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="marks")
    value = models.DecimalField(max_digits=4, decimal_places=2, null=True, blank=True,
                                validators=[MinValueValidator(0), MaxValueValidator(20)])
    absent = models.BooleanField(default=False)
    observation = models.CharField(max_length=255, blank=True)

    class Meta:
        unique_together = (("entry", "student"),)
        ordering = ["entry", "id"]

    def __str__(self):
        return f"{self.student.matricule} → {self.entry}: {'ABS' if self.absent else self.value}"
