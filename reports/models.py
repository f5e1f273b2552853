import uuid
from django.db import models
from enrollments.models import Student


class ReportToken(models.Model):
    """Jeton de vérification imprimé (QR) sur chaque bulletin PDF."""
    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="report_tokens")
    class_name = models.CharField(max_length=32)
    term = models.CharField(max_length=3)  # '1', '2', '3', 'all'
    created_at = models.DateTimeField(auto_now_add=True)
    valid = models.BooleanField(default=True)
    # Snapshot JSON (archivage)
    payload = models.JSONField(default=dict, blank=True)
    pdf_sha1 = models.CharField(max_length=64, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.uid} - {self.student.matricule} - Term {self.term}"
