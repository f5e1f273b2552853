import logging
from decimal import Decimal

from rest_framework import serializers
from django.db import transaction

from core.models import Classroom
from subjects.models import Subject
from enrollments.models import Student
from grading.exceptions import InvalidInput, NotFound
from grading.sessions import normalize_session
from grading.snapshot import normalize_key, parse_mark
from .models import GradeEntry, Mark

logger = logging.getLogger(__name__)


# -------------------------
#  Model Serializers
# -------------------------

class MarkSerializer(serializers.ModelSerializer):
    matricule = serializers.CharField(source="student.matricule", read_only=True)
    name = serializers.CharField(source="student.name", read_only=True)

    class Meta:
        model = Mark
        fields = ["matricule", "name", "value", "absent", "observation"]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # Decimal -> float pour le front
        if data.get("value") is not None:
            data["value"] = float(data["value"])
        return data


class GradeEntrySerializer(serializers.ModelSerializer):
    classroom = serializers.CharField(source="classroom.name", read_only=True)
    subject = serializers.CharField(source="subject.code", read_only=True)
    subject_name = serializers.CharField(source="subject.name", read_only=True)
    marks = MarkSerializer(many=True, read_only=True)

    class Meta:
        model = GradeEntry
        fields = ["id", "classroom", "subject", "subject_name", "session",
                  "coefficient", "teacher", "date", "updated_at", "marks"]


# -------------------------
#  BULK SERIALIZER
# -------------------------

class MarkLineSerializer(serializers.Serializer):
    matricule = serializers.CharField()
    mark = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    absent = serializers.BooleanField(required=False, default=False)
    observation = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_mark(self, value):
        try:
            mark = parse_mark(value)
        except InvalidInput as exc:
            raise serializers.ValidationError(str(exc))
        # la colonne est en 2 décimales
        if mark is not None and mark != mark.quantize(Decimal("0.01")):
            raise serializers.ValidationError("Mark must have at most 2 decimal places.")
        return mark


class BulkGradesUpsertSerializer(serializers.Serializer):
    """
    Enregistre une saisie complète pour (classe, matière, séance).
    La liste 'marks' remplace entièrement la précédente.

    Body:
    {
      "classroom": "FORM 4 SCE",
      "subject": "MATH",
      "session": "cc1",
      "coefficient": 2,
      "teacher": "Mr. Mathematics",
      "date": "2024-09-15",
      "marks": [
        { "matricule": "E21S40001", "mark": "15", "absent": false, "observation": "" },
        { "matricule": "E21S40002", "mark": "", "absent": true }
      ]
    }
    """
    classroom = serializers.CharField()
    subject = serializers.CharField()
    session = serializers.CharField()
    coefficient = serializers.IntegerField(required=False, default=1, min_value=1)
    teacher = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False, allow_null=True, default=None)
    marks = MarkLineSerializer(many=True, allow_empty=True)

    def validate_session(self, value):
        try:
            return normalize_session(value)
        except InvalidInput as exc:
            raise serializers.ValidationError(str(exc))

    def validate(self, attrs):
        # classe/matière inconnue -> 404 via le handler d'exceptions
        class_name = normalize_key(attrs["classroom"])
        code = normalize_key(attrs["subject"])
        try:
            attrs["classroom_obj"] = Classroom.objects.get(name=class_name)
        except Classroom.DoesNotExist:
            raise NotFound(f"Class {attrs['classroom']!r} not found")
        try:
            attrs["subject_obj"] = Subject.objects.get(code=code)
        except Subject.DoesNotExist:
            raise NotFound(f"Subject {attrs['subject']!r} not found")
        return attrs

    @transaction.atomic
    def create(self, validated):
        classroom = validated["classroom_obj"]
        subject = validated["subject_obj"]

        entry, created = GradeEntry.objects.update_or_create(
            classroom=classroom, subject=subject, session=validated["session"],
            defaults={
                "coefficient": validated.get("coefficient") or 1,
                "teacher": validated.get("teacher") or "",
                "date": validated.get("date"),
            },
        )
        # remplacement complet, pas de fusion
        entry.marks.all().delete()

        students = {s.matricule: s for s in Student.objects.filter(classroom=classroom)}
        results = {"entry": entry.id, "created": created, "saved": [], "skipped": []}

        lines = {}
        for line in validated.get("marks", []):
            matricule = line["matricule"].strip()
            if matricule not in students:
                results["skipped"].append({"matricule": matricule, "reason": "Student not found in class"})
                continue
            # doublon : la dernière ligne l'emporte
            lines[matricule] = line

        Mark.objects.bulk_create([
            Mark(
                entry=entry,
                student=students[matricule],
                value=line.get("mark"),
                absent=line.get("absent", False),
                observation=line.get("observation") or "",
            )
            for matricule, line in lines.items()
        ])
        results["saved"] = list(lines.keys())

        logger.info(
            "Saved grades %s/%s/%s: %d marks, %d skipped",
            classroom.name, subject.code, entry.session, len(lines), len(results["skipped"]),
        )
        return results
