"""
Accès aux données pour le moteur : lit l'ORM et construit des instantanés
immuables (grading.snapshot) consommés par grading.services.
"""
import logging
from abc import ABC, abstractmethod

from django.db import transaction
from django.db.models import Prefetch

from .exceptions import NotFound
from .snapshot import ClassSnapshot, GradeEntry, MarkLine, StudentInfo, SubjectInfo, normalize_key

logger = logging.getLogger(__name__)


class GradeRepository(ABC):
    """Interface de lecture utilisée par les vues, rapports et commandes."""

    @abstractmethod
    def fetch_roster(self, class_name) -> tuple:
        """Élèves de la classe, dans l'ordre d'inscription."""

    @abstractmethod
    def fetch_subjects(self) -> tuple:
        """Catalogue actif."""

    @abstractmethod
    def fetch_entries(self, class_name, subject_codes=None, sessions=None) -> tuple:
        """Saisies de la classe, filtrées par matière et/ou séance."""

    def snapshot(self, class_name, sessions=None) -> ClassSnapshot:
        return ClassSnapshot(
            class_name=normalize_key(class_name),
            roster=self.fetch_roster(class_name),
            subjects=self.fetch_subjects(),
            entries=self.fetch_entries(class_name, sessions=sessions),
        )


def student_info(student) -> StudentInfo:
    return StudentInfo(
        matricule=student.matricule,
        name=student.name,
        sex=student.sex,
        class_name=student.classroom.name,
        birth_date=student.birth_date,
        birth_place=student.birth_place,
    )


def subject_info(subject) -> SubjectInfo:
    return SubjectInfo(
        code=subject.code,
        name=subject.name,
        group=subject.group,
        coefficient=subject.coefficient,
    )


def grade_entry(row) -> GradeEntry:
    return GradeEntry(
        class_name=row.classroom.name,
        subject_code=row.subject.code,
        session=row.session,
        coefficient=row.coefficient,
        teacher=row.teacher,
        date=row.date,
        marks=tuple(
            MarkLine(
                matricule=m.student.matricule,
                mark=m.value,
                absent=m.absent,
                observation=m.observation,
            )
            for m in row.marks.all()
        ),
    )


class OrmGradeRepository(GradeRepository):

    def get_classroom(self, class_name):
        from core.models import Classroom
        try:
            return Classroom.objects.get(name=normalize_key(class_name))
        except Classroom.DoesNotExist:
            raise NotFound(f"Class {class_name!r} not found")

    def fetch_roster(self, class_name) -> tuple:
        from enrollments.models import Student
        classroom = self.get_classroom(class_name)
        qs = Student.objects.select_related("classroom").filter(classroom=classroom).order_by("id")
        return tuple(student_info(s) for s in qs)

    def fetch_subjects(self) -> tuple:
        from subjects.models import Subject
        return tuple(subject_info(s) for s in Subject.objects.filter(is_active=True).order_by("id"))

    def fetch_entries(self, class_name, subject_codes=None, sessions=None) -> tuple:
        from assessments.models import GradeEntry as GradeEntryRow, Mark
        classroom = self.get_classroom(class_name)
        qs = (GradeEntryRow.objects
              .filter(classroom=classroom)
              .select_related("classroom", "subject")
              .prefetch_related(Prefetch("marks", queryset=Mark.objects.select_related("student").order_by("id"))))
        if subject_codes:
            qs = qs.filter(subject__code__in=[normalize_key(c) for c in subject_codes])
        if sessions:
            qs = qs.filter(session__in=[str(s).lower() for s in sessions])
        return tuple(grade_entry(row) for row in qs.order_by("id"))

    def snapshot(self, class_name, sessions=None) -> ClassSnapshot:
        # une seule lecture cohérente par requête
        with transaction.atomic():
            snap = super().snapshot(class_name, sessions=sessions)
        logger.debug(
            "Snapshot %s: %d students, %d subjects, %d entries",
            snap.class_name, len(snap.roster), len(snap.subjects), len(snap.entries),
        )
        return snap
