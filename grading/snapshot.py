"""
Instantané en lecture seule d'une classe : effectif, catalogue des matières
et saisies de notes. Le moteur ne travaille que sur ces objets, jamais sur
l'ORM.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .exceptions import InvalidInput, NotFound
from .scales import D0, D20, level_for_class, to_decimal


def normalize_key(value) -> str:
    """Classes et codes matière sont comparés en majuscules."""
    return str(value or "").strip().upper()


def parse_mark(value) -> Optional[Decimal]:
    """
    '' / None -> None (pas de note) ; sinon Decimal dans [0, 20].
    Toute valeur non numérique ou hors bornes lève InvalidInput.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    mark = to_decimal(value)
    if not (D0 <= mark <= D20):
        raise InvalidInput(f"Mark must be between 0 and 20, got {value!r}")
    return mark


@dataclass(frozen=True)
class MarkLine:
    matricule: str
    mark: Optional[Decimal] = None
    absent: bool = False
    observation: str = ""


@dataclass(frozen=True)
class GradeEntry:
    class_name: str
    subject_code: str
    session: str
    coefficient: int = 1
    marks: Tuple[MarkLine, ...] = ()
    teacher: str = ""
    date: Optional[date] = None

    @property
    def key(self):
        return (normalize_key(self.class_name), normalize_key(self.subject_code), self.session.lower())

    def mark_for(self, matricule) -> Optional[MarkLine]:
        for line in self.marks:
            if line.matricule == matricule:
                return line
        return None


@dataclass(frozen=True)
class SubjectInfo:
    code: str
    name: str = ""
    group: int = 1
    coefficient: int = 1


@dataclass(frozen=True)
class StudentInfo:
    matricule: str
    name: str = ""
    sex: str = ""
    class_name: str = ""
    birth_date: Optional[date] = None
    birth_place: str = ""

    @property
    def level(self) -> str:
        return level_for_class(self.class_name)


@dataclass(frozen=True)
class ClassSnapshot:
    class_name: str
    roster: Tuple[StudentInfo, ...] = ()
    subjects: Tuple[SubjectInfo, ...] = ()
    entries: Tuple[GradeEntry, ...] = field(default=(), repr=False)

    @property
    def level(self) -> str:
        return level_for_class(self.class_name)

    def student(self, matricule) -> StudentInfo:
        for s in self.roster:
            if s.matricule == matricule:
                return s
        raise NotFound(f"Student {matricule!r} not found in class {self.class_name!r}")

    def subject(self, code) -> SubjectInfo:
        wanted = normalize_key(code)
        for s in self.subjects:
            if normalize_key(s.code) == wanted:
                return s
        raise NotFound(f"Subject {code!r} not found")

    def entries_for(self, subject_code, sessions=None) -> list:
        wanted = normalize_key(subject_code)
        return [
            e for e in self.entries
            if normalize_key(e.subject_code) == wanted and (sessions is None or e.session in sessions)
        ]
