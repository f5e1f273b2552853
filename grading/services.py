"""
Moteur d'agrégation des notes.

  - moyenne matière = moyenne arithmétique des notes retenues (ni absent,
    ni vide) dans la fenêtre de séances ; aucune note -> matière ignorée
  - moyenne trimestrielle = moyenne des moyennes matières pondérée par le
    coefficient de la matière, sur les seules matières notées
  - rang = position 1..N par moyenne décroissante ; à égalité, l'ordre de
    l'effectif est conservé (tri stable)

Tout est calculé en Decimal, sans arrondi ; l'arrondi à 2 décimales n'a lieu
qu'à la sérialisation (as_dict).
"""
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, Tuple

from .scales import (
    AL, BAND_KEYS, D0, D5, OL,
    appreciation, council_decision, honors, is_pass, letter_grade,
    letters_for_level, level_for_class, performance_band, q2,
)
from .sessions import SESSION_INDEX, check_window, parse_term, sessions_for_term
from .snapshot import ClassSnapshot, StudentInfo, SubjectInfo, normalize_key, parse_mark

logger = logging.getLogger(__name__)


def to_float(x):
    return float(q2(x)) if x is not None else None


def mean_of(values) -> Decimal:
    return sum(values, D0) / Decimal(len(values)) if values else D0


# -------------------------
#  Résultats
# -------------------------

@dataclass(frozen=True)
class SubjectAverage:
    subject: SubjectInfo
    average20: Decimal
    average100: Decimal
    letter_grade: str
    appreciation: str
    marks: Tuple[Tuple[str, Decimal], ...] = ()   # (séance, note) retenues

    @property
    def coefficient(self) -> int:
        return self.subject.coefficient

    @property
    def count(self) -> int:
        return len(self.marks)

    @property
    def weighted(self) -> Decimal:
        return self.average20 * self.coefficient

    def as_dict(self):
        return {
            "code": self.subject.code,
            "subject": self.subject.name,
            "group": self.subject.group,
            "coefficient": self.coefficient,
            "average20": to_float(self.average20),
            "average100": to_float(self.average100),
            "weighted": to_float(self.weighted),
            "letter_grade": self.letter_grade,
            "appreciation": self.appreciation,
            "count": self.count,
            "marks": {session: float(mark) for session, mark in self.marks},
        }


@dataclass(frozen=True)
class RankedStudent:
    student: StudentInfo
    average20: Decimal
    rank: int
    result: Optional[SubjectAverage] = None

    def as_dict(self):
        return {
            "matricule": self.student.matricule,
            "name": self.student.name,
            "average": to_float(self.average20),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class TermResult:
    student: StudentInfo
    term: object
    level: str
    subjects: Tuple[SubjectAverage, ...]
    total_coefficient: int
    weighted_total: Decimal
    average20: Decimal
    average100: Decimal
    letter_grade: str
    council_decision: str
    honors: dict
    rank: Optional[int] = None
    out_of: int = 0

    def as_dict(self):
        return {
            "student": {
                "matricule": self.student.matricule,
                "name": self.student.name,
                "sex": self.student.sex,
                "class_name": self.student.class_name,
            },
            "term": self.term,
            "level": self.level,
            "subject_averages": [s.as_dict() for s in self.subjects],
            "total_coefficient": self.total_coefficient,
            "weighted_total": to_float(self.weighted_total),
            "term_average20": to_float(self.average20),
            "term_average100": to_float(self.average100),
            "term_letter_grade": self.letter_grade,
            "rank": self.rank,
            "out_of": self.out_of,
            "council_decision": self.council_decision,
            "honors": dict(self.honors),
        }


@dataclass(frozen=True)
class ClassStatistics:
    level: str
    total: int
    male_count: int
    female_count: int
    male_average: Decimal
    female_average: Decimal
    average: Decimal
    highest: Decimal
    lowest: Decimal
    pass_count: int
    fail_count: int
    success_rate: Decimal
    distribution: dict
    letter_distribution: Optional[dict] = None

    @property
    def average100(self) -> Decimal:
        return self.average * D5

    @property
    def class_letter_grade(self) -> str:
        return letter_grade(self.average100, self.level)

    def as_dict(self):
        return {
            "level": self.level,
            "total_students": self.total,
            "male_students": self.male_count,
            "female_students": self.female_count,
            "male_average": to_float(self.male_average),
            "female_average": to_float(self.female_average),
            "male_average100": to_float(self.male_average * D5),
            "female_average100": to_float(self.female_average * D5),
            "overall_average": to_float(self.average),
            "overall_average100": to_float(self.average100),
            "class_letter_grade": self.class_letter_grade,
            "highest": to_float(self.highest),
            "lowest": to_float(self.lowest),
            "highest100": to_float(self.highest * D5),
            "lowest100": to_float(self.lowest * D5),
            "passed": self.pass_count,
            "failed": self.fail_count,
            "success_rate": to_float(self.success_rate),
            "distribution": dict(self.distribution),
            "letter_distribution": dict(self.letter_distribution) if self.letter_distribution is not None else None,
        }


# -------------------------
#  Moyenne par matière
# -------------------------

def compute_subject_average(entries, subject: SubjectInfo, student: StudentInfo, window) -> Optional[SubjectAverage]:
    """
    Moyenne d'un élève dans une matière sur une fenêtre de séances.
    Retourne None si aucune note n'est retenue (la matière ne compte pas).
    """
    window = check_window(window)
    class_name = normalize_key(student.class_name)
    code = normalize_key(subject.code)

    marks = []
    for entry in entries:
        e_class, e_code, e_session = entry.key
        if e_code != code or e_session not in window:
            continue
        if class_name and e_class != class_name:
            continue
        line = entry.mark_for(student.matricule)
        # absent l'emporte sur toute note saisie
        if line is None or line.absent:
            continue
        mark = parse_mark(line.mark)
        if mark is None:
            continue
        marks.append((e_session, mark))

    if not marks:
        return None

    marks.sort(key=lambda m: SESSION_INDEX[m[0]])
    average20 = mean_of([m for _, m in marks])
    average100 = average20 * D5
    return SubjectAverage(
        subject=subject,
        average20=average20,
        average100=average100,
        letter_grade=letter_grade(average100, level_for_class(student.class_name)),
        appreciation=appreciation(average20),
        marks=tuple(marks),
    )


def rank_by_subject(roster, entries, subject: SubjectInfo, window) -> list:
    """
    Classement de la classe dans une matière. Les élèves sans note restent
    classés avec une moyenne de 0.
    """
    window = check_window(window)
    rows = []
    for student in roster:
        rows.append((student, compute_subject_average(entries, subject, student, window)))

    ranked = sorted(rows, key=lambda r: r[1].average20 if r[1] else D0, reverse=True)
    return [
        RankedStudent(student=s, average20=(res.average20 if res else D0), rank=i, result=res)
        for i, (s, res) in enumerate(ranked, start=1)
    ]


# -------------------------
#  Moyenne trimestrielle + rang
# -------------------------

def _term_result(snapshot: ClassSnapshot, student: StudentInfo, term, window) -> TermResult:
    subjects = []
    for subject in snapshot.subjects:
        res = compute_subject_average(snapshot.entries, subject, student, window)
        if res is None:
            continue
        subjects.append(res)

    total_coef = sum(r.coefficient for r in subjects)
    weighted = sum((r.weighted for r in subjects), D0)
    average20 = (weighted / Decimal(total_coef)) if total_coef > 0 else D0
    average100 = average20 * D5
    level = level_for_class(snapshot.class_name)

    return TermResult(
        student=student,
        term=term,
        level=level,
        subjects=tuple(subjects),
        total_coefficient=total_coef,
        weighted_total=weighted,
        average20=average20,
        average100=average100,
        letter_grade=letter_grade(average100, level),
        council_decision=council_decision(average20),
        honors=honors(average20),
    )


def compute_class_term_results(snapshot: ClassSnapshot, term) -> list:
    """Résultats trimestriels de tous les élèves, triés par rang."""
    term = parse_term(term)
    window = check_window(sessions_for_term(term))
    results = [_term_result(snapshot, s, term, window) for s in snapshot.roster]
    out_of = len(results)

    if not snapshot.subjects:
        # catalogue vide : moyenne 0 partout, pas de rang
        logger.info("Empty subject catalog for %s, term results are neutral", snapshot.class_name)
        return [replace(r, out_of=out_of) for r in results]

    ranked = sorted(results, key=lambda r: r.average20, reverse=True)
    logger.debug("Ranked %d students of %s for term %s", out_of, snapshot.class_name, term)
    return [replace(r, rank=i, out_of=out_of) for i, r in enumerate(ranked, start=1)]


def compute_term_result(snapshot: ClassSnapshot, matricule, term) -> TermResult:
    student = snapshot.student(matricule)
    results = compute_class_term_results(snapshot, term)
    return next(r for r in results if r.student.matricule == student.matricule)


# -------------------------
#  Statistiques de classe
# -------------------------

def compute_class_statistics(results, level) -> ClassStatistics:
    """
    results: iterable de (sexe, moyenne/20 ou None).
    Les moyennes None comptent dans l'effectif mais pas dans les moyennes,
    extrêmes et distributions.
    """
    rows = [(normalize_key(sex), avg) for sex, avg in results]
    defined = [avg for _, avg in rows if avg is not None]
    male = [avg for sex, avg in rows if sex == "M" and avg is not None]
    female = [avg for sex, avg in rows if sex == "F" and avg is not None]

    total = len(rows)
    passed = sum(1 for avg in defined if is_pass(avg))

    distribution = {key: 0 for key in BAND_KEYS}
    for avg in defined:
        distribution[performance_band(avg)] += 1

    letter_distribution = None
    if level in (OL, AL):
        letter_distribution = {letter: 0 for letter in letters_for_level(level)}
        for avg in defined:
            letter_distribution[letter_grade(avg * D5, level)] += 1

    return ClassStatistics(
        level=level,
        total=total,
        male_count=sum(1 for sex, _ in rows if sex == "M"),
        female_count=sum(1 for sex, _ in rows if sex == "F"),
        male_average=mean_of(male),
        female_average=mean_of(female),
        average=mean_of(defined),
        highest=max(defined) if defined else D0,
        lowest=min(defined) if defined else D0,
        pass_count=passed,
        fail_count=total - passed,
        success_rate=(Decimal(passed) * 100 / Decimal(total)) if total else D0,
        distribution=distribution,
        letter_distribution=letter_distribution,
    )


def statistics_for_class(snapshot: ClassSnapshot, term=None, subject_code=None) -> ClassStatistics:
    """
    Statistiques d'une classe : par matière si subject_code, sinon sur la
    moyenne trimestrielle. Un élève sans note compte pour 0 dans les deux cas.
    """
    if subject_code:
        subject = snapshot.subject(subject_code)
        window = sessions_for_term(term)
        rows = []
        for student in snapshot.roster:
            res = compute_subject_average(snapshot.entries, subject, student, window)
            # sans note : 0, comme dans rank_by_subject
            rows.append((student.sex, res.average20 if res else D0))
    else:
        rows = [(r.student.sex, r.average20) for r in compute_class_term_results(snapshot, term)]
    return compute_class_statistics(rows, snapshot.level)
