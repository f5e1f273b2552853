from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.models import Classroom
from enrollments.models import Student
from subjects.models import Subject
from assessments.models import GradeEntry as GradeEntryRow, Mark

from .exceptions import InvalidInput, NotFound
from .repository import OrmGradeRepository
from .scales import AL, JS, OL, appreciation, council_decision, honors, letter_grade, level_for_class
from .services import (
    compute_class_statistics, compute_class_term_results, compute_subject_average,
    compute_term_result, rank_by_subject, statistics_for_class,
)
from .sessions import SESSION_CODES, check_window, parse_term, sessions_for_pvr, sessions_for_term
from .snapshot import ClassSnapshot, GradeEntry, MarkLine, StudentInfo, SubjectInfo, parse_mark


CLASS = "FORM 4 SCE"
TERM1 = sessions_for_term(1)
MATH = SubjectInfo(code="MATH", name="MATHEMATICS", group=1, coefficient=2)
ENG = SubjectInfo(code="ENG", name="ENGLISH", group=2, coefficient=2)


def student(matricule, sex="M", class_name=CLASS):
    return StudentInfo(matricule=matricule, name=f"Student {matricule}", sex=sex, class_name=class_name)


def entry(code, session, *lines, class_name=CLASS):
    return GradeEntry(class_name=class_name, subject_code=code, session=session, marks=tuple(lines))


def mark(matricule, value=None, absent=False):
    return MarkLine(matricule=matricule, mark=None if value is None else Decimal(str(value)), absent=absent)


class GradingScaleTest(SimpleTestCase):
    """Barèmes OL/AL, appréciations, décisions."""

    def test_level_from_class_name(self):
        """Level is derived from the class name."""
        self.assertEqual(level_for_class("FORM 4 SCE"), OL)
        self.assertEqual(level_for_class("form 5 art"), OL)
        self.assertEqual(level_for_class("L6 ART"), AL)
        self.assertEqual(level_for_class("U6 SC"), AL)
        self.assertEqual(level_for_class("FORM 1"), JS)

    def test_ol_boundaries(self):
        """OL bands are half-open on the percentage."""
        self.assertEqual(letter_grade(Decimal("44.9"), OL), "D")
        self.assertEqual(letter_grade(Decimal("45"), OL), "C")
        self.assertEqual(letter_grade(Decimal("54.9"), OL), "C")
        self.assertEqual(letter_grade(Decimal("55"), OL), "B")
        self.assertEqual(letter_grade(Decimal("29.99"), OL), "U")
        self.assertEqual(letter_grade(Decimal("70"), OL), "A")
        self.assertEqual(letter_grade(Decimal("0"), OL), "NC")

    def test_al_boundaries(self):
        """AL bands are half-open on the percentage."""
        self.assertEqual(letter_grade(Decimal("49.9"), AL), "E")
        self.assertEqual(letter_grade(Decimal("50"), AL), "D")
        self.assertEqual(letter_grade(Decimal("35"), AL), "O")
        self.assertEqual(letter_grade(Decimal("10"), AL), "F")
        self.assertEqual(letter_grade(Decimal("59.99"), AL), "C")
        self.assertEqual(letter_grade(Decimal("0"), AL), "NC")

    def test_every_band_threshold(self):
        """Each threshold belongs to the upper band; just below stays in the lower one."""
        cases = (
            (OL, "29.99", "U"), (OL, "30", "E"),
            (OL, "39.99", "E"), (OL, "40", "D"),
            (OL, "44.99", "D"), (OL, "45", "C"),
            (OL, "54.99", "C"), (OL, "55", "B"),
            (OL, "69.99", "B"), (OL, "70", "A"),
            (AL, "29.99", "F"), (AL, "30", "O"),
            (AL, "39.99", "O"), (AL, "40", "E"),
            (AL, "49.99", "E"), (AL, "50", "D"),
            (AL, "54.99", "D"), (AL, "55", "C"),
            (AL, "59.99", "C"), (AL, "60", "B"),
            (AL, "69.99", "B"), (AL, "70", "A"),
        )
        for level, percentage, expected in cases:
            with self.subTest(level=level, percentage=percentage):
                self.assertEqual(letter_grade(Decimal(percentage), level), expected)

    def test_junior_has_no_letter(self):
        """Junior classes get an empty letter grade."""
        self.assertEqual(letter_grade(Decimal("80"), JS), "")

    def test_appreciation_bands(self):
        """Appreciation thresholds on /20."""
        self.assertEqual(appreciation(Decimal("16")), "Excellent")
        self.assertEqual(appreciation(Decimal("15.99")), "Très Bien")
        self.assertEqual(appreciation(Decimal("12")), "Bien")
        self.assertEqual(appreciation(Decimal("10")), "Passable")
        self.assertEqual(appreciation(Decimal("9.99")), "Insuffisant")

    def test_council_decision(self):
        """Council decision thresholds."""
        self.assertEqual(council_decision(Decimal("10")), "PASSABLE")
        self.assertEqual(council_decision(Decimal("9.5")), "ACADEMIC WARNING")
        self.assertEqual(council_decision(Decimal("8")), "ACADEMIC WARNING")
        self.assertEqual(council_decision(Decimal("7.99")), "SERIOUS ACADEMIC WARNING")

    def test_honors_overlap(self):
        """Honor flags are not exclusive."""
        h = honors(Decimal("16.5"))
        self.assertTrue(h["honor_roll"] and h["encouragements"] and h["distinctions"])
        self.assertFalse(h["academic_warning"])
        h = honors(Decimal("7"))
        self.assertTrue(h["academic_warning"])
        self.assertTrue(h["serious_academic_warning"])


class SessionWindowTest(SimpleTestCase):

    def test_term_windows(self):
        """Terms are cumulative windows."""
        self.assertEqual(sessions_for_term(1), ("cc1", "ds1", "cc2", "ds2"))
        self.assertEqual(len(sessions_for_term("2")), 8)
        self.assertEqual(sessions_for_term("all"), SESSION_CODES)
        self.assertEqual(sessions_for_term(3), SESSION_CODES)

    def test_unknown_integer_term_falls_back(self):
        """An unknown integer term uses the full window."""
        self.assertEqual(parse_term(4), "all")
        self.assertEqual(sessions_for_term("7"), SESSION_CODES)

    def test_garbage_term_rejected(self):
        """Non-integer terms raise InvalidInput."""
        with self.assertRaises(InvalidInput):
            parse_term("first")
        with self.assertRaises(InvalidInput):
            parse_term(1.5)

    def test_pvr_windows(self):
        """Session-type windows are per term, not cumulative."""
        self.assertEqual(sessions_for_pvr(2, "cc"), ("cc3", "cc4"))
        self.assertEqual(sessions_for_pvr(3, "DS"), ("ds5",))
        self.assertEqual(sessions_for_pvr(1, "all"), TERM1)
        with self.assertRaises(InvalidInput):
            sessions_for_pvr(1, "exam")

    def test_arbitrary_window_rejected(self):
        """Only the fixed windows are accepted."""
        self.assertEqual(check_window(["ds1", "cc1", "ds2", "cc2"]), frozenset(TERM1))
        with self.assertRaises(InvalidInput):
            check_window(["cc1", "ds2"])
        with self.assertRaises(InvalidInput):
            check_window(["cc1", "cc9"])

    def test_mark_parsing(self):
        """Marks are numbers in [0, 20]."""
        self.assertIsNone(parse_mark(""))
        self.assertEqual(parse_mark("12.5"), Decimal("12.5"))
        for bad in ("abc", "21", "-1", "nan"):
            with self.assertRaises(InvalidInput):
                parse_mark(bad)


class SubjectAverageTest(SimpleTestCase):
    """Moyenne d'une matière sur une fenêtre."""

    def test_exact_mean(self):
        """Average is the plain arithmetic mean, without rounding."""
        x = student("X")
        entries = [
            entry("MATH", "cc1", mark("X", 13)),
            entry("MATH", "ds1", mark("X", 14)),
            entry("MATH", "cc2", mark("X", 14)),
        ]
        res = compute_subject_average(entries, MATH, x, TERM1)
        self.assertEqual(res.average20, Decimal(41) / Decimal(3))
        self.assertEqual(res.count, 3)
        self.assertEqual(res.as_dict()["average20"], 13.67)

    def test_absent_excluded(self):
        """Absent marks leave the denominator, even with a numeric value."""
        x = student("X")
        entries = [
            entry("MATH", "cc1", mark("X", 15)),
            entry("MATH", "ds1", mark("X", 0, absent=True)),
        ]
        res = compute_subject_average(entries, MATH, x, TERM1)
        self.assertEqual(res.average20, Decimal("15"))
        self.assertEqual(res.count, 1)

    def test_outside_window_ignored(self):
        """Sessions outside the window do not count."""
        x = student("X")
        entries = [
            entry("MATH", "cc1", mark("X", 10)),
            entry("MATH", "cc3", mark("X", 20)),
        ]
        self.assertEqual(compute_subject_average(entries, MATH, x, TERM1).average20, Decimal("10"))
        self.assertEqual(compute_subject_average(entries, MATH, x, SESSION_CODES).average20, Decimal("15"))

    def test_no_marks_returns_none(self):
        """No qualifying mark means no result, never a zero."""
        x = student("X")
        entries = [entry("MATH", "cc1", mark("X", absent=True)), entry("MATH", "ds1", mark("Y", 12))]
        self.assertIsNone(compute_subject_average(entries, MATH, x, TERM1))

    def test_invalid_mark_raises(self):
        """A malformed stored mark fails fast."""
        x = student("X")
        entries = [entry("MATH", "cc1", MarkLine(matricule="X", mark="abc"))]
        with self.assertRaises(InvalidInput):
            compute_subject_average(entries, MATH, x, TERM1)

    def test_invalid_window_raises(self):
        with self.assertRaises(InvalidInput):
            compute_subject_average([], MATH, student("X"), ["cc1"])


class RankingTest(SimpleTestCase):

    def test_students_without_marks_rank_with_zero(self):
        """Every roster student is ranked; no marks counts as 0."""
        roster = (student("A"), student("B"), student("C"))
        entries = [entry("MATH", "cc1", mark("A", 8), mark("C", 12))]
        ranked = rank_by_subject(roster, entries, MATH, TERM1)
        self.assertEqual([r.student.matricule for r in ranked], ["C", "A", "B"])
        self.assertEqual([r.rank for r in ranked], [1, 2, 3])
        self.assertEqual(ranked[2].average20, Decimal("0"))
        self.assertIsNone(ranked[2].result)

    def test_ties_keep_roster_order(self):
        """Equal averages get consecutive ranks in roster order."""
        entries = [entry("MATH", "cc1", mark("A", 14), mark("B", 14))]
        ranked = rank_by_subject((student("A"), student("B")), entries, MATH, TERM1)
        self.assertEqual([(r.student.matricule, r.rank) for r in ranked], [("A", 1), ("B", 2)])
        ranked = rank_by_subject((student("B"), student("A")), entries, MATH, TERM1)
        self.assertEqual([(r.student.matricule, r.rank) for r in ranked], [("B", 1), ("A", 2)])


class TermResultTest(SimpleTestCase):
    """Moyenne trimestrielle, rang et décision."""

    def setUp(self):
        self.snapshot = ClassSnapshot(
            class_name=CLASS,
            roster=(student("X"), student("Y", sex="F"), student("Z")),
            subjects=(MATH, ENG, SubjectInfo(code="PHY", name="PHYSICS", group=1, coefficient=2)),
            entries=(
                entry("MATH", "cc1", mark("X", 15), mark("Z", 9)),
                entry("MATH", "ds1", mark("X", 16), mark("Z", 11)),
                entry("ENG", "cc1", mark("X", 10), mark("Z", 14)),
            ),
        )

    def test_form4_scenario(self):
        """Weighted term average over graded subjects only."""
        r = compute_term_result(self.snapshot, "X", 1)
        by_code = {s.subject.code: s for s in r.subjects}
        self.assertEqual(by_code["MATH"].average20, Decimal("15.5"))
        self.assertEqual(by_code["MATH"].average100, Decimal("77.5"))
        self.assertEqual(by_code["MATH"].letter_grade, "A")
        self.assertEqual(by_code["ENG"].average20, Decimal("10"))
        self.assertEqual(by_code["ENG"].letter_grade, "C")
        self.assertEqual(r.average20, Decimal("12.75"))
        self.assertEqual(r.council_decision, "PASSABLE")
        self.assertTrue(r.honors["distinctions"])
        self.assertFalse(r.honors["encouragements"])

    def test_ungraded_subject_skipped(self):
        """A subject with no marks is left out of the coefficients."""
        r = compute_term_result(self.snapshot, "X", 1)
        self.assertNotIn("PHY", [s.subject.code for s in r.subjects])
        self.assertEqual(r.total_coefficient, 4)

    def test_zero_marks_student(self):
        """No marks at all: average 0, last rank, serious warning."""
        r = compute_term_result(self.snapshot, "Y", 1)
        self.assertEqual(r.average20, Decimal("0"))
        self.assertEqual(r.rank, 3)
        self.assertEqual(r.out_of, 3)
        self.assertEqual(r.council_decision, "SERIOUS ACADEMIC WARNING")

    def test_ranks_are_monotonic(self):
        """Ranks follow decreasing averages."""
        results = compute_class_term_results(self.snapshot, 1)
        self.assertEqual([r.rank for r in results], [1, 2, 3])
        averages = [r.average20 for r in results]
        self.assertEqual(averages, sorted(averages, reverse=True))

    def test_tied_students(self):
        """Two students at 14.00 get consecutive ranks in roster order."""
        snapshot = ClassSnapshot(
            class_name=CLASS,
            roster=(student("P"), student("Q")),
            subjects=(MATH,),
            entries=(entry("MATH", "cc1", mark("P", 14), mark("Q", 14)),),
        )
        results = compute_class_term_results(snapshot, 1)
        self.assertEqual([(r.student.matricule, r.rank) for r in results], [("P", 1), ("Q", 2)])

    def test_idempotent(self):
        """Same snapshot, same result."""
        self.assertEqual(compute_term_result(self.snapshot, "X", 1), compute_term_result(self.snapshot, "X", 1))

    def test_unknown_student(self):
        with self.assertRaises(NotFound):
            compute_term_result(self.snapshot, "NOPE", 1)

    def test_empty_catalog(self):
        """No subjects: neutral result without rank."""
        snapshot = ClassSnapshot(class_name=CLASS, roster=(student("X"),), subjects=())
        r = compute_term_result(snapshot, "X", 1)
        self.assertEqual(r.average20, Decimal("0"))
        self.assertIsNone(r.rank)

    def test_as_dict_rounds(self):
        """Serialized values are rounded to 2 decimals."""
        data = compute_term_result(self.snapshot, "X", "1").as_dict()
        self.assertEqual(data["term_average20"], 12.75)
        self.assertEqual(data["term_average100"], 63.75)
        self.assertEqual(data["term_letter_grade"], "B")
        self.assertEqual(data["rank"], 1)


class ClassStatisticsTest(SimpleTestCase):

    def test_statistics(self):
        """Counts, gender means, pass rate and buckets."""
        stats = compute_class_statistics(
            [("M", Decimal("15")), ("F", Decimal("9")), ("F", None)], OL,
        )
        self.assertEqual(stats.total, 3)
        self.assertEqual((stats.male_count, stats.female_count), (1, 2))
        self.assertEqual(stats.female_average, Decimal("9"))
        self.assertEqual(stats.average, Decimal("12"))
        self.assertEqual((stats.highest, stats.lowest), (Decimal("15"), Decimal("9")))
        self.assertEqual((stats.pass_count, stats.fail_count), (1, 2))
        self.assertEqual(stats.as_dict()["success_rate"], 33.33)
        self.assertEqual(stats.distribution["very_good"], 1)
        self.assertEqual(stats.distribution["insufficient"], 1)
        self.assertEqual(stats.letter_distribution["A"], 1)
        self.assertEqual(stats.letter_distribution["C"], 1)

    def test_empty_class(self):
        stats = compute_class_statistics([], JS)
        self.assertEqual(stats.success_rate, Decimal("0"))
        self.assertEqual(stats.highest, Decimal("0"))
        self.assertIsNone(stats.letter_distribution)

    def test_statistics_for_subject(self):
        """Per-subject statistics over the requested term."""
        snapshot = ClassSnapshot(
            class_name=CLASS,
            roster=(student("A"), student("B", sex="F")),
            subjects=(MATH,),
            entries=(entry("MATH", "cc1", mark("A", 16), mark("B", 8)),),
        )
        stats = statistics_for_class(snapshot, term=1, subject_code="math")
        self.assertEqual(stats.average, Decimal("12"))
        self.assertEqual(stats.class_letter_grade, "B")
        with self.assertRaises(NotFound):
            statistics_for_class(snapshot, subject_code="BIO")

    def test_subject_statistics_count_missing_marks_as_zero(self):
        """A student with no mark in the subject counts as 0, as in the subject ranking."""
        snapshot = ClassSnapshot(
            class_name=CLASS,
            roster=(student("A"), student("B", sex="F")),
            subjects=(MATH,),
            entries=(entry("MATH", "cc1", mark("A", 16)),),
        )
        stats = statistics_for_class(snapshot, term=1, subject_code="MATH")
        self.assertEqual(stats.total, 2)
        self.assertEqual(stats.average, Decimal("8"))
        self.assertEqual((stats.highest, stats.lowest), (Decimal("16"), Decimal("0")))
        self.assertEqual(stats.female_average, Decimal("0"))
        self.assertEqual(stats.distribution["insufficient"], 1)
        self.assertEqual(stats.letter_distribution["NC"], 1)
        self.assertEqual(stats.letter_distribution["A"], 1)


class OrmRepositoryTest(TestCase):
    """Lecture de l'ORM vers l'instantané."""

    def setUp(self):
        self.classroom = Classroom.objects.get(name=CLASS)
        self.x = Student.objects.create(matricule="X1", name="ALPHA", sex="M", classroom=self.classroom)
        self.y = Student.objects.create(matricule="Y1", name="BETA", sex="F", classroom=self.classroom)
        math = Subject.objects.get(code="MATH")
        eng = Subject.objects.get(code="ENG")
        for code, session, values in (
            (math, "cc1", {self.x: "15", self.y: "12"}),
            (math, "ds1", {self.x: "16", self.y: None}),
            (eng, "cc1", {self.x: "10"}),
            (math, "cc3", {self.x: "2"}),
        ):
            e = GradeEntryRow.objects.create(classroom=self.classroom, subject=code, session=session)
            for s, v in values.items():
                Mark.objects.create(entry=e, student=s, value=v, absent=v is None)
        self.client = APIClient()

    def test_snapshot(self):
        """Roster in insertion order, window filter applied."""
        snap = OrmGradeRepository().snapshot("form 4 sce", sessions=TERM1)
        self.assertEqual([s.matricule for s in snap.roster], ["X1", "Y1"])
        self.assertEqual(len(snap.entries), 3)
        self.assertEqual(snap.level, OL)

    def test_unknown_class(self):
        with self.assertRaises(NotFound):
            OrmGradeRepository().snapshot("FORM 9")

    def test_student_term_average_endpoint(self):
        """Term 1 average for one student."""
        url = reverse("student-term-average", args=[CLASS, "X1", "1"])
        resp = self.client.get(url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["term_average20"], 12.75)
        self.assertEqual(resp.data["rank"], 1)
        self.assertEqual(resp.data["council_decision"], "PASSABLE")

    def test_class_term_averages_endpoint(self):
        """Ranked table without details by default."""
        resp = self.client.get(reverse("class-term-averages", args=[CLASS, "all"]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([r["student"]["matricule"] for r in resp.data["results"]], ["Y1", "X1"])
        self.assertNotIn("subject_averages", resp.data["results"][0])
        self.assertEqual(resp.data["statistics"]["total_students"], 2)

    def test_errors_map_to_status(self):
        """Unknown student -> 404, malformed term -> 400."""
        resp = self.client.get(reverse("student-term-average", args=[CLASS, "NOPE", "1"]))
        self.assertEqual(resp.status_code, 404)
        resp = self.client.get(reverse("class-term-averages", args=[CLASS, "first"]))
        self.assertEqual(resp.status_code, 400)
