"""
Affiche le classement trimestriel d'une classe.

Usage:
    python manage.py term_results "FORM 4 SCE" 1
    python manage.py term_results "L6 SC" all --details
"""
from django.core.management.base import BaseCommand, CommandError

from grading.exceptions import GradingError
from grading.repository import OrmGradeRepository
from grading.services import compute_class_term_results, statistics_for_class
from grading.sessions import sessions_for_term


class Command(BaseCommand):
    help = "Print the ranked term results of a class"

    def add_arguments(self, parser):
        parser.add_argument("class_name", type=str, help='Class name, e.g. "FORM 4 SCE"')
        parser.add_argument("term", type=str, nargs="?", default="all", help="1, 2, 3 or all")
        parser.add_argument(
            "--details",
            action="store_true",
            help="Also print the subject averages of each student",
        )

    def handle(self, *args, **options):
        term = options["term"]
        try:
            window = sessions_for_term(term)
            snapshot = OrmGradeRepository().snapshot(options["class_name"], sessions=window)
            results = compute_class_term_results(snapshot, term)
            stats = statistics_for_class(snapshot, term=term)
        except GradingError as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"{snapshot.class_name} ({snapshot.level}) - term {term}")
        for r in results:
            d = r.as_dict()
            rank = d["rank"] if d["rank"] is not None else "-"
            self.stdout.write(
                f"{rank:>3}  {d['student']['matricule']:<12} {d['student']['name']:<28} "
                f"{d['term_average20']:>6.2f}  {d['term_letter_grade']:<2}  {d['council_decision']}"
            )
            if options["details"]:
                for s in d["subject_averages"]:
                    self.stdout.write(
                        f"       {s['code']:<6} {s['average20']:>6.2f} x{s['coefficient']}  {s['appreciation']}"
                    )

        s = stats.as_dict()
        self.stdout.write(self.style.SUCCESS(
            f"Class average {s['overall_average']:.2f} - success rate {s['success_rate']:.2f}% "
            f"({s['passed']}/{s['total_students']})"
        ))
