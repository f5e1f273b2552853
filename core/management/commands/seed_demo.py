"""
Charge des élèves de démonstration (2 par classe) et deux saisies de notes
en MATH pour la FORM 4 SCE.

Usage:
    python manage.py seed_demo
    python manage.py seed_demo --force   # réécrit les saisies de démonstration
"""
from datetime import date

from django.core.management.base import BaseCommand
from django.db import transaction

from core.models import Classroom, SchoolSettings
from subjects.models import Subject
from enrollments.models import Student
from assessments.models import GradeEntry, Mark

# classe -> [(matricule, nom, sexe, naissance, lieu, parent, téléphone)]
DEMO_STUDENTS = {
    "FORM 1": [
        ("E24F10001", "John Smith", "M", "2008-05-15", "Douala", "Mr. Smith", "677123456"),
        ("E24F10002", "Mary Johnson", "F", "2008-08-22", "Yaounde", "Mrs. Johnson", "677654321"),
    ],
    "FORM 2": [
        ("E23F20001", "David Brown", "M", "2007-03-10", "Bafoussam", "Mr. Brown", "677112233"),
        ("E23F20002", "Sarah Wilson", "F", "2007-11-05", "Douala", "Mrs. Wilson", "677445566"),
    ],
    "FORM 3": [
        ("E22F30001", "Michael Davis", "M", "2006-02-18", "Yaounde", "Mr. Davis", "677778899"),
        ("E22F30002", "Emma Taylor", "F", "2006-09-30", "Douala", "Mrs. Taylor", "677990011"),
    ],
    "FORM 4 ART": [
        ("E21A40001", "James Anderson", "M", "2005-01-25", "Bafoussam", "Mr. Anderson", "677223344"),
        ("E21A40002", "Olivia Martinez", "F", "2005-07-12", "Douala", "Mrs. Martinez", "677556677"),
    ],
    "FORM 4 SCE": [
        ("E21S40001", "Robert Thomas", "M", "2005-04-08", "Yaounde", "Mr. Thomas", "677889900"),
        ("E21S40002", "Sophia Garcia", "F", "2005-12-03", "Douala", "Mrs. Garcia", "677001122"),
    ],
    "FORM 5 ART": [
        ("E20A50001", "William Rodriguez", "M", "2004-06-20", "Bafoussam", "Mr. Rodriguez", "677334455"),
        ("E20A50002", "Isabella Lee", "F", "2004-10-15", "Douala", "Mrs. Lee", "677667788"),
    ],
    "FORM 5 SCE": [
        ("E20S50001", "Daniel Perez", "M", "2004-03-05", "Yaounde", "Mr. Perez", "677990022"),
        ("E20S50002", "Ava Hernandez", "F", "2004-11-28", "Douala", "Mrs. Hernandez", "677113344"),
    ],
    "L6 ART": [
        ("E19LA6001", "Joseph King", "M", "2003-02-14", "Bafoussam", "Mr. King", "677225566"),
        ("E19LA6002", "Mia Wright", "F", "2003-08-09", "Douala", "Mrs. Wright", "677558899"),
    ],
    "L6 SC": [
        ("E19LS6001", "Charles Lopez", "M", "2003-05-17", "Yaounde", "Mr. Lopez", "677881122"),
        ("E19LS6002", "Charlotte Hill", "F", "2003-09-24", "Douala", "Mrs. Hill", "677223355"),
    ],
    "U6 ART": [
        ("E18UA7001", "Thomas Scott", "M", "2002-01-30", "Bafoussam", "Mr. Scott", "677446677"),
        ("E18UA7002", "Amelia Green", "F", "2002-07-22", "Douala", "Mrs. Green", "677779900"),
    ],
    "U6 SC": [
        ("E18US7001", "Christopher Adams", "M", "2002-04-11", "Yaounde", "Mr. Adams", "677002233"),
        ("E18US7002", "Harper Baker", "F", "2002-12-05", "Douala", "Mrs. Baker", "677335566"),
    ],
}

# (classe, matière, séance, coef, enseignant, date, [(matricule, note, observation)])
DEMO_ENTRIES = [
    ("FORM 4 SCE", "MATH", "cc1", 2, "Mr. Mathematics", "2024-09-15", [
        ("E21S40001", "15", ""),
        ("E21S40002", "12", ""),
    ]),
    ("FORM 4 SCE", "MATH", "ds1", 3, "Mr. Mathematics", "2024-10-10", [
        ("E21S40001", "16", "Excellent work"),
        ("E21S40002", "11", ""),
    ]),
]


class Command(BaseCommand):
    help = "Seed demo students and sample grade entries"

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Overwrite existing demo grade entries',
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            SchoolSettings.load()
            self.create_students()
            self.create_entries(options["force"])

        self.stdout.write(self.style.SUCCESS('Successfully seeded demo data'))

    def create_students(self):
        created = 0
        for class_name, rows in DEMO_STUDENTS.items():
            classroom, _ = Classroom.objects.get_or_create(name=class_name)
            for matricule, name, sex, born, place, parent, phone in rows:
                _, was_created = Student.objects.get_or_create(matricule=matricule, defaults={
                    "name": name,
                    "sex": sex,
                    "classroom": classroom,
                    "birth_date": date.fromisoformat(born),
                    "birth_place": place,
                    "parent": parent,
                    "phone": phone,
                })
                created += was_created
        self.stdout.write(f'  Students created: {created}')

    def create_entries(self, force):
        for class_name, code, session, coef, teacher, day, marks in DEMO_ENTRIES:
            classroom = Classroom.objects.get(name=class_name)
            try:
                subject = Subject.objects.get(code=code)
            except Subject.DoesNotExist:
                self.stdout.write(self.style.WARNING(f'  Subject {code} missing, run migrate first'))
                continue

            exists = GradeEntry.objects.filter(classroom=classroom, subject=subject, session=session).exists()
            if exists and not force:
                self.stdout.write(f'  {class_name} {code} {session} already exists. Use --force to overwrite.')
                continue

            entry, _ = GradeEntry.objects.update_or_create(
                classroom=classroom, subject=subject, session=session,
                defaults={"coefficient": coef, "teacher": teacher, "date": date.fromisoformat(day)},
            )
            entry.marks.all().delete()
            for matricule, value, observation in marks:
                Mark.objects.create(
                    entry=entry,
                    student=Student.objects.get(matricule=matricule),
                    value=value,
                    observation=observation,
                )
            self.stdout.write(f'  Saved {class_name} {code} {session}')
