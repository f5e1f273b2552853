from django.db import migrations

# (code, name, group, coefficient)
DEFAULT_SUBJECTS = [
    ("MATH", "MATHEMATICS", 1, 2),
    ("PHY", "PHYSICS", 1, 2),
    ("CHEM", "CHEMISTRY", 1, 2),
    ("AMATH", "ADDITIONAL MATHEMATICS", 1, 2),
    ("FMATH", "FURTHER MATHEMATICS", 1, 2),
    ("COMP", "COMPUTER SCIENCE/ICT", 1, 1),
    ("BIO", "BIOLOGY", 1, 2),
    ("HBIO", "HUMAN BIOLOGY", 1, 2),
    ("GEOG", "GEOGRAPHY", 2, 2),
    ("HIST", "HISTORY", 2, 2),
    ("ECON", "ECONOMICS", 2, 2),
    ("COMM", "COMMERCE", 2, 2),
    ("ENG", "ENGLISH", 2, 2),
    ("FREN", "FRENCH", 2, 2),
    ("LIT", "LITERATURE", 2, 1),
    ("CIT", "CITIZENSHIP", 2, 1),
    ("REL", "RELIGIOUS STUDIES", 2, 1),
    ("SPORT", "SPORTS", 3, 1),
    ("MAN", "MANUAL LABOUR", 3, 1),
    ("GEOL", "GEOLOGY", 1, 2),
    ("FSN", "FOOD SCIENCE AND NUTRITION", 1, 2),
]


def seed_subjects(apps, schema_editor):
    Subject = apps.get_model("subjects", "Subject")
    for code, name, group, coef in DEFAULT_SUBJECTS:
        Subject.objects.get_or_create(code=code, defaults={"name": name, "group": group, "coefficient": coef})


def unseed_subjects(apps, schema_editor):
    Subject = apps.get_model("subjects", "Subject")
    Subject.objects.filter(code__in=[s[0] for s in DEFAULT_SUBJECTS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("subjects", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_subjects, reverse_code=unseed_subjects),
    ]
