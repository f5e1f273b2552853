from django.db import migrations

CLASS_NAMES = [
    "FORM 1", "FORM 2", "FORM 3",
    "FORM 4 ART", "FORM 4 SCE", "FORM 5 ART", "FORM 5 SCE",
    "L6 ART", "L6 SC", "U6 ART", "U6 SC",
]


def seed_classrooms(apps, schema_editor):
    Classroom = apps.get_model("core", "Classroom")
    for name in CLASS_NAMES:
        Classroom.objects.get_or_create(name=name)


def unseed_classrooms(apps, schema_editor):
    Classroom = apps.get_model("core", "Classroom")
    Classroom.objects.filter(name__in=CLASS_NAMES, students__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("core", "0001_initial"),
        ("enrollments", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_classrooms, reverse_code=unseed_classrooms),
    ]
