import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("subjects", "0001_initial"),
        ("enrollments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GradeEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("session", models.CharField(choices=[
                    ("cc1", "CC1"), ("ds1", "DS1"), ("cc2", "CC2"), ("ds2", "DS2"), ("cc3", "CC3"),
                    ("ds3", "DS3"), ("cc4", "CC4"), ("ds4", "DS4"), ("cc5", "CC5"), ("ds5", "DS5"),
                ], max_length=4)),
                ("coefficient", models.PositiveSmallIntegerField(
                    default=1, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("teacher", models.CharField(blank=True, max_length=128)),
                ("date", models.DateField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("classroom", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="grade_entries", to="core.classroom",
                )),
                ("subject", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="grade_entries", to="subjects.subject",
                )),
            ],
            options={
                "ordering": ["classroom", "subject", "id"],
                "unique_together": {("classroom", "subject", "session")},
            },
        ),
        migrations.CreateModel(
            name="Mark",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("value", models.DecimalField(
                    blank=True, decimal_places=2, max_digits=4, null=True,
                    validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(20)],
                )),
                ("absent", models.BooleanField(default=False)),
                ("observation", models.CharField(blank=True, max_length=255)),
                ("entry", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="marks", to="assessments.gradeentry",
                )),
                ("student", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="marks", to="enrollments.student",
                )),
            ],
            options={
                "ordering": ["entry", "id"],
                "unique_together": {("entry", "student")},
            },
        ),
    ]
