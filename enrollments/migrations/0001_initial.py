import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("matricule", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=128)),
                ("sex", models.CharField(choices=[("M", "M"), ("F", "F")], max_length=1)),
                ("birth_date", models.DateField(blank=True, null=True)),
                ("birth_place", models.CharField(blank=True, max_length=64)),
                ("parent", models.CharField(blank=True, max_length=128)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("classroom", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="students", to="core.classroom",
                )),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
