from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Classroom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=32, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="SchoolSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                ("address", models.CharField(blank=True, max_length=128)),
                ("phone", models.CharField(blank=True, max_length=64)),
                ("academic_year", models.CharField(max_length=9)),
                ("auto_print", models.BooleanField(default=False)),
                ("show_rank", models.BooleanField(default=True)),
                ("show_statistics", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "school settings",
                "verbose_name_plural": "school settings",
            },
        ),
    ]
