import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Subject",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=16, unique=True)),
                ("name", models.CharField(max_length=64)),
                ("group", models.PositiveSmallIntegerField(
                    choices=[(1, "Groupe 1"), (2, "Groupe 2"), (3, "Groupe 3")],
                    default=1,
                    validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(3)],
                )),
                ("coefficient", models.PositiveSmallIntegerField(
                    default=1, validators=[django.core.validators.MinValueValidator(1)],
                )),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
    ]
