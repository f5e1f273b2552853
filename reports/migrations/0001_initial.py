import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("enrollments", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ReportToken",
            fields=[
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("class_name", models.CharField(max_length=32)),
                ("term", models.CharField(max_length=3)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("valid", models.BooleanField(default=True)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("pdf_sha1", models.CharField(blank=True, max_length=64)),
                ("student", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="report_tokens", to="enrollments.student",
                )),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
