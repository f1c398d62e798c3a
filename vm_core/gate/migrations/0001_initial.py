import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("access_codes", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="EntryLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("submitted_code", models.CharField(max_length=5)),
                ("estate_id", models.UUIDField(blank=True, db_index=True, null=True)),
                (
                    "result",
                    models.CharField(
                        choices=[("granted", "Granted"), ("denied", "Denied")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                (
                    "reason_code",
                    models.CharField(
                        choices=[
                            ("CODE_NOT_FOUND", "Code not found"),
                            ("CODE_CANCELLED", "Code cancelled"),
                            ("INVALID_DATE", "Invalid date"),
                            ("TOO_EARLY", "Too early"),
                            ("CODE_EXPIRED", "Code expired"),
                            ("CODE_ALREADY_USED", "Code already used"),
                            ("GRANTED", "Granted"),
                        ],
                        max_length=32,
                    ),
                ),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("gate", models.CharField(default="Main Gate", max_length=100)),
                ("validated_at", models.DateTimeField(db_index=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "access_code",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entry_logs",
                        to="access_codes.accesscode",
                    ),
                ),
                (
                    "resident",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="visitor_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "security",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="gate_validations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "gate_entry_log",
                "indexes": [
                    models.Index(fields=["estate_id", "validated_at"], name="entrylog_estate_time_idx"),
                    models.Index(fields=["security", "validated_at"], name="entrylog_security_time_idx"),
                    models.Index(fields=["resident", "result", "validated_at"], name="entrylog_resident_idx"),
                ],
            },
        ),
    ]
