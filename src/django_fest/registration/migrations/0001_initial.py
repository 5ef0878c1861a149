import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("fest_events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("registered", "Registered"),
                            ("waitlisted", "Waitlisted"),
                            ("cancelled", "Cancelled"),
                            ("attended", "Attended"),
                        ],
                        default="registered",
                        max_length=20,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[("individual", "Individual"), ("team", "Team"), ("merch", "Merchandise order")],
                        default="individual",
                        max_length=20,
                    ),
                ),
                ("team_name", models.CharField(blank=True, default="", max_length=200)),
                (
                    "team_member_ids",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="User ids of the other team members (excluding this user).",
                    ),
                ),
                ("form_responses", models.JSONField(blank=True, default=list)),
                ("ticket_id", models.CharField(blank=True, db_index=True, default="", max_length=100)),
                ("qr_code_url", models.CharField(blank=True, default="", max_length=2000)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="fest_events.event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fest_registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["event", "status"], name="fest_reg_event_status_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "user"), name="fest_registration_event_user_uniq"),
                ],
            },
        ),
    ]
