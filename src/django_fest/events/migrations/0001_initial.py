import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Organizer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("category", models.CharField(blank=True, default="", max_length=100)),
                ("contact_email", models.EmailField(max_length=254)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("disabled", "Disabled"), ("archived", "Archived")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organizer_profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "event_type",
                    models.CharField(
                        choices=[("normal", "Normal"), ("merchandise", "Merchandise")],
                        default="normal",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("published", "Published"),
                            ("cancelled", "Cancelled"),
                            ("completed", "Completed"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("venue", models.CharField(blank=True, default="", max_length=300)),
                ("registration_deadline", models.DateTimeField()),
                ("start_date", models.DateTimeField(blank=True, null=True)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                (
                    "registration_limit",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Maximum number of registrations. 0 means unlimited.",
                    ),
                ),
                ("registration_count", models.PositiveIntegerField(default=0)),
                ("registration_open", models.BooleanField(default=True)),
                ("registration_fee", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                (
                    "eligibility",
                    models.CharField(
                        choices=[
                            ("all", "Everyone"),
                            ("iiit_only", "IIIT participants only"),
                            ("non_iiit_only", "Non-IIIT participants only"),
                        ],
                        default="all",
                        max_length=20,
                    ),
                ),
                ("is_team_event", models.BooleanField(default=False)),
                (
                    "min_team_size",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Leave empty to use the configured default.",
                        null=True,
                    ),
                ),
                (
                    "max_team_size",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Leave empty to use the configured default.",
                        null=True,
                    ),
                ),
                (
                    "form_schema",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Ordered list of {label, fieldType, required, options} descriptors.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="fest_events.organizer",
                    ),
                ),
            ],
            options={
                "ordering": ["registration_deadline", "name"],
                "indexes": [models.Index(fields=["organizer", "status"], name="fest_event_org_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="MerchItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("stock", models.PositiveIntegerField(default=0)),
                ("variants", models.JSONField(blank=True, default=list, help_text='e.g. ["S", "M", "L", "XL"]')),
                ("limit_per_user", models.PositiveIntegerField(default=1)),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="merch_items",
                        to="fest_events.event",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "name"), name="fest_merchitem_event_name_uniq"),
                ],
            },
        ),
    ]
