"""Management command to bootstrap organizers and events from a TOML configuration file."""

from datetime import date, datetime
from typing import Any

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.db import transaction
from django.utils import timezone

from django_fest.accounts.models import Profile
from django_fest.config_loader import as_datetime, load_fest_config
from django_fest.events.models import Event, MerchItem, Organizer

# Mapping from TOML short field names to Django model field names.
_ORGANIZER_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "category": "category",
    "description": "description",
}

_EVENT_FIELD_MAP: dict[str, str] = {
    "description": "description",
    "event_type": "event_type",
    "status": "status",
    "venue": "venue",
    "limit": "registration_limit",
    "open": "registration_open",
    "fee": "registration_fee",
    "eligibility": "eligibility",
    "team_event": "is_team_event",
    "min_team_size": "min_team_size",
    "max_team_size": "max_team_size",
}

_MERCH_FIELD_MAP: dict[str, str] = {
    "price": "price",
    "stock": "stock",
    "variants": "variants",
    "limit_per_user": "limit_per_user",
}


def _map_fields(data: dict[str, Any], field_map: dict[str, str]) -> dict[str, Any]:
    """Map TOML config keys to Django model field names."""
    return {model_field: data[key] for key, model_field in field_map.items() if key in data}


def _aware(value: date, *, end_of_day: bool = False) -> datetime:
    moment = as_datetime(value, end_of_day=end_of_day)
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def _form_schema(fields: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "label": str(field["label"]).strip(),
            "fieldType": field.get("field_type", "text"),
            "required": bool(field.get("required", False)),
            "options": [str(option) for option in field.get("options", [])],
        }
        for field in fields
    ]


class Command(BaseCommand):
    """Bootstrap organizers, events and merchandise from a TOML file.

    Organizers are matched by account e-mail, events by organizer and name,
    and merchandise items by event and name, so re-running the command
    updates records in place. Registration counters are never touched.

    Usage::

        manage.py bootstrap_fest --config fest.toml
        manage.py bootstrap_fest --config fest.toml --dry-run
    """

    help = "Create or update fest organizers and events from a TOML config file."

    def add_arguments(self, parser: CommandParser) -> None:
        """Define the command-line arguments accepted by this command."""
        parser.add_argument(
            "--config",
            required=True,
            help="Path to the fest TOML configuration file.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            default=False,
            help="Validate the config and print what would be created without saving.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the bootstrap command."""
        try:
            fest = load_fest_config(options["config"])
        except (FileNotFoundError, TypeError, ValueError) as exc:
            raise CommandError(str(exc)) from exc

        if options["dry_run"]:
            self._print_dry_run(fest)
            return

        with transaction.atomic():
            organizers = {
                data["email"]: self._bootstrap_organizer(data) for data in fest["organizers"]
            }
            for event_data in fest["events"]:
                event = self._bootstrap_event(organizers[event_data["organizer"]], event_data)
                self._bootstrap_merch_items(event, event_data.get("merch_items", []))

        self.stdout.write(
            self.style.SUCCESS(
                f"\nBootstrapped {len(organizers)} organizer(s) and {len(fest['events'])} event(s)."
            )
        )

    def _bootstrap_organizer(self, data: dict[str, Any]) -> Organizer:
        """Create or update an organizer and its login account."""
        User = get_user_model()
        email = data["email"]
        account = User.objects.filter(email__iexact=email).first()
        if account is None:
            account = User(username=email, email=email)
            account.set_unusable_password()
            account.save()
            self.stdout.write(self.style.SUCCESS(f"  Created account: {email}"))

        Profile.objects.update_or_create(user=account, defaults={"role": Profile.Role.ORGANIZER})

        fields = _map_fields(data, _ORGANIZER_FIELD_MAP)
        fields["contact_email"] = data.get("contact_email", email)
        organizer, created = Organizer.objects.update_or_create(account=account, defaults=fields)
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(f"  {verb} organizer: {organizer.name}"))
        return organizer

    def _bootstrap_event(self, organizer: Organizer, data: dict[str, Any]) -> Event:
        """Create or update an event matched by organizer and name."""
        fields = _map_fields(data, _EVENT_FIELD_MAP)
        fields["registration_deadline"] = _aware(data["deadline"], end_of_day=True)
        if "start" in data:
            fields["start_date"] = _aware(data["start"])
        if "end" in data:
            fields["end_date"] = _aware(data["end"], end_of_day=True)
        if "form_schema" in data:
            fields["form_schema"] = _form_schema(data["form_schema"])

        event, created = Event.objects.update_or_create(organizer=organizer, name=data["name"], defaults=fields)
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(f"  {verb} event: {event.name}"))
        return event

    def _bootstrap_merch_items(self, event: Event, items: list[dict[str, Any]]) -> None:
        """Create or update an event's merchandise items, keeping file order."""
        for position, data in enumerate(items):
            fields = _map_fields(data, _MERCH_FIELD_MAP)
            fields["order"] = position
            item, created = MerchItem.objects.update_or_create(event=event, name=data["name"], defaults=fields)
            verb = "Created" if created else "Updated"
            self.stdout.write(self.style.SUCCESS(f"    {verb} item: {item.name}"))

    def _print_dry_run(self, fest: dict[str, Any]) -> None:
        """Print a preview of what would be created without touching the database."""
        self.stdout.write(self.style.MIGRATE_HEADING("\n[DRY RUN] No database changes will be made.\n"))
        self.stdout.write(self.style.MIGRATE_HEADING(f"Organizers ({len(fest['organizers'])}):"))
        for organizer in fest["organizers"]:
            self.stdout.write(f"  - {organizer['name']} <{organizer['email']}>")

        self.stdout.write(self.style.MIGRATE_HEADING(f"\nEvents ({len(fest['events'])}):"))
        for event in fest["events"]:
            kind = "team" if event.get("team_event") else event["event_type"]
            self.stdout.write(f"  - {event['name']} [{kind}] by {event['organizer']}, deadline {event['deadline']}")
            for item in event.get("merch_items", []):
                self.stdout.write(f"      * {item['name']}: stock {item['stock']} @ {item['price']}")
