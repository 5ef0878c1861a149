"""Management command to restore cached registration counts."""

from typing import Any

from django.core.management.base import BaseCommand, CommandError, CommandParser

from django_fest.events.models import Event
from django_fest.registration.services.capacity import resync


class Command(BaseCommand):
    """Recompute ``Event.registration_count`` from the registration table.

    Usage::

        manage.py resync_registration_counts
        manage.py resync_registration_counts --event 42
    """

    help = "Recompute cached registration counts for one or all events."

    def add_arguments(self, parser: CommandParser) -> None:
        """Define the command-line arguments accepted by this command."""
        parser.add_argument(
            "--event",
            type=int,
            default=None,
            help="Only resync the event with this id.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the resync."""
        events = Event.objects.order_by("pk")
        if options["event"] is not None:
            events = events.filter(pk=options["event"])
            if not events.exists():
                raise CommandError(f"Event {options['event']} does not exist.")

        changed = 0
        for event in events:
            before = event.registration_count
            after = resync(event)
            if before != after:
                changed += 1
                self.stdout.write(f"  {event.name}: {before} -> {after}")
        self.stdout.write(self.style.SUCCESS(f"Resynced {len(events)} event(s), {changed} changed."))
