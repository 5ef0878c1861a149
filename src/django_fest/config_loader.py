"""TOML loader for fest bootstrap configuration.

Loads and validates a fest TOML file (see ``fest.example.toml``) so that
organizers, events, merchandise items, and registration forms can be
created programmatically.
"""

import tomllib
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

from django_fest.registration.form_schema import FieldKind

_REQUIRED_ORGANIZER_FIELDS: set[str] = {"name", "email"}
_REQUIRED_EVENT_FIELDS: set[str] = {"name", "organizer", "deadline"}
_REQUIRED_MERCH_FIELDS: set[str] = {"name", "price", "stock"}
_REQUIRED_FORM_FIELDS: set[str] = {"label"}

_EVENT_TYPES: set[str] = {"normal", "merchandise"}
_ELIGIBILITY: set[str] = {"all", "iiit_only", "non_iiit_only"}
_STATUSES: set[str] = {"draft", "published", "cancelled", "completed"}


def _validate_mapping(mapping: object, required: set[str], label: str) -> None:
    """Validate that *mapping* is a dict containing all *required* keys.

    Raises:
        TypeError: If *mapping* is not a dict.
        ValueError: If *mapping* is missing required keys.
    """
    if not isinstance(mapping, dict):
        msg = f"{label} must be a mapping, got {type(mapping).__name__}"
        raise TypeError(msg)
    missing = required - mapping.keys()
    if missing:
        msg = f"{label} is missing required fields: {', '.join(sorted(missing))}"
        raise ValueError(msg)


def _validate_list(
    parent: dict[str, Any],
    key: str,
    label: str,
    required_fields: set[str],
    *,
    must_exist: bool = False,
) -> list[dict[str, Any]]:
    """Validate an optional list of mappings and return it (``[]`` if absent)."""
    items = parent.get(key)
    if items is None:
        if must_exist:
            msg = f"{label} must be a non-empty list"
            raise ValueError(msg)
        return []
    if not isinstance(items, list) or (must_exist and len(items) == 0):
        msg = f"{label} must be a non-empty list"
        raise ValueError(msg)
    for idx, item in enumerate(items):
        _validate_mapping(item, required_fields, f"{label}[{idx}]")
    return items


def _validate_choice(value: object, choices: set[str], label: str) -> None:
    if value not in choices:
        msg = f"{label} must be one of: {', '.join(sorted(choices))}"
        raise ValueError(msg)


def _validate_unique(values: list[str], label: str) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for value in values:
        if value in seen:
            duplicates.add(value)
        seen.add(value)
    if duplicates:
        msg = f"{label} has duplicates: {', '.join(sorted(duplicates))}"
        raise ValueError(msg)


def _validate_event(event: dict[str, Any], label: str, organizer_emails: set[str]) -> None:
    event["organizer"] = str(event["organizer"]).strip().lower()
    if event["organizer"] not in organizer_emails:
        msg = f"{label}.organizer '{event['organizer']}' does not match any fest.organizers email"
        raise ValueError(msg)

    for key in ("deadline", "start", "end"):
        if key in event and not isinstance(event[key], date):
            msg = f"{label}.{key} must be a TOML date or datetime"
            raise ValueError(msg)

    event.setdefault("event_type", "normal")
    _validate_choice(event["event_type"], _EVENT_TYPES, f"{label}.event_type")
    if "eligibility" in event:
        _validate_choice(event["eligibility"], _ELIGIBILITY, f"{label}.eligibility")
    if "status" in event:
        _validate_choice(event["status"], _STATUSES, f"{label}.status")

    if event.get("team_event"):
        min_size = event.get("min_team_size")
        max_size = event.get("max_team_size")
        for key, value in (("min_team_size", min_size), ("max_team_size", max_size)):
            if value is not None and (not isinstance(value, int) or value < 1):
                msg = f"{label}.{key} must be a positive integer"
                raise ValueError(msg)
        if min_size is not None and max_size is not None and min_size > max_size:
            msg = f"{label}.min_team_size cannot exceed max_team_size"
            raise ValueError(msg)

    items = _validate_list(event, "merch_items", f"{label}.merch_items", _REQUIRED_MERCH_FIELDS)
    if items and event["event_type"] != "merchandise":
        msg = f"{label}.merch_items requires event_type = \"merchandise\""
        raise ValueError(msg)
    _validate_unique([str(item["name"]).strip().lower() for item in items], f"{label}.merch_items")

    fields = _validate_list(event, "form_schema", f"{label}.form_schema", _REQUIRED_FORM_FIELDS)
    for idx, form_field in enumerate(fields):
        kind = form_field.get("field_type", FieldKind.TEXT.value)
        _validate_choice(kind, {k.value for k in FieldKind}, f"{label}.form_schema[{idx}].field_type")


def load_fest_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a fest TOML configuration file.

    Args:
        path: Filesystem path to the TOML file.

    Returns:
        The ``fest`` mapping from the parsed TOML, with native types
        (``datetime`` for dates, ``Decimal`` for prices). Organizer e-mails
        are normalized to lowercase, and each event's ``organizer`` reference
        is normalized the same way.

    Raises:
        FileNotFoundError: If *path* does not exist.
        TypeError: If a table or list entry is not a mapping.
        ValueError: If required keys or fields are missing or invalid, or
            the file is not valid TOML.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Fest config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open("rb") as fh:
        try:
            data: dict[str, Any] = tomllib.load(fh, parse_float=Decimal)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {path}: {exc}"
            raise ValueError(msg) from exc

    if "fest" not in data:
        msg = "Missing required [fest] table in config file"
        raise ValueError(msg)

    fest = data["fest"]
    _validate_mapping(fest, set(), "fest")

    organizers = _validate_list(fest, "organizers", "fest.organizers", _REQUIRED_ORGANIZER_FIELDS, must_exist=True)
    for organizer in organizers:
        organizer["email"] = str(organizer["email"]).strip().lower()
    emails = [organizer["email"] for organizer in organizers]
    _validate_unique(emails, "fest.organizers")

    events = _validate_list(fest, "events", "fest.events", _REQUIRED_EVENT_FIELDS)
    fest["events"] = events
    for idx, event in enumerate(events):
        _validate_event(event, f"fest.events[{idx}]", set(emails))
    _validate_unique([f"{event['organizer']}/{event['name']}" for event in events], "fest.events")

    return fest


def as_datetime(value: date, *, end_of_day: bool = False) -> datetime:
    """Widen a TOML date to a datetime; datetimes are returned unchanged.

    Args:
        value: A ``date`` or ``datetime`` from the parsed config.
        end_of_day: Use 23:59:59 instead of midnight for bare dates.
    """
    if isinstance(value, datetime):
        return value
    moment = datetime.max.time().replace(microsecond=0) if end_of_day else datetime.min.time()
    return datetime.combine(value, moment)
