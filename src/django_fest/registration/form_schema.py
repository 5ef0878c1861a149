"""Evaluation of organizer-defined registration forms.

An event's ``form_schema`` is an ordered list of field descriptors stored as
JSON (``{"label", "fieldType", "required", "options"}``). Answers arrive as a
list of ``{"question", "answer"}`` pairs keyed by the field label. The
functions here are pure and shared by individual registration and team
creation.
"""

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from django_fest.exceptions import ValidationError


class FieldKind(enum.StrEnum):
    """Supported form field types."""

    TEXT = "text"
    NUMBER = "number"
    FILE = "file"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"


@dataclass(frozen=True, slots=True)
class FormField:
    """A single field descriptor from an event's form schema."""

    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    options: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormField":
        """Build a descriptor from its stored JSON form.

        Unknown field types fall back to ``text``.
        """
        raw_kind = data.get("fieldType") or data.get("field_type") or FieldKind.TEXT
        try:
            kind = FieldKind(str(raw_kind))
        except ValueError:
            kind = FieldKind.TEXT
        options = data.get("options") or []
        return cls(
            label=str(data.get("label") or "").strip(),
            kind=kind,
            required=bool(data.get("required", False)),
            options=[str(o) for o in options] if isinstance(options, list) else [],
        )


def parse_schema(raw: Iterable[Any] | None) -> list[FormField]:
    """Parse a stored schema, skipping entries that are not mappings."""
    return [FormField.from_dict(item) for item in (raw or []) if isinstance(item, Mapping)]


def normalize_responses(raw: Any) -> list[dict[str, Any]]:
    """Keep only ``{"question": str, "answer": ...}`` entries.

    Args:
        raw: Whatever the caller submitted as form responses.

    Returns:
        A list of plain dicts safe to persist as JSON.
    """
    if not isinstance(raw, list):
        return []
    return [
        {"question": item["question"], "answer": item.get("answer")}
        for item in raw
        if isinstance(item, Mapping) and isinstance(item.get("question"), str)
    ]


def _is_blank(answer: Any) -> bool:
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    if isinstance(answer, list):
        return len(answer) == 0
    return False


def find_missing_required(schema: list[FormField], responses: list[dict[str, Any]]) -> FormField | None:
    """Return the first required field without a usable answer, if any.

    A blank string or an empty list counts as missing; any other value
    counts as present.
    """
    answers = {item["question"]: item.get("answer") for item in responses}
    for form_field in schema:
        if not form_field.required or not form_field.label:
            continue
        if _is_blank(answers.get(form_field.label)):
            return form_field
    return None


def validate_form_responses(raw_schema: Iterable[Any] | None, raw_responses: Any) -> list[dict[str, Any]]:
    """Validate answers against a schema and return the normalized answers.

    Args:
        raw_schema: The event's stored ``form_schema``.
        raw_responses: The submitted responses.

    Returns:
        The normalized responses.

    Raises:
        ValidationError: If a required field is unanswered.
    """
    responses = normalize_responses(raw_responses)
    missing = find_missing_required(parse_schema(raw_schema), responses)
    if missing is not None:
        raise ValidationError(f"Missing required form field: {missing.label}")
    return responses
