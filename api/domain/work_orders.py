"""Domain helpers for work orders: record type, field rules and filtering."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

PRIORITIES = ("Low", "Medium", "High")
STATUSES = ("Open", "In Progress", "Done")

EDITABLE_FIELDS = ("title", "description", "priority", "status")
# Store-managed keys: accepted in update payloads but never trusted.
MANAGED_FIELDS = ("id", "updatedAt")

FIELD_RULES: dict[str, dict[str, Any]] = {
    "title": {"min": 2, "max": 80},
    "description": {"min": 10, "max": 500},
    "priority": {"choices": PRIORITIES},
    "status": {"choices": STATUSES},
}

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

FILTER_ALL = "All"


@dataclass
class WorkOrder:
    id: str
    title: str
    description: str
    priority: str
    status: str
    updated_at: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkOrder":
        """Build from the persisted shape; raises KeyError/TypeError on malformed entries."""
        if not isinstance(data, Mapping):
            raise TypeError(f"work order entry must be an object, got {type(data).__name__}")
        for key in ("id", *EDITABLE_FIELDS, "updatedAt"):
            if not isinstance(data[key], str):
                raise TypeError(f"work order field '{key}' must be a string, got {type(data[key]).__name__}")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            priority=data["priority"],
            status=data["status"],
            updated_at=data["updatedAt"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "updatedAt": self.updated_at,
        }


def is_valid_id(value: Any) -> bool:
    """Return True when value is a canonical UUID string."""
    if not isinstance(value, str):
        return False
    return bool(UUID_PATTERN.fullmatch(value))


def _check_field(name: str, value: Any) -> tuple[Any, str | None]:
    """Apply FIELD_RULES[name] to value. Returns (cleaned value, error message or None)."""
    rule = FIELD_RULES[name]
    choices = rule.get("choices")
    if choices is not None:
        if value not in choices:
            return value, f"must be one of: {', '.join(choices)}"
        return value, None
    if not isinstance(value, str):
        return value, "must be a string"
    cleaned = value.strip()
    if not cleaned:
        return cleaned, "is required"
    if len(cleaned) < rule["min"]:
        return cleaned, f"must be at least {rule['min']} characters"
    if len(cleaned) > rule["max"]:
        return cleaned, f"must not exceed {rule['max']} characters"
    return cleaned, None


def validate_fields(fields: Mapping[str, Any], *, partial: bool = False) -> tuple[dict, list[tuple[str, str]]]:
    """
    Check fields against FIELD_RULES and collect every violation.

    Full mode (create) requires all editable fields and drops any other key.
    Partial mode (update) checks only provided fields, treats None as absent,
    discards store-managed keys and reports unknown keys.
    Returns (cleaned fields, [(field, message), ...]).
    """
    cleaned: dict[str, Any] = {}
    errors: list[tuple[str, str]] = []
    if not isinstance(fields, Mapping):
        return cleaned, [("fields", "must be an object")]

    if partial:
        for key in fields:
            if key not in EDITABLE_FIELDS and key not in MANAGED_FIELDS:
                errors.append((str(key), "unrecognized field"))

    for name in EDITABLE_FIELDS:
        value = fields.get(name)
        if value is None:
            if not partial:
                errors.append((name, "is required"))
            continue
        value, message = _check_field(name, value)
        if message:
            errors.append((name, message))
        else:
            cleaned[name] = value

    if partial and not errors and not cleaned:
        errors.append(("fields", "at least one field must be provided for update"))
    return cleaned, errors


def filter_work_orders(
    orders: Iterable[WorkOrder],
    query: str | None = None,
    status: str | None = None,
) -> list[WorkOrder]:
    """Case-insensitive title search plus exact status match; blank or 'All' disables a criterion."""
    needle = (query or "").strip().lower()
    wanted = (status or "").strip()
    if wanted == FILTER_ALL:
        wanted = ""
    result = []
    for order in orders:
        if wanted and order.status != wanted:
            continue
        if needle and needle not in order.title.lower():
            continue
        result.append(order)
    return result
