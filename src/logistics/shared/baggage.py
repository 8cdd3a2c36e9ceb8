"""Baggage-type sets, stored as JSON lists on Deals and Parcels."""

import json

from protean.exceptions import ValidationError


def parse_baggage_types(value) -> list[str]:
    """Return the baggage types held in ``value`` (a JSON string or a list)."""
    if value is None or value == "":
        return []
    items = json.loads(value) if isinstance(value, str) else list(value)
    if not isinstance(items, list):
        raise ValidationError({"baggage_types": ["Baggage types must be a list"]})

    seen: list[str] = []
    for item in items:
        name = str(item).strip()
        if name and name not in seen:
            seen.append(name)
    return seen


def dump_baggage_types(value, required: bool = True) -> str:
    """Normalize ``value`` and serialize it back to a JSON list."""
    types = parse_baggage_types(value)
    if required and not types:
        raise ValidationError({"baggage_types": ["At least one baggage type is required"]})
    return json.dumps(types)


def intersects(left, right) -> bool:
    return bool(set(parse_baggage_types(left)) & set(parse_baggage_types(right)))
