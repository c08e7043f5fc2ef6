from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import ValidationError


# Field kinds understood by validate_payload
INT = "int"
STR = "str"
BOOL = "bool"

MAX_TEXT_LENGTH = 500


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy for one JSON body:
    - fields: allowlist of field name -> kind (security boundary)
    - required: fields that must be present and non-null
    """
    fields: dict[str, str]
    required: set[str] = field(default_factory=set)


def _coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15") and decimals
        if "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{key} must be a plain integer")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false", "active", "inactive"):
        return value.lower() in ("true", "active")
    raise ValidationError(f"{key} must be a boolean")


def _coerce_str(key: str, value: Any) -> str:
    text = str(value).strip()
    if len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(f"{key} exceeds max length {MAX_TEXT_LENGTH}")
    return text


_COERCERS = {INT: _coerce_int, BOOL: _coerce_bool, STR: _coerce_str}


def validate_payload(payload: Any, policy: PayloadPolicy) -> dict:
    """
    Validate and normalize an incoming JSON body.

    Unknown fields are rejected, required fields enforced, values coerced.
    Returns a cleaned dict containing only the fields that were sent.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    missing = sorted(f for f in policy.required if payload.get(f) is None)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cleaned: dict = {}
    for key, raw in payload.items():
        kind = policy.fields.get(key)
        if kind is None:
            raise ValidationError(f"Field not allowed: {key}")
        if raw is None:
            cleaned[key] = None
            continue
        cleaned[key] = _COERCERS[kind](key, raw)
    return cleaned
