"""
Helpers for client-supplied fields that may arrive JSON-encoded.

Multipart requests carry structured values (lists, objects) as JSON strings,
while JSON bodies carry them already decoded. Everything is normalized here
before business logic runs.
"""

import json
from typing import Any, List, Optional

from src.utils.errors import ValidationError


def parse_json_field(value: Any, field_name: str) -> Any:
    """
    Decode a field that may be a JSON string or an already-decoded value.

    Args:
        value: Raw field value from the request
        field_name: Field name used in the error message

    Returns:
        Decoded value, or None when the field was not supplied

    Raises:
        ValidationError: If a string value is not valid JSON
    """
    if value is None:
        return None
    if isinstance(value, (list, dict)):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON format in field '{field_name}': {e.msg}")
    return value


def ensure_list(value: Any) -> List[Any]:
    """Wrap a bare scalar into a one-element list; None becomes []."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def parse_json_list(value: Any, field_name: str) -> Optional[List[Any]]:
    """Decode a list field, returning None when it was not supplied."""
    parsed = parse_json_field(value, field_name)
    if parsed is None:
        return None
    return ensure_list(parsed)


def parse_form_bool(value: Any) -> Optional[bool]:
    """Form booleans arrive as 'true'/'false' strings."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def parse_form_number(value: Any, field_name: str) -> Optional[float]:
    """Parse a numeric form field; empty values count as not supplied."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Field '{field_name}' must be a number")
