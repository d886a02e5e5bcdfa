"""
Timestamp parsing shared by the ORM column type and the SLA engine.
"""

from datetime import datetime, timezone
from typing import Any, Union


class InvalidTimestamp(ValueError):
    """Raised when a complaint timestamp cannot be parsed."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Invalid timestamp in field '{field}': {value!r}")


def parse_timestamp(value: Union[datetime, str], field: str = "due_date") -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware UTC-comparable datetime.

    Naive values are taken as UTC, matching how DateTime columns are stored.

    Raises:
        InvalidTimestamp: If the value is not a datetime or a parseable string
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidTimestamp(field, value) from e
    else:
        raise InvalidTimestamp(field, value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
