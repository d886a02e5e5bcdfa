"""
Custom column types.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator

from campusdesk.core.timestamps import InvalidTimestamp, parse_timestamp

# Same text layout SQLAlchemy's SQLite DateTime writes, so ordering is unchanged
SQLITE_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


class LenientDateTime(TypeDecorator):
    """
    Naive-UTC DateTime that tolerates unparseable stored values.

    SQLite keeps DateTime as text and the stock result processor raises a
    bare ValueError on a bad value, which aborts the whole row load. This
    type hands such values back as the raw string instead, so they reach
    the SLA engine and surface as InvalidTimestamp only where the value is
    actually evaluated.
    """

    impl = DateTime
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(DateTime())

    def process_bind_param(self, value: Optional[Union[datetime, str]], dialect) -> Optional[Union[datetime, str]]:
        if value is None:
            return None
        if isinstance(value, str):
            value = parse_timestamp(value)
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        if dialect.name == "sqlite":
            return value.strftime(SQLITE_FORMAT)
        return value

    def process_result_value(self, value: Optional[Union[datetime, str]], dialect) -> Optional[Union[datetime, str]]:
        if value is None or isinstance(value, datetime):
            return value
        try:
            parsed = parse_timestamp(value)
        except InvalidTimestamp:
            return value
        return parsed.astimezone(timezone.utc).replace(tzinfo=None)
