import enum
from typing import Dict, Mapping, Type, TypeVar

E = TypeVar("E", bound=enum.Enum)
V = TypeVar("V")


def exhaustive(enum_cls: Type[E], mapping: Mapping[E, V]) -> Dict[E, V]:
    """
    Freeze a lookup table keyed by every member of ``enum_cls``.

    Raises at import time when a member is missing or a foreign key is
    present, so adding a category, status or role without updating the
    tables that depend on it fails loudly instead of falling through to
    a default at render time.

    Args:
        enum_cls: The closed enumeration the table must cover
        mapping: Member -> value table

    Returns:
        A plain dict copy of the table
    """
    members = set(enum_cls)
    keys = set(mapping)

    missing = members - keys
    if missing:
        names = ", ".join(sorted(m.name for m in missing))
        raise TypeError(f"{enum_cls.__name__} lookup is missing: {names}")

    extra = keys - members
    if extra:
        raise TypeError(f"{enum_cls.__name__} lookup has unknown keys: {sorted(map(str, extra))}")

    return dict(mapping)
