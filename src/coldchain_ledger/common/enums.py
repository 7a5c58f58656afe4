"""Helpers for the closed string enums used in call arguments."""

from enum import Enum
from typing import Optional, TypeVar

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: type[E], value) -> Optional[E]:
    """Return the member of ``enum_cls`` for ``value``, or None if there is none."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None
