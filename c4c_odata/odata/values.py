"""
c4c_odata.odata.values - Typed OData literal values
====================================================

Wrappers for OData scalar types whose literal form needs a type prefix,
plus the conversion of plain Python values into ``$filter`` literals.

>>> from datetime import datetime, timezone
>>> str(ODataDateTime.from_datetime(datetime(2020, 1, 1, tzinfo=timezone.utc)))
"datetime'2020-01-01T00:00:00.000Z'"
>>> to_literal("Open")
"'Open'"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
import math

from c4c_odata.core.errors import FrameworkError, ValidationError


class LiteralKind(str, Enum):
    """Closed set of value kinds accepted in a filter comparison."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetimeoffset"
    VALUE_OBJECT = "value_object"


def iso_instant(value: date) -> str:
    """
    Format a point in time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Aware datetimes are converted to UTC, naive datetimes are taken as UTC
    and a plain ``date`` is midnight UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
    else:
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ODataValueObject(ABC):
    """
    A value that knows its own OData literal representation.

    ``str(value)`` is used verbatim in filter expressions.
    """

    kind: LiteralKind = LiteralKind.VALUE_OBJECT

    @abstractmethod
    def __str__(self) -> str:
        ...


@dataclass(frozen=True)
class ODataDateTime(ODataValueObject):
    """Edm.DateTime literal, ``datetime'...'``."""

    value: datetime
    kind = LiteralKind.DATETIME

    @classmethod
    def from_datetime(cls, value: date) -> "ODataDateTime":
        return cls(value)

    def __str__(self) -> str:
        return f"datetime'{iso_instant(self.value)}'"


@dataclass(frozen=True)
class ODataDateTimeOffset(ODataValueObject):
    """Edm.DateTimeOffset literal, ``datetimeoffset'...'``."""

    value: datetime
    kind = LiteralKind.DATETIME_OFFSET

    @classmethod
    def from_datetime(cls, value: date) -> "ODataDateTimeOffset":
        return cls(value)

    def __str__(self) -> str:
        return f"datetimeoffset'{iso_instant(self.value)}'"


def classify(value: Any) -> Optional[LiteralKind]:
    """Return the kind of ``value`` or None when it is not supported."""
    if value is None:
        return LiteralKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return LiteralKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return LiteralKind.NUMBER
    if isinstance(value, str):
        return LiteralKind.STRING
    if isinstance(value, ODataValueObject):
        kind = getattr(value, "kind", None)
        if kind in (LiteralKind.DATETIME, LiteralKind.DATETIME_OFFSET):
            return kind
        return LiteralKind.VALUE_OBJECT
    return None


def _format_number(value: Any) -> str:
    if isinstance(value, float) and not math.isfinite(value) or (
        isinstance(value, Decimal) and not value.is_finite()
    ):
        raise ValidationError(f"{value} is not a valid odata number")
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # plain positional notation, never 1e-07
        return format(Decimal(repr(value)), "f")
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def to_text(value: Any) -> str:
    """Text of a value placed inside a quoted string literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _format_number(value)
    return str(value)


def to_literal(value: Any) -> Optional[str]:
    """
    Convert a comparison value into its ``$filter`` literal.

    Returns None for the OData ``null`` literal. Value objects render
    through their own ``str``.

    Raises
    ------
    ValidationError
        If a number is NaN or infinite
    FrameworkError
        If the value type is not supported
    """
    if isinstance(value, ODataValueObject):
        return str(value)
    kind = classify(value)
    if kind is LiteralKind.NULL:
        return None
    if kind is LiteralKind.BOOLEAN:
        return "true" if value else "false"
    if kind is LiteralKind.NUMBER:
        return _format_number(value)
    if kind is LiteralKind.STRING:
        # already formatted literals pass through
        if value.startswith("'") or value.startswith("datetime"):
            return value
        return f"'{value}'"
    raise FrameworkError(
        f"Unsupported value of type {type(value).__name__} in odata filter comparison"
    )
