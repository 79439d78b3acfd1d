"""
c4c_odata.odata.filter - Fluent $filter builder
================================================

Builds OData v2 ``$filter`` expressions from per-field comparisons.

Comparisons are collected per field in the order fields are first touched.
When the filter is built, each field with several comparisons becomes a
parenthesized group: joined with ``or`` when any comparison is ``eq``,
otherwise with ``and``. Field groups are joined with ``and``.

Examples
--------
>>> f = ODataFilter.new_filter()
>>> f.field("Status").in_(["A", "B"]).field("Amount").gt(100).build()
"(Status eq 'A' or Status eq 'B') and Amount gt 100"
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union
import logging

from c4c_odata.core.errors import FrameworkError, ValidationError
from c4c_odata.odata.values import (
    ODataDateTime,
    ODataDateTimeOffset,
    ODataValueObject,
    to_literal,
    to_text,
)

logger = logging.getLogger("c4c_odata.filter")

FilterValue = Union[int, float, bool, str, ODataValueObject, None]

_MISSING: Any = object()


class ExprOperator(str, Enum):
    eq = "eq"
    ne = "ne"
    gt = "gt"
    lt = "lt"
    ge = "ge"
    le = "le"


@dataclass(frozen=True)
class FieldExpr:
    """One comparison on a field; ``value`` None is the ``null`` literal."""

    op: ExprOperator
    value: Optional[str]

    def render(self, field_name: str) -> str:
        literal = "null" if self.value is None else self.value
        return f"{field_name} {self.op.value} {literal}"


def _require_date(value: Any, label: str) -> date:
    if value is None:
        raise ValidationError(f"You must give out the {label} date")
    if not isinstance(value, date):
        raise FrameworkError(
            f"Unsupported {label} date of type {type(value).__name__}, expected datetime"
        )
    return value


def _require_range(start: Any, end: Any):
    """Check both bounds of a closed date range before anything is added."""
    if start is None or end is None:
        raise ValidationError("You must give out the start and end date")
    return _require_date(start, "start"), _require_date(end, "end")


class ODataPropertyExpr:
    """
    Comparisons for a single field of an ``ODataFilter``.

    Obtained from ``ODataFilter.field``; every comparison appends to the
    field's expression list and returns the owning filter so calls can be
    chained across fields.
    """

    def __init__(self, owner: "ODataFilter", field_name: str) -> None:
        self._filter = owner
        self._field_name = field_name
        owner._get_expr_mapping().setdefault(field_name, [])

    def _get_field_exprs(self) -> List[FieldExpr]:
        return self._filter._get_expr_mapping()[self._field_name]

    def _add_expr(self, op: ExprOperator, value: Any) -> "ODataFilter":
        if value is _MISSING:
            raise ValidationError(
                f"value is required for odata filter {self._field_name} {op.value}"
            )
        # convert before appending so a failure leaves the list untouched
        self._get_field_exprs().append(FieldExpr(op, to_literal(value)))
        return self._filter

    # ---------------- comparisons ----------------

    def eq(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """equal"""
        return self._add_expr(ExprOperator.eq, value)

    def ne(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """not equal"""
        return self._add_expr(ExprOperator.ne, value)

    def eq_string(self, value: Any) -> "ODataFilter":
        """Equal, always quoting ``value`` as a string literal."""
        return self._add_expr(ExprOperator.eq, f"'{to_text(value)}'")

    def ne_string(self, value: Any) -> "ODataFilter":
        """Not equal, always quoting ``value`` as a string literal."""
        return self._add_expr(ExprOperator.ne, f"'{to_text(value)}'")

    def gt(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """greater than"""
        return self._add_expr(ExprOperator.gt, value)

    def ge(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """greater or equal"""
        return self._add_expr(ExprOperator.ge, value)

    def lt(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """less than"""
        return self._add_expr(ExprOperator.lt, value)

    def le(self, value: FilterValue = _MISSING) -> "ODataFilter":
        """less or equal"""
        return self._add_expr(ExprOperator.le, value)

    # ---------------- derived ----------------

    def in_(self, values: Optional[Iterable[Any]] = None) -> "ODataFilter":
        """
        Match any value in ``values``.

        Adds one ``eq`` per value, so the field group is joined with ``or``.
        An empty or missing list adds nothing.
        """
        for value in values or []:
            self.eq_string(value)
        return self._filter

    def between(
        self, low: Any = _MISSING, high: Any = _MISSING, include_boundary: bool = True
    ) -> "ODataFilter":
        """
        Filter by value range.

        Parameters
        ----------
        low : number or str
            Lower bound
        high : number or str
            Upper bound
        include_boundary : bool
            Use ``ge``/``le`` when True, ``gt``/``lt`` otherwise

        Raises
        ------
        ValidationError
            If either bound is None or not given
        """
        if low is None or high is None or low is _MISSING or high is _MISSING:
            raise ValidationError("You must give out the start and end value")
        # convert both bounds first so a bad upper bound adds nothing
        lower = FieldExpr(ExprOperator.ge if include_boundary else ExprOperator.gt, to_literal(low))
        upper = FieldExpr(ExprOperator.le if include_boundary else ExprOperator.lt, to_literal(high))
        self._get_field_exprs().extend([lower, upper])
        return self._filter

    def _between_temporal(
        self,
        wrapper: type,
        start: Optional[date],
        end: Optional[date],
        include_boundary: bool,
    ) -> "ODataFilter":
        if start is None and end is None:
            raise ValidationError("You must give out the start or end date")
        lower = wrapper.from_datetime(_require_date(start, "start")) if start is not None else None
        upper = wrapper.from_datetime(_require_date(end, "end")) if end is not None else None
        if lower is not None:
            if include_boundary:
                self.ge(lower)
            else:
                self.gt(lower)
        if upper is not None:
            if include_boundary:
                self.le(upper)
            else:
                self.lt(upper)
        return self._filter

    def between_date_time(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_boundary: bool = True,
    ) -> "ODataFilter":
        """Range over ``datetime'...'`` literals; either bound may be omitted."""
        return self._between_temporal(ODataDateTime, start, end, include_boundary)

    def between_date_time_offset(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        include_boundary: bool = True,
    ) -> "ODataFilter":
        """Range over ``datetimeoffset'...'`` literals; either bound may be omitted."""
        return self._between_temporal(ODataDateTimeOffset, start, end, include_boundary)

    def __repr__(self) -> str:
        return f"ODataPropertyExpr({self._field_name!r}, {self._get_field_exprs()!r})"


class ODataFilter:
    """
    OData filter builder.

    Holds an insertion-ordered mapping of field name to its comparisons and
    serializes it into one ``$filter`` string.

    Examples
    --------
    >>> f = ODataFilter()
    >>> f.field("Amount").between(1, 10).build()
    '(Amount ge 1 and Amount le 10)'
    """

    def __init__(self) -> None:
        self._field_expr_mappings: Dict[str, List[FieldExpr]] = {}
        self._accessors: Dict[str, ODataPropertyExpr] = {}

    @classmethod
    def new_builder(cls) -> "ODataFilter":
        return cls()

    @classmethod
    def new_filter(cls) -> "ODataFilter":
        """Construct a new, empty filter."""
        return cls()

    def _get_expr_mapping(self) -> Dict[str, List[FieldExpr]]:
        return self._field_expr_mappings

    def field(self, name: str) -> ODataPropertyExpr:
        """Comparisons for field ``name``; see ``property``."""
        return self.property(name)

    def property(self, name: str) -> ODataPropertyExpr:
        """
        Comparisons for property ``name``.

        The field is registered on first access and the same accessor is
        returned on every later call.
        """
        expr = self._accessors.get(name)
        if expr is None:
            expr = ODataPropertyExpr(self, name)
            self._accessors[name] = expr
        return expr

    def fields(self) -> List[str]:
        """Touched field names in first-touch order."""
        return list(self._field_expr_mappings)

    # ---------------- legacy helpers ----------------

    def field_in(self, name: str, values: Optional[Iterable[str]]) -> "ODataFilter":
        """Deprecated, use ``field(name).in_(values)``."""
        return self.field_value_match_array(name, values)

    def field_value_match_array(
        self, name: str, values: Optional[Iterable[str]] = None
    ) -> "ODataFilter":
        """Deprecated, use ``field(name).in_(values)``."""
        for value in values or []:
            self.field(name).eq_string(value)
        return self

    def in_period(self, name: str, start: date, end: date) -> "ODataFilter":
        """Deprecated, use ``between_date_time``."""
        return self.between_date_time(name, start, end)

    def between_date_time(self, name: str, start: date, end: date) -> "ODataFilter":
        """
        Deprecated, use ``field(name).between_date_time(start, end)``.

        Unlike the field form, both bounds are required and both are
        exclusive (``gt``/``lt``).
        """
        start, end = _require_range(start, end)
        return self.gt_date_time(name, start).lt_date_time(name, end)

    def between_date_time_offset(self, name: str, start: date, end: date) -> "ODataFilter":
        """Deprecated, use ``field(name).between_date_time_offset(start, end)``."""
        start, end = _require_range(start, end)
        return self.gt_date_time_offset(name, start).lt_date_time_offset(name, end)

    def gt_date_time(self, name: str, value: date) -> "ODataFilter":
        return self.field(name).gt(ODataDateTime.from_datetime(_require_date(value, "start")))

    def gt_date_time_offset(self, name: str, value: date) -> "ODataFilter":
        return self.field(name).gt(ODataDateTimeOffset.from_datetime(_require_date(value, "start")))

    def lt_date_time(self, name: str, value: date) -> "ODataFilter":
        return self.field(name).lt(ODataDateTime.from_datetime(_require_date(value, "end")))

    def lt_date_time_offset(self, name: str, value: date) -> "ODataFilter":
        return self.field(name).lt(ODataDateTimeOffset.from_datetime(_require_date(value, "end")))

    def group(self, other: "ODataFilter") -> "ODataFilter":
        """
        Merge the fields of ``other`` into this filter.

        On a field name collision the comparisons of ``other`` replace ours.
        """
        if not isinstance(other, ODataFilter):
            raise FrameworkError(f"Cannot group {type(other).__name__} into ODataFilter")
        for name, exprs in other._get_expr_mapping().items():
            self._field_expr_mappings[name] = list(exprs)
        return self

    # ---------------- serialization ----------------

    def _build_field_expr_string(self, field_name: str) -> str:
        exprs = self._get_expr_mapping()[field_name]
        if not exprs:
            return ""
        # any eq turns the whole group into an or-group
        if any(expr.op == ExprOperator.eq for expr in exprs):
            joiner = " or "
        else:
            joiner = " and "
        return "(" + joiner.join(expr.render(field_name) for expr in exprs) + ")"

    def build(self) -> str:
        """Build the ``$filter`` string."""
        segments: List[str] = []
        for field_name, exprs in self._get_expr_mapping().items():
            if not exprs:
                continue
            if len(exprs) == 1:
                segments.append(exprs[0].render(field_name))
            else:
                segments.append(self._build_field_expr_string(field_name))
        result = " and ".join(segments)
        logger.debug("build: fields=%d filter=%s", len(segments), result)
        return result

    def __str__(self) -> str:
        return self.build()

    def __repr__(self) -> str:
        return f"ODataFilter({self.build()!r})"


def filter() -> ODataFilter:
    """Shortcut for ``ODataFilter.new_filter()``."""
    return ODataFilter.new_filter()
