"""
c4c_odata.odata.params - OData system query options
====================================================

``ODataQueryParam`` collects ``$filter``, ``$select``, ``$orderby`` and the
other system query options and encodes them as a URL query string.

ref https://github.com/SAP/C4CODATAAPIDEVGUIDE
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote_plus, urlencode

from c4c_odata.core.errors import FrameworkError, ValidationError
from c4c_odata.odata.filter import ODataFilter


@dataclass
class ODataParamOrderField:
    """
    One ``$orderby`` entry.

    Parameters
    ----------
    field : str
        Field name
    order : str
        "asc" or "desc" (default: "desc")
    """
    field: str
    order: str = "desc"

    def render(self) -> str:
        return f"{self.field} {self.order or 'desc'}"


OrderSpec = Union[ODataParamOrderField, Mapping[str, str]]


def _as_list(fields: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(fields, str):
        return [fields]
    return list(fields)


def _as_order_field(item: OrderSpec) -> ODataParamOrderField:
    if isinstance(item, ODataParamOrderField):
        return item
    if isinstance(item, Mapping):
        return ODataParamOrderField(item["field"], item.get("order") or "desc")
    raise FrameworkError(f"Unsupported orderby entry of type {type(item).__name__}")


class ODataQueryParam:
    """
    OData query parameter object.

    Examples
    --------
    >>> f = ODataFilter().field("Status").eq("Open")
    >>> str(ODataQueryParam().filter(f).top(10))
    '%24format=json&%24filter=Status+eq+%27Open%27&%24top=10'
    """

    def __init__(self) -> None:
        self._skip = 0
        self._filter: Optional[str] = None
        self._top = 0
        self._select: List[str] = []
        self._orderby: Optional[str] = None
        self._format = "json"
        self._search: Optional[str] = None
        self._inlinecount: Optional[str] = None
        self._expand: List[str] = []

    @classmethod
    def new_param(cls) -> "ODataQueryParam":
        return cls()

    def inlinecount(self, inlinecount: bool = False) -> "ODataQueryParam":
        """Request ``$inlinecount=allpages``, or drop it."""
        self._inlinecount = "allpages" if inlinecount else None
        return self

    def filter(self, value: Union[str, ODataFilter]) -> "ODataQueryParam":
        """
        Set ``$filter`` from a builder (built right away) or a raw string.

        Raises
        ------
        FrameworkError
            If ``value`` is neither a string nor an ``ODataFilter``
        """
        if isinstance(value, ODataFilter):
            self._filter = value.build()
        elif isinstance(value, str):
            self._filter = value
        else:
            raise FrameworkError(
                "ODataQueryParam.filter only accept str or ODataFilter, "
                f"got {type(value).__name__}"
            )
        return self

    def skip(self, skip: int) -> "ODataQueryParam":
        """skip first records"""
        self._skip = skip
        return self

    def top(self, top: int) -> "ODataQueryParam":
        """limit result max records"""
        self._top = top
        return self

    def select(self, selects: Union[str, Sequence[str]]) -> "ODataQueryParam":
        """Add fields to ``$select``; repeated calls accumulate."""
        self._select.extend(_as_list(selects))
        return self

    def orderby(
        self,
        field_or_orders: Union[str, Sequence[OrderSpec]],
        order: str = "desc",
    ) -> "ODataQueryParam":
        """
        Set ``$orderby``.

        Parameters
        ----------
        field_or_orders : str or list
            Field name, or a list of ``ODataParamOrderField`` (``order`` is
            ignored in that case)
        order : str
            "asc" or "desc" (default: "desc")
        """
        if isinstance(field_or_orders, str):
            self._orderby = f"{field_or_orders} {order}"
            return self
        return self.orderby_multi(field_or_orders)

    def orderby_multi(self, fields: Optional[Sequence[OrderSpec]] = None) -> "ODataQueryParam":
        """Order by several fields, comma separated."""
        self._orderby = ",".join(_as_order_field(f).render() for f in fields or [])
        return self

    def format(self, fmt: str) -> "ODataQueryParam":
        """
        Result format; only json is supported.

        Raises
        ------
        ValidationError
            For any format other than "json"
        """
        if fmt != "json":
            raise ValidationError(f"c4c_odata does not support {fmt} response format")
        self._format = fmt
        return self

    def search(self, value: str, fuzzy: bool = True) -> "ODataQueryParam":
        """Full text search, wrapped in ``%`` for fuzzy search (SAP only)."""
        self._search = f"%{value}%" if fuzzy else value
        return self

    def expand(self, fields: Union[str, Sequence[str]], replace: bool = False) -> "ODataQueryParam":
        """Expand navigation properties, replacing or appending."""
        if replace:
            self._expand = _as_list(fields)
        else:
            self._expand.extend(_as_list(fields))
        return self

    def to_params(self) -> Dict[str, str]:
        """The query options that will be sent, in encoding order."""
        p: Dict[str, str] = {}
        if self._format:
            p["$format"] = self._format
        if self._filter:
            p["$filter"] = self._filter
        if self._orderby:
            p["$orderby"] = self._orderby
        if self._search:
            p["$search"] = self._search
        if self._select:
            p["$select"] = ",".join(self._select)
        if self._skip:
            p["$skip"] = str(self._skip)
        if self._top and self._top > 0:
            p["$top"] = str(self._top)
        if self._expand:
            p["$expand"] = ",".join(self._expand)
        if self._inlinecount:
            p["$inlinecount"] = self._inlinecount
        return p

    def build(self) -> str:
        """Form-encode the query options."""
        return urlencode(self.to_params(), quote_via=quote_plus, safe="*")

    def __str__(self) -> str:
        return self.build()

    def __repr__(self) -> str:
        return f"ODataQueryParam({self.to_params()!r})"


ODataParam = ODataQueryParam
