"""
c4c_odata.odata - OData query building and service access
==========================================================

- ODataFilter: fluent $filter builder
- ODataDateTime / ODataDateTimeOffset: typed date literals
- ODataQueryParam: $filter, $select, $orderby, ... as a query string
- ODataService: entity set reads with paging

"""

from c4c_odata.odata.values import (
    LiteralKind,
    ODataValueObject,
    ODataDateTime,
    ODataDateTimeOffset,
    to_literal,
)
from c4c_odata.odata.filter import ExprOperator, FieldExpr, ODataFilter, ODataPropertyExpr, filter
from c4c_odata.odata.params import ODataParam, ODataParamOrderField, ODataQueryParam
from c4c_odata.odata.service import ODataService

__all__ = [
    "LiteralKind",
    "ODataValueObject",
    "ODataDateTime",
    "ODataDateTimeOffset",
    "to_literal",
    "ExprOperator",
    "FieldExpr",
    "ODataFilter",
    "ODataPropertyExpr",
    "filter",
    "ODataParam",
    "ODataParamOrderField",
    "ODataQueryParam",
    "ODataService",
]
