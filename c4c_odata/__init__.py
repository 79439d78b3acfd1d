"""
c4c_odata - OData v2 query builder for SAP C4C
===============================================

Typed, fluent construction of OData ``$filter`` expressions and query
options, plus a small requests-based client to run them.

Usage
-----
>>> from c4c_odata import ODataFilter, ODataQueryParam
>>> f = ODataFilter.new_filter()
>>> f = f.field("Status").eq("A").field("Status").eq("B").field("Amount").gt(100)
>>> f.build()
"(Status eq 'A' or Status eq 'B') and Amount gt 100"
>>> str(ODataQueryParam.new_param().filter(f).top(20))
'%24format=json&%24filter=%28Status+eq+%27A%27+or+Status+eq+%27B%27%29+and+Amount+gt+100&%24top=20'

Subpackages
-----------
- c4c_odata.core: errors, session, configuration
- c4c_odata.odata: filter builder, query options, service client
- c4c_odata.api: Optional FastAPI gateway

"""

__version__ = "0.3.0"

from c4c_odata.core import (
    ODataError,
    ValidationError,
    FrameworkError,
    ODataUpstreamError,
    ODataAuth,
    ODataConfig,
    ODataSession,
    ConnectionContext,
)
from c4c_odata.odata import (
    ODataDateTime,
    ODataDateTimeOffset,
    ODataFilter,
    ODataParam,
    ODataParamOrderField,
    ODataQueryParam,
    ODataService,
    filter,
)

__all__ = [
    "__version__",
    # Errors
    "ODataError",
    "ValidationError",
    "FrameworkError",
    "ODataUpstreamError",
    # Core
    "ODataAuth",
    "ODataConfig",
    "ODataSession",
    "ConnectionContext",
    # Query building
    "ODataDateTime",
    "ODataDateTimeOffset",
    "ODataFilter",
    "ODataParam",
    "ODataParamOrderField",
    "ODataQueryParam",
    "ODataService",
    "filter",
]
