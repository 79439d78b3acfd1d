"""
c4c_odata.core - Core connectivity and errors
==============================================

- ODataError, ValidationError, FrameworkError, ODataUpstreamError: errors
- ODataAuth: Authentication configuration (basic or bearer token)
- ODataConfig: Full connection configuration
- ODataSession: Low-level HTTP session with retry and sap-client handling
- ConnectionContext: Environment-driven connection manager

"""

from c4c_odata.core.errors import (
    ODataError,
    ValidationError,
    FrameworkError,
    ODataUpstreamError,
)
from c4c_odata.core.session import ODataAuth, ODataConfig, ODataSession
from c4c_odata.core.connection import ConnectionContext

__all__ = [
    "ODataError",
    "ValidationError",
    "FrameworkError",
    "ODataUpstreamError",
    "ODataAuth",
    "ODataConfig",
    "ODataSession",
    "ConnectionContext",
]
