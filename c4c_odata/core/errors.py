"""
c4c_odata.core.errors - Exception hierarchy
============================================

All errors raised by the package derive from ``ODataError``:

- ValidationError: caller input is incomplete (missing value or bounds,
  unsupported output format)
- FrameworkError: an unsupported value type or parameter reached the builder
- ODataUpstreamError: the OData backend answered with an error status
"""

from __future__ import annotations

from typing import Dict, Optional


class ODataError(Exception):
    """Base class for c4c_odata errors."""


class ValidationError(ODataError, ValueError):
    """Raised when a required value or boundary was not supplied."""


class FrameworkError(ODataError, TypeError):
    """Raised when a value or parameter of an unsupported type is used."""


class ODataUpstreamError(ODataError, RuntimeError):
    """
    Exception raised when the OData service returns an error.

    Attributes
    ----------
    status : int
        HTTP status code from the backend
    body : str
        Response body (truncated for display)
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"OData upstream error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}
