"""
c4c_odata.core.connection - High-level connection management
=============================================================

Environment-driven connection setup, usable as a context manager.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional

from c4c_odata.core.session import ODataAuth, ODataConfig, ODataSession

if TYPE_CHECKING:
    from c4c_odata.odata.service import ODataService


class ConnectionContext:
    """
    High-level connection manager for OData services.

    Explicit arguments win over environment variables.

    Parameters
    ----------
    base_url : str, optional
        OData base URL. Falls back to C4C_BASE_URL env var.
    user : str, optional
        Username for basic auth. Falls back to C4C_USER env var.
    password : str, optional
        Password for basic auth. Falls back to C4C_PASS env var.
    bearer_token : str, optional
        Bearer token for OAuth. Falls back to C4C_BEARER_TOKEN env var.
    sap_client : str, optional
        Default SAP client. Falls back to C4C_SAP_CLIENT env var.
    verify : bool, optional
        SSL verification. Falls back to C4C_VERIFY_TLS env var.
    timeout : float
        Request timeout in seconds.

    Examples
    --------
    >>> with ConnectionContext() as conn:  # reads C4C_* env vars
    ...     leads = conn.get_service("c4codataapi")
    ...     rows = leads.query("LeadCollection", ODataQueryParam().top(10))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        bearer_token: Optional[str] = None,
        sap_client: Optional[str] = None,
        verify: Optional[bool] = None,
        timeout: float = 60.0,
    ) -> None:
        self._base_url = (base_url or os.environ.get("C4C_BASE_URL", "")).rstrip("/") + "/"
        self._user = user or os.environ.get("C4C_USER", "")
        self._password = password or os.environ.get("C4C_PASS", "")
        self._bearer_token = bearer_token or os.environ.get("C4C_BEARER_TOKEN", "")
        self._sap_client = sap_client or os.environ.get("C4C_SAP_CLIENT")

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("C4C_VERIFY_TLS", "true").lower() != "false"

        self._timeout = timeout

        if self._base_url == "/":
            raise ValueError(
                "Missing base_url. Set C4C_BASE_URL environment variable "
                "or pass base_url parameter."
            )
        if not self._bearer_token and not (self._user and self._password):
            raise ValueError(
                "Missing credentials. Set C4C_USER/C4C_PASS or C4C_BEARER_TOKEN "
                "environment variables, or pass user/password or bearer_token parameters."
            )

        self._session: Optional[ODataSession] = None

    @property
    def session(self) -> ODataSession:
        """Get or create the underlying OData session."""
        if self._session is None:
            self._session = ODataSession(self.config())
        return self._session

    def config(self) -> ODataConfig:
        """Build the ``ODataConfig`` for this connection."""
        if self._bearer_token:
            auth = ODataAuth("bearer", self._bearer_token)
        else:
            auth = ODataAuth("basic", (self._user, self._password))
        return ODataConfig(
            base_url=self._base_url,
            auth=auth,
            default_sap_client=self._sap_client,
            verify=self._verify,
            timeout=self._timeout,
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ConnectionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_service(self, service_name: str) -> "ODataService":
        """Get an ``ODataService`` for the given service name."""
        # local import, service depends on core
        from c4c_odata.odata.service import ODataService
        return ODataService(self.session, service_name, default_sap_client=self._sap_client)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def sap_client(self) -> Optional[str]:
        return self._sap_client
