"""
c4c_odata.core.session - OData HTTP Session
============================================

Low-level session handling for SAP (C4C / S/4) OData v2 services with:
- Basic and Bearer token authentication
- Automatic retry with exponential backoff
- sap-client injection
- Error extraction from SAP error payloads
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple, Union
import logging
import time

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from c4c_odata.core.errors import ODataUpstreamError

if TYPE_CHECKING:
    from c4c_odata.odata.params import ODataQueryParam

QueryParams = Union["ODataQueryParam", Mapping[str, str], None]


@dataclass
class ODataAuth:
    """
    Authentication configuration.

    Parameters
    ----------
    kind : str
        Either "basic" or "bearer"
    value : tuple or str
        For basic: (username, password) tuple
        For bearer: access token string

    Examples
    --------
    >>> auth = ODataAuth("basic", ("USER", "PASSWORD"))
    >>> auth = ODataAuth("bearer", "eyJ...")
    """
    kind: str  # "basic" | "bearer"
    value: Union[Tuple[str, str], str]


@dataclass
class ODataConfig:
    """
    Connection configuration for OData services.

    Parameters
    ----------
    base_url : str
        Base URL, e.g. "https://my000000.crm.ondemand.com/sap/c4c/odata/v1/"
    auth : ODataAuth
        Authentication configuration
    default_sap_client : str, optional
        Default SAP client number (can be overridden per-request)
    lang : str
        Language (default: "EN")
    timeout : float
        Request timeout in seconds (default: 60.0)
    retries : int
        Number of retry attempts (default: 3)
    backoff : float
        Backoff factor for retries (default: 0.5)
    verify : bool or str
        SSL verification (True, False, or path to CA bundle)
    user_agent : str
        User-Agent header value
    """
    base_url: str
    auth: ODataAuth
    default_sap_client: Optional[str] = None
    lang: str = "EN"
    timeout: float = 60.0
    retries: int = 3
    backoff: float = 0.5
    verify: Union[bool, str] = True
    user_agent: str = "c4c-odata/0.1"


class ODataSession:
    """
    HTTP session for OData v2 services.

    Use as a context manager for automatic cleanup.

    Parameters
    ----------
    cfg : ODataConfig
        Connection configuration

    Examples
    --------
    >>> with ODataSession(cfg) as sess:
    ...     data = sess.get("c4codataapi", "LeadCollection",
    ...                     ODataQueryParam().top(10))
    """

    def __init__(self, cfg: ODataConfig) -> None:
        self.cfg = cfg
        self.base = cfg.base_url.rstrip("/") + "/"
        self.timeout = float(cfg.timeout)
        self.verify = cfg.verify
        self.logger = logging.getLogger("c4c_odata.odata")
        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "ODataSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _build_session(self) -> Session:
        sess = requests.Session()

        if self.cfg.auth.kind == "basic":
            sess.auth = self.cfg.auth.value  # type: ignore[assignment]
        elif self.cfg.auth.kind == "bearer":
            sess.headers.update({"Authorization": f"Bearer {self.cfg.auth.value}"})
        else:
            raise ValueError("auth.kind must be 'basic' or 'bearer'")

        sess.headers.update({
            "Accept": "application/json",
            "Accept-Language": self.cfg.lang.lower(),
            "DataServiceVersion": "2.0",
            "MaxDataServiceVersion": "2.0",
            "User-Agent": self.cfg.user_agent,
        })

        retry = Retry(
            total=self.cfg.retries,
            backoff_factor=self.cfg.backoff,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD", "OPTIONS"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        sess.mount("https://", adapter)
        sess.mount("http://", adapter)
        return sess

    # ---------------- helpers ----------------

    def _params(self, params: QueryParams = None, sap_client: Optional[str] = None) -> Dict[str, str]:
        p: Dict[str, str] = {"$format": "json"}
        client = sap_client if sap_client is not None else self.cfg.default_sap_client
        if client:
            p["sap-client"] = str(client)
        if hasattr(params, "to_params"):
            p.update(params.to_params())
        elif params:
            p.update(params)
        return p

    def _url(self, service: str, path: str) -> str:
        return f"{self.base}{service.strip('/')}/{path.lstrip('/')}"

    def _extract_sap_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        err = data.get("error") if isinstance(data, dict) else None
        if not isinstance(err, dict):
            return r.text

        message = err.get("message")
        if isinstance(message, dict):
            message = message.get("value")

        parts = []
        if err.get("code"):
            parts.append(f"code={err['code']}")
        if message:
            parts.append(f"message={message}")
        return " | ".join(parts) or r.text

    def raise_for_error(self, r: Response, url: str) -> None:
        """Raise ``ODataUpstreamError`` for error and redirect responses."""
        if r.status_code >= 400 or r.status_code in (301, 302, 303, 307, 308):
            body = self._extract_sap_error(r)
            raise ODataUpstreamError(r.status_code, body, url, dict(r.headers))

    def _request(self, url: str, params: Optional[Dict[str, str]]) -> Response:
        t0 = time.perf_counter()
        r = self.session.get(url, params=params, timeout=self.timeout, verify=self.verify)
        self.raise_for_error(r, url)
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("GET %s %sms", url, round(dt, 1))
        return r

    # ---------------- public ops ----------------

    def get(
        self,
        service: str,
        path: str,
        params: QueryParams = None,
        *,
        sap_client: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Execute a GET request against an OData service path.

        Parameters
        ----------
        service : str
            Service name, e.g. "c4codataapi"
        path : str
            Entity set or path, e.g. "LeadCollection"
        params : ODataQueryParam or dict, optional
            Query options
        sap_client : str, optional
            Override default sap-client

        Returns
        -------
        dict
            Parsed JSON response
        """
        url = self._url(service, path)
        return self._request(url, self._params(params, sap_client)).json()

    def get_url(self, url: str) -> Dict[str, Any]:
        """GET an absolute URL, e.g. a ``__next`` paging link."""
        return self._request(url, None).json()
