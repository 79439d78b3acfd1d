"""
c4c_odata.api.gateway - FastAPI OData Gateway
==============================================

Optional REST gateway that builds OData query strings from JSON condition
lists and can run them against the configured backend.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from c4c_odata.core.errors import ODataError, ODataUpstreamError, ValidationError
from c4c_odata.core.session import ODataAuth, ODataConfig, ODataSession
from c4c_odata.odata.filter import ODataFilter
from c4c_odata.odata.params import ODataParamOrderField, ODataQueryParam
from c4c_odata.odata.service import ODataService
from c4c_odata.odata.values import ODataDateTime, ODataDateTimeOffset
from c4c_odata.api.models import (
    BuildResponse,
    FilterCondition,
    QueryOptions,
    QueryRequest,
    QueryResponse,
)

logger = logging.getLogger("c4c_odata.api")


class ODataGateway:
    """
    Configuration and session factory for the API gateway.

    Reads configuration from environment variables by default.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        bearer_token: Optional[str] = None,
        sap_client: Optional[str] = None,
        verify_tls: Optional[bool] = None,
        api_key: Optional[str] = None,
        max_top: Optional[int] = None,
        max_pages: Optional[int] = None,
    ):
        self.base_url = (base_url or os.environ.get("C4C_BASE_URL", "")).rstrip("/") + "/"
        self.user = user or os.environ.get("C4C_USER", "")
        self.password = password or os.environ.get("C4C_PASS", "")
        self.bearer_token = bearer_token or os.environ.get("C4C_BEARER_TOKEN", "")
        self.sap_client = sap_client or os.environ.get("C4C_SAP_CLIENT")

        if verify_tls is not None:
            self.verify_tls = verify_tls
        else:
            self.verify_tls = os.environ.get("C4C_VERIFY_TLS", "true").lower() != "false"

        self.api_key = api_key if api_key is not None else os.environ.get("ODATA_API_KEY", "")
        self.max_top = max_top or int(os.environ.get("ODATA_MAX_TOP", "500"))
        self.max_pages = max_pages or int(os.environ.get("ODATA_MAX_PAGES", "10"))

    def validate(self) -> None:
        """Validate configuration. Raises RuntimeError if invalid."""
        if self.base_url == "/":
            raise RuntimeError("Missing C4C_BASE_URL environment variable")
        if not self.bearer_token and not (self.user and self.password):
            raise RuntimeError("Missing C4C_USER/C4C_PASS or C4C_BEARER_TOKEN")
        if not self.api_key:
            raise RuntimeError("Missing ODATA_API_KEY - required for security")

    def build_session(self) -> ODataSession:
        """Create a new OData session."""
        if self.bearer_token:
            auth = ODataAuth("bearer", self.bearer_token)
        else:
            auth = ODataAuth("basic", (self.user, self.password))
        cfg = ODataConfig(
            base_url=self.base_url,
            auth=auth,
            default_sap_client=self.sap_client,
            verify=self.verify_tls,
            timeout=float(os.environ.get("ODATA_TIMEOUT", "60")),
            retries=int(os.environ.get("ODATA_RETRIES", "3")),
            backoff=float(os.environ.get("ODATA_BACKOFF", "0.5")),
        )
        return ODataSession(cfg)


# ---------------------------------------------------------------------------
# Request -> builder translation
# ---------------------------------------------------------------------------

def _typed(value: Any, value_type: Optional[str]) -> Any:
    if value is None or value_type is None:
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{value_type} values must be ISO-8601 strings, got {value!r}")
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid ISO-8601 value {value!r}") from e
    if value_type == "datetime":
        return ODataDateTime.from_datetime(moment)
    return ODataDateTimeOffset.from_datetime(moment)


def build_filter(conditions: Iterable[FilterCondition]) -> ODataFilter:
    """Apply ``conditions`` in order to a new ``ODataFilter``."""
    f = ODataFilter.new_filter()
    for cond in conditions:
        prop = f.field(cond.field)
        if cond.op == "in":
            prop.in_(cond.values)
        elif cond.op == "between":
            bounds = list(cond.values or [])
            if len(bounds) != 2:
                raise ValidationError("between needs exactly two values: [low, high]")
            prop.between(
                _typed(bounds[0], cond.value_type),
                _typed(bounds[1], cond.value_type),
                cond.include_boundary,
            )
        elif "value" in cond.model_fields_set:
            getattr(prop, cond.op)(_typed(cond.value, cond.value_type))
        else:
            # no value given at all, let the builder report it
            getattr(prop, cond.op)()
    return f


def build_params(options: QueryOptions, max_top: Optional[int] = None) -> ODataQueryParam:
    """Translate request options into an ``ODataQueryParam``."""
    param = ODataQueryParam.new_param()
    if options.conditions:
        param.filter(build_filter(options.conditions))
    elif options.filter:
        param.filter(options.filter)
    if options.select:
        param.select(options.select)
    if options.orderby:
        param.orderby_multi([ODataParamOrderField(o.field, o.order) for o in options.orderby])
    if options.search:
        param.search(options.search, options.fuzzy)
    if options.expand:
        param.expand(options.expand)
    top = options.top
    if max_top is not None:
        top = min(top, max_top) if top else max_top
    if top:
        param.top(top)
    if options.skip:
        param.skip(options.skip)
    param.inlinecount(options.inlinecount)
    return param


# Global gateway instance (lazy init)
_gateway: Optional[ODataGateway] = None


def get_gateway() -> ODataGateway:
    """Get or create the global gateway instance."""
    global _gateway
    if _gateway is None:
        _gateway = ODataGateway()
    return _gateway


def create_app(
    gateway: Optional[ODataGateway] = None,
    validate_on_startup: bool = True,
) -> FastAPI:
    """
    Create the FastAPI application.

    Parameters
    ----------
    gateway : ODataGateway, optional
        Custom gateway configuration. If None, reads from environment.
    validate_on_startup : bool
        If True, log configuration problems on startup.

    Returns
    -------
    FastAPI
        Configured FastAPI application
    """
    global _gateway
    _gateway = gateway or ODataGateway()

    if validate_on_startup:
        try:
            _gateway.validate()
        except RuntimeError as e:
            # app stays usable for filter building without a backend
            logger.warning(f"gateway configuration incomplete: {e}")

    app = FastAPI(
        title="C4C OData Query Gateway",
        description="Build OData $filter and query strings from JSON, and run them.",
        version="1.0.0",
        openapi_tags=[
            {"name": "Build", "description": "Build $filter and query strings"},
            {"name": "Generic OData", "description": "Generic OData query operations"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Dependencies
    # -------------------------------------------------------------------------

    def require_api_key(x_api_key: str = Header(default="")) -> None:
        gw = get_gateway()
        if gw.api_key and x_api_key != gw.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Health check endpoint."""
        return {"ok": True, "version": "1.0.0"}

    @app.post("/filter/build", response_model=BuildResponse, tags=["Build"])
    def build_query(
        options: QueryOptions,
        _: None = Depends(require_api_key),
    ) -> BuildResponse:
        """Build the $filter expression and the encoded query string."""
        try:
            param = build_params(options)
        except ODataError as e:
            raise HTTPException(status_code=422, detail=str(e))
        params = param.to_params()
        return BuildResponse(
            filter=params.get("$filter", ""),
            query=param.build(),
            params=params,
        )

    @app.post("/query", response_model=QueryResponse, tags=["Generic OData"])
    def query_any(
        req: QueryRequest,
        _: None = Depends(require_api_key),
    ) -> QueryResponse:
        """Execute an entity set query built from the request options."""
        gw = get_gateway()
        try:
            param = build_params(req, max_top=gw.max_top)
        except ODataError as e:
            raise HTTPException(status_code=422, detail=str(e))
        max_pages = min(int(req.max_pages or 1), gw.max_pages)

        try:
            with gw.build_session() as sess:
                s = ODataService(sess, req.service, default_sap_client=req.sap_client or gw.sap_client)
                items = s.query(req.entity_set, param, max_pages=max_pages)
        except ODataUpstreamError as e:
            logger.warning(f"query_any: upstream error status={e.status}")
            raise HTTPException(
                status_code=502,
                detail={"upstream_status": e.status, "url": e.url, "error": str(e)},
            )
        return QueryResponse(
            service=req.service,
            entity_set=req.entity_set,
            count=len(items),
            items=items,
        )

    return app
