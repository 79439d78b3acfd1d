"""
c4c_odata.odata.service - OData Service Client
===============================================

Service-scoped read client that sends ``ODataQueryParam`` options and
follows ``__next`` paging links.
"""

from __future__ import annotations

from typing import Any, Dict, Generator, List, Optional

from c4c_odata.core.session import ODataSession, QueryParams


def _results(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    d = payload.get("d")
    if isinstance(d, dict):
        return d.get("results") or []
    return []


def _next_link(payload: Dict[str, Any]) -> Optional[str]:
    d = payload.get("d")
    return d.get("__next") if isinstance(d, dict) else None


class ODataService:
    """
    Service-scoped OData query client.

    Parameters
    ----------
    sess : ODataSession
        Active OData session
    service : str
        Service name, e.g. "c4codataapi"
    default_sap_client : str, optional
        Default SAP client override

    Examples
    --------
    >>> api = ODataService(sess, "c4codataapi")
    >>> f = ODataFilter().field("StatusCode").in_(["1", "2"])
    >>> leads = api.query(
    ...     "LeadCollection",
    ...     ODataQueryParam().filter(f).select(["ObjectID", "Name"]).top(50),
    ... )
    """

    def __init__(
        self,
        sess: ODataSession,
        service: str,
        *,
        default_sap_client: Optional[str] = None,
    ) -> None:
        self.sess = sess
        self.service = service
        self.default_sap_client = default_sap_client

    def read(
        self,
        entity_set: str,
        params: QueryParams = None,
        *,
        sap_client: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Read a single page of results from an entity set."""
        payload = self.sess.get(
            self.service,
            entity_set,
            params,
            sap_client=sap_client or self.default_sap_client,
        )
        return _results(payload)

    def iterate(
        self,
        entity_set: str,
        params: QueryParams = None,
        *,
        sap_client: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> Generator[List[Dict[str, Any]], None, None]:
        """
        Iterate through pages of results.

        Yields each non-empty page, following ``__next`` links until there
        are none left, a link repeats, or ``max_pages`` pages were yielded.
        """
        p = self.sess.get(
            self.service,
            entity_set,
            params,
            sap_client=sap_client or self.default_sap_client,
        )
        yielded = 0
        seen = set()
        while True:
            chunk = _results(p)
            if chunk:
                yield chunk
                yielded += 1
                if max_pages is not None and yielded >= int(max_pages):
                    return
            next_link = _next_link(p)
            if not next_link or next_link in seen:
                return
            seen.add(next_link)
            p = self.sess.get_url(next_link)

    def read_all(
        self,
        entity_set: str,
        params: QueryParams = None,
        *,
        sap_client: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Read all pages of results into a single list."""
        out: List[Dict[str, Any]] = []
        for page in self.iterate(entity_set, params, sap_client=sap_client, max_pages=max_pages):
            out.extend(page)
        return out

    def query(
        self,
        entity_set: str,
        params: QueryParams = None,
        *,
        sap_client: Optional[str] = None,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Execute a query against an entity set.

        Parameters
        ----------
        entity_set : str
            Entity set name
        params : ODataQueryParam or dict, optional
            Query options; ``ODataQueryParam`` is the usual way to build them
        sap_client : str, optional
            SAP client override
        max_pages : int, optional
            Maximum pages to follow

        Returns
        -------
        list of dict
            Records across all fetched pages
        """
        return self.read_all(entity_set, params, sap_client=sap_client, max_pages=max_pages)

    def count(self, entity_set: str, params: QueryParams = None) -> int:
        """Return ``__count`` of an ``$inlinecount=allpages`` request."""
        payload = self.sess.get(
            self.service, entity_set, params, sap_client=self.default_sap_client
        )
        d = payload.get("d")
        return int(d.get("__count", 0)) if isinstance(d, dict) else 0
