"""
Client for the hosted sales-order search service.

Endpoints (relative to ORDER_SEARCH_URL):
    POST /search             body: {"type", "filters", "columns", "start", "end"}
                             returns: {"results": [{<column key>: {"value", "text"}}]}
    GET  /lookups/{source}   returns: [{"id", "name"}]

Single attempt per call, no retries. Transport errors, non-2xx answers and
malformed bodies all surface as SearchError.
"""

import logging
from typing import Any

import requests

from orders.engine import SearchResult
from orders.errors import SearchError
from orders.query import (
    RESULT_LIMIT,
    SEARCH_TYPE,
    SearchColumn,
    SearchFilter,
    filter_expression,
)

log = logging.getLogger("orders.remote")


class RemoteOrderSearch:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        if not base_url:
            raise SearchError("ORDER_SEARCH_URL is not configured.")
        self.base_url = base_url.rstrip("/")
        self.timeout  = timeout
        self.session  = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _call(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            log.debug("%s %s → %s", method, url, resp.status_code)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise SearchError(f"Search service answered {status} for {path}", status=status) from exc
        except requests.exceptions.RequestException as exc:
            raise SearchError(f"Search service unreachable: {exc}") from exc
        except ValueError as exc:
            raise SearchError(f"Search service returned invalid JSON for {path}") from exc

    def run(
        self,
        filters: list[SearchFilter],
        columns: list[SearchColumn],
        start: int = 0,
        end: int = RESULT_LIMIT,
    ) -> list[SearchResult]:
        body = {
            "type":    SEARCH_TYPE,
            "filters": filter_expression(filters),
            "columns": [c.to_dict() for c in columns],
            "start":   start,
            "end":     end,
        }
        data = self._call("POST", "/search", json=body)
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise SearchError("Search response has no 'results' list.")
        # the service applies the range; trim anyway so the cap holds
        return [SearchResult(cells) for cells in results[: end - start]]

    def lookup(self, source: str) -> list[tuple[str, str]]:
        data = self._call("GET", f"/lookups/{source}")
        if not isinstance(data, list):
            raise SearchError(f"Lookup response for {source!r} is not a list.")
        return [(str(r.get("id", "")), str(r.get("name", ""))) for r in data]
