"""
Supabase backend access over plain HTTP.

Talks to the project's PostgREST endpoint (/rest/v1) and storage endpoint
(/storage/v1) with a single requests.Session. Only the handful of calls the
catalog needs are implemented:

    select(table, eq=..., match_any=..., order=..., limit=...)  → list[dict]
    insert(table, row)                                         → None
    rpc(name, params)                                          → Any
    public_url(bucket, path, download=None)                    → str

Every transport or HTTP failure is raised as BackendError. There are no
retries; callers decide whether a failure is fatal.
"""

import logging
from typing import Any, Protocol
from urllib.parse import quote, urlencode

import requests

from catalog import config

log = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend request failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogBackend(Protocol):
    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: dict[str, Any] | None = None,
        match_any: dict[str, str] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    def insert(self, table: str, row: dict[str, Any]) -> None: ...

    def rpc(self, name: str, params: dict[str, Any]) -> Any: ...

    def public_url(self, bucket: str, path: str, download: str | None = None) -> str: ...


# ---------------------------------------------------------------------------
# PostgREST filter encoding
# ---------------------------------------------------------------------------

def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _like_literal(term: str) -> str:
    """Escape LIKE wildcards so % and _ in user input match themselves."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _quoted_pattern(term: str) -> str:
    """
    Wrap a substring term as a quoted ilike pattern: calc → "*calc*".

    The term is first made LIKE-literal, then quoted: quoting keeps commas
    and parentheses in user input from being read as filter syntax, with
    backslash and double quote escaped inside the quotes.
    """
    escaped = _like_literal(term).replace("\\", "\\\\").replace('"', '\\"')
    return f'"*{escaped}*"'


def build_select_params(
    *,
    columns: str = "*",
    eq: dict[str, Any] | None = None,
    match_any: dict[str, str] | None = None,
    order: str | None = None,
    descending: bool = False,
    limit: int | None = None,
) -> list[tuple[str, str]]:
    """Translate a select call into PostgREST query parameters."""
    params: list[tuple[str, str]] = [("select", columns)]
    for column, value in (eq or {}).items():
        params.append((column, f"eq.{_literal(value)}"))
    if match_any:
        clauses = ",".join(
            f"{column}.ilike.{_quoted_pattern(term)}" for column, term in match_any.items()
        )
        params.append(("or", f"({clauses})"))
    if order:
        params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
    if limit is not None:
        params.append(("limit", str(limit)))
    return params


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class SupabaseBackend:
    def __init__(
        self,
        url: str = config.SUPABASE_URL,
        key: str = config.SUPABASE_ANON_KEY,
        session: requests.Session | None = None,
        timeout: float = config.REQUEST_TIMEOUT,
    ):
        if not url:
            raise ValueError("SUPABASE_URL is not configured.")
        self.url     = url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["apikey"] = key
        self.session.headers["Authorization"] = f"Bearer {key}"
        self.session.headers["User-Agent"] = "ExamAce-Vault/1.0"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise BackendError(f"{method} {path} returned HTTP {status}", status) from exc
        except requests.RequestException as exc:
            raise BackendError(f"{method} {path} failed: {exc}") from exc
        return resp

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: dict[str, Any] | None = None,
        match_any: dict[str, str] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = build_select_params(
            columns=columns, eq=eq, match_any=match_any,
            order=order, descending=descending, limit=limit,
        )
        log.debug("select %s %s", table, params)
        resp = self._request("GET", f"/rest/v1/{quote(table)}", params=params)
        try:
            rows = resp.json()
        except ValueError as exc:
            raise BackendError(f"select {table}: response is not JSON") from exc
        if not isinstance(rows, list):
            raise BackendError(f"select {table}: expected a JSON array")
        return rows

    def insert(self, table: str, row: dict[str, Any]) -> None:
        log.debug("insert %s", table)
        self._request(
            "POST",
            f"/rest/v1/{quote(table)}",
            json=row,
            headers={"Prefer": "return=minimal"},
        )

    def rpc(self, name: str, params: dict[str, Any]) -> Any:
        log.debug("rpc %s %s", name, params)
        resp = self._request("POST", f"/rest/v1/rpc/{quote(name)}", json=params)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def public_url(self, bucket: str, path: str, download: str | None = None) -> str:
        """Public object URL; download= asks storage to send it as an attachment."""
        url = f"{self.url}/storage/v1/object/public/{quote(bucket)}/{quote(path.lstrip('/'))}"
        if download:
            url += "?" + urlencode({"download": download})
        return url
