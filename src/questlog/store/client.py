"""Row store client for a PostgREST-style REST API (e.g. a Supabase project).

To connect to your store:
1. Open your project's API settings
2. Copy the project URL and the anon (public) API key

Set these as environment variables:
    export QUESTLOG_STORE_URL="https://your-project.supabase.co"
    export QUESTLOG_STORE_KEY="your_anon_key"
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


class StoreError(Exception):
    """Error from the row store."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class QueryResult:
    """Rows returned by a query, plus the exact count when one was requested."""

    data: Any = None
    count: int | None = None


def _format_value(value: Any) -> str:
    """Render a filter value the way PostgREST expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    text = _format_value(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _parse_count(content_range: str | None) -> int | None:
    """Extract the total from a Content-Range header like '0-24/25' or '*/25'."""
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


@dataclass
class Query:
    """Builder for a single request against one table.

    Filters, ordering and limits apply to reads and to update/delete alike.
    Nothing is sent until :meth:`execute` is called.
    """

    client: "StoreClient"
    table: str
    method: str = "GET"
    columns: str | None = None
    body: Any = None
    filters: list[tuple[str, str]] = field(default_factory=list)
    ordering: list[str] = field(default_factory=list)
    row_limit: int | None = None
    count: str | None = None
    head: bool = False
    expect_single: bool = False

    def select(self, columns: str = "*", count: str | None = None, head: bool = False) -> "Query":
        """Select columns; embed related rows with `alias:fk_column(col, ...)`."""
        # Whitespace is insignificant in PostgREST select lists
        self.columns = "".join(columns.split())
        self.count = count
        self.head = head
        if head:
            self.method = "HEAD"
        return self

    def insert(self, row: dict | list[dict]) -> "Query":
        self.method = "POST"
        self.body = row
        return self

    def update(self, values: dict) -> "Query":
        self.method = "PATCH"
        self.body = values
        return self

    def delete(self) -> "Query":
        self.method = "DELETE"
        return self

    def eq(self, column: str, value: Any) -> "Query":
        if value is None:
            self.filters.append((column, "is.null"))
        else:
            self.filters.append((column, f"eq.{_format_value(value)}"))
        return self

    def in_(self, column: str, values) -> "Query":
        joined = ",".join(_quote(v) for v in values)
        self.filters.append((column, f"in.({joined})"))
        return self

    def order(self, column: str, desc: bool = False, nulls_first: bool = False) -> "Query":
        """Sort by a column; rows with nulls go last unless `nulls_first` is set."""
        direction = "desc" if desc else "asc"
        nulls = "nullsfirst" if nulls_first else "nullslast"
        self.ordering.append(f"{column}.{direction}.{nulls}")
        return self

    def limit(self, n: int) -> "Query":
        self.row_limit = n
        return self

    def single(self) -> "Query":
        """Expect exactly one row; `execute` then returns it as a dict."""
        self.expect_single = True
        return self

    def build_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        if self.columns:
            params.append(("select", self.columns))
        params.extend(self.filters)
        if self.ordering:
            params.append(("order", ",".join(self.ordering)))
        if self.row_limit is not None:
            params.append(("limit", str(self.row_limit)))
        return params

    def build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        prefer = []
        if self.method in ("POST", "PATCH", "DELETE"):
            prefer.append("return=representation")
        if self.count:
            prefer.append(f"count={self.count}")
        if prefer:
            headers["Prefer"] = ",".join(prefer)
        if self.expect_single:
            headers["Accept"] = "application/vnd.pgrst.object+json"
        return headers

    def execute(self) -> QueryResult:
        return self.client.execute(self)


class StoreClient:
    """Client for the hosted row store's REST interface."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = (url or os.getenv("QUESTLOG_STORE_URL") or "").rstrip("/")
        self.api_key = api_key or os.getenv("QUESTLOG_STORE_KEY")

        if not self.url:
            raise StoreError(
                "Store URL not provided. Set QUESTLOG_STORE_URL environment variable "
                "or pass url parameter."
            )
        if not self.api_key:
            raise StoreError(
                "Store API key not provided. Set QUESTLOG_STORE_KEY environment variable "
                "or pass api_key parameter."
            )

        self._http_client = httpx.Client(
            base_url=f"{self.url}{REST_PATH}",
            timeout=30.0,
            transport=transport,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
        )

    def table(self, name: str) -> Query:
        """Start a query against a table."""
        return Query(client=self, table=name)

    def execute(self, query: Query) -> QueryResult:
        """Send a query and decode the response.

        Raises:
            StoreError: On transport failure or a non-2xx response.
        """
        params = query.build_params()
        logger.debug("%s %s %s", query.method, query.table, params)

        try:
            response = self._http_client.request(
                query.method,
                f"/{query.table}",
                params=params,
                headers=query.build_headers(),
                json=query.body,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Request to {query.table} failed: {e}") from e

        if response.is_error:
            raise StoreError(self._error_message(response), status_code=response.status_code)

        count = _parse_count(response.headers.get("content-range")) if query.count else None
        if query.method == "HEAD" or not response.content:
            return QueryResult(data=None, count=count)

        return QueryResult(data=response.json(), count=count)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return f"Store returned {response.status_code}: {response.text[:200]}"
        if isinstance(payload, dict) and payload.get("message"):
            return f"Store returned {response.status_code}: {payload['message']}"
        return f"Store returned {response.status_code}"

    def close(self) -> None:
        self._http_client.close()
