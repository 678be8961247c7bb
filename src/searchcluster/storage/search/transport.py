from typing import Any, Dict, Optional

import httpx
import structlog

from searchcluster.errors import (
    BackendStatusError,
    ProtocolError,
    QuerySyntaxError,
    TransportError,
)

logger = structlog.get_logger()


class ElasticTransport:
    """
    HTTP+JSON transport to one Elasticsearch endpoint using httpx for async.

    Paths are resolved under the configured index namespace:
    base "http://search:9200", index "phabricator" and path "/TASK/_search"
    request "http://search:9200/phabricator/TASK/_search".
    """

    MUTATING_METHODS = ("PUT", "POST", "DELETE")

    def __init__(
        self,
        base_url: str,
        index: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._index = index.strip("/")
        # A zero or missing timeout means no timeout
        self._timeout = timeout or None
        self._transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def index(self) -> str:
        return self._index

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    async def connect(self) -> None:
        if not self.client:
            self.client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _ensure_connected(self):
        if not self.client:
            await self.connect()

    def build_path(self, path: str) -> str:
        return f"/{self._index}/{path.lstrip('/')}"

    async def request(
        self,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        method: str = "GET",
    ) -> Optional[Any]:
        """
        Issue one request and decode the JSON reply.

        Mutating methods return None. Raises TransportError when the host
        cannot be reached, BackendStatusError (QuerySyntaxError for a
        rejected search) on non-2xx replies and ProtocolError when the body
        of a non-mutating call is not JSON.
        """
        await self._ensure_connected()
        url = self.build_path(path)
        operation = f"{method} {url}"

        try:
            resp = await self.client.request(method, url, json=data)
        except httpx.HTTPError as e:
            logger.warning(
                "elastic_request_failed", host=self._base_url, operation=operation, error=str(e)
            )
            raise TransportError(str(e) or type(e).__name__, host=self._base_url, operation=operation) from e

        if resp.status_code >= 400:
            error_class = BackendStatusError
            if resp.status_code == 400 and url.rstrip("/").endswith("_search"):
                error_class = QuerySyntaxError
            raise error_class(
                resp.status_code,
                body=resp.text,
                host=self._base_url,
                operation=operation,
            )

        if method.upper() in self.MUTATING_METHODS:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise ProtocolError(
                "Elasticsearch server returned invalid JSON",
                host=self._base_url,
                operation=operation,
            ) from e
