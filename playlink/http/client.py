# Playlink HTTP Client
# Uniform async request/response wrapper over httpx

import json
from typing import Any, Optional

import httpx

from playlink.errors import NetworkError
from playlink.logger import PlaylinkLogger


class Response:
    """
    Buffered HTTP response.

    4xx/5xx statuses are ordinary responses; only transport faults raise.
    """

    def __init__(self, status_code: int, headers: httpx.Headers, text: str, logger: Optional[PlaylinkLogger] = None):
        self.status_code = status_code
        self._headers = headers
        self._text = text
        self._logger = logger

    @classmethod
    def from_httpx(cls, response: httpx.Response, logger: Optional[PlaylinkLogger] = None) -> "Response":
        """Build from a fully read httpx response."""
        return cls(response.status_code, response.headers, response.text, logger)

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        """
        Case-insensitive header lookup.

        Repeated headers are joined with ", ". Returns None if absent.
        """
        values = self._headers.get_list(name)
        if not values:
            return None
        return ", ".join(values)

    def text(self) -> str:
        """Response body as text."""
        return self._text

    def json(self) -> Any:
        """Parsed JSON body, or None if the body is not valid JSON."""
        try:
            return json.loads(self._text)
        except ValueError:
            if self._logger:
                self._logger.debug(f"Response body is not valid JSON (status {self.status_code})")
            return None

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}]>"


class HttpClient:
    """
    Async HTTP client with a lazily created, pooled httpx.AsyncClient.

    Request bodies may be str, bytes, or any JSON-serialisable value.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = "playlink",
        logger: Optional[PlaylinkLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client.

        Args:
            timeout: Request timeout in seconds.
            user_agent: User-Agent header sent with every request.
            logger: Operator log for debug output.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.logger = logger
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        body: Any = None,
        params: Optional[list[tuple[str, str]]] = None,
    ) -> Response:
        """
        Issue a request and return the buffered response.

        Args:
            url: Absolute URL.
            method: HTTP method.
            headers: Extra request headers.
            body: Request body; non-str/bytes values are JSON-encoded.
            params: Query parameters as (name, value) pairs; names may repeat.

        Returns:
            Response for any HTTP status.

        Raises:
            NetworkError: On DNS, connection, timeout or protocol failures.
        """
        content: bytes | None
        if body is None:
            content = None
        elif isinstance(body, bytes):
            content = body
        elif isinstance(body, str):
            content = body.encode("utf-8")
        else:
            content = json.dumps(body).encode("utf-8")

        if self.logger:
            self.logger.debug(f"{method} {url}")

        try:
            response = await self._get_client().request(
                method,
                url,
                headers=headers,
                content=content,
                params=params,
            )
        except httpx.RequestError as e:
            raise NetworkError(f"{type(e).__name__}: {e}", url=url) from e

        return Response.from_httpx(response, self.logger)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
