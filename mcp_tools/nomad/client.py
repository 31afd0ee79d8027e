"""Nomad HTTP API client.

Executes requests against a Nomad agent's ``/v1`` API, attaches the ACL
token when one is set and classifies every response into a result or one
of the ``Nomad*Error`` exceptions below. Holds the only mutable state of
the adapter: the ACL token, which ``bootstrap_acl_token`` may replace at
runtime.
"""

import asyncio
import json
import threading
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

import httpx

from config import get_settings
from logging_config import get_logger, register_secret

if TYPE_CHECKING:
    from .request_builder import NomadRequest

logger = get_logger(__name__)

# Fixed for every call; a per-call timeout may only shorten it.
REQUEST_TIMEOUT_SECONDS = 30.0

HEALTH_PROBE_PATH = "status/leader"


class NomadError(Exception):
    """Base class for all adapter errors."""
    pass


class NomadValidationError(NomadError):
    """Arguments did not match the operation's schema.

    Raised before any request is built.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NomadConnectionError(NomadError):
    """Failed to reach the Nomad agent (DNS, refused, timeout)."""
    pass


class NomadAPIError(NomadError):
    """Nomad answered with an HTTP status >= 400.

    The response body is kept unparsed so the remote diagnostic can be
    shown verbatim.
    """

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NomadDecodeError(NomadError):
    """Response body did not match the operation's declared shape."""
    pass


class NomadClient:
    """Async client for the Nomad HTTP API.

    The health probe runs once when the client is opened; a client that
    cannot reach its agent never becomes usable.

    Usage:
        async with NomadClient() as client:
            body = await client.request("GET", "jobs")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Nomad client.

        Args:
            base_url: Agent address (defaults to NOMAD_ADDR from config)
            token: Initial ACL token (defaults to NOMAD_TOKEN from config)
            transport: Optional httpx transport, used by tests
        """
        settings = get_settings()

        self.base_url = (base_url or settings.nomad_addr or "").rstrip("/")
        self.timeout = REQUEST_TIMEOUT_SECONDS

        self._token = token if token is not None else (settings.nomad_token or "")
        register_secret(self._token)
        self._token_lock = threading.Lock()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "NomadClient":
        """Async context manager entry - creates client and probes the agent."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close client."""
        await self.close()

    # ------------------------------------------------------------------
    # Token
    # ------------------------------------------------------------------

    def get_token(self) -> str:
        with self._token_lock:
            return self._token

    def set_token(self, token: Optional[str]) -> None:
        register_secret(token)
        with self._token_lock:
            self._token = token or ""

    @property
    def authenticated(self) -> bool:
        return bool(self.get_token())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Create the HTTP client and run the health probe.

        Raises:
            NomadConnectionError: If no address is configured or the probe fails
        """
        if not self.base_url:
            raise NomadConnectionError("Nomad address not configured")

        self._ensure_client()
        try:
            await self.request("GET", HEALTH_PROBE_PATH)
        except NomadError as e:
            await self.close()
            raise NomadConnectionError(
                f"Failed to connect to Nomad server at {self.base_url}: {e}"
            ) from e

        logger.info("Connected to Nomad agent", extra={"nomad_addr": self.base_url})

    def _ensure_client(self) -> httpx.AsyncClient:
        """Create HTTP client if not exists."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = self.get_token()
        if token:
            headers["X-Nomad-Token"] = token
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Sequence[Tuple[str, str]]] = None,
        json_data: Any = None,
        timeout: Optional[float] = None,
    ) -> bytes:
        """Make a single request against ``/v1/<path>``.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path relative to /v1 (e.g. "job/example")
            params: Ordered query parameters
            json_data: Optional JSON body
            timeout: Optional per-call deadline in seconds, capped at the fixed timeout

        Returns:
            Raw response body

        Raises:
            NomadConnectionError: On transport failure or timeout
            NomadAPIError: If Nomad returns a status >= 400
        """
        client = self._ensure_client()

        effective_timeout = self.timeout
        if timeout is not None and 0 < timeout < self.timeout:
            effective_timeout = timeout

        content = None
        if json_data is not None:
            content = json.dumps(json_data).encode("utf-8")

        url = f"/v1/{path.lstrip('/')}"
        query: List[Tuple[str, str]] = list(params or [])

        try:
            response = await client.request(
                method=method,
                url=url,
                params=query or None,
                content=content,
                headers=self._headers(),
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as e:
            raise NomadConnectionError(f"Request to Nomad timed out: {e}") from e
        except httpx.RequestError as e:
            raise NomadConnectionError(f"Request to Nomad failed: {e}") from e

        logger.debug(
            "Nomad request completed",
            extra={"method": method, "path": url, "status_code": response.status_code}
        )

        if response.status_code >= 400:
            raise NomadAPIError(
                f"API error (status {response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return response.content

    async def execute(self, nomad_request: "NomadRequest", timeout: Optional[float] = None) -> bytes:
        """Execute a request produced by the request builder."""
        return await self.request(
            nomad_request.method,
            nomad_request.path,
            params=nomad_request.query,
            json_data=nomad_request.body,
            timeout=timeout,
        )


# Process-wide client
_client: Optional[NomadClient] = None
_client_lock = asyncio.Lock()


async def get_nomad_client() -> NomadClient:
    """Get the global Nomad client.

    Creates and probes the instance on first call.

    Raises:
        NomadConnectionError: If the agent cannot be reached
    """
    global _client
    if _client is not None:
        return _client

    async with _client_lock:
        # Another caller may have finished while this one waited
        if _client is None:
            client = NomadClient()
            await client.connect()
            _client = client
    return _client


async def close_nomad_client() -> None:
    """Close and forget the global Nomad client."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None


def error_to_dict(error: Exception) -> dict:
    """Structured error payload for tool front ends.

    Remote status and body are kept verbatim for API errors.
    """
    payload = {
        "success": False,
        "error": str(error),
        "error_type": type(error).__name__,
    }
    if isinstance(error, NomadValidationError) and error.field:
        payload["field"] = error.field
    if isinstance(error, NomadAPIError):
        payload["status_code"] = error.status_code
        payload["body"] = error.body
    return payload
