"""
Depex API fetcher.

Expands nodes against the Depex backend over HTTP:

    POST {api_url}/depex/graph/expand/version           {"version_purl": ...}
    POST {api_url}/depex/graph/expand/requirement_file  {"requirement_file_id": ...}
    POST {api_url}/depex/graph/expand/package           {"node_type": ..., "package_purl": ..., "constraints": ...}

Responses are wrapped in an envelope: {"data": {"nodes": [...], "edges": [...]}}.

Timeouts, 429 and 5xx responses are retried with exponential backoff;
everything else fails immediately. Timeout and retry policy live here, not
in the engine.
"""

import asyncio
import json
import logging
from typing import Any, Dict

import httpx

from ..config import Settings
from ..core.exceptions import (
    AuthenticationError,
    FetchError,
    FetchTimeoutError,
    MalformedResponseError,
    NeighborhoodNotFoundError,
)
from ..core.types import GraphFragment, NodeType
from .base import NeighborhoodRequest

logger = logging.getLogger(__name__)

EXPAND_VERSION = "/depex/graph/expand/version"
EXPAND_REQUIREMENT_FILE = "/depex/graph/expand/requirement_file"
EXPAND_PACKAGE = "/depex/graph/expand/package"


class _RetryableError(FetchError):
    """A failure worth another attempt."""


def endpoint_for(request: NeighborhoodRequest) -> tuple[str, Dict[str, Any]]:
    """Map a request onto its endpoint path and JSON body."""
    if request.node_type == NodeType.VERSION:
        return EXPAND_VERSION, {"version_purl": request.node_identity}
    if request.node_type == NodeType.REQUIREMENT_FILE:
        return EXPAND_REQUIREMENT_FILE, {"requirement_file_id": request.node_identity}
    return EXPAND_PACKAGE, {
        "node_type": request.node_type.value,
        "package_purl": request.node_identity,
        "constraints": request.constraints,
    }


class DepexApiFetcher:
    """
    NeighborhoodFetcher backed by the Depex REST API.

    The underlying httpx.AsyncClient is created on first use; use the fetcher
    as an async context manager (or call close()) to release it.
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or Settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
            if self.settings.api_token is not None:
                headers["Authorization"] = f"Bearer {self.settings.api_token.get_secret_value()}"
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_url.rstrip("/"),
                headers=headers,
                timeout=httpx.Timeout(self.settings.timeout),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DepexApiFetcher":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def fetch(self, request: NeighborhoodRequest) -> GraphFragment:
        path, body = endpoint_for(request)
        identity = request.node_identity
        max_retries = self.settings.max_retries
        last_error: FetchError

        for attempt in range(1, max_retries + 1):
            try:
                response = await self.client.post(path, json=body)
                payload = self._handle_response(response, identity)
                return self._to_fragment(payload, identity)
            except _RetryableError as e:
                last_error = FetchError(e.message, node_id=identity)
            except httpx.TimeoutException as err:
                last_error = FetchTimeoutError(f"Timed out expanding via {path}", node_id=identity)
                last_error.__cause__ = err
            except httpx.TransportError as err:
                last_error = FetchError(f"Network error: {err}", node_id=identity)
                last_error.__cause__ = err

            if attempt == max_retries:
                raise last_error

            delay = self.settings.backoff_base * (2 ** (attempt - 1))
            logger.warning(f"{last_error}. Retry {attempt}/{max_retries - 1} in {delay:.2f}s")
            await asyncio.sleep(delay)

        raise FetchError(f"No attempt made to expand via {path} (max_retries={max_retries})", node_id=identity)

    def _handle_response(self, response: httpx.Response, identity: str) -> Dict[str, Any]:
        """Map status codes to errors and return the decoded JSON body."""
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError("Invalid API token or unauthorized access", node_id=identity)
        if status == 404:
            raise NeighborhoodNotFoundError("No neighborhood found", node_id=identity)
        if status == 429 or status >= 500:
            raise _RetryableError(f"Server responded {status}", node_id=identity)
        if status >= 400:
            try:
                message = response.json().get("detail", f"API error: {status}")
            except (json.JSONDecodeError, AttributeError):
                message = f"API error: {status}"
            raise FetchError(str(message), node_id=identity)

        try:
            return response.json()
        except json.JSONDecodeError as err:
            raise MalformedResponseError("Invalid response format from API", node_id=identity) from err

    @staticmethod
    def _to_fragment(payload: Any, identity: str) -> GraphFragment:
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise MalformedResponseError("Response has no 'data' object", node_id=identity)
        try:
            return GraphFragment.from_payload(payload["data"])
        except TypeError as err:
            raise MalformedResponseError(str(err), node_id=identity) from err
