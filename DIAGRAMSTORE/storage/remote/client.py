"""HTTP client for the diagram record service.

Maps the service's status codes onto the storage error taxonomy:

- 2xx: success (204 carries no body)
- 400: `ValidationError` with the service's message
- 404 on a direct lookup: `None`
- anything else, or no response at all: `TransportError`
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from DIAGRAMSTORE.utils.error_handling import (
    ErrorContext,
    TransportError,
    ValidationError,
    log_error_with_context,
)
from DIAGRAMSTORE.utils.logging import get_logger

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


class ApiClient:
    """Thin async JSON client bound to one service base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        options: Dict[str, Any] = {"base_url": self.base_url}
        if timeout is not None:
            options["timeout"] = timeout
        if transport is not None:
            options["transport"] = transport
        self._client = httpx.AsyncClient(**options)

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, str]] = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send one request and return the decoded body (None for 204/404)."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, path, json=json, params=params or None)
        except httpx.HTTPError as e:
            error = TransportError(f"Record service unreachable: {e}", method=method, url=url)
            log_error_with_context(e, ErrorContext(operation="remote request", url=url))
            raise error from e

        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code == 204:
            return None
        if response.is_success:
            return response.json() if response.content else None
        if response.status_code == 400:
            raise ValidationError(_error_message(response))
        if response.status_code == 404 and allow_not_found:
            return None

        error = TransportError(
            f"Record service returned {response.status_code}: {_error_message(response)}",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        log_error_with_context(error, ErrorContext(operation="remote request", url=url))
        raise error

    async def get(self, path: str, params: Optional[Dict[str, str]] = None, allow_not_found: bool = False) -> Any:
        return await self.request("GET", path, params=params, allow_not_found=allow_not_found)

    async def post(self, path: str, body: Any) -> Any:
        return await self.request("POST", path, json=body)

    async def put(self, path: str, body: Any) -> Any:
        return await self.request("PUT", path, json=body)

    async def patch(self, path: str, body: Any) -> Any:
        return await self.request("PATCH", path, json=body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
