"""
apps.edge_connector.client
~~~~~~~~~~~~~~~~~~~~~~~~~~
HTTP client for the Edge management API, built on :mod:`httpx`.

The client is the only place that touches the network.  It turns transport
and HTTP failures into :mod:`common.exceptions` errors so the DRF exception
handler can render them:

==========================  ===============================================
Backend outcome             Raised
==========================  ===============================================
connection / timeout error  :class:`~common.exceptions.RemoteAPIError`
HTTP 404                    :class:`~common.exceptions.RemoteEntityNotFoundError`
any other 4xx / 5xx         :class:`~common.exceptions.RemoteAPIError`
==========================  ===============================================
"""
from __future__ import annotations

import time
from functools import lru_cache
from typing import Any

import httpx
import structlog
from django.conf import settings

from common.exceptions import RemoteAPIError, RemoteEntityNotFoundError

logger = structlog.get_logger(__name__)


class EdgeClient:
    """
    Synchronous client bound to one Edge management endpoint.

    Args:
        endpoint: Base URL, e.g. ``"https://api.enterprise.apigee.com/v1"``.
        username: Basic-auth user; leave empty to send no credentials.
        password: Basic-auth password.
        timeout: Per-request timeout in seconds.
        transport: Optional :class:`httpx.BaseTransport`; tests pass an
            :class:`httpx.MockTransport` here.
    """

    def __init__(
        self,
        endpoint: str,
        username: str = "",
        password: str = "",
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._http = httpx.Client(
            base_url=self.endpoint,
            auth=(username, password) if username else None,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send a request and return the decoded JSON body (``None`` if empty).

        Raises:
            RemoteEntityNotFoundError: The backend answered 404.
            RemoteAPIError: Any other failure.
        """
        start = time.monotonic()
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            logger.error("edge_request_failed", method=method, path=path, error=str(exc))
            raise RemoteAPIError(f"Could not reach the API management backend: {exc}") from exc

        duration_ms = round((time.monotonic() - start) * 1000, 2)
        logger.debug(
            "edge_request",
            method=method,
            path=path,
            status=response.status_code,
            duration_ms=duration_ms,
        )

        if response.status_code == httpx.codes.NOT_FOUND:
            raise RemoteEntityNotFoundError(
                f"{method} {path} returned 404.", remote_status=response.status_code
            )
        if response.is_error:
            raise RemoteAPIError(
                f"{method} {path} returned {response.status_code}: {_error_message(response)}",
                remote_status=response.status_code,
            )
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, params: dict | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self) -> None:
        self._http.close()


def _error_message(response: httpx.Response) -> str:
    """Pull the backend's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


@lru_cache(maxsize=1)
def get_client() -> EdgeClient:
    """Return the process-wide client configured from Django settings."""
    logger.info("edge_client_created", endpoint=settings.EDGE_ENDPOINT)
    return EdgeClient(
        settings.EDGE_ENDPOINT,
        settings.EDGE_USERNAME,
        settings.EDGE_PASSWORD,
        timeout=settings.EDGE_TIMEOUT,
    )
