"""httpx wrapper holding the cookie jar that carries the Mail.Ru session."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from mailru_cloud.endpoints import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from mailru_cloud.exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport:
    """One cookie-bearing HTTP client per session.

    HTTP error statuses are returned to the caller untouched; only
    network-level failures raise, as TransportError.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            headers={"Accept": "*/*", "User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def build_request(self, method: str, url: str, **kwargs: Any) -> httpx.Request:
        """Build a request with the session headers and cookies applied."""
        return self._client.build_request(method, url, **kwargs)

    def send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request.

        Raises:
            TransportError: If the request could not be completed
        """
        try:
            return self._client.send(request)
        except httpx.TransportError as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Build and send a request in one step."""
        return self.send(self.build_request(method, url, **kwargs))

    @contextmanager
    def stream(self, method: str, url: str, **kwargs: Any) -> Iterator[httpx.Response]:
        """Open a streaming response; the body is read lazily by the caller."""
        try:
            with self._client.stream(method, url, **kwargs) as response:
                yield response
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    def close(self) -> None:
        self._client.close()
