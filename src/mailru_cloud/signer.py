"""Turns logical API calls into signed Mail.Ru Cloud requests.

The service has no auth header. Every API call authenticates itself by
carrying the session token as an ordinary parameter named ``token``,
paired with ``_`` (the token's issuance timestamp). Where those parameters
travel depends on the verb: GET requests put them in the query string,
everything else in a form-encoded body. Only the login call uses
multipart, and it goes out without the signing parameters.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from mailru_cloud._internal.transport import Transport
from mailru_cloud.endpoints import API_BASE, API_VERSION
from mailru_cloud.exceptions import ProtocolError
from mailru_cloud.models import Session

logger = logging.getLogger(__name__)

MULTIPART = "multipart"


def format_url(path: str) -> str:
    """Resolve an API path against the API base; absolute URLs pass through."""
    return path if "://" in path else API_BASE + path


def _wire_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class RequestSigner:
    """Builds, sends and decodes requests on behalf of one session."""

    def __init__(self, transport: Transport, session: Session) -> None:
        self._transport = transport
        self._session = session

    def default_params(self) -> dict[str, Any]:
        """Signing parameters merged into every API call."""
        email = self._session.account_email
        return {
            "home": None,
            "api": API_VERSION,
            "email": email,
            "x-email": email,
            "token": self._session.token,
            "_": self._session.token_timestamp,
        }

    def sign(
        self,
        path: str,
        method: str,
        params: dict[str, Any],
        encoding: str | None = None,
        apply_defaults: bool = True,
    ) -> httpx.Request:
        """Build a wire-ready request for a logical API call.

        Args:
            path: API path such as "/file/move", or an absolute URL
            method: HTTP verb
            params: Call parameters; they win over the signing defaults
            encoding: "multipart" to send name/contents parts, None otherwise
            apply_defaults: Merge in the token and other signing parameters

        Returns:
            The prepared httpx.Request
        """
        url = format_url(path)
        payload = {**self.default_params(), **params} if apply_defaults else dict(params)
        wire = {key: _wire_value(value) for key, value in payload.items()}
        method = method.upper()

        if encoding == MULTIPART:
            files = [(key, (None, value)) for key, value in wire.items()]
            return self._transport.build_request(method, url, files=files)
        if method == "GET":
            return self._transport.build_request(method, url, params=wire)
        return self._transport.build_request(method, url, data=wire)

    def request(
        self,
        path: str,
        method: str,
        params: dict[str, Any],
        encoding: str | None = None,
        apply_defaults: bool = True,
    ) -> httpx.Response:
        """Sign and send a call, returning the raw response."""
        request = self.sign(path, method, params, encoding, apply_defaults)
        logger.debug(f"{request.method} {request.url.host}{request.url.path}")
        return self._transport.send(request)

    def call(
        self,
        path: str,
        method: str,
        params: dict[str, Any],
        encoding: str | None = None,
        apply_defaults: bool = True,
    ) -> Any:
        """Sign and send a call, returning the decoded JSON body."""
        response = self.request(path, method, params, encoding, apply_defaults)
        if not response.is_success:
            logger.warning(f"{method.upper()} {path} answered {response.status_code}")
        return decode(response)


def decode(response: httpx.Response) -> Any:
    """Parse the whole response body as one JSON document.

    Raises:
        ProtocolError: If the body is not valid JSON
    """
    try:
        return json.loads(response.content)
    except ValueError as e:
        raise ProtocolError(
            f"Expected JSON from {response.request.url.path}, got: {response.text[:200]!r}"
        ) from e
