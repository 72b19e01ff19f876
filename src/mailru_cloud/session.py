"""Login handshake and CSRF token management for Mail.Ru Cloud."""

from __future__ import annotations

import json
import logging

from mailru_cloud._internal.transport import Transport
from mailru_cloud.endpoints import AUTH_URL, CLOUD_URL, FETCH_TOKEN_URL
from mailru_cloud.exceptions import AuthenticationError, ProtocolError
from mailru_cloud.models import Credentials, Session
from mailru_cloud.signer import MULTIPART, RequestSigner

logger = logging.getLogger(__name__)


class SessionManager:
    """Turns credentials into an authenticated, token-bearing session.

    The login handshake happens once. Afterwards the token can be re-fetched
    at any time with fetch_token(), which relies only on the cookies already
    held by the transport.
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Transport,
        signer: RequestSigner,
        session: Session,
    ) -> None:
        self._credentials = credentials
        self._transport = transport
        self._signer = signer
        self.session = session

    def authenticate(self) -> Session:
        """Run the full login handshake.

        Returns:
            The populated session

        Raises:
            AuthenticationError: If any step of the handshake fails
            TransportError: If the network fails
        """
        creds = self._credentials
        response = self._signer.request(
            AUTH_URL,
            "POST",
            {"Login": creds.login, "Password": creds.password, "Domain": creds.domain},
            encoding=MULTIPART,
            apply_defaults=False,
        )
        if not response.is_success:
            raise AuthenticationError(f"Login rejected with HTTP {response.status_code}")
        logger.info(f"Logged in as {creds.login}")

        try:
            # The landing page sets the cookies the token endpoint checks.
            landing = self._transport.request("GET", CLOUD_URL)
            if not landing.is_success:
                raise AuthenticationError(
                    f"Cloud landing page answered HTTP {landing.status_code}"
                )
            self.fetch_token()
        except ProtocolError as e:
            self.session.clear()
            raise AuthenticationError(f"Failed to obtain session token: {e}") from e
        except Exception:
            self.session.clear()
            raise

        self.session.is_authenticated = True
        return self.session

    def fetch_token(self) -> str:
        """Fetch a fresh CSRF token and store it with its timestamp.

        Returns:
            The new token

        Raises:
            AuthenticationError: If the token endpoint answers non-2xx
            ProtocolError: If the token response is malformed
        """
        login = self._credentials.login
        response = self._transport.request(
            "GET",
            FETCH_TOKEN_URL,
            params={"api": "v2", "email": login, "x-email": login},
        )
        if not response.is_success:
            raise AuthenticationError(
                f"Token request rejected with HTTP {response.status_code}"
            )

        try:
            data = json.loads(response.content)
            token = data["body"]["token"]
            timestamp = int(data["time"])
            email = data["email"]
        except (ValueError, KeyError, TypeError) as e:
            raise ProtocolError(f"Malformed token response: {e}") from e
        if not token:
            raise ProtocolError("Token response contained an empty token")

        token = str(token)
        self.session.set_token(token, timestamp, str(email))
        logger.info(f"Fetched session token for {email}")
        return token
