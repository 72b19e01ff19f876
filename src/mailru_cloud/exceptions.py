"""Exception hierarchy for the mailru_cloud library."""

from __future__ import annotations


class CloudMailError(Exception):
    """Base exception for all mailru_cloud errors."""

    pass


class TransportError(CloudMailError):
    """Raised when the HTTP layer fails (DNS, TLS, connection, timeout)."""

    pass


class AuthenticationError(CloudMailError):
    """Raised when the login handshake or token fetch fails."""

    pass


class ProtocolError(CloudMailError):
    """Raised when a response does not have the expected shape."""

    pass


class UploadError(CloudMailError):
    """Raised when a file upload fails.

    The phase attribute is "bytes" when the raw byte PUT was rejected and
    "confirm" when registering the uploaded hash failed.
    """

    def __init__(self, message: str, phase: str) -> None:
        super().__init__(message)
        self.phase = phase


class DownloadError(CloudMailError):
    """Raised when a download does not answer with HTTP 200."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionError(CloudMailError):
    """Raised when there's an issue with the session state."""

    pass
