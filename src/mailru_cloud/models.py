"""Data models for the mailru_cloud library."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Credentials:
    """Login, password and mail domain used for the auth handshake."""

    login: str
    password: str = field(repr=False)
    domain: str = "mail.ru"


@dataclass
class Session:
    """Authentication state shared by the session manager and the client.

    The token, its issuance timestamp and the account email come from the
    same token response and are only ever written together through
    set_token(). Signed requests carry the token and timestamp as a pair.
    """

    is_authenticated: bool = False
    token: str | None = None
    token_timestamp: int | None = None
    account_email: str | None = None

    @property
    def has_token(self) -> bool:
        return self.token is not None

    def set_token(self, token: str, token_timestamp: int, account_email: str) -> None:
        """Store a freshly issued token together with its timestamp and email."""
        self.token = token
        self.token_timestamp = token_timestamp
        self.account_email = account_email

    def clear(self) -> None:
        """Forget everything, e.g. when the client is closed."""
        self.is_authenticated = False
        self.token = None
        self.token_timestamp = None
        self.account_email = None


@dataclass(frozen=True)
class UploadReceipt:
    """Result of pushing raw bytes to the upload host."""

    content_hash: str
    byte_size: int


@dataclass(frozen=True)
class UploadResult:
    """Result of one upload in a batch."""

    success: bool
    file_path: Path
    cloud_path: str
    file_name: str
    error: str | None = None


@dataclass(frozen=True)
class FileInfo:
    """Information about a file in the cloud."""

    name: str
    path: str
    size: int
    hash: str | None = None
    mtime: int | None = None


@dataclass(frozen=True)
class FolderInfo:
    """Information about a folder in the cloud."""

    name: str
    path: str


def entry_from_listing(item: dict[str, Any]) -> FileInfo | FolderInfo:
    """Build a FileInfo or FolderInfo from one element of a folder listing."""
    name = item["name"]
    path = item["home"]
    if item.get("type") == "folder":
        return FolderInfo(name=name, path=path)
    return FileInfo(
        name=name,
        path=path,
        size=int(item.get("size", 0)),
        hash=item.get("hash"),
        mtime=item.get("mtime"),
    )
