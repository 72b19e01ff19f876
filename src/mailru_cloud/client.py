"""Main CloudMailClient class for interacting with Mail.Ru Cloud."""

from __future__ import annotations

import logging
import os
import posixpath
import tempfile
from pathlib import Path
from typing import IO, Any

import httpx

from mailru_cloud._internal.transport import Transport
from mailru_cloud.endpoints import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    DOWNLOAD_URL,
    PUBLIC_LINK_SEGMENT,
)
from mailru_cloud.exceptions import (
    CloudMailError,
    DownloadError,
    ProtocolError,
    SessionError,
)
from mailru_cloud.models import (
    Credentials,
    FileInfo,
    FolderInfo,
    Session,
    UploadResult,
    entry_from_listing,
)
from mailru_cloud.session import SessionManager
from mailru_cloud.signer import RequestSigner
from mailru_cloud.upload import UploadPipeline

logger = logging.getLogger(__name__)

FOLDER_SORT = '{"type":"name","order":"asc"}'


def _normalize(path: str) -> str:
    return path if path.startswith("/") else "/" + path


class CloudMailClient:
    """Client for Mail.Ru Cloud.

    The constructor logs in and fetches the session token; a client object
    only exists once it holds a token. Supports the context manager protocol.

    Example:
        with CloudMailClient("user@mail.ru", "password") as client:
            client.create_folder("/docs")
            client.upload("report.pdf", "/docs/report.pdf")
            print(client.get_link("/docs/report.pdf"))
    """

    def __init__(
        self,
        login: str,
        password: str,
        domain: str = "mail.ru",
        *,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client and authenticate.

        Args:
            login: Account login, usually the full mailbox address
            password: Account password
            domain: Mail domain of the account
            timeout: Timeout applied to every HTTP request
            user_agent: User-Agent sent with every request
            transport: Optional httpx transport, e.g. for testing

        Raises:
            AuthenticationError: If the login handshake fails
            TransportError: If the network fails
        """
        self._credentials = Credentials(login=login, password=password, domain=domain)
        self._transport = Transport(user_agent=user_agent, timeout=timeout, transport=transport)
        self.session = Session()
        self._signer = RequestSigner(self._transport, self.session)
        self._session_manager = SessionManager(
            self._credentials, self._transport, self._signer, self.session
        )
        try:
            self._session_manager.authenticate()
        except Exception:
            self._transport.close()
            raise

    def __enter__(self) -> CloudMailClient:
        """Enter context manager."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit context manager."""
        self.close()

    @property
    def is_authenticated(self) -> bool:
        """Check if the client holds a session token."""
        return self.session.is_authenticated and self.session.has_token

    @property
    def account_email(self) -> str | None:
        return self.session.account_email

    def _ensure_authenticated(self) -> None:
        if not self.is_authenticated:
            raise SessionError("No session token. The client is closed or the token fetch failed.")

    def refresh_token(self) -> str:
        """Fetch a new session token using the existing login cookies.

        Returns:
            The new token
        """
        if not self.session.is_authenticated:
            raise SessionError("Cannot refresh the token of a closed client")
        return self._session_manager.fetch_token()

    def _call(self, path: str, method: str, params: dict[str, Any]) -> Any:
        self._ensure_authenticated()
        return self._signer.call(path, method, params)

    def files(self, path: str = "/") -> Any:
        """List a folder, sorted by name.

        Returns:
            Decoded JSON response; entries are under body.list
        """
        return self._call("/folder", "GET", {"home": _normalize(path), "sort": FOLDER_SORT})

    def list_entries(self, path: str = "/") -> list[FileInfo | FolderInfo]:
        """List a folder as FileInfo and FolderInfo objects.

        Raises:
            ProtocolError: If the listing has an unexpected shape
        """
        response = self.files(path)
        try:
            return [entry_from_listing(item) for item in response["body"]["list"]]
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(f"Unexpected folder listing for {path}: {e}") from e

    def move(self, path: str, folder: str) -> Any:
        """Move a file or folder into another folder, renaming on conflict."""
        return self._call(
            "/file/move",
            "POST",
            {"home": _normalize(path), "folder": _normalize(folder), "conflict": "rename"},
        )

    def copy(self, path: str, folder: str) -> Any:
        """Copy a file or folder into another folder, renaming on conflict."""
        return self._call(
            "/file/copy",
            "POST",
            {"home": _normalize(path), "folder": _normalize(folder), "conflict": "rename"},
        )

    def delete(self, path: str) -> Any:
        return self._call("/file/remove", "POST", {"home": _normalize(path)})

    def create_folder(self, path: str) -> Any:
        return self._call("/folder/add", "GET", {"home": _normalize(path)})

    def rename(self, path: str, name: str) -> Any:
        """Give a file or folder a new name within its folder."""
        return self._call("/file/rename", "GET", {"home": _normalize(path), "name": name})

    def publish_file(self, path: str) -> Any:
        """Set the publish flag; the response body holds the public link id."""
        return self._call("/file/publish", "GET", {"home": _normalize(path)})

    def get_link(self, path: str) -> str:
        """Publish a file or folder and return its public URL.

        Raises:
            ProtocolError: If the publish response carries no link id
        """
        response = self.publish_file(path)
        link = response.get("body") if isinstance(response, dict) else None
        if not isinstance(link, str):
            raise ProtocolError(f"Publish response for {path} has no link: {response!r}")
        return DOWNLOAD_URL + PUBLIC_LINK_SEGMENT + link

    def upload(
        self,
        source: str | os.PathLike[str] | IO[bytes],
        remote_path: str | None = None,
    ) -> Any:
        """Upload a local file.

        Args:
            source: Local file path or a binary file object
            remote_path: Target cloud path. None uploads to the root under the
                local name; a path ending in "/" is treated as a folder.

        Returns:
            Decoded JSON response of the confirm call

        Raises:
            SessionError: If not authenticated
            UploadError: If either upload phase fails
        """
        self._ensure_authenticated()

        if isinstance(source, (str, os.PathLike)):
            local_path = Path(source)
            data = local_path.read_bytes()
            local_name: str | None = local_path.name
        else:
            data = source.read()
            name = getattr(source, "name", None)
            local_name = Path(name).name if isinstance(name, str) else None

        if remote_path is None:
            folder, file_name = "/", local_name
        elif remote_path.endswith("/"):
            folder, file_name = _normalize(remote_path), local_name
        else:
            folder, file_name = posixpath.split(_normalize(remote_path))
        if not file_name:
            raise ValueError("Cannot determine the remote file name; pass remote_path")

        pipeline = UploadPipeline(self._transport, self._signer, self.session)
        return pipeline.run(data, folder or "/", file_name)

    def upload_many(
        self,
        sources: list[str | Path],
        folder: str = "/",
        *,
        stop_on_error: bool = False,
    ) -> list[UploadResult]:
        """Upload several local files into one cloud folder.

        Args:
            sources: Local file paths
            folder: Cloud folder to upload into
            stop_on_error: If True, stop uploading on first error

        Returns:
            List of UploadResult for each file
        """
        folder = _normalize(folder)
        if not folder.endswith("/"):
            folder += "/"

        results: list[UploadResult] = []
        for source in sources:
            file_path = Path(source)
            try:
                self.upload(file_path, folder)
                result = UploadResult(
                    success=True,
                    file_path=file_path,
                    cloud_path=folder,
                    file_name=file_path.name,
                )
            except (CloudMailError, OSError) as e:
                logger.error(f"Upload of {file_path.name} failed: {e}")
                result = UploadResult(
                    success=False,
                    file_path=file_path,
                    cloud_path=folder,
                    file_name=file_path.name,
                    error=str(e),
                )
            results.append(result)

            if stop_on_error and not result.success:
                break

        return results

    def create_file(self, path: str, content: str | bytes) -> Any:
        """Create a cloud file with the given content."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        with tempfile.TemporaryFile() as tmp:
            tmp.write(content)
            tmp.seek(0)
            return self.upload(tmp, path)

    def download(self, path: str, save_path: str | Path) -> Path:
        """Download a cloud file to a local path.

        The local file is only opened once the server answers 200. If the
        transfer breaks off afterwards, a partial file is left behind.

        Raises:
            DownloadError: If the server does not answer 200
        """
        self._ensure_authenticated()
        save_path = Path(save_path)
        url = DOWNLOAD_URL + "get" + _normalize(path)

        with self._transport.stream("GET", url) as response:
            if response.status_code != 200:
                logger.error(f"Download of {path} failed with HTTP {response.status_code}")
                raise DownloadError(
                    f"Download of {path} failed with HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            with save_path.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)

        logger.info(f"Downloaded {path} to {save_path}")
        return save_path

    def close(self) -> None:
        """Close the HTTP client and forget the session."""
        self._transport.close()
        self.session.clear()
