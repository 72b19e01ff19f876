"""Two-phase upload: push raw bytes, then register the returned hash."""

from __future__ import annotations

import enum
import logging
from typing import Any

from mailru_cloud._internal.transport import Transport
from mailru_cloud.endpoints import UPLOAD_URL
from mailru_cloud.exceptions import TransportError, UploadError
from mailru_cloud.models import Session, UploadReceipt
from mailru_cloud.signer import RequestSigner, decode

logger = logging.getLogger(__name__)


class UploadState(enum.Enum):
    IDLE = "idle"
    BYTES_SENT = "bytes_sent"
    CONFIRMED = "confirmed"
    FAILED = "failed"


def join_home(folder: str, file_name: str) -> str:
    """Cloud path of file_name inside folder."""
    return folder.rstrip("/") + "/" + file_name


class UploadPipeline:
    """Runs one upload. Create a new pipeline for every file.

    Phase one PUTs the bytes to the upload host, which answers with an
    opaque content hash. Phase two is a signed /file/add call that turns
    the hash into a named file. Neither phase is retried.
    """

    def __init__(self, transport: Transport, signer: RequestSigner, session: Session) -> None:
        self._transport = transport
        self._signer = signer
        self._session = session
        self._receipt: UploadReceipt | None = None
        self.state = UploadState.IDLE

    def send_bytes(self, data: bytes, file_name: str) -> UploadReceipt:
        """Push raw bytes to the upload host.

        The body is the file content as-is even though the headers announce
        multipart/form-data; the upload host only reads the file name from
        Content-Disposition.

        Raises:
            UploadError: If the host rejects the bytes or returns no hash
        """
        if self.state is not UploadState.IDLE:
            raise UploadError(f"Upload pipeline already {self.state.value}", phase="bytes")

        try:
            response = self._transport.request(
                "PUT",
                UPLOAD_URL,
                params={"cloud_domain": 2, "x-email": self._session.account_email or ""},
                content=data,
                headers={
                    # Raw UTF-8; the upload host does not understand filename*=
                    "Content-Disposition": (
                        f'form-data; name="file"; filename="{file_name}"'.encode("utf-8")
                    ),
                    "Content-Type": "multipart/form-data",
                },
            )
        except TransportError:
            self.state = UploadState.FAILED
            raise
        if not response.is_success:
            self.state = UploadState.FAILED
            logger.error(f"Upload of {file_name} rejected with HTTP {response.status_code}")
            raise UploadError(
                f"Upload host rejected {file_name} with HTTP {response.status_code}",
                phase="bytes",
            )

        content_hash = response.text.strip()
        if not content_hash:
            self.state = UploadState.FAILED
            raise UploadError(f"Upload host returned no hash for {file_name}", phase="bytes")

        self._receipt = UploadReceipt(content_hash=content_hash, byte_size=len(data))
        self.state = UploadState.BYTES_SENT
        return self._receipt

    def confirm(self, receipt: UploadReceipt, folder: str, file_name: str) -> Any:
        """Register uploaded bytes as folder/file_name.

        Name collisions are rejected by the server (conflict=strict).

        Returns:
            Decoded JSON response of /file/add

        Raises:
            UploadError: If the receipt is not this pipeline's or the call fails
        """
        if self.state is not UploadState.BYTES_SENT or receipt is not self._receipt:
            raise UploadError("Receipt does not belong to a pending upload", phase="confirm")
        self._receipt = None

        home = join_home(folder, file_name)
        try:
            response = self._signer.request(
                "/file/add",
                "POST",
                {
                    "hash": receipt.content_hash,
                    "size": receipt.byte_size,
                    "home": home,
                    "conflict": "strict",
                },
            )
        except TransportError:
            self.state = UploadState.FAILED
            raise
        if not response.is_success:
            self.state = UploadState.FAILED
            logger.error(f"Confirming {home} failed with HTTP {response.status_code}")
            raise UploadError(
                f"Confirming {home} failed with HTTP {response.status_code}",
                phase="confirm",
            )

        self.state = UploadState.CONFIRMED
        logger.info(f"Uploaded {home} ({receipt.byte_size} bytes)")
        return decode(response)

    def run(self, data: bytes, folder: str, file_name: str) -> Any:
        """Send the bytes and confirm them in one go."""
        receipt = self.send_bytes(data, file_name)
        return self.confirm(receipt, folder, file_name)
