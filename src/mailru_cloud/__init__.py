"""mailru-cloud - A Python client for Mail.Ru Cloud storage.

Example usage:
    from mailru_cloud import CloudMailClient

    with CloudMailClient("user@mail.ru", "password") as client:
        client.create_folder("/docs")
        client.upload("notes.txt", "/docs/notes.txt")
        client.download("/docs/notes.txt", "notes-copy.txt")
        print(client.get_link("/docs/notes.txt"))
"""

from mailru_cloud.client import CloudMailClient
from mailru_cloud.exceptions import (
    AuthenticationError,
    CloudMailError,
    DownloadError,
    ProtocolError,
    SessionError,
    TransportError,
    UploadError,
)
from mailru_cloud.models import (
    Credentials,
    FileInfo,
    FolderInfo,
    Session,
    UploadReceipt,
    UploadResult,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "CloudMailClient",
    # Models
    "Credentials",
    "Session",
    "UploadReceipt",
    "UploadResult",
    "FileInfo",
    "FolderInfo",
    # Exceptions
    "CloudMailError",
    "TransportError",
    "AuthenticationError",
    "ProtocolError",
    "UploadError",
    "DownloadError",
    "SessionError",
]
