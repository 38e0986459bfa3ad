"""
Errors raised by the storage adapter.

Every failure in the video path surfaces to the caller of save() as one
of these. Nothing here is retried internally.
"""

from typing import Optional


class MuxStorageError(Exception):
    """Base class for all adapter errors."""
    pass


class MissingCredential(MuxStorageError):
    """Raised at construction when the token id or secret is absent."""
    pass


class RemoteServiceError(MuxStorageError):
    """Raised when the Mux API answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SessionCreationFailed(RemoteServiceError):
    """Raised when Mux rejects, or we cannot reach it for, a new upload."""
    pass


class TransferFailed(MuxStorageError):
    """Raised when the streamed PUT to the upload URL does not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AssetNotReady(MuxStorageError):
    """
    Raised when the upload has no asset id yet.

    The transfer itself succeeded; Mux just has not attached an asset
    to the upload by the time we asked.
    """

    def __init__(self, upload_id: str, status: Optional[str] = None) -> None:
        self.upload_id = upload_id
        self.status = status
        super().__init__(f"No asset ID found for upload {upload_id} (status: {status})")


class Unreadable(MuxStorageError):
    """Raised by read(). Content is never retrievable through this adapter."""
    pass
