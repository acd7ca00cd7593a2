# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract upload store interface for blob storage backends."""

import os
from abc import ABC, abstractmethod
from typing import Any


class UploadStoreError(Exception):
    """Base exception for upload store errors."""
    pass


class UploadStoreConnectionError(UploadStoreError):
    """Exception raised when connection to the backing store fails."""
    pass


class UploadStoreAuthenticationError(UploadStoreConnectionError):
    """Exception raised when the backing store rejects the supplied credentials."""
    pass


class StoredFileWriteError(UploadStoreError):
    """Exception raised when the backing store rejects a write."""
    pass


class StoredFileNotFoundError(UploadStoreError):
    """Exception raised when no blob exists at a logical path."""
    pass


class StoredFile(ABC):
    """Lightweight reference to one blob in an upload store.

    A stored file holds no open resource between calls. Each operation that
    touches the backing store opens a stream, acts and closes it again.
    """

    def __init__(self, store: "UploadStore", logical_path: str):
        self.store = store
        self.logical_path = logical_path

    @property
    def path(self) -> None:
        """Local filesystem path. Always None: blobs only live in the store."""
        return None

    @property
    def url(self) -> str | None:
        """Public URL for the blob, or None if no access URL is configured."""
        access_url = self.store.access_url
        if access_url is None:
            return None
        return f"{access_url}/{self.logical_path}"

    @abstractmethod
    def read(self) -> bytes:
        """Read the full content of the blob.

        Returns:
            Blob content as bytes

        Raises:
            StoredFileNotFoundError: If no blob exists at the logical path
        """
        pass

    @abstractmethod
    def delete(self) -> bool:
        """Delete the blob.

        Returns:
            True if a blob was deleted, False if nothing was stored at the path
        """
        pass

    @abstractmethod
    def content_type(self) -> str | None:
        """Return the content type recorded when the blob was stored.

        Raises:
            StoredFileNotFoundError: If no blob exists at the logical path
        """
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check whether a blob is stored at the logical path."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.logical_path!r})"


class UploadStore(ABC):
    """Abstract interface for upload storage backends.

    A store is bound to one uploader, which supplies connection settings
    (``grid_fs_*`` accessors) and resolves logical paths via ``store_path``.
    """

    def __init__(self, uploader: Any):
        self.uploader = uploader

    @property
    def access_url(self) -> str | None:
        """URL prefix under which stored blobs are served, read from the uploader."""
        return getattr(self.uploader, "grid_fs_access_url", None)

    def store(self, file: Any, identifier: str | None = None) -> StoredFile:
        """Store an uploaded file at the path resolved by the uploader.

        Args:
            file: File-like object exposing ``content_type`` and ``read()``
            identifier: Optional filename passed to ``uploader.store_path``

        Returns:
            StoredFile bound to the resolved logical path

        Raises:
            StoredFileWriteError: If the backing store rejects the write
        """
        if identifier is None:
            logical_path = self.uploader.store_path()
        else:
            logical_path = self.uploader.store_path(identifier)
        content_type = getattr(file, "content_type", None)
        return self.store_bytes(file.read(), content_type, logical_path)

    def retrieve(self, identifier: str) -> StoredFile:
        """Return a handle for a previously stored file.

        No I/O is performed; existence is only checked by the handle's
        read, delete and content_type operations.
        """
        return self.open(self.uploader.store_path(identifier))

    @abstractmethod
    def store_bytes(self, content: bytes, content_type: str | None, logical_path: str) -> StoredFile:
        """Write bytes at a logical path, replacing any earlier blob there.

        Args:
            content: Raw bytes to persist
            content_type: Content type recorded alongside the blob
            logical_path: Key identifying the blob in the store

        Returns:
            StoredFile bound to ``logical_path``

        Raises:
            StoredFileWriteError: If the backing store rejects the write
        """
        pass

    @abstractmethod
    def open(self, logical_path: str) -> StoredFile:
        """Build a handle for an already resolved logical path without I/O."""
        pass


def create_upload_store(store_type: str | None = None, uploader: Any = None, **kwargs) -> UploadStore:
    """Factory function to create an upload store instance.

    Args:
        store_type: Type of upload store ("gridfs", "inmemory").
                   If None, reads from UPLOAD_STORE_TYPE environment variable
                   (defaults to "gridfs")
        uploader: Uploader supplying settings and path resolution
        **kwargs: Additional store-specific arguments

    Returns:
        UploadStore instance

    Raises:
        ValueError: If store_type is not recognized or uploader is missing

    Examples:
        >>> settings = UploaderSettings(grid_fs_host="localhost", grid_fs_database="uploads")
        >>> store = create_upload_store("gridfs", settings)
        >>> store = create_upload_store("inmemory", settings)
    """
    if uploader is None:
        raise ValueError("uploader is required")

    if store_type is None:
        store_type = os.getenv("UPLOAD_STORE_TYPE", "gridfs")

    store_type = store_type.lower()
    if store_type == "gridfs":
        from .gridfs_upload_store import GridFSUploadStore
        return GridFSUploadStore(uploader, **kwargs)
    elif store_type == "inmemory":
        from .inmemory_upload_store import InMemoryUploadStore
        return InMemoryUploadStore(uploader, **kwargs)
    else:
        raise ValueError(f"Unknown upload store type: {store_type}")
