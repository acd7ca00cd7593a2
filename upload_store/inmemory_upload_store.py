# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory upload store implementation for testing."""

import logging
from typing import Any

from .upload_store import (
    StoredFile,
    StoredFileNotFoundError,
    UploadStore,
)

logger = logging.getLogger(__name__)


class InMemoryFile(StoredFile):
    """Handle to one blob held by an InMemoryUploadStore."""

    def read(self) -> bytes:
        content, _ = self._lookup()
        return content

    def content_type(self) -> str | None:
        _, content_type = self._lookup()
        return content_type

    def delete(self) -> bool:
        return self.store.blobs.pop(self.logical_path, None) is not None

    def exists(self) -> bool:
        return self.logical_path in self.store.blobs

    def _lookup(self) -> tuple[bytes, str | None]:
        try:
            return self.store.blobs[self.logical_path]
        except KeyError as e:
            raise StoredFileNotFoundError(f"No file stored at {self.logical_path}") from e


class InMemoryUploadStore(UploadStore):
    """Upload store that keeps blobs in a dictionary.

    Useful for testing code that depends on an upload store without a
    running MongoDB.
    """

    def __init__(self, uploader: Any, **kwargs):
        super().__init__(uploader)
        self.blobs: dict[str, tuple[bytes, str | None]] = {}

    def store_bytes(self, content: bytes, content_type: str | None, logical_path: str) -> InMemoryFile:
        self.blobs[logical_path] = (bytes(content), content_type)
        logger.debug("InMemoryUploadStore: stored %d bytes at %s", len(content), logical_path)
        return InMemoryFile(self, logical_path)

    def open(self, logical_path: str) -> InMemoryFile:
        return InMemoryFile(self, logical_path)

    def clear(self) -> None:
        """Remove all stored blobs (useful for testing)."""
        self.blobs.clear()
