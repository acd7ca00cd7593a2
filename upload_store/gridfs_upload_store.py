# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""MongoDB GridFS-based upload store implementation."""

import logging
from typing import Any

from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from .connection import GridFSConnection
from .upload_store import (
    StoredFile,
    StoredFileNotFoundError,
    StoredFileWriteError,
    UploadStore,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_KEY = "contentType"


class GridFSFile(StoredFile):
    """Handle to one file in a GridFS bucket.

    Reads always see the newest revision stored under the logical path.
    """

    def read(self) -> bytes:
        with self._open_download() as grid_out:
            content = grid_out.read()
        logger.debug("GridFSFile: read %d bytes from %s", len(content), self.logical_path)
        return content

    def content_type(self) -> str | None:
        """Return the recorded content type.

        Files written through a bucket keep it in ``metadata.contentType``;
        files written with the legacy GridFS API keep it in a top-level
        ``contentType`` field of the files document.
        """
        with self._open_download() as grid_out:
            metadata = grid_out.metadata or {}
            content_type = metadata.get(CONTENT_TYPE_KEY)
            if content_type is None:
                content_type = getattr(grid_out, CONTENT_TYPE_KEY, None)
        return content_type

    def delete(self) -> bool:
        """Delete every revision stored under the logical path.

        Deleting a path with nothing stored is a no-op.

        Returns:
            True if at least one revision was deleted, False otherwise
        """
        bucket = self.store.connection.bucket
        deleted = 0
        for grid_out in bucket.find({"filename": self.logical_path}):
            bucket.delete(grid_out._id)
            deleted += 1

        if not deleted:
            logger.debug("GridFSFile: nothing to delete at %s", self.logical_path)
            return False

        logger.debug("GridFSFile: deleted %d revision(s) of %s", deleted, self.logical_path)
        return True

    def exists(self) -> bool:
        cursor = self.store.connection.bucket.find({"filename": self.logical_path}, limit=1)
        return any(True for _ in cursor)

    def _open_download(self):
        try:
            return self.store.connection.bucket.open_download_stream_by_name(self.logical_path)
        except NoFile as e:
            raise StoredFileNotFoundError(f"No file stored at {self.logical_path}") from e


class GridFSUploadStore(UploadStore):
    """Upload store backed by a MongoDB GridFS bucket.

    Connection settings come from the uploader's ``grid_fs_*`` accessors. The
    connection is created with the store and opened on first use.
    """

    def __init__(self, uploader: Any, connection: GridFSConnection | None = None, **connection_options):
        """Initialize GridFS upload store.

        Args:
            uploader: Uploader supplying settings and path resolution
            connection: Pre-built connection to own instead of one derived from the uploader
            **connection_options: Extra GridFSConnection options (bucket_name, MongoClient options)

        Raises:
            ValueError: If the uploader lacks host, port or database
        """
        super().__init__(uploader)
        if connection is None:
            connection = GridFSConnection.from_uploader(uploader, **connection_options)
        self.connection = connection

    def store_bytes(self, content: bytes, content_type: str | None, logical_path: str) -> GridFSFile:
        bucket = self.connection.bucket
        try:
            with bucket.open_upload_stream(
                logical_path, metadata={CONTENT_TYPE_KEY: content_type}
            ) as grid_in:
                grid_in.write(content)
        except PyMongoError as e:
            logger.error("GridFSUploadStore: write to %s failed - %s", logical_path, e, exc_info=True)
            raise StoredFileWriteError(f"Failed to store file at {logical_path}: {e}") from e

        logger.debug("GridFSUploadStore: stored %d bytes at %s", len(content), logical_path)
        return GridFSFile(self, logical_path)

    def open(self, logical_path: str) -> GridFSFile:
        return GridFSFile(self, logical_path)

    def close(self) -> None:
        """Close the owned connection."""
        self.connection.disconnect()
