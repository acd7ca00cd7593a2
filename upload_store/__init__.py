# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""GridFS Upload Store Adapter.

Persists uploaded files in MongoDB GridFS and retrieves or deletes them
by logical path.

Example:
    >>> from upload_store import UploaderSettings, create_upload_store
    >>> settings = UploaderSettings(grid_fs_host="localhost", grid_fs_database="test")
    >>> store = create_upload_store("gridfs", settings)
    >>> stored = store.store_bytes(b"this is stuff", "application/xml", "uploads/bar.txt")
    >>> stored.read()
    b'this is stuff'
"""

__version__ = "0.1.0"

from .config import UploaderSettings
from .connection import GridFSConnection
from .gridfs_upload_store import GridFSFile, GridFSUploadStore
from .inmemory_upload_store import InMemoryFile, InMemoryUploadStore
from .upload_store import (
    StoredFile,
    StoredFileNotFoundError,
    StoredFileWriteError,
    UploadStore,
    UploadStoreAuthenticationError,
    UploadStoreConnectionError,
    UploadStoreError,
    create_upload_store,
)

__all__ = [
    # Version
    "__version__",
    # Upload Stores
    "UploadStore",
    "GridFSUploadStore",
    "InMemoryUploadStore",
    "create_upload_store",
    # File Handles
    "StoredFile",
    "GridFSFile",
    "InMemoryFile",
    # Connection and settings
    "GridFSConnection",
    "UploaderSettings",
    # Exceptions
    "UploadStoreError",
    "UploadStoreConnectionError",
    "UploadStoreAuthenticationError",
    "StoredFileWriteError",
    "StoredFileNotFoundError",
]
