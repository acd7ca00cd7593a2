# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for upload_store tests.

GridFS is replaced by a small in-memory bucket so the unit tests run
without a MongoDB server. Integration tests use a real server instead.
"""

from __future__ import annotations

import itertools
from unittest.mock import MagicMock, patch

import pytest
from gridfs.errors import NoFile

from upload_store import GridFSUploadStore, UploaderSettings


class FakeGridIn:
    """Upload stream that commits to the bucket when closed without error."""

    def __init__(self, bucket: "FakeGridFSBucket", filename: str, metadata: dict | None):
        self._bucket = bucket
        self._filename = filename
        self._metadata = metadata
        self._chunks: list[bytes] = []
        self.closed = False

    def write(self, data: bytes) -> None:
        self._chunks.append(bytes(data))

    def close(self) -> None:
        self._bucket.commit(self._filename, b"".join(self._chunks), self._metadata)
        self.closed = True

    def abort(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        else:
            self.abort()
        return False


class FakeGridOut:
    """Download stream over one stored revision."""

    def __init__(self, record: dict):
        self._file = record
        self._id = record["_id"]
        self.filename = record["filename"]
        self.metadata = record["metadata"]
        self._data = record["data"]
        self.closed = False

    def __getattr__(self, name):
        # Extra files-document fields are exposed as attributes, like GridOut
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._file[name]
        except KeyError:
            raise AttributeError(name) from None

    def read(self) -> bytes:
        return self._data

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class FakeGridFSBucket:
    """Subset of gridfs.GridFSBucket used by GridFSUploadStore."""

    def __init__(self):
        self.files: list[dict] = []
        self.opened_streams: list[FakeGridIn | FakeGridOut] = []
        self._ids = itertools.count(1)

    def commit(self, filename: str, data: bytes, metadata: dict | None, **fields) -> None:
        self.files.append(
            {"_id": next(self._ids), "filename": filename, "data": data, "metadata": metadata, **fields}
        )

    def open_upload_stream(self, filename: str, metadata: dict | None = None) -> FakeGridIn:
        stream = FakeGridIn(self, filename, metadata)
        self.opened_streams.append(stream)
        return stream

    def open_download_stream_by_name(self, filename: str) -> FakeGridOut:
        revisions = [f for f in self.files if f["filename"] == filename]
        if not revisions:
            raise NoFile(f"no version -1 for filename {filename!r}")
        stream = FakeGridOut(revisions[-1])
        self.opened_streams.append(stream)
        return stream

    def find(self, filter: dict, limit: int = 0):
        matches = [FakeGridOut(f) for f in self.files if f["filename"] == filter["filename"]]
        return matches[:limit] if limit else matches

    def delete(self, file_id) -> None:
        before = len(self.files)
        self.files = [f for f in self.files if f["_id"] != file_id]
        if len(self.files) == before:
            raise NoFile(f"File {file_id!r} not found")


@pytest.fixture
def uploader():
    """Uploader configured like a local, unauthenticated MongoDB."""
    return UploaderSettings(
        grid_fs_host="localhost",
        grid_fs_port=27017,
        grid_fs_database="test",
        filename="bar.txt",
    )


@pytest.fixture
def fake_bucket():
    return FakeGridFSBucket()


@pytest.fixture
def mock_mongo(fake_bucket):
    """Patch MongoClient and GridFSBucket in the connection module."""
    with patch("upload_store.connection.MongoClient") as mock_client_cls, \
            patch("upload_store.connection.GridFSBucket") as mock_bucket_cls:
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client
        mock_bucket_cls.return_value = fake_bucket
        yield mock_client_cls, mock_client, mock_bucket_cls


@pytest.fixture
def store(uploader, mock_mongo):
    """GridFS upload store backed by the fake bucket."""
    return GridFSUploadStore(uploader)


class UploadedFile:
    """File-like upload input exposing content_type and read()."""

    def __init__(self, content: bytes, content_type: str | None):
        self.content_type = content_type
        self._content = content

    def read(self) -> bytes:
        return self._content


@pytest.fixture
def uploaded_file():
    return UploadedFile(b"this is stuff", "application/xml")
