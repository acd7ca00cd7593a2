# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""MongoDB connection provider for the GridFS upload store."""

import logging
from typing import Any

from gridfs import GridFSBucket
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from .upload_store import UploadStoreAuthenticationError, UploadStoreConnectionError

logger = logging.getLogger(__name__)

# MongoDB server error code for rejected credentials
AUTHENTICATION_FAILED = 18


class GridFSConnection:
    """Lazily opened, cached connection to one MongoDB database and its GridFS bucket.

    The connection is owned by a single upload store. It is opened on first
    use and reused until ``disconnect`` is called. It performs no locking.
    """

    @classmethod
    def from_uploader(cls, uploader: Any, **kwargs) -> "GridFSConnection":
        """Create a GridFSConnection from an uploader's ``grid_fs_*`` accessors.

        Args:
            uploader: Object with grid_fs_host, grid_fs_port, grid_fs_database,
                      grid_fs_username and grid_fs_password attributes
            **kwargs: Additional connection options (bucket_name, MongoClient options)

        Returns:
            Configured, not yet connected GridFSConnection instance
        """
        return cls(
            host=getattr(uploader, "grid_fs_host", None),
            port=getattr(uploader, "grid_fs_port", None),
            database=getattr(uploader, "grid_fs_database", None),
            username=getattr(uploader, "grid_fs_username", None),
            password=getattr(uploader, "grid_fs_password", None),
            **kwargs,
        )

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        username: str | None = None,
        password: str | None = None,
        bucket_name: str = "fs",
        **client_options,
    ):
        """Initialize the connection settings. No network I/O happens here.

        Args:
            host: MongoDB host (required)
            port: MongoDB port (required)
            database: Database name (required)
            username: MongoDB username (optional)
            password: MongoDB password (optional)
            bucket_name: GridFS bucket (collection prefix), "fs" by default
            **client_options: Additional MongoClient options

        Raises:
            ValueError: If host, port or database is not provided
        """
        if not host:
            raise ValueError(
                "GridFS host is required. "
                "Provide the MongoDB server hostname or IP address."
            )
        if port is None:
            raise ValueError(
                "GridFS port is required. "
                "Provide the MongoDB server port number."
            )
        if not database:
            raise ValueError(
                "GridFS database is required. "
                "Provide the database name to use."
            )

        self.host = host
        self.port = int(port)
        self.database_name = database
        self.username = username
        self.password = password
        self.bucket_name = bucket_name
        self.client_options = client_options
        self.client: MongoClient | None = None
        self._database: Database | None = None
        self._bucket: GridFSBucket | None = None

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    def connect(self) -> None:
        """Connect to MongoDB and select the configured database.

        Authentication is attempted only when both username and password are
        set. A ping is issued so that network and credential problems surface
        here rather than on the first read or write. Calling connect on an
        open connection is a no-op.

        Raises:
            UploadStoreConnectionError: If the server cannot be reached
            UploadStoreAuthenticationError: If the credentials are rejected
        """
        if self.is_connected:
            return

        connection_params: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
        }
        if self.username and self.password:
            connection_params["username"] = self.username
            connection_params["password"] = self.password
            # Credentials belong to the selected database unless told otherwise
            if "authSource" not in self.client_options:
                connection_params["authSource"] = self.database_name
        connection_params.update(self.client_options)

        client = None
        try:
            client = MongoClient(**connection_params)
            client.admin.command("ping")
        except OperationFailure as e:
            self._close_quietly(client)
            if e.code == AUTHENTICATION_FAILED:
                logger.error("GridFSConnection: authentication failed for user %s", self.username)
                raise UploadStoreAuthenticationError(
                    f"Authentication failed for database {self.database_name}"
                ) from e
            logger.error("GridFSConnection: connection setup failed - %s", e, exc_info=True)
            raise UploadStoreConnectionError(
                f"Failed to set up MongoDB connection at {self.host}:{self.port}"
            ) from e
        except ConnectionFailure as e:
            self._close_quietly(client)
            logger.error("GridFSConnection: connection failed - %s", e, exc_info=True)
            raise UploadStoreConnectionError(f"Failed to connect to MongoDB at {self.host}:{self.port}") from e
        except PyMongoError as e:
            self._close_quietly(client)
            logger.error("GridFSConnection: unexpected error during connect - %s", e, exc_info=True)
            raise UploadStoreConnectionError(f"Unexpected error connecting to MongoDB: {str(e)}") from e

        self.client = client
        self._database = client[self.database_name]
        logger.info("GridFSConnection: connected to %s:%s/%s", self.host, self.port, self.database_name)

    def disconnect(self) -> None:
        """Close the client and drop the cached handles."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self._database = None
            self._bucket = None
            logger.info("GridFSConnection: disconnected")

    @property
    def database(self) -> Database:
        """Database handle, connecting on first access."""
        self.connect()
        return self._database

    @property
    def bucket(self) -> GridFSBucket:
        """GridFS bucket in the selected database, connecting on first access."""
        if self._bucket is None:
            self._bucket = GridFSBucket(self.database, bucket_name=self.bucket_name)
        return self._bucket

    @staticmethod
    def _close_quietly(client: MongoClient | None) -> None:
        if client is not None:
            client.close()

    def __repr__(self) -> str:
        return (
            f"GridFSConnection(host={self.host!r}, port={self.port!r}, "
            f"database={self.database_name!r}, bucket={self.bucket_name!r})"
        )
