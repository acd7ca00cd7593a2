# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Uploader settings consumed by the upload stores."""

import os
from dataclasses import dataclass


def _default(value, env_var: str, fallback=None):
    """Helper to pick an explicit value, then env var, then fallback."""
    if value is not None:
        return value
    return os.getenv(env_var) or fallback


@dataclass(frozen=True)
class UploaderSettings:
    """Connection settings and path resolution for an upload store.

    Any object exposing the same ``grid_fs_*`` accessors and a
    ``store_path(identifier=None)`` method can be used in its place.

    Attributes:
        grid_fs_host: MongoDB host
        grid_fs_port: MongoDB port
        grid_fs_database: Database holding the GridFS bucket
        grid_fs_username: Optional username (authentication only if a password is set too)
        grid_fs_password: Optional password
        grid_fs_access_url: Optional URL prefix under which stored files are served
        store_dir: Directory prefix for logical paths
        filename: Default filename used when ``store_path`` gets no identifier
    """
    grid_fs_host: str = "localhost"
    grid_fs_port: int = 27017
    grid_fs_database: str = "uploads"
    grid_fs_username: str | None = None
    grid_fs_password: str | None = None
    grid_fs_access_url: str | None = None
    store_dir: str = "uploads"
    filename: str | None = None

    @classmethod
    def from_env(
        cls,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        username: str | None = None,
        password: str | None = None,
        access_url: str | None = None,
        store_dir: str | None = None,
    ) -> "UploaderSettings":
        """Build settings from explicit values, falling back to environment variables.

        Environment variables: GRID_FS_HOST, GRID_FS_PORT, GRID_FS_DATABASE,
        GRID_FS_USERNAME, GRID_FS_PASSWORD, GRID_FS_ACCESS_URL, UPLOAD_STORE_DIR.

        Raises:
            ValueError: If GRID_FS_PORT is not an integer
        """
        raw_port = _default(port, "GRID_FS_PORT", 27017)
        try:
            resolved_port = int(raw_port)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid GridFS port: {raw_port!r}") from e

        return cls(
            grid_fs_host=_default(host, "GRID_FS_HOST", "localhost"),
            grid_fs_port=resolved_port,
            grid_fs_database=_default(database, "GRID_FS_DATABASE", "uploads"),
            grid_fs_username=_default(username, "GRID_FS_USERNAME"),
            grid_fs_password=_default(password, "GRID_FS_PASSWORD"),
            grid_fs_access_url=_default(access_url, "GRID_FS_ACCESS_URL"),
            store_dir=_default(store_dir, "UPLOAD_STORE_DIR", "uploads"),
        )

    def store_path(self, identifier: str | None = None) -> str:
        """Resolve the logical path for a file.

        Args:
            identifier: Filename to store under; defaults to ``filename``

        Returns:
            ``store_dir`` and the filename joined with "/"

        Raises:
            ValueError: If neither identifier nor filename is set
        """
        name = identifier if identifier is not None else self.filename
        if not name:
            raise ValueError("A filename is required to resolve a store path")
        if not self.store_dir:
            return name
        return f"{self.store_dir.rstrip('/')}/{name}"
