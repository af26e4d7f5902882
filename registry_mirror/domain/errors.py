"""
Errors raised while synchronizing or reading a registry snapshot.
"""
from __future__ import annotations


class RegistryError(Exception):
    """Base class for all registry synchronization errors."""


class RegistryIOError(RegistryError):
    """A directory or file operation on the local snapshot failed."""


class DownloadError(RegistryError):
    """A remote resource could not be fetched."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage  # "metadata" or "archive"


class UnpackError(RegistryError):
    """The downloaded archive could not be unpacked or verified."""


class CatalogParseError(RegistryError, ValueError):
    """Persisted JSON/YAML data is not well-formed."""


class SnapshotNotFoundError(RegistryError, FileNotFoundError):
    """The snapshot metadata file does not exist."""
