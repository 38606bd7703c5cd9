"""Errors raised by the storage client.

A missing key is not an error: read operations return None for it.
"""

from typing import Optional


class StorageError(Exception):
    """Base class for every error raised by StorageClient."""


class ConfigError(StorageError):
    """Invalid caller configuration (header name/value, base URL)."""


class NetworkError(StorageError):
    """Transport failure: connection refused, DNS failure, timeout."""


class ResponseStatusError(NetworkError):
    """Non-success status, raised only when raise_on_error_status is enabled."""

    def __init__(self, status_code: int, url: str, method: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        self.method = method
        prefix = f"{method} " if method else ""
        super().__init__(f"{prefix}{url} returned status {status_code}")


class DecodeError(StorageError):
    """Response body could not be decoded into the requested type."""


class EncodeError(StorageError):
    """Value could not be serialized for the wire."""
