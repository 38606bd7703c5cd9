"""Async client for key-value storage served over the unstorage HTTP protocol."""

from .storage import (
    ConfigError,
    DecodeError,
    EncodeError,
    Meta,
    NetworkError,
    ResponseStatusError,
    StorageClient,
    StorageError,
    TransactionOptions,
    effective_headers,
)

__version__ = "0.1.0"

__all__ = [
    "StorageClient",
    "TransactionOptions",
    "Meta",
    "effective_headers",
    "StorageError",
    "ConfigError",
    "NetworkError",
    "ResponseStatusError",
    "DecodeError",
    "EncodeError",
]
