"""Storage module: StorageClient and its request/response models."""

from .client import StorageClient
from .exceptions import (
    ConfigError,
    DecodeError,
    EncodeError,
    NetworkError,
    ResponseStatusError,
    StorageError,
)
from .headers import effective_headers
from .schemas import Meta, TransactionOptions

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
