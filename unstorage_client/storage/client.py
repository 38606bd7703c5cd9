"""Async client for key-value storage served over the unstorage HTTP protocol."""

import httpx

from functools import lru_cache
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from unstorage_client.config.settings import Settings, settings as default_settings
from unstorage_client.config.logger import get_logger
from .exceptions import (
    ConfigError,
    DecodeError,
    EncodeError,
    NetworkError,
    ResponseStatusError,
)
from .headers import TTL_HEADER, effective_headers, validate_headers
from .schemas import Meta, TransactionOptions

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"

_ANY_ADAPTER = TypeAdapter(Any)
_KEYS_ADAPTER = TypeAdapter(List[str])


@lru_cache(maxsize=128)
def _cached_adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def _adapter_for(model: Any) -> TypeAdapter:
    if model is None:
        return _ANY_ADAPTER
    try:
        return _cached_adapter(model)
    except TypeError:
        # unhashable type expressions
        return TypeAdapter(model)


def parse_mtime(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 2822 Last-Modified value into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if parsed.tzinfo is None:
        # "-0000" means UTC with unknown local zone
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        return None


def parse_ttl(value: Optional[str]) -> Optional[timedelta]:
    """Parse an x-ttl value (non-negative integer seconds)."""
    if value is None:
        return None
    value = value.strip()
    if not value.isascii() or not value.isdigit():
        return None
    try:
        return timedelta(seconds=int(value))
    except OverflowError:
        return None


class StorageClient:
    """
    Client for a remote unstorage HTTP server.

    Each operation sends exactly one request to ``{base_url}/{key}``
    (or ``{base_url}/{base}:`` for key listing and clear). A non-2xx
    answer on a read means the key is absent; read methods return
    None / False for it instead of raising.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        raise_on_error_status: bool = False,
    ):
        self._base_url = base_url
        self._headers = validate_headers(headers or {})
        self._raise_on_error_status = raise_on_error_status
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StorageClient":
        """Build a client from Settings (the module-level settings by default)."""
        config = config or default_settings
        logger.info(f"Creating storage client for {config.base_url}")
        return cls(
            config.base_url,
            config.headers,
            timeout=config.timeout,
            transport=transport,
            raise_on_error_status=config.raise_on_error_status,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def raise_on_error_status(self) -> bool:
        return self._raise_on_error_status

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "StorageClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ========================================================================
    # REQUEST HELPERS
    # ========================================================================

    def _item_url(self, key: str) -> str:
        return f"{self._base_url.rstrip('/')}/{key}"

    def _base_key_url(self, base: str) -> str:
        return f"{self._base_url.rstrip('/')}/{base}:"

    def build_headers(
        self,
        topts: Optional[TransactionOptions] = None,
        base: Optional[Mapping[str, str]] = None,
        override: Optional[Mapping[str, str]] = None,
    ) -> httpx.Headers:
        """
        Headers for one request.

        ``base`` headers (e.g. Content-Type) can be overridden by the
        caller; ``override`` headers (e.g. accept for raw reads) cannot.
        """
        headers = httpx.Headers(base or {})
        for name, value in effective_headers(self._headers, topts).items():
            headers[name] = value
        for name, value in (override or {}).items():
            headers[name] = value
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        content: Optional[Any] = None,
    ) -> httpx.Response:
        try:
            response = await self.client.request(method, url, headers=headers, content=content)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.error(f"Invalid storage URL {url}: {e}")
            raise ConfigError(f"Invalid storage URL {url!r}: {e}") from e
        except httpx.DecodingError as e:
            logger.error(f"{method} {url} returned an undecodable body: {e!r}")
            raise DecodeError(f"{method} {url} returned an undecodable body: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"{method} {url} failed: {e!r}")
            raise NetworkError(f"{method} {url} failed: {e}") from e
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def _is_absent(self, response: httpx.Response) -> bool:
        """True when a read response means "no such key"."""
        if response.is_success:
            return False
        if self._raise_on_error_status and response.status_code != 404:
            self._raise_status(response)
        logger.debug(f"Key absent: {response.request.url} ({response.status_code})")
        return True

    def _check_write(self, response: httpx.Response) -> None:
        if self._raise_on_error_status and not response.is_success:
            self._raise_status(response)

    @staticmethod
    def _raise_status(response: httpx.Response):
        request = response.request
        logger.error(f"{request.method} {request.url} returned {response.status_code}")
        raise ResponseStatusError(response.status_code, str(request.url), request.method)

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def has_item(self, key: str, topts: Optional[TransactionOptions] = None) -> bool:
        """
        Check if an item exists.

        Args:
            key: Storage key
            topts: Per-call headers / TTL

        Returns:
            True on a 2xx answer to HEAD, False otherwise
        """
        response = await self._send("HEAD", self._item_url(key), self.build_headers(topts))
        return not self._is_absent(response)

    async def get_item(self, key: str, topts: Optional[TransactionOptions] = None) -> Optional[str]:
        """
        Get an item as text.

        Returns:
            Response body, or None if the key is absent
        """
        response = await self._send("GET", self._item_url(key), self.build_headers(topts))
        if self._is_absent(response):
            return None
        return response.text

    async def get_item_json(
        self,
        key: str,
        model: Any = None,
        topts: Optional[TransactionOptions] = None,
    ) -> Optional[Any]:
        """
        Get an item and decode its JSON body.

        Args:
            key: Storage key
            model: Target type (pydantic model, dataclass, List[int], ...).
                   Plain JSON values are returned when omitted.
            topts: Per-call headers / TTL

        Returns:
            Decoded value, or None if the key is absent

        Raises:
            DecodeError: body is not valid JSON for ``model``
        """
        response = await self._send("GET", self._item_url(key), self.build_headers(topts))
        if self._is_absent(response):
            return None
        adapter = _adapter_for(model)
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Failed to decode JSON for key '{key}': {e.error_count()} error(s)")
            raise DecodeError(f"Value of {key!r} is not valid JSON for {model or 'Any'}: {e}") from e

    async def get_item_raw(self, key: str, topts: Optional[TransactionOptions] = None) -> Optional[bytes]:
        """Get an item in binary mode (``accept: application/octet-stream``)."""
        headers = self.build_headers(topts, override={"accept": BINARY_CONTENT_TYPE})
        response = await self._send("GET", self._item_url(key), headers)
        if self._is_absent(response):
            return None
        return response.content

    async def get_meta(self, key: str, topts: Optional[TransactionOptions] = None) -> Optional[Meta]:
        """
        Get metadata (mtime and ttl) of an item from HEAD response headers.

        Either field is None when its header is missing or unparsable.
        """
        response = await self._send("HEAD", self._item_url(key), self.build_headers(topts))
        if self._is_absent(response):
            return None
        return Meta(
            mtime=parse_mtime(response.headers.get("last-modified")),
            ttl=parse_ttl(response.headers.get(TTL_HEADER)),
        )

    async def get_keys(self, base: str, topts: Optional[TransactionOptions] = None) -> Optional[List[str]]:
        """
        List keys under a namespace (``GET {base_url}/{base}:``).

        Returns:
            Keys in server order, or None on a non-2xx answer

        Raises:
            DecodeError: body is not a JSON array of strings
        """
        response = await self._send("GET", self._base_key_url(base), self.build_headers(topts))
        if self._is_absent(response):
            return None
        try:
            return _KEYS_ADAPTER.validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Failed to decode key list for '{base}': {e.error_count()} error(s)")
            raise DecodeError(f"Key list of {base!r} is not a JSON array of strings: {e}") from e

    # ========================================================================
    # WRITE OPERATIONS
    # ========================================================================

    async def set_item(self, key: str, value: str, topts: Optional[TransactionOptions] = None) -> None:
        """Set an item from a string, sent as-is with ``Content-Type: application/json``."""
        if not isinstance(value, str):
            raise EncodeError(f"set_item expects str, got {type(value).__name__}")
        headers = self.build_headers(topts, base={"Content-Type": JSON_CONTENT_TYPE})
        response = await self._send("PUT", self._item_url(key), headers, content=value)
        self._check_write(response)

    async def set_item_raw(self, key: str, value: bytes, topts: Optional[TransactionOptions] = None) -> None:
        """Set an item in binary mode."""
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError(f"set_item_raw expects bytes, got {type(value).__name__}")
        headers = self.build_headers(topts, base={"Content-Type": BINARY_CONTENT_TYPE})
        response = await self._send("PUT", self._item_url(key), headers, content=bytes(value))
        self._check_write(response)

    async def set_item_json(self, key: str, value: Any, topts: Optional[TransactionOptions] = None) -> None:
        """
        Serialize a value to JSON and set it.

        Accepts anything pydantic can serialize: models, dataclasses,
        dicts, lists, scalars, datetimes.

        Raises:
            EncodeError: value cannot be serialized; nothing is sent
        """
        try:
            body = to_json(value)
        except PydanticSerializationError as e:
            logger.error(f"Failed to encode value for key '{key}': {e}")
            raise EncodeError(f"Value for {key!r} is not JSON serializable: {e}") from e
        headers = self.build_headers(topts, base={"Content-Type": JSON_CONTENT_TYPE})
        response = await self._send("PUT", self._item_url(key), headers, content=body)
        self._check_write(response)

    async def remove_item(self, key: str, topts: Optional[TransactionOptions] = None) -> None:
        """Remove an item."""
        response = await self._send("DELETE", self._item_url(key), self.build_headers(topts))
        self._check_write(response)

    async def clear(self, base: str, topts: Optional[TransactionOptions] = None) -> None:
        """Remove every item under a namespace (``DELETE {base_url}/{base}:``)."""
        response = await self._send("DELETE", self._base_key_url(base), self.build_headers(topts))
        self._check_write(response)
