"""Request header validation and merging."""

import re
from typing import Dict, Mapping, Optional

from .exceptions import ConfigError
from .schemas import TransactionOptions

TTL_HEADER = "x-ttl"

# RFC 9110 token: 1*tchar
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# Visible ASCII, space and HTAB; no CR, LF, NUL or other controls
_VALUE_RE = re.compile(r"[\t\x20-\x7e]*")


def validate_header(name: str, value: str) -> None:
    """Raise ConfigError unless name is an HTTP token and value is a legal field value."""
    if not isinstance(name, str) or not _TOKEN_RE.fullmatch(name):
        raise ConfigError(f"Invalid header name: {name!r}")
    if not isinstance(value, str) or not _VALUE_RE.fullmatch(value):
        raise ConfigError(f"Invalid value for header {name!r}")


def validate_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Validate every header and return a plain dict copy."""
    validated = {}
    for name, value in headers.items():
        validate_header(name, value)
        validated[name] = value
    return validated


def effective_headers(
    default_headers: Mapping[str, str],
    topts: Optional[TransactionOptions] = None,
) -> Dict[str, str]:
    """
    Merge the headers for one request.

    Order, later wins: default headers, x-ttl derived from topts.ttl,
    topts.headers. Keys are kept exactly as supplied.

    Raises:
        ConfigError: if any resulting header name or value is invalid.
    """
    headers = dict(default_headers)
    if topts is not None:
        if topts.ttl is not None:
            headers[TTL_HEADER] = str(topts.ttl)
        if topts.headers:
            headers.update(topts.headers)
    return validate_headers(headers)
