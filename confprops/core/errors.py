"""Error types raised while resolving configuration values."""

from __future__ import annotations

from typing import Optional


class ConfpropsError(Exception):
    """Base class for all confprops errors."""


class ResourceUnavailableError(ConfpropsError, LookupError):
    """A source could not be resolved, read or parsed.

    Attributes:
        source_id: Identifier of the source that failed.
    """

    def __init__(self, source_id: str, reason: Optional[str] = None):
        self.source_id = source_id
        message = f"Failed to read properties source [{source_id}]"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StaleCheckFailedError(ConfpropsError):
    """The freshness token of a source could not be computed.

    Attributes:
        source_id: Identifier of the source that failed.
    """

    def __init__(self, source_id: str, reason: Optional[str] = None):
        self.source_id = source_id
        message = f"Failed to check modification of properties source [{source_id}]"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodeError(ConfpropsError, ValueError):
    """A present, non-empty value could not be converted.

    Attributes:
        key: Key whose value failed to decode.
        value: Raw string value.
    """

    def __init__(self, key: str, value: str, expected: str):
        self.key = key
        self.value = value
        self.expected = expected
        super().__init__(f"Cannot decode {key}={value!r} as {expected}")
