"""Source protocol for key-value configuration sources."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from .types import FlatMapping, FreshnessToken

SYSTEM_SOURCE_ID = "property/system"
ENV_SOURCE_ID = "property/env"


class SourceKind(str, Enum):
    """Kinds of sources a declaration can be bound to."""

    FILE = "file"
    SYSTEM = "system"
    ENV = "env"


class SourceReader(Protocol):
    """Protocol defining the interface for configuration sources.

    Readers hold no cache of their own; every call reflects the
    source as it is at that moment.
    """

    def read(self, source_id: str) -> FlatMapping:
        """Read the current key-value pairs of a source.

        Args:
            source_id: Identifier of the source.

        Returns:
            Read-only flat mapping of the source contents.

        Raises:
            ResourceUnavailableError: If the source cannot be resolved,
                read or parsed.
        """
        ...

    def token(self, source_id: str) -> FreshnessToken:
        """Compute the freshness token of a source.

        Args:
            source_id: Identifier of the source.

        Returns:
            Hashable token that changes whenever the source changes.

        Raises:
            StaleCheckFailedError: If the modification metadata of the
                source cannot be obtained.
        """
        ...
