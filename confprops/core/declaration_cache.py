"""Per-declaration caches of decoded values."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, Optional, TypeVar, cast

import structlog

from .decoders import Decoder
from .resource_cache import ResourceCache
from .source import SourceReader
from .types import FreshnessToken

T = TypeVar("T")

logger = structlog.get_logger(__name__)

_MISSING = object()


class CachePolicy(str, Enum):
    """Caching policy of a single declaration."""

    NO_CACHE = "no-cache"
    CACHE_FOREVER = "cache-forever"
    CACHE_ON_CHANGE = "cache-on-change"


class DeclarationCache(ABC, Generic[T]):
    """Cache of one declaration's decoded value.

    Instances are owned by exactly one declaration and sit on top of a
    shared :class:`ResourceCache`.
    """

    policy: CachePolicy

    def __init__(self, resources: ResourceCache):
        self.resources = resources

    @abstractmethod
    def get(
        self, source_id: str, key: str, reader: SourceReader, decoder: Decoder[T]
    ) -> Optional[T]:
        """Resolve the decoded value of ``key`` in ``source_id``.

        Args:
            source_id: Identifier of the source.
            key: Key (or prefix) handed to the decoder.
            reader: Reader able to resolve the source.
            decoder: Decoder producing the typed value.

        Returns:
            Decoded value, or None if the key is not configured.
        """


class NoCache(DeclarationCache[T]):
    policy = CachePolicy.NO_CACHE

    def get(
        self, source_id: str, key: str, reader: SourceReader, decoder: Decoder[T]
    ) -> Optional[T]:
        return decoder.parse(self.resources.fetch(source_id, reader), key)


class MemoryCache(DeclarationCache[T]):
    """Decodes on first use and keeps the result for good."""

    policy = CachePolicy.CACHE_FOREVER

    def __init__(self, resources: ResourceCache):
        super().__init__(resources)
        self._lock = threading.Lock()
        self._value: object = _MISSING

    def get(
        self, source_id: str, key: str, reader: SourceReader, decoder: Decoder[T]
    ) -> Optional[T]:
        value = self._value
        if value is not _MISSING:
            return cast(Optional[T], value)
        with self._lock:
            if self._value is _MISSING:
                mapping = self.resources.fetch_once(source_id, reader)
                self._value = decoder.parse(mapping, key)
            return cast(Optional[T], self._value)


class RefreshCache(DeclarationCache[T]):
    """Re-decodes whenever the source's freshness token moves.

    A newly decoded None replaces a previously cached value.
    """

    policy = CachePolicy.CACHE_ON_CHANGE

    def __init__(self, resources: ResourceCache):
        super().__init__(resources)
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._token: Optional[FreshnessToken] = None

    def get(
        self, source_id: str, key: str, reader: SourceReader, decoder: Decoder[T]
    ) -> Optional[T]:
        with self._lock:
            snapshot = self.resources.fetch_if_changed(
                source_id, reader, seen=self._token
            )
            if snapshot is not None:
                value = decoder.parse(snapshot.mapping, key)
                if self._token is not None:
                    logger.debug("declaration_refreshed", source_id=source_id, key=key)
                self._value, self._token = value, snapshot.token
            return self._value


_POLICIES = {
    CachePolicy.NO_CACHE: NoCache,
    CachePolicy.CACHE_FOREVER: MemoryCache,
    CachePolicy.CACHE_ON_CHANGE: RefreshCache,
}


def make_cache(policy: CachePolicy, resources: ResourceCache) -> DeclarationCache:
    """Create a fresh declaration cache for ``policy``."""
    return _POLICIES[CachePolicy(policy)](resources)
