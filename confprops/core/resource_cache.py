"""Process-wide cache of flat key-value mappings keyed by source id."""

from __future__ import annotations

import threading
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional, Tuple

import structlog

from .errors import ConfpropsError, ResourceUnavailableError, StaleCheckFailedError
from .source import SourceReader
from .types import FlatMapping, FreshnessToken, Snapshot

logger = structlog.get_logger(__name__)


class ResourcePolicy(str, Enum):
    """How a consumer wants a source's mapping to be cached."""

    NO_CACHE = "no-cache"
    CACHE_FOREVER = "cache-forever"
    CACHE_ON_CHANGE = "cache-on-change"


def _read(reader: SourceReader, source_id: str) -> FlatMapping:
    try:
        mapping = reader.read(source_id)
    except ConfpropsError:
        raise
    except (OSError, ValueError) as e:
        raise ResourceUnavailableError(source_id, str(e)) from e
    logger.debug("resource_read", source_id=source_id, keys=len(mapping))
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


def _token(reader: SourceReader, source_id: str) -> FreshnessToken:
    try:
        token = reader.token(source_id)
    except ConfpropsError:
        raise
    except (OSError, ValueError) as e:
        raise StaleCheckFailedError(source_id, str(e)) from e
    if token is None:
        raise StaleCheckFailedError(source_id, "reader returned no token")
    return token


class ResourceCache:
    """Shared cache of source mappings.

    One instance is meant to live for the whole process and be handed
    to every declaration; entries are replaced in place and never
    evicted. Reads of a given source are serialized per policy so that
    concurrent first access triggers a single read.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._source_locks: Dict[Tuple[ResourcePolicy, str], threading.Lock] = {}
        self._mappings: Dict[str, FlatMapping] = {}
        self._snapshots: Dict[str, Snapshot] = {}

    def _source_lock(self, policy: ResourcePolicy, source_id: str) -> threading.Lock:
        with self._lock:
            lock = self._source_locks.get((policy, source_id))
            if lock is None:
                lock = self._source_locks[(policy, source_id)] = threading.Lock()
            return lock

    def fetch(self, source_id: str, reader: SourceReader) -> FlatMapping:
        """Read a source without caching.

        Args:
            source_id: Identifier of the source.
            reader: Reader able to resolve the source.

        Returns:
            Freshly read mapping.
        """
        return _read(reader, source_id)

    def fetch_once(self, source_id: str, reader: SourceReader) -> FlatMapping:
        """Return the stored mapping of a source, reading it at most once.

        A failed read stores nothing, so the next call reads again.

        Args:
            source_id: Identifier of the source.
            reader: Reader able to resolve the source.

        Returns:
            The mapping stored for ``source_id``.
        """
        mapping = self._mappings.get(source_id)
        if mapping is not None:
            return mapping
        with self._source_lock(ResourcePolicy.CACHE_FOREVER, source_id):
            mapping = self._mappings.get(source_id)
            if mapping is None:
                mapping = _read(reader, source_id)
                self._mappings[source_id] = mapping
                logger.debug("resource_cached", source_id=source_id)
            return mapping

    def fetch_if_changed(
        self,
        source_id: str,
        reader: SourceReader,
        seen: Optional[FreshnessToken] = None,
    ) -> Optional[Snapshot]:
        """Return a snapshot of a source unless it is unchanged for the caller.

        The token of the source is computed on every call. When it equals
        ``seen`` nothing is returned and the caller keeps what it already
        decoded. Otherwise the shared snapshot is returned, re-reading the
        source only if its token moved since the snapshot was taken.

        Args:
            source_id: Identifier of the source.
            reader: Reader able to resolve the source.
            seen: Token of the snapshot the caller last consumed, if any.

        Returns:
            Snapshot with the current mapping, or None for "no update".
        """
        with self._source_lock(ResourcePolicy.CACHE_ON_CHANGE, source_id):
            token = _token(reader, source_id)
            if seen is not None and token == seen:
                return None
            snapshot = self._snapshots.get(source_id)
            if snapshot is None or snapshot.token != token:
                snapshot = Snapshot(token=token, mapping=_read(reader, source_id))
                self._snapshots[source_id] = snapshot
                logger.info("resource_refreshed", source_id=source_id)
            return snapshot

    def get(
        self, policy: ResourcePolicy, source_id: str, reader: SourceReader
    ) -> Optional[FlatMapping]:
        """Fetch a source according to ``policy``.

        For ``CACHE_ON_CHANGE`` every call that sees the same token as the
        previous call through this method returns None.
        """
        policy = ResourcePolicy(policy)
        if policy is ResourcePolicy.NO_CACHE:
            return self.fetch(source_id, reader)
        if policy is ResourcePolicy.CACHE_FOREVER:
            return self.fetch_once(source_id, reader)
        previous = self._snapshots.get(source_id)
        snapshot = self.fetch_if_changed(
            source_id, reader, seen=previous.token if previous else None
        )
        return snapshot.mapping if snapshot else None


_default_cache = ResourceCache()


def default_resource_cache() -> ResourceCache:
    """Return the process-wide resource cache."""
    return _default_cache
