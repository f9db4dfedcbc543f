"""Declarations: typed, defaulted bindings to one key of one source."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from ..sources.environ import EnvironmentSource
from ..sources.properties_file import PropertiesFileSource
from ..sources.system import SystemPropertiesSource
from .declaration_cache import CachePolicy, DeclarationCache, make_cache
from .decoders import Decoder
from .resource_cache import ResourceCache, default_resource_cache
from .source import ENV_SOURCE_ID, SYSTEM_SOURCE_ID, SourceKind, SourceReader

T = TypeVar("T")

_READERS = {
    SourceKind.FILE: PropertiesFileSource(),
    SourceKind.SYSTEM: SystemPropertiesSource(),
    SourceKind.ENV: EnvironmentSource(),
}


def reader_for(kind: SourceKind) -> SourceReader:
    """Return the process default reader for a source kind."""
    return _READERS[SourceKind(kind)]


@dataclass(frozen=True, eq=False)
class Declaration(Generic[T]):
    """A configuration value bound to a key of a source.

    Attributes:
        source_id: Identifier of the source the value is read from.
        key: Key (or key prefix for map decoders) inside the source.
        default: Value returned when the key is not configured.
        decoder: Decoder producing the typed value.
        reader: Reader resolving the source.
        cache: Cache owned by this declaration.
    """

    source_id: str
    key: str
    default: T
    decoder: Decoder[T]
    reader: SourceReader = field(repr=False)
    cache: DeclarationCache[T] = field(repr=False, compare=False)

    @property
    def policy(self) -> CachePolicy:
        return self.cache.policy

    def get(self) -> T:
        """Resolve the value, falling back to the default.

        Raises:
            ResourceUnavailableError: If the source cannot be read.
            StaleCheckFailedError: If the source's freshness cannot be checked.
            DecodeError: If the configured value cannot be converted.
        """
        value = self.cache.get(self.source_id, self.key, self.reader, self.decoder)
        return self.default if value is None else value


def declare(
    source_id: str,
    key: str,
    default: T,
    decoder: Decoder[T],
    *,
    policy: CachePolicy = CachePolicy.CACHE_FOREVER,
    reader: Optional[SourceReader] = None,
    resources: Optional[ResourceCache] = None,
) -> Declaration[T]:
    """Declare a configuration value.

    Args:
        source_id: Identifier of the source.
        key: Key (or key prefix) to decode.
        default: Value used when the key is not configured.
        decoder: Decoder producing the typed value.
        policy: Caching policy of this declaration.
        reader: Reader for the source; defaults to the properties file reader.
        resources: Resource cache to share; defaults to the process-wide one.

    Returns:
        Declaration bound to the source.
    """
    return Declaration(
        source_id=source_id,
        key=key,
        default=default,
        decoder=decoder,
        reader=reader or reader_for(SourceKind.FILE),
        cache=make_cache(policy, resources or default_resource_cache()),
    )


def define_uncached(
    file_name: str, key: str, default: T, decoder: Decoder[T], **kwargs
) -> Declaration[T]:
    """Declare a file value that is re-read on every access."""
    return declare(file_name, key, default, decoder, policy=CachePolicy.NO_CACHE, **kwargs)


def define(
    file_name: str, key: str, default: T, decoder: Decoder[T], **kwargs
) -> Declaration[T]:
    """Declare a file value read on first access and kept in memory."""
    return declare(
        file_name, key, default, decoder, policy=CachePolicy.CACHE_FOREVER, **kwargs
    )


def define_refreshing(
    file_name: str, key: str, default: T, decoder: Decoder[T], **kwargs
) -> Declaration[T]:
    """Declare a file value kept in memory and reloaded when the file changes."""
    return declare(
        file_name, key, default, decoder, policy=CachePolicy.CACHE_ON_CHANGE, **kwargs
    )


def define_system(
    key: str,
    default: T,
    decoder: Decoder[T],
    *,
    reader: Optional[SourceReader] = None,
    resources: Optional[ResourceCache] = None,
) -> Declaration[T]:
    """Declare a value read from the system properties."""
    return declare(
        SYSTEM_SOURCE_ID,
        key,
        default,
        decoder,
        reader=reader or reader_for(SourceKind.SYSTEM),
        resources=resources,
    )


def define_env(
    key: str,
    default: T,
    decoder: Decoder[T],
    *,
    reader: Optional[SourceReader] = None,
    resources: Optional[ResourceCache] = None,
) -> Declaration[T]:
    """Declare a value read from the environment."""
    return declare(
        ENV_SOURCE_ID,
        key,
        default,
        decoder,
        reader=reader or reader_for(SourceKind.ENV),
        resources=resources,
    )
