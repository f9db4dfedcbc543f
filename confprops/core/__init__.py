from .declaration import (
    Declaration,
    declare,
    define,
    define_env,
    define_refreshing,
    define_system,
    define_uncached,
)
from .declaration_cache import CachePolicy, DeclarationCache
from .errors import (
    ConfpropsError,
    DecodeError,
    ResourceUnavailableError,
    StaleCheckFailedError,
)
from .resource_cache import ResourceCache, ResourcePolicy, default_resource_cache
from .source import SourceKind, SourceReader

__all__ = [
    "Declaration",
    "declare",
    "define",
    "define_env",
    "define_refreshing",
    "define_system",
    "define_uncached",
    "CachePolicy",
    "DeclarationCache",
    "ConfpropsError",
    "DecodeError",
    "ResourceUnavailableError",
    "StaleCheckFailedError",
    "ResourceCache",
    "ResourcePolicy",
    "default_resource_cache",
    "SourceKind",
    "SourceReader",
]
