"""Confprops - typed, cached configuration properties.

Declare typed values bound to keys of properties files, system
properties or environment variables, and resolve them through a
per-declaration cache layered over a shared resource cache.
"""

from .core import decoders
from .core.declaration import (
    Declaration,
    declare,
    define,
    define_env,
    define_refreshing,
    define_system,
    define_uncached,
)
from .core.declaration_cache import CachePolicy
from .core.errors import (
    ConfpropsError,
    DecodeError,
    ResourceUnavailableError,
    StaleCheckFailedError,
)
from .core.loader import ConfigLoader
from .core.resource_cache import ResourceCache, default_resource_cache

__all__ = [
    "decoders",
    "Declaration",
    "declare",
    "define",
    "define_env",
    "define_refreshing",
    "define_system",
    "define_uncached",
    "CachePolicy",
    "ConfpropsError",
    "DecodeError",
    "ResourceUnavailableError",
    "StaleCheckFailedError",
    "ConfigLoader",
    "ResourceCache",
    "default_resource_cache",
]
