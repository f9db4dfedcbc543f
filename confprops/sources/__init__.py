"""Configuration source implementations.

This package contains the readers a declaration can be bound to:
properties files (on a search path or inside packages), the process
system properties registry, and environment variables.
"""

from .environ import EnvironmentSource
from .properties_file import PropertiesFileSource, parse_properties
from .system import (
    SystemProperties,
    SystemPropertiesSource,
    clear_system_property,
    get_system_property,
    set_system_property,
    system_properties,
)

__all__ = [
    "EnvironmentSource",
    "PropertiesFileSource",
    "parse_properties",
    "SystemProperties",
    "SystemPropertiesSource",
    "clear_system_property",
    "get_system_property",
    "set_system_property",
    "system_properties",
]
