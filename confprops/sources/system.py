"""Process-wide system properties and their configuration source."""

from __future__ import annotations

import os
import platform
import sys
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Optional

from ..core.types import FlatMapping, FreshnessToken


def _interpreter_properties() -> Dict[str, str]:
    return {
        "python.version": platform.python_version(),
        "python.implementation": platform.python_implementation(),
        "python.executable": sys.executable or "",
        "os.name": platform.system(),
        "os.version": platform.release(),
        "os.arch": platform.machine(),
        "file.encoding": sys.getfilesystemencoding(),
        "file.separator": os.sep,
        "path.separator": os.pathsep,
        "line.separator": os.linesep,
        "user.home": str(Path.home()),
        "user.dir": os.getcwd(),
    }


class SystemProperties:
    """Mutable, thread-safe registry of process properties.

    Seeded with facts about the running interpreter. Every change bumps
    :attr:`version`.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = threading.Lock()
        self._values: Dict[str, str] = (
            _interpreter_properties() if initial is None else dict(initial)
        )
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = str(value)
            self._version += 1

    def unset(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._version += 1

    def snapshot(self) -> FlatMapping:
        with self._lock:
            return MappingProxyType(dict(self._values))


_system_properties = SystemProperties()


def system_properties() -> SystemProperties:
    """Return the process-wide system properties registry."""
    return _system_properties


def get_system_property(key: str, default: Optional[str] = None) -> Optional[str]:
    value = _system_properties.get(key)
    return default if value is None else value


def set_system_property(key: str, value: str) -> None:
    _system_properties.set(key, value)


def clear_system_property(key: str) -> None:
    _system_properties.unset(key)


class SystemPropertiesSource:
    """Configuration source over a :class:`SystemProperties` registry.

    The source id is ignored; the whole registry is one source.
    """

    def __init__(self, properties: Optional[SystemProperties] = None):
        self.properties = properties or _system_properties

    def read(self, source_id: str) -> FlatMapping:
        return self.properties.snapshot()

    def token(self, source_id: str) -> FreshnessToken:
        return self.properties.version
