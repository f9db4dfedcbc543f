"""Loader for confprops.yaml declaration files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
import yaml

from ..sources.properties_file import PropertiesFileSource
from .declaration import Declaration, declare, reader_for
from .declaration_cache import CachePolicy
from .decoders import decoder_for
from .resource_cache import ResourceCache
from .source import ENV_SOURCE_ID, SYSTEM_SOURCE_ID, SourceKind

CONFIG_FILE_NAME = "confprops.yaml"

logger = structlog.get_logger(__name__)

_DEFAULT_SOURCE_IDS = {
    SourceKind.SYSTEM: SYSTEM_SOURCE_ID,
    SourceKind.ENV: ENV_SOURCE_ID,
}
_ENTRY_FIELDS = {"source", "key", "type", "default", "cache", "kind", "delimiter"}


class ConfigLoader:
    """Handles loading and parsing of confprops.yaml files."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config loader.

        Args:
            config_path: Path to confprops.yaml file. If None, looks in current
                directory and parent directories.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(
        self, config_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        """Find the confprops.yaml file.

        Args:
            config_path: Explicit path to config file, or None to search.

        Returns:
            Path to config file if found, None otherwise.
        """
        if config_path is not None:
            path = Path(config_path)
            if path.exists():
                return path
            return None

        current = Path.cwd()
        for directory in (current, *current.parents):
            candidate = directory / CONFIG_FILE_NAME
            if candidate.exists():
                return candidate
        return None

    def load(self) -> Dict[str, Any]:
        """Load the configuration file.

        Returns:
            Parsed configuration dictionary, or empty dict if no config file.

        Raises:
            ValueError: If the config file is invalid YAML or not a mapping.
        """
        if self.config_path is None:
            return {}

        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(
                f"Invalid {CONFIG_FILE_NAME} at {self.config_path}: {e}"
            ) from e
        except OSError as e:
            logger.warning(
                "config_file_unreadable", path=str(self.config_path), error=str(e)
            )
            return {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid {CONFIG_FILE_NAME} at {self.config_path}: expected a mapping"
            )
        self._config = data
        return self._config

    def get_settings(self) -> Dict[str, Any]:
        return self.load().get("settings") or {}

    def search_path(self) -> Optional[List[Path]]:
        """Search path for properties files, relative to the config file.

        Returns:
            List of directories, or None when the file does not set one.
        """
        entries = self.get_settings().get("search_path")
        if entries is None:
            return None
        if isinstance(entries, str):
            entries = [entries]
        base = self.config_path.parent if self.config_path else Path.cwd()
        return [base / Path(entry) for entry in entries]

    def get_declarations(self) -> Dict[str, Dict[str, Any]]:
        declarations = self.load().get("declarations") or {}
        if not isinstance(declarations, dict):
            raise ValueError("'declarations' must be a mapping of name to entry")
        return declarations

    def parse_declaration(
        self,
        name: str,
        entry: Dict[str, Any],
        resources: Optional[ResourceCache] = None,
        file_reader: Optional[PropertiesFileSource] = None,
    ) -> Declaration[Any]:
        """Build a declaration from one YAML entry.

        Args:
            name: Declaration name, used as the key when none is given.
            entry: Raw entry from the ``declarations`` section.
            resources: Resource cache to bind to.
            file_reader: Reader used for ``kind: file`` entries.

        Returns:
            Declaration instance.

        Raises:
            ValueError: If the entry is malformed.
        """
        if not isinstance(entry, dict):
            raise ValueError(f"Declaration {name!r} must be a mapping")
        unknown = set(entry) - _ENTRY_FIELDS
        if unknown:
            raise ValueError(
                f"Declaration {name!r} has unknown fields: {', '.join(sorted(unknown))}"
            )

        kind = SourceKind(entry.get("kind", SourceKind.FILE.value))
        source_id = entry.get("source") or _DEFAULT_SOURCE_IDS.get(kind)
        if not source_id:
            raise ValueError(f"Declaration {name!r} must name a 'source'")

        decoder = decoder_for(str(entry.get("type", "string")), entry.get("delimiter"))
        policy = CachePolicy(entry.get("cache", CachePolicy.CACHE_FOREVER.value))
        if kind is SourceKind.FILE and file_reader is not None:
            reader = file_reader
        else:
            reader = reader_for(kind)

        return declare(
            str(source_id),
            str(entry.get("key", name)),
            entry.get("default"),
            decoder,
            policy=policy,
            reader=reader,
            resources=resources,
        )

    def load_declarations(
        self, resources: Optional[ResourceCache] = None
    ) -> Dict[str, Declaration[Any]]:
        """Build every declaration in the file.

        File declarations share one reader that uses the configured
        search path.

        Args:
            resources: Resource cache to bind to; defaults to the
                process-wide one.

        Returns:
            Declarations keyed by name, in file order.
        """
        search_path = self.search_path()
        file_reader = PropertiesFileSource(search_path) if search_path else None
        result: Dict[str, Declaration[Any]] = {}
        for name, entry in self.get_declarations().items():
            try:
                result[name] = self.parse_declaration(
                    name, entry, resources=resources, file_reader=file_reader
                )
            except ValueError as e:
                raise ValueError(
                    f"Invalid {CONFIG_FILE_NAME} at {self.config_path}: {e}"
                ) from e
        logger.debug("declarations_loaded", path=str(self.config_path), count=len(result))
        return result
