"""Properties file (.properties) configuration source."""

from __future__ import annotations

import os
import re
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..core.errors import ResourceUnavailableError, StaleCheckFailedError
from ..core.types import FlatMapping, FreshnessToken

SEARCH_PATH_ENV = "CONFPROPS_PATH"
DEFAULT_ENCODING = "utf-8"

_WHITESPACE = " \t\f"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
# "package.module:resource/name.properties"
_PACKAGE_RESOURCE = re.compile(
    r"^(?P<package>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)+|[A-Za-z_]\w+):(?P<name>[^:]+)$"
)


def _logical_lines(text: str) -> Iterator[str]:
    """Join continuation lines and drop blanks and comments."""
    pending: List[str] = []
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield "".join(pending)
        pending = []
    if pending:
        yield "".join(pending)


def _unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        c = text[i]
        if c != "\\" or i + 1 == len(text):
            out.append(c)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u":
            digits = text[i + 2 : i + 6]
            if len(digits) != 4 or not all(d in "0123456789abcdefABCDEF" for d in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: {text[i:i + 6]!r}")
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_entry(line: str) -> Tuple[str, str]:
    i = 0
    while i < len(line):
        c = line[i]
        if c == "\\":
            i += 2
            continue
        if c in "=:" or c in _WHITESPACE:
            break
        i += 1
    key, rest = line[:i], line[i:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties-file text into a dict.

    Supports ``#``/``!`` comments, ``=``, ``:`` or whitespace between key
    and value, backslash line continuation and the ``\\t \\n \\r \\f
    \\uXXXX`` escapes. A key repeated later in the text wins.

    Args:
        text: Decoded file contents.

    Returns:
        Dictionary of key-value pairs in file order.

    Raises:
        ValueError: If a ``\\u`` escape is malformed.
    """
    values: Dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        values[key] = value
    return values


def search_path_from_env() -> List[Path]:
    """Search path from ``CONFPROPS_PATH``, else the current directory."""
    raw = os.environ.get(SEARCH_PATH_ENV, "")
    entries = [Path(p) for p in raw.split(os.pathsep) if p]
    return entries or [Path.cwd()]


class PropertiesFileSource:
    """Configuration source for properties files.

    A source id is either an absolute path, ``package:resource`` for a
    resource shipped inside an importable package, or a relative name
    looked up on the search path, first match wins.
    """

    def __init__(
        self,
        search_path: Optional[Sequence[Union[str, Path]]] = None,
        encoding: str = DEFAULT_ENCODING,
    ):
        """Initialize PropertiesFileSource.

        Args:
            search_path: Directories searched for relative source ids.
                Defaults to ``CONFPROPS_PATH``, evaluated on each read.
            encoding: Text encoding of the files; undecodable bytes fail
                the read.
        """
        self._search_path = (
            None if search_path is None else [Path(p) for p in search_path]
        )
        self.encoding = encoding

    @property
    def search_path(self) -> List[Path]:
        if self._search_path is None:
            return search_path_from_env()
        return list(self._search_path)

    def resolve(self, source_id: str):
        """Locate a source.

        Returns:
            A ``Path`` for files, or an ``importlib.resources`` traversable
            for package resources.

        Raises:
            ResourceUnavailableError: If nothing matches.
        """
        match = _PACKAGE_RESOURCE.match(source_id)
        if match and not Path(source_id).is_absolute():
            try:
                resource = resources.files(match["package"]).joinpath(match["name"])
            except (ImportError, TypeError) as e:
                raise ResourceUnavailableError(source_id, str(e)) from e
            if not resource.is_file():
                raise ResourceUnavailableError(source_id, "package resource not found")
            return resource
        path = Path(source_id)
        if path.is_absolute():
            if path.is_file():
                return path
            raise ResourceUnavailableError(source_id, "file not found")
        for base in self.search_path:
            candidate = base / path
            if candidate.is_file():
                return candidate
        raise ResourceUnavailableError(source_id, "not found on search path")

    def read(self, source_id: str) -> FlatMapping:
        target = self.resolve(source_id)
        try:
            text = target.read_bytes().decode(self.encoding, errors="strict")
            values = parse_properties(text)
        except (OSError, ValueError) as e:
            raise ResourceUnavailableError(source_id, str(e)) from e
        return MappingProxyType(values)

    def token(self, source_id: str) -> FreshnessToken:
        try:
            target = self.resolve(source_id)
        except ResourceUnavailableError as e:
            raise StaleCheckFailedError(source_id, str(e)) from e
        if not isinstance(target, Path):
            raise StaleCheckFailedError(source_id, "resource is not a plain file")
        try:
            stat = target.stat()
        except OSError as e:
            raise StaleCheckFailedError(source_id, str(e)) from e
        return (stat.st_mtime_ns, stat.st_size)
