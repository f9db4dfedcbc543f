"""Decoders turning flat string mappings into typed values.

Every decoder exposes ``parse(mapping, key)`` and returns None when the
key (or, for map decoders, the key prefix) resolves to nothing. A value
that is present but cannot be converted raises :class:`DecodeError`.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from .errors import DecodeError
from .types import FlatMapping

T = TypeVar("T")

DEFAULT_DELIMITER = ";"
TREE_SEPARATOR = "."

_INTEGER = re.compile(r"^[+-]?[0-9]+$")
_BOOLEANS = {"true": True, "false": False}


@dataclass(frozen=True)
class Converter(Generic[T]):
    """Named conversion from a raw string to a scalar."""

    name: str
    convert: Callable[[str], T]

    def __call__(self, key: str, text: str) -> T:
        try:
            return self.convert(text)
        except ValueError as e:
            raise DecodeError(key, text, self.name) from e


def _to_int(text: str) -> int:
    if not _INTEGER.match(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


def _to_bool(text: str) -> bool:
    try:
        return _BOOLEANS[text.lower()]
    except KeyError:
        raise ValueError(f"invalid boolean literal: {text!r}") from None


STRING = Converter("string", str)
INTEGER = Converter("integer", _to_int)
BOOLEAN = Converter("boolean", _to_bool)


class Decoder(ABC, Generic[T]):
    """Conversion of a flat mapping plus a key into an optional value."""

    @abstractmethod
    def parse(self, mapping: FlatMapping, key: str) -> Optional[T]:
        """Decode the value selected by ``key``.

        Args:
            mapping: Flat mapping read from a source.
            key: Exact key, or key prefix for map decoders.

        Returns:
            Decoded value, or None if nothing is configured.
        """


def _check_delimiter(delimiter: str) -> None:
    if not delimiter:
        raise ValueError("Delimiter must be a non-empty string")


@dataclass(frozen=True)
class ScalarDecoder(Decoder[T]):
    converter: Converter[T]

    def parse(self, mapping: FlatMapping, key: str) -> Optional[T]:
        value = mapping.get(key, "")
        if not value:
            return None
        return self.converter(key, value)


@dataclass(frozen=True)
class ListDecoder(Decoder[List[T]]):
    """Splits one value on a literal delimiter.

    Empty segments are kept, so ``"a;b;"`` yields three elements.
    """

    converter: Converter[T]
    delimiter: str = DEFAULT_DELIMITER

    def __post_init__(self) -> None:
        _check_delimiter(self.delimiter)

    def with_delimiter(self, delimiter: str) -> "ListDecoder[T]":
        return replace(self, delimiter=delimiter)

    def split(self, key: str, value: str) -> List[T]:
        return [self.converter(key, part) for part in value.split(self.delimiter)]

    def parse(self, mapping: FlatMapping, key: str) -> Optional[List[T]]:
        value = mapping.get(key, "")
        if not value:
            return None
        return self.split(key, value)


@dataclass(frozen=True)
class MapDecoder(Decoder[Dict[str, T]]):
    """Collects every entry whose key starts with a prefix.

    Keys are kept whole; the prefix is not stripped. Keys appearing more
    than once resolve to the last one iterated.
    """

    converter: Converter[T]

    def parse(self, mapping: FlatMapping, key: str) -> Optional[Dict[str, T]]:
        selected = {
            k: self.converter(k, v) for k, v in mapping.items() if k.startswith(key)
        }
        return selected or None


@dataclass(frozen=True)
class MapListDecoder(Decoder[Dict[str, List[T]]]):
    """Like :class:`MapDecoder` with every value split as a list.

    An empty value decodes to an empty list instead of being dropped.
    """

    converter: Converter[T]
    delimiter: str = DEFAULT_DELIMITER

    def __post_init__(self) -> None:
        _check_delimiter(self.delimiter)

    def with_delimiter(self, delimiter: str) -> "MapListDecoder[T]":
        return replace(self, delimiter=delimiter)

    def parse(
        self, mapping: FlatMapping, key: str
    ) -> Optional[Dict[str, List[T]]]:
        selected: Dict[str, List[T]] = {}
        for k, v in mapping.items():
            if not k.startswith(key):
                continue
            selected[k] = (
                [self.converter(k, part) for part in v.split(self.delimiter)]
                if v
                else []
            )
        return selected or None


@dataclass(frozen=True)
class TreeDecoder(Decoder[Dict[str, Any]]):
    """Folds ``prefix.a.b=v`` entries into ``{"a": {"b": v}}``."""

    converter: Converter[Any]
    separator: str = TREE_SEPARATOR

    def __post_init__(self) -> None:
        _check_delimiter(self.separator)

    def parse(self, mapping: FlatMapping, key: str) -> Optional[Dict[str, Any]]:
        head = f"{key}{self.separator}" if key else ""
        tree: Dict[str, Any] = {}
        for k, v in mapping.items():
            if not k.startswith(head) or len(k) == len(head):
                continue
            *branches, leaf = k[len(head):].split(self.separator)
            node = tree
            for part in branches:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    raise DecodeError(k, v, f"tree under {key!r} ({part!r} is a leaf)")
                node = child
            if isinstance(node.get(leaf), dict):
                raise DecodeError(k, v, f"tree under {key!r} ({leaf!r} is a branch)")
            node[leaf] = self.converter(k, v)
        return tree or None


def string() -> ScalarDecoder[str]:
    return ScalarDecoder(STRING)


def integer() -> ScalarDecoder[int]:
    return ScalarDecoder(INTEGER)


def boolean() -> ScalarDecoder[bool]:
    return ScalarDecoder(BOOLEAN)


def string_list(delimiter: str = DEFAULT_DELIMITER) -> ListDecoder[str]:
    return ListDecoder(STRING, delimiter)


def integer_list(delimiter: str = DEFAULT_DELIMITER) -> ListDecoder[int]:
    return ListDecoder(INTEGER, delimiter)


def boolean_list(delimiter: str = DEFAULT_DELIMITER) -> ListDecoder[bool]:
    return ListDecoder(BOOLEAN, delimiter)


def string_map() -> MapDecoder[str]:
    return MapDecoder(STRING)


def integer_map() -> MapDecoder[int]:
    return MapDecoder(INTEGER)


def boolean_map() -> MapDecoder[bool]:
    return MapDecoder(BOOLEAN)


def string_map_list(delimiter: str = DEFAULT_DELIMITER) -> MapListDecoder[str]:
    return MapListDecoder(STRING, delimiter)


def integer_map_list(delimiter: str = DEFAULT_DELIMITER) -> MapListDecoder[int]:
    return MapListDecoder(INTEGER, delimiter)


def boolean_map_list(delimiter: str = DEFAULT_DELIMITER) -> MapListDecoder[bool]:
    return MapListDecoder(BOOLEAN, delimiter)


def string_tree() -> TreeDecoder:
    return TreeDecoder(STRING)


_CONVERTERS = {c.name: c for c in (STRING, INTEGER, BOOLEAN)}


def decoder_for(name: str, delimiter: Optional[str] = None) -> Decoder[Any]:
    """Build a decoder from its name.

    Names are a scalar type (``string``, ``integer``, ``boolean``) with an
    optional shape suffix: ``-list``, ``-map``, ``-map-list`` or ``-tree``.

    Args:
        name: Decoder name, e.g. ``integer-map-list``.
        delimiter: List delimiter for list shapes.

    Returns:
        Decoder instance.

    Raises:
        ValueError: If the name is unknown, or a delimiter is given for a
            shape without lists.
    """
    scalar, _, shape = name.strip().lower().partition("-")
    converter = _CONVERTERS.get(scalar)
    if converter is None:
        raise ValueError(f"Unknown decoder type: {name}")
    splits = shape in {"list", "map-list"}
    if delimiter is not None and not splits:
        raise ValueError(f"Decoder type {name} does not take a delimiter")
    sep = DEFAULT_DELIMITER if delimiter is None else delimiter
    if shape == "":
        return ScalarDecoder(converter)
    if shape == "list":
        return ListDecoder(converter, sep)
    if shape == "map":
        return MapDecoder(converter)
    if shape == "map-list":
        return MapListDecoder(converter, sep)
    if shape == "tree":
        return TreeDecoder(converter)
    raise ValueError(f"Unknown decoder type: {name}")
