"""Type definitions for the confprops resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Mapping

# Read-only snapshot of one source at one read
FlatMapping = Mapping[str, str]

# Equal for two reads of an unchanged source; never None
FreshnessToken = Hashable


@dataclass(frozen=True)
class Snapshot:
    """A flat mapping together with the token it was read under.

    Attributes:
        token: Freshness token observed before the read.
        mapping: Key-value pairs read from the source.
    """

    token: FreshnessToken
    mapping: FlatMapping
