"""Environment variable configuration source."""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Mapping, Optional

from ..core.types import FlatMapping, FreshnessToken


class EnvironmentSource:
    """Configuration source over the process environment.

    The source id is ignored; the whole environment is one source.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """Initialize EnvironmentSource.

        Args:
            environ: Mapping to read instead of ``os.environ``.
        """
        self.environ = os.environ if environ is None else environ

    def read(self, source_id: str) -> FlatMapping:
        return MappingProxyType(dict(self.environ))

    def token(self, source_id: str) -> FreshnessToken:
        return tuple(sorted(self.environ.items()))
