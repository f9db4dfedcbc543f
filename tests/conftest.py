from __future__ import annotations

import threading
import time
from typing import Dict, Optional

import pytest
import structlog

from confprops.core.errors import ResourceUnavailableError, StaleCheckFailedError
from confprops.core.resource_cache import ResourceCache


class FakeReader:
    """In-memory source that counts reads and token checks."""

    def __init__(self, values: Optional[Dict[str, str]] = None, token: int = 1):
        self.values = dict(values or {})
        self.current_token = token
        self.reads = 0
        self.token_checks = 0
        self.delay = 0.0
        self.fail_read = False
        self.fail_token = False
        self._lock = threading.Lock()

    def update(self, values: Dict[str, str], bump_token: bool = True) -> None:
        self.values = dict(values)
        if bump_token:
            self.current_token += 1

    def read(self, source_id: str) -> Dict[str, str]:
        with self._lock:
            self.reads += 1
        if self.delay:
            time.sleep(self.delay)
        if self.fail_read:
            raise ResourceUnavailableError(source_id, "fake failure")
        return dict(self.values)

    def token(self, source_id: str) -> int:
        with self._lock:
            self.token_checks += 1
        if self.fail_token:
            raise StaleCheckFailedError(source_id, "fake failure")
        return self.current_token


@pytest.fixture
def resources() -> ResourceCache:
    return ResourceCache()


@pytest.fixture
def reader() -> FakeReader:
    return FakeReader({"app.name": "demo", "app.port": "8080"})


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
