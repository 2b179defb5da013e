"""
Pytest fixtures for queuehub tests.

Stores are backed by the in-process memory backend; every test starts with
empty namespaces. Async code is driven with asyncio.run().
"""

from datetime import datetime, timedelta

import pytest

from queuehub.backends import MemoryBackend, register_backend, unregister_backend
from queuehub.config import Settings
from queuehub.constants import SERVICES_INFO_KEY
from queuehub.exceptions import BackendError


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def reset_memory_backend():
    """Start and finish every test with empty memory stores."""
    MemoryBackend.reset()
    yield
    MemoryBackend.reset()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def make_config():
    """Factory for a single-store construction input."""

    def _make(
        identifiers=("orders",),
        kind="memory",
        namespace="test",
        service="notifier",
    ):
        return {
            kind: {
                "queueConnector": [{"namespace": namespace}],
                "serviceName": service,
                "identifierSet": list(identifiers),
            }
        }

    return _make


@pytest.fixture
def shadow_backend():
    """A second memory-backed store kind, "shadow"."""

    @register_backend("shadow")
    class ShadowBackend(MemoryBackend):
        pass

    yield ShadowBackend
    unregister_backend("shadow")


@pytest.fixture
def flaky_backend():
    """
    A memory-backed store kind, "flaky", whose operations fail on demand.

    Put operation names ("get_field", "set_field", ...) in fail_on.
    """

    @register_backend("flaky")
    class FlakyBackend(MemoryBackend):
        fail_on: set = set()
        closed = 0

        def _maybe_fail(self, operation):
            if operation in self.fail_on:
                raise BackendError(self.kind, operation, f"{operation} refused")

        async def get_field(self, group, field):
            self._maybe_fail("get_field")
            return await super().get_field(group, field)

        async def set_field(self, group, field, value):
            self._maybe_fail("set_field")
            return await super().set_field(group, field, value)

        async def delete_field(self, group, field):
            self._maybe_fail("delete_field")
            return await super().delete_field(group, field)

        async def list_fields(self, group):
            self._maybe_fail("list_fields")
            return await super().list_fields(group)

        async def close(self):
            type(self).closed += 1

    FlakyBackend.fail_on = set()
    yield FlakyBackend
    unregister_backend("flaky")


@pytest.fixture
def recorded_writes(monkeypatch):
    """Every set_field call made through a memory-backed store, in order."""
    writes = []
    original = MemoryBackend.set_field

    async def recording(self, group, field, value):
        writes.append((self.kind, group, field, value))
        return await original(self, group, field, value)

    monkeypatch.setattr(MemoryBackend, "set_field", recording)
    return writes


@pytest.fixture
def recorded_reads(monkeypatch):
    """Every get_field, list_fields and delete_field call made through a memory-backed store."""
    calls = []

    def _wrap(name):
        original = getattr(MemoryBackend, name)

        async def recording(self, *args):
            calls.append((self.kind, name) + args)
            return await original(self, *args)

        monkeypatch.setattr(MemoryBackend, name, recording)

    for name in ("get_field", "list_fields", "delete_field"):
        _wrap(name)
    return calls


@pytest.fixture
def stamp_writes(recorded_writes):
    """Only the writes that touched the registered-services hash."""

    def _filter(kind=None):
        return [
            w for w in recorded_writes
            if w[1] == SERVICES_INFO_KEY and (kind is None or w[0] == kind)
        ]

    return _filter


@pytest.fixture
def sample_value():
    return {"targetType": ["email"], "subject": "Order shipped"}
