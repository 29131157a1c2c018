"""
Shared pytest fixtures for converge tests.

This module provides:
- Settings with a fast, deterministic backoff budget
- A retry executor that records delays instead of sleeping
- A scriptable fake of the address inventory
- An in-memory mapping store
"""

import sys
from pathlib import Path

import pytest

# Ensure converge package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from converge.core.settings import ConvergeSettings
from converge.execution.retry import BackoffRetryExecutor
from converge.iamauth.store import InMemoryMappingStore
from converge.network.addresses import ManagedAddress


class FakeAddressAPI:
    """Address inventory fake.

    ``release_script`` maps an allocation id to a list of outcomes consumed
    one per release call: an exception instance is raised, anything else
    means success. Once the list is empty every call succeeds.
    """

    def __init__(self, addresses: list[ManagedAddress] | None = None):
        self.addresses = list(addresses or [])
        self.release_script: dict[str, list] = {}
        self.release_calls: list[str] = []
        self.tag_calls: list[tuple] = []
        self.allocate_error: Exception | None = None
        self.tag_error: Exception | None = None
        self.describe_error: Exception | None = None
        self._next = 0

    def allocate(self, domain):
        if self.allocate_error:
            raise self.allocate_error
        self._next += 1
        return f"eipalloc-{self._next:04d}", f"203.0.113.{self._next}"

    def describe_filtered(self, owner):
        if self.describe_error:
            raise self.describe_error
        return list(self.addresses)

    def release(self, allocation_id):
        self.release_calls.append(allocation_id)
        script = self.release_script.get(allocation_id)
        if script:
            outcome = script.pop(0)
            if isinstance(outcome, Exception):
                raise outcome

    def tag(self, allocation_id, owner, lifecycle):
        self.tag_calls.append((allocation_id, owner, lifecycle))
        if self.tag_error:
            raise self.tag_error


@pytest.fixture
def settings() -> ConvergeSettings:
    """Settings with a small, jitter-free backoff budget."""
    return ConvergeSettings(
        _env_file=None,
        backoff_max_retries=5,
        backoff_base_delay=0.01,
        backoff_max_delay=0.05,
        backoff_multiplier=2.0,
        backoff_jitter=False,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def executor(sleeps) -> BackoffRetryExecutor:
    """Retry executor that records delays instead of sleeping."""
    return BackoffRetryExecutor(sleep=sleeps.append)


@pytest.fixture
def address_api() -> FakeAddressAPI:
    return FakeAddressAPI()


@pytest.fixture
def mapping_store() -> InMemoryMappingStore:
    return InMemoryMappingStore()
