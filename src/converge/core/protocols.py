"""
Protocols for the remote collaborators the engine consumes.

Components receive these through their constructors. Anything with the
right shape satisfies them, so tests pass small fakes and production
passes the boto3 adapter or a mapping-store client.

Architecture:
    ::

        protocols.py
        ├── AddressAPI          — allocate / describe / release / tag addresses
        ├── RetryExecutor       — run an operation under a backoff policy
        └── MappingStoreClient  — list / create identity mapping records

    Consumers:
        network/addresses.py, iamauth/engine.py
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from converge.core.errors import RemoteErrorCode
    from converge.execution.retry import RetryStrategy
    from converge.iamauth.models import IdentityMappingRecord
    from converge.network.addresses import ManagedAddress
    from converge.network.tags import ResourceLifecycle


@runtime_checkable
class AddressAPI(Protocol):
    """
    Cloud provider address inventory.

    Implementations raise ``RemoteError`` with a classified
    ``RemoteErrorCode`` for every provider failure.
    """

    def allocate(self, domain: str) -> tuple[str, str]:
        """Allocate a new address. Returns ``(allocation_id, public_address)``."""
        ...

    def describe_filtered(self, owner: str) -> list[ManagedAddress]:
        """List addresses carrying ``owner``'s cluster tag."""
        ...

    def release(self, allocation_id: str) -> None:
        """Release an address back to the provider."""
        ...

    def tag(self, allocation_id: str, owner: str, lifecycle: ResourceLifecycle) -> None:
        """Apply ownership tags to an allocation."""
        ...


@runtime_checkable
class RetryExecutor(Protocol):
    """
    Runs an operation under a backoff policy.

    ``operation`` returns True when finished and False to be polled again.
    A ``RemoteError`` whose code is in ``retryable_codes`` is retried; any
    other exception propagates. Exhaustion raises ``RetryExhaustedError``.
    """

    def run(
        self,
        operation: Callable[[], bool],
        policy: RetryStrategy,
        retryable_codes: Collection[RemoteErrorCode],
    ) -> None:
        ...


@runtime_checkable
class MappingStoreClient(Protocol):
    """Remote store of identity mapping records."""

    def list(self) -> list[IdentityMappingRecord]:
        """Return every mapping record currently stored."""
        ...

    def create(self, record: IdentityMappingRecord) -> IdentityMappingRecord:
        """Persist a new record and return it with its assigned name."""
        ...


__all__ = [
    "AddressAPI",
    "RetryExecutor",
    "MappingStoreClient",
]
