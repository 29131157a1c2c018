"""Lifecycle of cluster-owned elastic IP addresses.

``AddressLifecycleManager`` allocates addresses and tags them as owned by
a cluster, and releases every address tagged for a cluster once nothing
is bound to it any more.

Release safety:
    An address that still has an association is never released. Seeing
    one means the consumer was not detached first, so ``release`` stops
    with ``SafetyViolationError`` instead of retrying. Transient provider
    failures after a detach (``AUTH_FAILURE``, ``ADDRESS_IN_USE``) are
    absorbed by the retry executor within its backoff budget.

Ordering:
    Addresses are released one at a time in the order the provider lists
    them. The first fatal failure stops the batch; the raised error names
    the failing address and lists the allocation ids not attempted under
    ``context.metadata["not_attempted"]``.
"""

from __future__ import annotations

from dataclasses import dataclass

from converge.core.errors import (
    FatalRemoteError,
    PartialTagError,
    RemoteError,
    RemoteErrorCode,
    RetryExhaustedError,
    SafetyViolationError,
)
from converge.core.logging import get_logger
from converge.core.protocols import AddressAPI, RetryExecutor
from converge.core.settings import ConvergeSettings, get_settings
from converge.execution.retry import BackoffRetryExecutor, RetryStrategy, default_backoff
from converge.network.tags import ResourceLifecycle

logger = get_logger(__name__)

RELEASE_RETRYABLE_CODES = frozenset({
    RemoteErrorCode.AUTH_FAILURE,
    RemoteErrorCode.ADDRESS_IN_USE,
})


@dataclass(frozen=True)
class ManagedAddress:
    """One allocated address as reported by the provider.

    Attributes:
        allocation_id: Provider-assigned identifier, immutable once allocated
        public_address: Public IP in string form
        association_id: Set while the address is bound to a consumer
        ownership_tag: Lifecycle marker read from the cluster tag, if any
    """

    allocation_id: str
    public_address: str
    association_id: str | None = None
    ownership_tag: ResourceLifecycle | None = None

    @property
    def is_associated(self) -> bool:
        return bool(self.association_id)


class AddressLifecycleManager:
    """Allocate, tag and safely release a cluster's addresses."""

    def __init__(
        self,
        address_api: AddressAPI,
        executor: RetryExecutor | None = None,
        policy: RetryStrategy | None = None,
        settings: ConvergeSettings | None = None,
    ):
        settings = settings or get_settings()
        self.address_api = address_api
        self.executor = executor or BackoffRetryExecutor()
        self.policy = policy or default_backoff(settings)
        self.domain = settings.address_domain

    def allocate(self, owner: str) -> str:
        """Allocate a new address and tag it as owned by ``owner``.

        Returns:
            The new allocation id.

        Raises:
            FatalRemoteError: The provider refused the allocation.
            PartialTagError: The address exists but is untagged. It is not
                released here; ``allocation_id`` on the error names it.
        """
        try:
            allocation_id, public_address = self.address_api.allocate(self.domain)
        except RemoteError as e:
            raise FatalRemoteError(
                "failed to create elastic IP address", cause=e
            ).with_context(operation="allocate", cluster=owner)

        try:
            self.address_api.tag(allocation_id, owner, ResourceLifecycle.OWNED)
        except RemoteError as e:
            raise PartialTagError(
                f"failed to tag elastic IP {allocation_id!r}",
                allocation_id=allocation_id,
                cause=e,
            ).with_context(operation="tag", public_address=public_address, cluster=owner)

        logger.info(
            "elastic_ip_allocated",
            public_address=public_address,
            allocation_id=allocation_id,
            cluster=owner,
        )
        return allocation_id

    def release(self, owner: str) -> None:
        """Release every address tagged for ``owner``.

        Raises:
            FatalRemoteError: Listing failed, a release failed with a
                non-retryable code, or the backoff budget ran out.
            SafetyViolationError: An address is still associated.
        """
        log = logger.bind(cluster=owner)
        try:
            addresses = self.address_api.describe_filtered(owner)
        except RemoteError as e:
            raise FatalRemoteError(
                "failed to describe elastic IPs", cause=e
            ).with_context(operation="describe", cluster=owner)

        if not addresses:
            log.debug("elastic_ip_release_none")
            return

        for index, address in enumerate(addresses):
            not_attempted = [a.allocation_id for a in addresses[index + 1:]]

            if address.is_associated:
                raise SafetyViolationError(
                    f"failed to release elastic IP {address.public_address!r} "
                    f"with allocation ID {address.allocation_id!r}: "
                    f"still associated with association ID {address.association_id!r}"
                ).with_context(
                    operation="release",
                    resource_id=address.allocation_id,
                    public_address=address.public_address,
                    association_id=address.association_id,
                    cluster=owner,
                    not_attempted=not_attempted,
                )

            self._release_one(address, owner, not_attempted)

            log.info(
                "elastic_ip_released",
                public_address=address.public_address,
                allocation_id=address.allocation_id,
            )

    def _release_one(self, address: ManagedAddress, owner: str, not_attempted: list[str]) -> None:
        def release_once() -> bool:
            self.address_api.release(address.allocation_id)
            return True

        try:
            self.executor.run(release_once, self.policy, RELEASE_RETRYABLE_CODES)
        except (RemoteError, RetryExhaustedError) as e:
            raise FatalRemoteError(
                f"failed to release elastic IP {address.allocation_id!r}", cause=e
            ).with_context(
                operation="release",
                resource_id=address.allocation_id,
                public_address=address.public_address,
                cluster=owner,
                not_attempted=not_attempted,
            )
