"""Elastic IP lifecycle management.

``Ec2AddressAPI`` lives in ``converge.network.ec2`` and is imported from
there so that boto3 is only loaded when the EC2 adapter is used.
"""

from converge.network.addresses import (
    RELEASE_RETRYABLE_CODES,
    AddressLifecycleManager,
    ManagedAddress,
)
from converge.network.tags import ResourceLifecycle, build_ownership_tags, cluster_filter, cluster_tag_key

__all__ = [
    "RELEASE_RETRYABLE_CODES",
    "AddressLifecycleManager",
    "ManagedAddress",
    "ResourceLifecycle",
    "build_ownership_tags",
    "cluster_filter",
    "cluster_tag_key",
]
