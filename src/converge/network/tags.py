"""Ownership tags that scope network resources to a cluster.

A resource carrying ``kubernetes.io/cluster/<cluster>=owned`` was created
by this cluster and may be torn down with it; ``shared`` marks resources
the cluster only references.
"""

from __future__ import annotations

from enum import Enum

CLUSTER_TAG_PREFIX = "kubernetes.io/cluster/"
MANAGED_TAG_KEY = "sigs.k8s.io/cluster-api-provider-aws/managed"
ROLE_TAG_KEY = "sigs.k8s.io/cluster-api-provider-aws/role"
NAME_TAG_KEY = "Name"


class ResourceLifecycle(str, Enum):
    """Relationship between a cluster and a tagged resource."""

    OWNED = "owned"
    SHARED = "shared"


def cluster_tag_key(cluster: str) -> str:
    """Tag key that marks a resource as belonging to ``cluster``."""
    return f"{CLUSTER_TAG_PREFIX}{cluster}"


def build_ownership_tags(
    cluster: str,
    lifecycle: ResourceLifecycle,
    name: str | None = None,
    role: str | None = None,
    additional: dict[str, str] | None = None,
) -> list[dict[str, str]]:
    """Build the EC2 tag list for a resource owned by or shared with ``cluster``.

    ``additional`` tags never override the keys this function sets itself.
    """
    tags: dict[str, str] = dict(additional or {})
    tags[cluster_tag_key(cluster)] = ResourceLifecycle(lifecycle).value
    if lifecycle == ResourceLifecycle.OWNED:
        tags[MANAGED_TAG_KEY] = "true"
    if name:
        tags[NAME_TAG_KEY] = name
    if role:
        tags[ROLE_TAG_KEY] = role
    return [{"Key": key, "Value": value} for key, value in sorted(tags.items())]


def cluster_filter(cluster: str) -> dict[str, object]:
    """Describe filter matching every resource tagged for ``cluster``."""
    return {"Name": "tag-key", "Values": [cluster_tag_key(cluster)]}


def lifecycle_from_tags(cluster: str, tags: list[dict[str, str]] | None) -> ResourceLifecycle | None:
    """Read the cluster lifecycle marker back out of a described tag list."""
    key = cluster_tag_key(cluster)
    for tag in tags or []:
        if tag.get("Key") == key:
            try:
                return ResourceLifecycle(tag.get("Value"))
            except ValueError:
                return None
    return None
