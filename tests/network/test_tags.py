"""Tests for ownership tag helpers."""

from converge.network.tags import (
    MANAGED_TAG_KEY,
    ROLE_TAG_KEY,
    ResourceLifecycle,
    build_ownership_tags,
    cluster_filter,
    cluster_tag_key,
    lifecycle_from_tags,
)


def as_dict(tags):
    return {t["Key"]: t["Value"] for t in tags}


def test_cluster_tag_key():
    assert cluster_tag_key("prod") == "kubernetes.io/cluster/prod"


def test_owned_tags_mark_managed():
    tags = as_dict(build_ownership_tags("prod", ResourceLifecycle.OWNED, role="common"))
    assert tags == {
        "kubernetes.io/cluster/prod": "owned",
        MANAGED_TAG_KEY: "true",
        ROLE_TAG_KEY: "common",
    }


def test_shared_tags_are_not_managed():
    tags = as_dict(build_ownership_tags("prod", ResourceLifecycle.SHARED))
    assert tags == {"kubernetes.io/cluster/prod": "shared"}


def test_additional_tags_cannot_override_cluster_key():
    tags = as_dict(
        build_ownership_tags(
            "prod",
            ResourceLifecycle.OWNED,
            additional={"kubernetes.io/cluster/prod": "shared", "team": "net"},
        )
    )
    assert tags["kubernetes.io/cluster/prod"] == "owned"
    assert tags["team"] == "net"


def test_cluster_filter():
    assert cluster_filter("prod") == {"Name": "tag-key", "Values": ["kubernetes.io/cluster/prod"]}


def test_lifecycle_from_tags():
    tags = [{"Key": "kubernetes.io/cluster/prod", "Value": "shared"}]
    assert lifecycle_from_tags("prod", tags) == ResourceLifecycle.SHARED
    assert lifecycle_from_tags("other", tags) is None
    assert lifecycle_from_tags("prod", None) is None
    assert lifecycle_from_tags("prod", [{"Key": "kubernetes.io/cluster/prod", "Value": "odd"}]) is None
