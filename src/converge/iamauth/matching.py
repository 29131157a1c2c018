"""Equivalence between a desired mapping and a stored record."""

from __future__ import annotations

from collections.abc import Sequence

from converge.iamauth.models import IdentityMappingRecord, RoleMapping, UserMapping


def groups_equal(desired: Sequence[str], existing: Sequence[str]) -> bool:
    """Equal cardinality and every desired group present in ``existing``.

    Order is irrelevant and members compare by exact string equality.
    Validated mappings carry no repeated groups, which makes this set
    equality.
    """
    if len(desired) != len(existing):
        return False
    return all(group in existing for group in desired)


def mapping_matches(desired: RoleMapping | UserMapping, record: IdentityMappingRecord) -> bool:
    """True when ``record`` already grants exactly what ``desired`` asks for."""
    if desired.principal != record.arn:
        return False
    if desired.username != record.username:
        return False
    return groups_equal(desired.groups, record.groups)
