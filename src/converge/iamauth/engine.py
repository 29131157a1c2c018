"""Additive convergence of identity mappings.

``MappingConvergenceEngine`` makes sure a desired role or user mapping
exists in the mapping store. It lists the store fresh on every call,
scans for an equivalent record, and creates one only when none is found.
Existing records are never changed or removed.

Known limits:
    - No compare-and-swap on create. Two callers converging the same
      mapping at once can both see it missing and both create it.
    - Duplicates already in the store are left alone; any one of them
      satisfies the match and the call is a no-op.
"""

from __future__ import annotations

from converge.core.errors import MappingStoreError
from converge.core.logging import get_logger
from converge.core.protocols import MappingStoreClient
from converge.core.settings import ConvergeSettings, get_settings
from converge.iamauth.matching import mapping_matches
from converge.iamauth.models import IdentityMappingRecord, RoleMapping, UserMapping

logger = get_logger(__name__)


class MappingConvergenceEngine:
    """Converge desired identity mappings into a mapping store."""

    def __init__(self, store: MappingStoreClient, settings: ConvergeSettings | None = None):
        settings = settings or get_settings()
        self.store = store
        self.namespace = settings.mapping_namespace
        self.name_prefix = settings.mapping_name_prefix

    def map_role(self, mapping: RoleMapping) -> None:
        """Ensure ``mapping`` exists for its role ARN."""
        self._converge(mapping, "map_role")

    def map_user(self, mapping: UserMapping) -> None:
        """Ensure ``mapping`` exists for its user ARN."""
        self._converge(mapping, "map_user")

    def _converge(self, mapping: RoleMapping | UserMapping, operation: str) -> None:
        mapping.validate()
        log = logger.bind(operation=operation, principal=mapping.principal)

        try:
            existing = self.store.list()
        except Exception as e:
            raise MappingStoreError("getting list of mappings", cause=e).with_context(
                operation=operation, principal=mapping.principal
            )

        for record in existing:
            if mapping_matches(mapping, record):
                log.debug(
                    "iam_mapping_exists",
                    username=mapping.username,
                    name=record.name,
                )
                return

        record = IdentityMappingRecord(
            arn=mapping.principal,
            username=mapping.username,
            groups=list(mapping.groups),
            namespace=self.namespace,
            generate_name=self.name_prefix,
        )
        try:
            created = self.store.create(record)
        except Exception as e:
            raise MappingStoreError("creating mapping", cause=e).with_context(
                operation=operation, principal=mapping.principal
            )

        log.info(
            "iam_mapping_created",
            username=mapping.username,
            groups=list(mapping.groups),
            name=getattr(created, "name", None),
        )
