"""In-process ``MappingStoreClient``.

Holds records in memory and assigns generated names the way the remote
store does (prefix plus a random suffix). Useful for local runs and as
the store behind engine tests; ``creates`` counts successful writes.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import replace

from converge.iamauth.models import IdentityMappingRecord

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def _generated_suffix(length: int = 5) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


class InMemoryMappingStore:
    """Mapping store kept in a list, in insertion order."""

    def __init__(self, records: list[IdentityMappingRecord] | None = None):
        self._records: list[IdentityMappingRecord] = [replace(r) for r in records or []]
        self.creates = 0

    def list(self) -> list[IdentityMappingRecord]:
        return [replace(r, groups=list(r.groups)) for r in self._records]

    def create(self, record: IdentityMappingRecord) -> IdentityMappingRecord:
        stored = replace(record, groups=list(record.groups))
        if not stored.name:
            stored.name = f"{stored.generate_name}{_generated_suffix()}"
        self._records.append(stored)
        self.creates += 1
        return replace(stored, groups=list(stored.groups))

    def __len__(self) -> int:
        return len(self._records)
