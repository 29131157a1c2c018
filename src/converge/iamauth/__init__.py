"""IAM identity mapping convergence."""

from converge.iamauth.engine import MappingConvergenceEngine
from converge.iamauth.matching import groups_equal, mapping_matches
from converge.iamauth.models import IdentityMappingRecord, RoleMapping, UserMapping
from converge.iamauth.store import InMemoryMappingStore

__all__ = [
    "MappingConvergenceEngine",
    "groups_equal",
    "mapping_matches",
    "IdentityMappingRecord",
    "RoleMapping",
    "UserMapping",
    "InMemoryMappingStore",
]
