"""Shared primitives: errors, settings, logging and collaborator protocols."""

from converge.core.errors import (
    ConvergeError,
    ErrorCategory,
    ErrorContext,
    FatalRemoteError,
    MappingStoreError,
    PartialTagError,
    RemoteError,
    RemoteErrorCode,
    RetryExhaustedError,
    SafetyViolationError,
    ValidationError,
)
from converge.core.protocols import AddressAPI, MappingStoreClient, RetryExecutor
from converge.core.settings import ConvergeSettings, get_settings

__all__ = [
    "ConvergeError",
    "ErrorCategory",
    "ErrorContext",
    "FatalRemoteError",
    "MappingStoreError",
    "PartialTagError",
    "RemoteError",
    "RemoteErrorCode",
    "RetryExhaustedError",
    "SafetyViolationError",
    "ValidationError",
    "AddressAPI",
    "MappingStoreClient",
    "RetryExecutor",
    "ConvergeSettings",
    "get_settings",
]
