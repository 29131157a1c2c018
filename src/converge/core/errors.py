"""
Structured error types for the convergence engine.

Every failure raised by address lifecycle management or mapping convergence
is a ``ConvergeError``. Errors carry a category, a structured context
naming the resource and operation, and the chained underlying exception.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      ConvergeError                          │
        │  (category, context, cause)                                 │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  ValidationError    SafetyViolationError    RemoteError     │
        │  (VALIDATION)       (SAFETY)                (REMOTE, code)  │
        │                                                             │
        │  RetryExhaustedError    FatalRemoteError    PartialTagError │
        │  (REMOTE)               (REMOTE)            (REMOTE)        │
        │                                                             │
        │  MappingStoreError                                          │
        │  (REMOTE)                                                   │
        └─────────────────────────────────────────────────────────────┘

Retry classification:
    Remote failures are described by a ``RemoteErrorCode`` member, mapped
    from the provider's native code once at the collaborator boundary.
    The retry executor decides retryability by membership of that code in
    the set of retryable codes it was handed; error messages are never
    inspected.

Examples:
    >>> err = RemoteError("release failed", code=RemoteErrorCode.ADDRESS_IN_USE)
    >>> err.is_retryable_in({RemoteErrorCode.ADDRESS_IN_USE})
    True
    >>> FatalRemoteError("release failed", cause=err).with_context(
    ...     resource_id="eipalloc-123", operation="release"
    ... ).context.resource_id
    'eipalloc-123'
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    VALIDATION = "VALIDATION"  # Malformed input, never reaches the network
    SAFETY = "SAFETY"          # Operation would break a resource invariant
    REMOTE = "REMOTE"          # Provider or mapping-store failure
    INTERNAL = "INTERNAL"      # Bugs, unexpected state


class RemoteErrorCode(str, Enum):
    """Provider-neutral classes of remote failure.

    Adapters translate native provider codes into these members; the raw
    code is kept on the error for diagnostics.
    """

    AUTH_FAILURE = "AUTH_FAILURE"
    ADDRESS_IN_USE = "ADDRESS_IN_USE"
    NOT_FOUND = "NOT_FOUND"
    MALFORMED_REQUEST = "MALFORMED_REQUEST"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Name of the operation that failed (allocate, release, map_role)
        resource_id: Remote identifier of the resource (allocation id, mapping name)
        public_address: Public address string, for address failures
        association_id: Association id of a still-bound address
        cluster: Owning cluster identifier
        principal: Role or user ARN, for mapping failures
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    resource_id: str | None = None
    public_address: str | None = None
    association_id: str | None = None
    cluster: str | None = None
    principal: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "resource_id", "public_address",
                    "association_id", "cluster", "principal"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ConvergeError(Exception):
    """
    Base exception for all convergence engine errors.

    Subclasses set ``default_category``; callers may override it per
    instance. A ``cause`` is chained onto ``__cause__`` so tracebacks show
    the original failure.

    Examples:
        >>> error = ConvergeError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(operation="release", cluster="prod").to_dict()["context"]
        {'operation': 'release', 'cluster': 'prod'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ConvergeError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FatalRemoteError("release failed", cause=e).with_context(
                operation="release",
                resource_id=allocation_id,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# INPUT AND SAFETY ERRORS
# =============================================================================


class ValidationError(ConvergeError):
    """Desired input is malformed. Raised before any remote call is made."""

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.invalid_value = invalid_value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field_name:
            result["field"] = self.field_name
        if self.invalid_value is not None:
            result["invalid_value"] = str(self.invalid_value)[:100]
        return result


class SafetyViolationError(ConvergeError):
    """An operation would destroy a resource that is still in use."""

    default_category = ErrorCategory.SAFETY


# =============================================================================
# REMOTE ERRORS
# =============================================================================


class RemoteError(ConvergeError):
    """
    Failure reported by a remote collaborator.

    ``code`` is the provider-neutral classification and ``provider_code``
    the native code string (``"InvalidIPAddress.InUse"`` and so on).
    Whether it is retried depends on the code set handed to the retry
    executor, see ``is_retryable_in``.
    """

    default_category = ErrorCategory.REMOTE

    def __init__(
        self,
        message: str,
        *,
        code: RemoteErrorCode = RemoteErrorCode.UNKNOWN,
        provider_code: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.code = code
        self.provider_code = provider_code

    def is_retryable_in(self, retryable_codes: Iterable[RemoteErrorCode]) -> bool:
        """True when this error's code belongs to ``retryable_codes``."""
        return self.code in set(retryable_codes)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["code"] = self.code.value
        if self.provider_code:
            result["provider_code"] = self.provider_code
        return result


class RetryExhaustedError(ConvergeError):
    """The backoff budget ran out while the remote kept failing transiently."""

    default_category = ErrorCategory.REMOTE

    def __init__(self, message: str, *, attempts: int, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.attempts = attempts


class FatalRemoteError(ConvergeError):
    """A remote call failed in a way that aborts the current operation."""

    default_category = ErrorCategory.REMOTE


class PartialTagError(FatalRemoteError):
    """An address was allocated but could not be tagged.

    The allocation is left in place for out-of-band cleanup; its id is
    available as ``allocation_id``.
    """

    def __init__(self, message: str, *, allocation_id: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.allocation_id = allocation_id
        self.context.resource_id = allocation_id


class MappingStoreError(FatalRemoteError):
    """Listing or creating identity mappings failed."""


__all__ = [
    "ErrorCategory",
    "RemoteErrorCode",
    "ErrorContext",
    "ConvergeError",
    "ValidationError",
    "SafetyViolationError",
    "RemoteError",
    "RetryExhaustedError",
    "FatalRemoteError",
    "PartialTagError",
    "MappingStoreError",
]
