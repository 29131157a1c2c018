"""Tests for the converge error hierarchy."""

from converge.core.errors import (
    ConvergeError,
    ErrorCategory,
    FatalRemoteError,
    MappingStoreError,
    PartialTagError,
    RemoteError,
    RemoteErrorCode,
    RetryExhaustedError,
    SafetyViolationError,
    ValidationError,
)


class TestConvergeError:
    """Tests for the base error."""

    def test_defaults(self):
        error = ConvergeError("boom")
        assert error.category == ErrorCategory.INTERNAL
        assert str(error) == "boom"

    def test_cause_is_chained(self):
        cause = ValueError("inner")
        error = ConvergeError("outer", cause=cause)
        assert error.__cause__ is cause
        assert str(error) == "outer: inner"

    def test_with_context_known_and_extra_fields(self):
        error = ConvergeError("x").with_context(
            operation="release", resource_id="eipalloc-1", not_attempted=["eipalloc-2"]
        )
        assert error.context.operation == "release"
        assert error.context.metadata == {"not_attempted": ["eipalloc-2"]}

    def test_to_dict(self):
        error = FatalRemoteError("failed", cause=KeyError("k")).with_context(cluster="prod")
        data = error.to_dict()
        assert data["error_type"] == "FatalRemoteError"
        assert data["category"] == "REMOTE"
        assert data["context"] == {"cluster": "prod"}
        assert "cause" in data


class TestKinds:
    """Tests for concrete error kinds."""

    def test_validation(self):
        error = ValidationError("bad", field_name="username", invalid_value="a b")
        assert error.category == ErrorCategory.VALIDATION
        assert error.to_dict()["field"] == "username"

    def test_safety(self):
        assert SafetyViolationError("x").category == ErrorCategory.SAFETY

    def test_remote_code_membership(self):
        error = RemoteError("x", code=RemoteErrorCode.AUTH_FAILURE, provider_code="AuthFailure")
        assert error.is_retryable_in([RemoteErrorCode.AUTH_FAILURE])
        assert not error.is_retryable_in([RemoteErrorCode.ADDRESS_IN_USE])
        assert error.to_dict()["provider_code"] == "AuthFailure"

    def test_partial_tag_names_allocation(self):
        error = PartialTagError("untagged", allocation_id="eipalloc-7")
        assert error.context.resource_id == "eipalloc-7"
        assert isinstance(error, FatalRemoteError)

    def test_exhausted_attempts(self):
        assert RetryExhaustedError("x", attempts=4).attempts == 4

    def test_mapping_store_error_is_fatal_remote(self):
        assert isinstance(MappingStoreError("x"), FatalRemoteError)

