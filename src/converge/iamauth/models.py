"""Identity mappings that grant IAM principals access to a cluster.

A mapping ties a role or user ARN to an in-cluster username and a set of
groups. ``RoleMapping`` and ``UserMapping`` are the desired shapes a
caller asks for; ``IdentityMappingRecord`` is what the mapping store
holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from converge.core.errors import ValidationError

DEFAULT_NAMESPACE = "kube-system"
DEFAULT_NAME_PREFIX = "capa-iamauth-"
ARN_PREFIX = "arn:"


def _validate_principal(field_name: str, value: str) -> None:
    if not value:
        raise ValidationError(f"{field_name} is required", field_name=field_name)
    if not value.startswith(ARN_PREFIX) or value == ARN_PREFIX:
        raise ValidationError(
            f"{field_name} must be an ARN", field_name=field_name, invalid_value=value
        )


def _validate_username(value: str) -> None:
    if not value:
        raise ValidationError("username is required", field_name="username")
    if value != value.strip() or any(ch.isspace() for ch in value):
        raise ValidationError(
            "username must not contain whitespace",
            field_name="username",
            invalid_value=value,
        )


def _validate_groups(groups: list[str]) -> None:
    for group in groups:
        if not group or not group.strip():
            raise ValidationError(
                "group names must not be empty", field_name="groups", invalid_value=groups
            )
    if len(set(groups)) != len(groups):
        raise ValidationError(
            "group names must be unique", field_name="groups", invalid_value=groups
        )


@dataclass
class RoleMapping:
    """Desired mapping of an IAM role to a cluster username and groups."""

    role_arn: str
    username: str
    groups: list[str] = field(default_factory=list)

    @property
    def principal(self) -> str:
        return self.role_arn

    def validate(self) -> None:
        """Raise ``ValidationError`` if the mapping is malformed."""
        _validate_principal("role_arn", self.role_arn)
        _validate_username(self.username)
        _validate_groups(self.groups)


@dataclass
class UserMapping:
    """Desired mapping of an IAM user to a cluster username and groups."""

    user_arn: str
    username: str
    groups: list[str] = field(default_factory=list)

    @property
    def principal(self) -> str:
        return self.user_arn

    def validate(self) -> None:
        """Raise ``ValidationError`` if the mapping is malformed."""
        _validate_principal("user_arn", self.user_arn)
        _validate_username(self.username)
        _validate_groups(self.groups)


@dataclass
class IdentityMappingRecord:
    """A mapping as stored remotely.

    ``name`` is empty until the store assigns one from ``generate_name``.
    """

    arn: str
    username: str
    groups: list[str] = field(default_factory=list)
    namespace: str = DEFAULT_NAMESPACE
    name: str = ""
    generate_name: str = DEFAULT_NAME_PREFIX
