"""EC2-backed ``AddressAPI``.

Wraps a boto3 EC2 client. Every ``ClientError`` is translated into a
``RemoteError`` here, with its native code mapped to a ``RemoteErrorCode``,
so nothing above this module looks at provider error strings.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from converge.core.errors import RemoteError, RemoteErrorCode
from converge.core.logging import get_logger
from converge.core.settings import ConvergeSettings
from converge.network.addresses import ManagedAddress
from converge.network.tags import (
    ResourceLifecycle,
    build_ownership_tags,
    cluster_filter,
    lifecycle_from_tags,
)

logger = get_logger(__name__)

PROVIDER_CODES: dict[str, RemoteErrorCode] = {
    "AuthFailure": RemoteErrorCode.AUTH_FAILURE,
    "InvalidIPAddress.InUse": RemoteErrorCode.ADDRESS_IN_USE,
    "InvalidAllocationID.NotFound": RemoteErrorCode.NOT_FOUND,
    "InvalidAddress.NotFound": RemoteErrorCode.NOT_FOUND,
    "UnauthorizedOperation": RemoteErrorCode.PERMISSION_DENIED,
    "InvalidParameterValue": RemoteErrorCode.MALFORMED_REQUEST,
    "InvalidParameterCombination": RemoteErrorCode.MALFORMED_REQUEST,
    "MissingParameter": RemoteErrorCode.MALFORMED_REQUEST,
    "AddressLimitExceeded": RemoteErrorCode.LIMIT_EXCEEDED,
}


def classify_client_error(exc: ClientError, action: str) -> RemoteError:
    """Turn a botocore ``ClientError`` into a classified ``RemoteError``."""
    error = exc.response.get("Error", {})
    provider_code = error.get("Code", "")
    code = PROVIDER_CODES.get(provider_code, RemoteErrorCode.UNKNOWN)
    message = f"{action}: {provider_code or 'error'}"
    if error.get("Message"):
        message = f"{message}: {error['Message']}"
    return RemoteError(
        message,
        code=code,
        provider_code=provider_code or None,
        cause=exc,
    )


class Ec2AddressAPI:
    """Address inventory backed by the EC2 API."""

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def from_settings(cls, settings: ConvergeSettings) -> "Ec2AddressAPI":
        client_kwargs: dict[str, Any] = {
            "service_name": "ec2",
            "region_name": settings.aws_region,
            "config": Config(retries={"mode": "standard"}),
        }
        if settings.aws_endpoint_url:
            client_kwargs["endpoint_url"] = settings.aws_endpoint_url

        logger.info(
            "ec2_client_initialized",
            region=settings.aws_region,
            endpoint=settings.aws_endpoint_url,
        )
        return cls(boto3.client(**client_kwargs))

    def _call(self, action: str, method: str, **kwargs: Any) -> dict[str, Any]:
        try:
            return getattr(self.client, method)(**kwargs)
        except ClientError as exc:
            raise classify_client_error(exc, action)
        except BotoCoreError as exc:
            raise RemoteError(f"{action}: {exc}", cause=exc)

    def allocate(self, domain: str) -> tuple[str, str]:
        out = self._call("allocate address", "allocate_address", Domain=domain)
        return out["AllocationId"], out.get("PublicIp", "")

    def describe_filtered(self, owner: str) -> list[ManagedAddress]:
        out = self._call(
            "describe addresses",
            "describe_addresses",
            Filters=[cluster_filter(owner)],
        )
        addresses = []
        for item in out.get("Addresses", []):
            # Addresses without an allocation id cannot be released by id
            if not item.get("AllocationId"):
                logger.warning(
                    "elastic_ip_without_allocation_id",
                    public_address=item.get("PublicIp"),
                    cluster=owner,
                )
                continue
            addresses.append(
                ManagedAddress(
                    allocation_id=item["AllocationId"],
                    public_address=item.get("PublicIp", ""),
                    association_id=item.get("AssociationId"),
                    ownership_tag=lifecycle_from_tags(owner, item.get("Tags")),
                )
            )
        return addresses

    def release(self, allocation_id: str) -> None:
        self._call("release address", "release_address", AllocationId=allocation_id)

    def tag(self, allocation_id: str, owner: str, lifecycle: ResourceLifecycle) -> None:
        self._call(
            "create tags",
            "create_tags",
            Resources=[allocation_id],
            Tags=build_ownership_tags(owner, lifecycle, name=f"{owner}-eip", role="common"),
        )
