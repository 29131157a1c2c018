"""Environment-driven settings for the convergence engine.

``ConvergeSettings`` collects the knobs an outer reconciliation driver
needs to wire the engine: the AWS region and endpoint used to build the
EC2 client, the backoff budget for address release, the namespace and
name prefix of created identity mappings, and logging.

Every field can be set through a ``CONVERGE_``-prefixed environment
variable or a ``.env`` file::

    CONVERGE_AWS_REGION=eu-west-1
    CONVERGE_BACKOFF_MAX_RETRIES=5

Examples:
    >>> from converge.core.settings import ConvergeSettings
    >>> settings = ConvergeSettings(backoff_max_retries=2)
    >>> settings.backoff_max_retries
    2
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConvergeSettings(BaseSettings):
    """Settings shared by the address and mapping components.

    Fields
    ──────
    aws_region          : Region used to build the EC2 client
    aws_endpoint_url    : Alternate EC2 endpoint (LocalStack, moto server)
    address_domain      : Domain passed to address allocation
    backoff_*           : Exponential backoff budget for address release
    mapping_namespace   : Namespace of created identity mapping records
    mapping_name_prefix : Generated-name prefix of created records
    log_level / log_json: structlog configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="CONVERGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── AWS ──────────────────────────────────────────────────────
    aws_region: str = "us-east-1"
    aws_endpoint_url: str | None = None
    address_domain: str = "vpc"

    # ── Release backoff ──────────────────────────────────────────
    backoff_max_retries: int = Field(default=10, ge=0)
    backoff_base_delay: float = Field(default=1.0, ge=0.0)
    backoff_max_delay: float = Field(default=30.0, ge=0.0)
    backoff_multiplier: float = Field(default=1.5, ge=1.0)
    backoff_jitter: bool = True

    # ── Identity mappings ────────────────────────────────────────
    mapping_namespace: str = "kube-system"
    mapping_name_prefix: str = "capa-iamauth-"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> ConvergeSettings:
    """Return the process-wide settings, loaded once from the environment."""
    return ConvergeSettings()
