"""
Tests for structured logging.

Tests verify:
- JSON output carries ECS-style field names and service metadata
- DEBUG logs are suppressed at INFO level
- ConvergeError values are expanded into structured fields
- Released addresses and created mappings are logged with their ids
"""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from converge.core.errors import RemoteError, RemoteErrorCode, RetryExhaustedError
from converge.core.logging import configure_from_settings, configure_logging, get_logger
from converge.execution.retry import ConstantBackoff
from converge.iamauth.engine import MappingConvergenceEngine
from converge.iamauth.models import RoleMapping
from converge.network.addresses import AddressLifecycleManager, ManagedAddress


@pytest.fixture(autouse=True)
def reset_structlog():
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="converge-test")

        get_logger("test").info("elastic_ip_released", allocation_id="eipalloc-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        data = json.loads(line)
        assert data["event"] == "elastic_ip_released"
        assert data["allocation_id"] == "eipalloc-1"
        assert data["service.name"] == "converge-test"
        assert data["log.level"] == "info"
        assert "@timestamp" in data

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)

        get_logger("test").debug("hidden_event")

        assert "hidden_event" not in capsys.readouterr().out

    def test_configure_from_settings(self, capsys, settings):
        settings = settings.model_copy(update={"log_level": "DEBUG", "log_json": True})
        configure_from_settings(settings, service="converge-test")

        get_logger("test").debug("visible_event")

        data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert data["event"] == "visible_event"
        assert data["log.level"] == "debug"

    def test_converge_error_expanded(self, capsys):
        """An error passed as a field is rendered through to_dict."""
        configure_logging(level="INFO", json_format=True)
        error = RemoteError(
            "release failed",
            code=RemoteErrorCode.ADDRESS_IN_USE,
            provider_code="InvalidIPAddress.InUse",
        ).with_context(resource_id="eipalloc-1")

        get_logger("test").warning("release_failed", error=error)

        data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert data["error"]["error_type"] == "RemoteError"
        assert data["error"]["code"] == "ADDRESS_IN_USE"
        assert data["error"]["provider_code"] == "InvalidIPAddress.InUse"
        assert data["error"]["context"] == {"resource_id": "eipalloc-1"}

    def test_console_output(self, capsys):
        configure_logging(level="INFO", json_format=False)

        get_logger("test").info("elastic_ip_allocated", allocation_id="eipalloc-9")

        out = capsys.readouterr().out
        assert "elastic_ip_allocated" in out
        assert "eipalloc-9" in out


class TestOperationalEvents:
    """Operations emit identifying log events."""

    def test_release_logs_each_address(self, address_api, executor, settings):
        address_api.addresses = [ManagedAddress("eipalloc-a", "203.0.113.10")]
        manager = AddressLifecycleManager(address_api, executor=executor, settings=settings)

        with capture_logs() as logs:
            manager.release("prod-eu")

        released = [e for e in logs if e["event"] == "elastic_ip_released"]
        assert released == [
            {
                "event": "elastic_ip_released",
                "log_level": "info",
                "cluster": "prod-eu",
                "public_address": "203.0.113.10",
                "allocation_id": "eipalloc-a",
            }
        ]

    def test_mapping_create_logged_once(self, mapping_store, settings):
        engine = MappingConvergenceEngine(mapping_store, settings=settings)
        desired = RoleMapping("arn:role/X", "alice", ["system:masters"])

        with capture_logs() as logs:
            engine.map_role(desired)
            engine.map_role(desired)

        events = [e["event"] for e in logs]
        assert events.count("iam_mapping_created") == 1
        assert events.count("iam_mapping_exists") == 1
        created = next(e for e in logs if e["event"] == "iam_mapping_created")
        assert created["principal"] == "arn:role/X"
        assert created["operation"] == "map_role"

    def test_retry_logs_transient_error(self, executor):
        """Each scheduled retry carries the error that caused it."""
        error = RemoteError("in use", code=RemoteErrorCode.ADDRESS_IN_USE)

        def always_in_use():
            raise error

        with capture_logs() as logs:
            with pytest.raises(RetryExhaustedError):
                executor.run(
                    always_in_use, ConstantBackoff(delay=0.0, max_retries=2),
                    {RemoteErrorCode.ADDRESS_IN_USE},
                )

        scheduled = [e for e in logs if e["event"] == "retry_scheduled"]
        assert len(scheduled) == 1
        assert scheduled[0]["error"] is error
        assert scheduled[0]["attempt"] == 1
