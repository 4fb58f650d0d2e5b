"""
Tests for logging configuration and request ID context.
"""

import json
import logging
from unittest.mock import patch

from inventory_rest.config import settings
from inventory_rest.logging_config import (
    HumanReadableFormatter,
    StructuredFormatter,
    clear_request_id,
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)


def make_record(message: str = "REST request failed") -> logging.LogRecord:
    record = logging.LogRecord(
        name="inventory_rest.transport",
        level=logging.ERROR,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.extra_fields = {"status_code": 404, "url": "http://host/item"}
    return record


def test_request_id_lifecycle() -> None:
    generated = set_request_id()
    assert get_request_id() == generated

    set_request_id("fixed-id")
    assert get_request_id() == "fixed-id"

    clear_request_id()
    assert get_request_id() is None


def test_structured_formatter_outputs_json() -> None:
    set_request_id("abc12345-request")
    try:
        output = StructuredFormatter().format(make_record())
    finally:
        clear_request_id()

    data = json.loads(output)
    assert data["level"] == "ERROR"
    assert data["message"] == "REST request failed"
    assert data["request_id"] == "abc12345-request"
    assert data["status_code"] == 404


def test_human_readable_formatter_includes_fields() -> None:
    output = HumanReadableFormatter().format(make_record())

    assert "REST request failed" in output
    assert "status_code=404" in output
    assert "[inventory_rest.transport]" in output


def test_setup_logging_configures_root() -> None:
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        logger = setup_logging("WARNING", service_name="inventory-test", use_json=True)

        assert logger.name == "inventory-test"
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_get_logger_default_name() -> None:
    assert get_logger().name == "inventory-rest"
    assert get_logger("inventory_rest.x").name == "inventory_rest.x"


def test_setup_logging_defaults_to_settings() -> None:
    """
    Test that setup_logging without arguments follows LOG_LEVEL and LOG_JSON.
    """
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    try:
        with patch.object(settings, "LOG_LEVEL", "ERROR"), patch.object(
            settings, "LOG_JSON", True
        ):
            setup_logging()

        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
