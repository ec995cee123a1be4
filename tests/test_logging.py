"""
Tests for the JSON log pipeline.
"""
import io
import json
import logging
from decimal import Decimal

import pytest
import structlog

from marketplace_payments.database.models import ProfileType
from marketplace_payments.monitoring.logging import (
    bind_request_context,
    build_json_handler,
    clear_request_context,
    setup_logging,
)

LOGGER_NAME = "marketplace_payments.tests.logging"


@pytest.fixture
def log_stream():
    setup_logging()
    stream = io.StringIO()
    handler = build_json_handler(stream)
    std_logger = logging.getLogger(LOGGER_NAME)
    std_logger.setLevel(logging.INFO)
    std_logger.addHandler(handler)
    std_logger.propagate = False
    clear_request_context()
    yield stream
    clear_request_context()
    std_logger.removeHandler(handler)
    std_logger.propagate = True


def records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestJsonLogging:
    @pytest.mark.unit
    def test_event_fields_are_top_level(self, log_stream) -> None:
        structlog.get_logger(LOGGER_NAME).info(
            "deposit_completed", client_id=4, amount=Decimal("100.50")
        )

        (record,) = records(log_stream)
        assert record["event"] == "deposit_completed"
        assert record["level"] == "INFO"
        assert record["logger"] == LOGGER_NAME
        assert record["@timestamp"]
        assert record["client_id"] == 4
        assert record["amount"] == "100.50"

    @pytest.mark.unit
    def test_request_context_is_merged_until_cleared(self, log_stream) -> None:
        log = structlog.get_logger(LOGGER_NAME)

        bind_request_context(request_id="req-1", profile_id=7, profile_type=ProfileType.CLIENT)
        log.info("settlement_started", job_id=3)
        clear_request_context()
        log.info("request_finished")

        inside, after = records(log_stream)
        assert inside["request_id"] == "req-1"
        assert inside["profile_id"] == 7
        assert inside["profile_type"] == "client"
        assert "request_id" not in after

    @pytest.mark.unit
    def test_only_request_fields_can_be_bound(self) -> None:
        with pytest.raises(ValueError):
            bind_request_context(amount="10")
