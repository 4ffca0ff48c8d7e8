"""Tests for the loguru logging bridge."""

from __future__ import annotations

import logging

from loguru import logger as loguru_logger

from hoarder_sync.core.logging_utils import InterceptHandler, generate_correlation_id


def test_correlation_ids_are_short_and_unique() -> None:
    ids = {generate_correlation_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(len(cid) == 12 for cid in ids)


def test_intercept_handler_forwards_extra_fields() -> None:
    records: list[dict] = []
    sink_id = loguru_logger.add(lambda message: records.append(message.record), level="DEBUG")
    std_logger = logging.getLogger("hoarder_sync.tests.intercept")
    std_logger.addHandler(InterceptHandler())
    std_logger.setLevel(logging.INFO)
    std_logger.propagate = False
    try:
        std_logger.info("bookmark_synced", extra={"bookmark_id": "b1"})
    finally:
        loguru_logger.remove(sink_id)
        std_logger.handlers.clear()

    assert len(records) == 1
    record = records[0]
    assert record["message"] == "bookmark_synced"
    assert record["level"].name == "INFO"
    assert record["extra"]["bookmark_id"] == "b1"
    assert record["extra"]["logger_name"] == "hoarder_sync.tests.intercept"
