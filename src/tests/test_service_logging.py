"""Tests for service layer structured logging.

These tests verify that ingredient store operations emit structured log
entries with appropriate context information.
"""

import logging

import pytest

from src.models import Quantity, QuantityType
from src.services import ingredient_service
from src.services.exceptions import InsufficientQuantity
from src.services.logging_utils import get_service_logger, log_operation


def _find_record(caplog, operation):
    return next(r for r in caplog.records if getattr(r, "operation", None) == operation)


class TestLoggingUtilities:
    """Tests for logging utility functions."""

    def test_get_service_logger_returns_logger(self):
        """get_service_logger returns a configured Logger instance."""
        logger = get_service_logger("test_module")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "chopchop.services.test_module"

    def test_get_service_logger_extracts_module_name(self):
        """get_service_logger extracts module name from full path."""
        logger = get_service_logger("src.services.ingredient_service")
        assert logger.name == "chopchop.services.ingredient_service"

    def test_log_operation_logs_at_info_level(self, caplog):
        """log_operation logs at INFO level by default."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="test_op", outcome="success", ingredient="flour")

        assert "test_op: success" in caplog.text
        assert caplog.records[0].levelno == logging.INFO

    def test_log_operation_logs_at_custom_level(self, caplog):
        """log_operation respects custom log level."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.DEBUG):
            log_operation(
                logger,
                operation="debug_op",
                outcome="debug_outcome",
                level=logging.DEBUG,
            )

        assert "debug_op: debug_outcome" in caplog.text

    def test_log_operation_includes_extra_context(self, caplog):
        """log_operation includes extra context in log records."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(
                logger,
                operation="context_test",
                outcome="success",
                recipe="Pancakes",
                step_count=3,
            )

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.operation == "context_test"
        assert record.outcome == "success"
        assert record.recipe == "Pancakes"
        assert record.step_count == 3

    def test_log_operation_prefixes_clashing_context(self, caplog):
        """Context names that clash with LogRecord attributes get a ctx_ prefix."""
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="rename", outcome="success", name="flour")

        record = caplog.records[0]
        assert record.ctx_name == "flour"
        assert record.name == "chopchop.services.test"


class TestIngredientServiceLogging:
    """Tests for ingredient_service logging."""

    def test_create_ingredient_logs_success(self, test_db, caplog):
        """Creating an ingredient logs its name and type."""
        with caplog.at_level(logging.INFO, logger="chopchop.services"):
            ingredient_service.create_ingredient("rice", QuantityType.MASS)

        record = _find_record(caplog, "create_ingredient")
        assert record.ingredient == "rice"
        assert record.quantity_type == "mass"

    def test_use_logs_batches_removed(self, stocked_store, caplog):
        """Using an ingredient logs how many batches were emptied."""
        with caplog.at_level(logging.INFO, logger="chopchop.services"):
            ingredient_service.use("milk", Quantity.volume(0.5))

        record = _find_record(caplog, "use_ingredient")
        assert record.outcome == "success"
        assert record.batches_removed == 1

    def test_use_logs_warning_when_insufficient(self, stocked_store, caplog):
        """A refused use is logged at WARNING with both quantities."""
        with caplog.at_level(logging.INFO, logger="chopchop.services"):
            with pytest.raises(InsufficientQuantity):
                ingredient_service.use("egg", Quantity.count(12))

        record = _find_record(caplog, "use_ingredient")
        assert record.levelno == logging.WARNING
        assert record.outcome == "insufficient"
        assert record.required == "12"
        assert record.available == "6"
