"""Structured logging for ingredient store and cooking session services.

Each service logs through a "chopchop.services.<module>" logger and reports
operations with log_operation(), which attaches the operation name, its
outcome and any context fields to the LogRecord:

    logger = get_service_logger(__name__)
    log_operation(logger, "use_ingredient", "success", ingredient="flour")

Handlers can then filter or format on record.operation, record.ingredient
and so on.
"""

import logging
from typing import Any, Dict

SERVICE_LOGGER_PREFIX = "chopchop.services"

# Attributes every LogRecord already has; logging refuses extras that clash
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def get_service_logger(name: str) -> logging.Logger:
    """
    Logger for a service module.

    Only the last dotted part of name is kept, so both "ingredient_service"
    and "src.services.ingredient_service" give
    "chopchop.services.ingredient_service".
    """
    return logging.getLogger(f"{SERVICE_LOGGER_PREFIX}.{name.rsplit('.', 1)[-1]}")


def _record_fields(operation: str, outcome: str, context: Dict[str, Any]) -> Dict[str, Any]:
    fields = {"operation": operation, "outcome": outcome}
    for key, value in context.items():
        fields[f"ctx_{key}" if key in _RESERVED else key] = value
    return fields


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log "<operation>: <outcome>" with context fields on the record.

    Args:
        logger: Service logger from get_service_logger()
        operation: What was attempted, e.g. "use_ingredient"
        outcome: How it ended, e.g. "success" or "insufficient"
        level: Log level; refusals are usually logged at WARNING
        **context: Extra record fields such as recipe, ingredient or
            step_id. Names that clash with LogRecord attributes
            (e.g. "name") are stored with a "ctx_" prefix.
    """
    logger.log(level, f"{operation}: {outcome}", extra=_record_fields(operation, outcome, context))
