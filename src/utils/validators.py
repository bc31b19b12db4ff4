"""
Input validation functions for the ChopChop application.

This module provides validation functions for user inputs including:
- String validation (required fields, length)
- Numeric validation (positive)

All validation functions raise ValidationError on failure and return
the normalized value on success.
"""

from typing import Any, Optional

from src.services.exceptions import ValidationError

from .constants import (
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_TEXT,
    ERROR_REQUIRED_FIELD,
)


def validate_required_string(value: Optional[str], field_name: str = "Field") -> str:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        The value with surrounding whitespace removed

    Raises:
        ValidationError: If the value is None, blank or not a string
    """
    if value is None:
        raise ValidationError([f"{field_name}: {ERROR_REQUIRED_FIELD}"])
    if not isinstance(value, str):
        raise ValidationError([f"{field_name}: {ERROR_INVALID_TEXT}"])
    if value.strip() == "":
        raise ValidationError([f"{field_name}: {ERROR_REQUIRED_FIELD}"])
    return value.strip()


def validate_string_length(value: str, max_length: int, field_name: str = "Field") -> None:
    """
    Validate that a string doesn't exceed maximum length.

    Raises:
        ValidationError: If the value is longer than max_length
    """
    if value and len(value) > max_length:
        raise ValidationError([f"{field_name}: Must be {max_length} characters or less"])


def validate_positive_number(value: Any, field_name: str = "Field") -> float:
    """
    Validate that a value is a positive number (> 0).

    Returns:
        The value as a float

    Raises:
        ValidationError: If the value is not a number or not positive
    """
    try:
        num_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError([f"{field_name}: {ERROR_INVALID_NUMBER}"])
    if num_value <= 0:
        raise ValidationError([f"{field_name}: {ERROR_INVALID_POSITIVE}"])
    return num_value

