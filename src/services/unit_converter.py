"""
Unit conversion for the ChopChop recipe parser.

This module provides:
- Unit word lookup (plurals and abbreviations to canonical units)
- Conversion of amounts to base units (kilograms, liters)
- Numeral parsing (integers, decimals, fractions, mixed numbers)
- Construction of Quantity values from a parsed amount and unit word

Conversion Strategy:
- Mass units convert through kilograms (base unit)
- Volume units convert through liters (base unit)
- An amount with no recognised unit is a count of items
- Volume words are checked before mass words, so "fl oz" is a volume and
  plain "oz" is a mass
"""

import re
from typing import Mapping, Optional, Tuple

from src.models.enums import QuantityType
from src.models.quantity import Quantity
from src.services.exceptions import NegativeQuantity
from src.utils.constants import (
    MASS_TO_KILOGRAMS,
    MASS_WORD_MAP,
    VOLUME_TO_LITERS,
    VOLUME_WORD_MAP,
)

_WHITESPACE = re.compile(r"\s+")
_MIXED_NUMBER = re.compile(r"^(\d+)\s+(\d+\s*/\s*\d+)$")


# ============================================================================
# Unit Type Detection
# ============================================================================


def _normalize_unit(unit: str) -> str:
    return _WHITESPACE.sub(" ", unit.strip().lower())


def canonical_unit(unit: Optional[str]) -> Optional[str]:
    """
    Resolve a unit word to its canonical unit.

    Args:
        unit: Unit word as written (e.g., "Cups", "tbsp", "fl oz")

    Returns:
        Canonical unit (e.g., "cup", "tablespoon", "ounce"), or None if the
        word is not a known unit
    """
    if not unit:
        return None
    unit_lower = _normalize_unit(unit)
    if unit_lower in VOLUME_WORD_MAP:
        return VOLUME_WORD_MAP[unit_lower]
    return MASS_WORD_MAP.get(unit_lower)


def get_unit_type(unit: Optional[str]) -> str:
    """
    Determine the type of a unit word.

    Args:
        unit: Unit word

    Returns:
        Unit type: "volume", "mass", or "unknown"
    """
    if not unit:
        return "unknown"
    unit_lower = _normalize_unit(unit)
    if unit_lower in VOLUME_WORD_MAP:
        return QuantityType.VOLUME.value
    if unit_lower in MASS_WORD_MAP:
        return QuantityType.MASS.value
    return "unknown"


def _conversion_table(unit_type: str) -> Optional[Mapping[str, float]]:
    if unit_type == QuantityType.VOLUME.value:
        return VOLUME_TO_LITERS
    if unit_type == QuantityType.MASS.value:
        return MASS_TO_KILOGRAMS
    return None


def unit_words() -> Tuple[str, ...]:
    """
    All known unit words, longest first.

    Longest-first order lets a regex alternation built from these words
    prefer "tbsp" over "t..." style prefixes and "fl oz" over "oz".
    """
    return tuple(sorted(set(VOLUME_WORD_MAP) | set(MASS_WORD_MAP), key=lambda w: (-len(w), w)))


def unit_pattern() -> str:
    """Regex alternation matching any known unit word (spaces match any whitespace)."""
    return "|".join(
        r"\s+".join(re.escape(part) for part in word.split(" ")) for word in unit_words()
    )


# ============================================================================
# Base Unit Conversions
# ============================================================================


def convert_to_base_unit(value: float, unit: str) -> Tuple[bool, float, str]:
    """
    Convert an amount to the base unit of its type.

    Args:
        value: Amount in the given unit
        unit: Unit word (e.g., "cups", "lb")

    Returns:
        Tuple of (success, converted_value, error_message)
        - success: True if conversion successful
        - converted_value: Amount in kilograms or liters (0.0 if failed)
        - error_message: Error description (empty string if successful)
    """
    if value < 0:
        return False, 0.0, "Value cannot be negative"

    table = _conversion_table(get_unit_type(unit))
    if table is None:
        return False, 0.0, f"Unknown unit: {unit}"

    return True, value * table[canonical_unit(unit)], ""


# ============================================================================
# Numerals
# ============================================================================


def parse_fraction(text: str) -> float:
    """
    Parse a fraction such as "3/4".

    Returns:
        The fraction's value, or 0.0 if the text is malformed or the
        denominator is zero
    """
    parts = text.split("/")
    if len(parts) != 2:
        return 0.0
    try:
        numerator = float(parts[0].strip())
        denominator = float(parts[1].strip())
    except ValueError:
        return 0.0
    if denominator == 0:
        return 0.0
    return numerator / denominator


def parse_numeral(text: str) -> float:
    """
    Parse an integer, decimal, fraction or mixed number ("1 1/2").

    Returns:
        The numeric value, or 0.0 if the text is not a numeral
    """
    text = text.strip()
    mixed = _MIXED_NUMBER.match(text)
    if mixed:
        return float(mixed.group(1)) + parse_fraction(mixed.group(2))
    if "/" in text:
        return parse_fraction(text)
    try:
        return float(text)
    except ValueError:
        return 0.0


# ============================================================================
# Quantities
# ============================================================================


def parse_quantity(value: float, unit: Optional[str] = None) -> Quantity:
    """
    Build a Quantity from an amount and an optional unit word.

    Args:
        value: Amount in the given unit
        unit: Unit word; None or an unknown word gives a count

    Returns:
        Quantity in base units

    Raises:
        NegativeQuantity: If the amount is below zero

    Example:
        >>> parse_quantity(1.5, "cup")
        Quantity(type=<QuantityType.VOLUME: 'volume'>, value=0.375)
    """
    unit_type = get_unit_type(unit)
    if unit_type == "unknown":
        return Quantity(QuantityType.COUNT, value)

    success, base_value, _ = convert_to_base_unit(value, unit)
    if not success:
        raise NegativeQuantity(value)
    return Quantity(QuantityType(unit_type), base_value)
