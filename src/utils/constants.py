"""
Constants for the ChopChop application.

This module defines all system-wide constants including:
- Application metadata
- Unit word tables and base-unit conversion factors
- Parser vocabulary (connector words, sentence language, time words)
- Validation limits and error messages

The unit tables are read-only mappings; they are loaded once and never
changed at runtime.
"""

from types import MappingProxyType
from typing import Dict, Mapping

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "ChopChop"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "chopchop.db"

# ============================================================================
# Unit Words
# ============================================================================

# Volume words (plurals, abbreviations) -> canonical volume unit
VOLUME_WORD_MAP: Mapping[str, str] = MappingProxyType(
    {
        "tablespoon": "tablespoon",
        "tablespoons": "tablespoon",
        "tbsp": "tablespoon",
        "teaspoon": "teaspoon",
        "teaspoons": "teaspoon",
        "tsp": "teaspoon",
        "cup": "cup",
        "cups": "cup",
        "pint": "pint",
        "pints": "pint",
        "pt": "pint",
        "quart": "quart",
        "quarts": "quart",
        "qt": "quart",
        "gallon": "gallon",
        "gallons": "gallon",
        "liter": "liter",
        "liters": "liter",
        "litre": "liter",
        "litres": "liter",
        "l": "liter",
        "ml": "milliliter",
        "milliliter": "milliliter",
        "milliliters": "milliliter",
        "fl oz": "ounce",
        "fluid ounce": "ounce",
        "fluid ounces": "ounce",
    }
)

# Mass words (plurals, abbreviations) -> canonical mass unit
MASS_WORD_MAP: Mapping[str, str] = MappingProxyType(
    {
        "gram": "gram",
        "grams": "gram",
        "g": "gram",
        "kilogram": "kilogram",
        "kilograms": "kilogram",
        "kg": "kilogram",
        "ounce": "ounce",
        "ounces": "ounce",
        "oz": "ounce",
        "pound": "pound",
        "pounds": "pound",
        "lb": "pound",
        "lbs": "pound",
    }
)

# Canonical volume unit -> liters (base unit)
VOLUME_TO_LITERS: Mapping[str, float] = MappingProxyType(
    {
        "milliliter": 0.001,
        "teaspoon": 0.005,
        "tablespoon": 0.015,
        "ounce": 0.03,
        "cup": 0.25,
        "pint": 0.5,
        "quart": 0.95,
        "gallon": 3.8,
        "liter": 1.0,
    }
)

# Canonical mass unit -> kilograms (base unit)
MASS_TO_KILOGRAMS: Mapping[str, float] = MappingProxyType(
    {
        "gram": 0.001,
        "ounce": 0.028,
        "pound": 0.454,
        "kilogram": 1.0,
    }
)

# Display symbols for base units
BASE_UNIT_SYMBOLS: Dict[str, str] = {
    "mass": "kg",
    "volume": "L",
}

# ============================================================================
# Parser Vocabulary
# ============================================================================

# Word joining a unit to the ingredient name ("2 cups of flour")
INGREDIENT_CONNECTOR = "of"

# Bullets stripped from the start of pasted ingredient lines
LIST_BULLETS = "-*•·"

# Punkt model used to split paragraphs into sentences
SENTENCE_LANGUAGE = "english"

# Time unit words -> seconds
TIME_UNIT_SECONDS: Mapping[str, int] = MappingProxyType(
    {
        "hours": 3600,
        "hour": 3600,
        "hrs": 3600,
        "hr": 3600,
        "h": 3600,
        "minutes": 60,
        "minute": 60,
        "mins": 60,
        "min": 60,
        "m": 60,
        "seconds": 1,
        "second": 1,
        "secs": 1,
        "sec": 1,
        "s": 1,
    }
)

# Duration phrases without a number -> seconds
TIME_PHRASE_SECONDS: Mapping[str, int] = MappingProxyType(
    {
        "half an hour": 1800,
        "an hour": 3600,
        "a minute": 60,
        "overnight": 8 * 3600,
    }
)

# ============================================================================
# Validation Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_STEP_LENGTH = 5000

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Must be a valid number"
ERROR_INVALID_POSITIVE = "Must be a positive number"
ERROR_INVALID_TEXT = "Must be text"
