"""
Enumerations shared by the ChopChop models.

This module contains enums used across models and services:
- QuantityType: Kind of measurement a quantity holds
- Difficulty: Recipe difficulty rating
"""

from enum import Enum, IntEnum


class QuantityType(str, Enum):
    """
    Kind of measurement held by a Quantity.

    Values:
        COUNT: Number of whole items (eggs, lemons), no unit
        MASS: Weight, stored in kilograms
        VOLUME: Volume, stored in liters
    """

    COUNT = "count"
    MASS = "mass"
    VOLUME = "volume"


class Difficulty(IntEnum):
    """Recipe difficulty rating, from 1 (very easy) to 5 (very hard)."""

    VERY_EASY = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    VERY_HARD = 5
