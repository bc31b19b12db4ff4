"""
Quantity value type for ingredient amounts.

A Quantity is a tagged number: a count of items, a mass in kilograms or a
volume in liters. Unit words ("cup", "lb") are converted to these base units
before a Quantity is built (see src.services.unit_converter), so arithmetic
never has to deal with units.

Quantities are immutable; every operation returns a new Quantity.
"""

from dataclasses import dataclass

from src.services.exceptions import IncompatibleTypes, NegativeQuantity
from src.utils.constants import BASE_UNIT_SYMBOLS

from .enums import QuantityType

# Floating-point noise below this is treated as zero
QUANTITY_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Quantity:
    """
    An amount of something, normalized to a base unit.

    Attributes:
        type: QuantityType (count, mass or volume)
        value: Non-negative amount in the base unit for the type

    Raises:
        NegativeQuantity: If value is below zero
    """

    type: QuantityType
    value: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "type", QuantityType(self.type))
        value = float(self.value)
        if value < 0:
            if value > -QUANTITY_TOLERANCE:
                value = 0.0
            else:
                raise NegativeQuantity(value)
        object.__setattr__(self, "value", value)

    @classmethod
    def count(cls, value: float = 0.0) -> "Quantity":
        return cls(QuantityType.COUNT, value)

    @classmethod
    def mass(cls, kilograms: float = 0.0) -> "Quantity":
        return cls(QuantityType.MASS, kilograms)

    @classmethod
    def volume(cls, liters: float = 0.0) -> "Quantity":
        return cls(QuantityType.VOLUME, liters)

    @property
    def is_zero(self) -> bool:
        return abs(self.value) < QUANTITY_TOLERANCE

    def _check_compatible(self, other: "Quantity") -> None:
        if not isinstance(other, Quantity):
            raise TypeError(f"Expected a Quantity, got {type(other).__name__}")
        if other.type != self.type:
            raise IncompatibleTypes(self.type, other.type)

    def add(self, other: "Quantity") -> "Quantity":
        """
        Return the sum of two quantities of the same type.

        Raises:
            IncompatibleTypes: If the types differ
        """
        self._check_compatible(other)
        return Quantity(self.type, self.value + other.value)

    def subtract(self, other: "Quantity") -> "Quantity":
        """
        Return this quantity minus another of the same type.

        Raises:
            IncompatibleTypes: If the types differ
            NegativeQuantity: If the result would be below zero
        """
        self._check_compatible(other)
        return Quantity(self.type, self.value - other.value)

    def scale(self, factor: float) -> "Quantity":
        """
        Return this quantity multiplied by a factor.

        Raises:
            NegativeQuantity: If the factor is negative
        """
        return Quantity(self.type, self.value * float(factor))

    def __add__(self, other: "Quantity") -> "Quantity":
        return self.add(other)

    def __sub__(self, other: "Quantity") -> "Quantity":
        return self.subtract(other)

    def __mul__(self, factor: float) -> "Quantity":
        return self.scale(factor)

    __rmul__ = __mul__

    # Ordering is only meaningful between quantities of one type
    def __lt__(self, other: "Quantity") -> bool:
        self._check_compatible(other)
        return self.value < other.value

    def __le__(self, other: "Quantity") -> bool:
        self._check_compatible(other)
        return self.value <= other.value

    def __gt__(self, other: "Quantity") -> bool:
        self._check_compatible(other)
        return self.value > other.value

    def __ge__(self, other: "Quantity") -> bool:
        self._check_compatible(other)
        return self.value >= other.value

    def __str__(self) -> str:
        """Human-readable amount, e.g. '3', '0.5 kg', '0.375 L'."""
        symbol = BASE_UNIT_SYMBOLS.get(self.type.value)
        amount = f"{round(self.value, 6):g}"
        return f"{amount} {symbol}" if symbol else amount
