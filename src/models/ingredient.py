"""
Ingredient store models.

This module provides:
- Ingredient: an ingredient kept in the kitchen, with a fixed quantity type
- IngredientBatch: some quantity of an ingredient sharing one expiry date

Batch quantities are stored in base units (kilograms, liters or item count)
so they can be compared directly with Quantity values from parsed recipes.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Column, Date, Enum, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from src.utils import datetime_utils

from .base import BaseModel
from .enums import QuantityType
from .quantity import Quantity


class Ingredient(BaseModel):
    """
    An ingredient in the store.

    Attributes:
        name: Display name (unique)
        slug: Normalized name used for lookups (e.g., "plain_flour")
        quantity_type: QuantityType every batch of this ingredient uses
        batches: IngredientBatch records, ordered earliest expiry first
    """

    __tablename__ = "ingredients"

    name = Column(String(200), nullable=False, unique=True)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    quantity_type = Column(
        Enum(QuantityType, values_callable=lambda e: [member.value for member in e]),
        nullable=False,
        default=QuantityType.COUNT,
    )

    batches = relationship(
        "IngredientBatch",
        back_populates="ingredient",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def total_quantity(self) -> Quantity:
        """Sum of all batch quantities."""
        return Quantity(self.quantity_type, sum(batch.quantity for batch in self.batches))

    def sorted_batches(self):
        """Batches in consumption order: earliest expiry first, undated last."""
        return sorted(
            self.batches,
            key=lambda batch: (batch.expiry_date is None, batch.expiry_date or date.max, batch.id or 0),
        )


class IngredientBatch(BaseModel):
    """
    A batch of an ingredient with one expiry date.

    Attributes:
        ingredient_id: Foreign key to Ingredient
        quantity: Amount in the ingredient's base unit
        expiry_date: Optional date after which the batch is expired
    """

    __tablename__ = "ingredient_batches"

    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Float, nullable=False, default=0.0)
    expiry_date = Column(Date, nullable=True, index=True)

    ingredient = relationship("Ingredient", back_populates="batches")

    __table_args__ = (Index("idx_batch_ingredient_expiry", "ingredient_id", "expiry_date"),)

    @property
    def is_empty(self) -> bool:
        return self.as_quantity().is_zero

    def is_expired(self, on: Optional[date] = None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date < (on or datetime_utils.today())

    def as_quantity(self) -> Quantity:
        return Quantity(self.ingredient.quantity_type, self.quantity)

    def __repr__(self) -> str:
        return (
            f"IngredientBatch(id={self.id}, ingredient_id={self.ingredient_id}, "
            f"quantity={self.quantity}, expiry_date={self.expiry_date})"
        )
