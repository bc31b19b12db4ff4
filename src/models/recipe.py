"""
Recipe models.

This module provides:
- IngredientReference: an ingredient name paired with a Quantity
- RecipeIngredient: an ingredient line of a recipe (renamable)
- Recipe: name, servings, difficulty, ingredients and step graph
- SessionRecipe: a recipe snapshot being cooked

Ingredient arithmetic is delegated to Quantity; its IncompatibleTypes and
NegativeQuantity errors propagate unchanged and leave the ingredient as it
was.
"""

from typing import Iterable, List, Optional, Union

from src.services.exceptions import ValidationError
from src.utils.constants import MAX_NAME_LENGTH
from src.utils.validators import (
    validate_positive_number,
    validate_required_string,
    validate_string_length,
)

from .enums import Difficulty
from .quantity import Quantity
from .recipe_step import RecipeStepGraph
from .session_recipe_step import SessionRecipeStepGraph


def _clean_name(name: str, field_name: str) -> str:
    name = validate_required_string(name, field_name)
    validate_string_length(name, MAX_NAME_LENGTH, field_name)
    return name


class IngredientReference:
    """
    Some quantity of a named ingredient.

    The quantity is replaced, never mutated, so references handed out
    earlier keep their value.

    Attributes:
        name: Ingredient name (trimmed, non-empty)
        quantity: Quantity of the ingredient
    """

    def __init__(self, name: str, quantity: Quantity):
        self._name = _clean_name(name, "Ingredient name")
        self.quantity = quantity

    @property
    def name(self) -> str:
        return self._name

    def add(self, quantity: Quantity) -> None:
        self.quantity = self.quantity.add(quantity)

    def subtract(self, quantity: Quantity) -> None:
        self.quantity = self.quantity.subtract(quantity)

    def scale(self, factor: float) -> None:
        self.quantity = self.quantity.scale(factor)

    def copy(self):
        return self.__class__(self._name, self.quantity)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IngredientReference):
            return NotImplemented
        return self._name == other._name and self.quantity == other.quantity

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r}, quantity={self.quantity})"


class RecipeIngredient(IngredientReference):
    """An ingredient line of a recipe."""

    def rename(self, name: str) -> None:
        self._name = _clean_name(name, "Ingredient name")

    def update_quantity(self, quantity: Quantity) -> None:
        self.quantity = quantity


class Recipe:
    """
    A recipe.

    Attributes:
        name: Recipe name (trimmed, non-empty)
        servings: Number of servings the quantities are for (> 0)
        difficulty: Optional Difficulty rating
        ingredients: Ingredient lines; names are unique
        step_graph: RecipeStepGraph of the instructions

    Raises:
        ValidationError: On a blank name or non-positive servings
    """

    def __init__(
        self,
        name: str,
        servings: float = 1,
        difficulty: Optional[Difficulty] = None,
        ingredients: Iterable[IngredientReference] = (),
        step_graph: Optional[RecipeStepGraph] = None,
    ):
        self._name = _clean_name(name, "Recipe name")
        self._servings = validate_positive_number(servings, "Servings")
        self.difficulty = Difficulty(difficulty) if difficulty is not None else None
        self._ingredients: List[RecipeIngredient] = []
        for ingredient in ingredients:
            self.add_ingredient(ingredient.name, ingredient.quantity)
        self.step_graph = step_graph if step_graph is not None else RecipeStepGraph()

    @property
    def name(self) -> str:
        return self._name

    @property
    def servings(self) -> float:
        return self._servings

    @property
    def ingredients(self) -> List[RecipeIngredient]:
        return list(self._ingredients)

    @property
    def total_time_taken(self) -> int:
        """Total estimated seconds over all steps."""
        return self.step_graph.total_time_taken

    def rename(self, name: str) -> None:
        self._name = _clean_name(name, "Recipe name")

    def update_servings(self, servings: float) -> None:
        self._servings = validate_positive_number(servings, "Servings")

    # ------------------------------------------------------------------
    # Ingredients
    # ------------------------------------------------------------------

    def get_ingredient(self, name: str) -> Optional[RecipeIngredient]:
        name = name.strip()
        return next((i for i in self._ingredients if i.name == name), None)

    def add_ingredient(self, name: str, quantity: Quantity) -> RecipeIngredient:
        """
        Add an ingredient, merging into an existing line of the same name.

        Raises:
            IncompatibleTypes: If merging quantities of different types
        """
        existing = self.get_ingredient(_clean_name(name, "Ingredient name"))
        if existing is not None:
            existing.add(quantity)
            return existing
        ingredient = RecipeIngredient(name, quantity)
        self._ingredients.append(ingredient)
        return ingredient

    def remove_ingredient(self, ingredient: Union[RecipeIngredient, str]) -> None:
        """
        Raises:
            ValidationError: If the recipe has no such ingredient
        """
        name = ingredient if isinstance(ingredient, str) else ingredient.name
        existing = self.get_ingredient(name)
        if existing is None:
            raise ValidationError([f"Recipe has no ingredient '{name}'"])
        self._ingredients.remove(existing)

    def update_ingredient(
        self, old_ingredient: Union[RecipeIngredient, str], name: str, quantity: Quantity
    ) -> RecipeIngredient:
        """
        Rename and/or requantify an ingredient line.

        Renaming onto another existing ingredient merges the two lines.

        Returns:
            The ingredient line now holding the quantity

        Raises:
            ValidationError: If old_ingredient is not in the recipe
            IncompatibleTypes: If a merge mixes quantity types
        """
        old_name = old_ingredient if isinstance(old_ingredient, str) else old_ingredient.name
        existing = self.get_ingredient(old_name)
        if existing is None:
            raise ValidationError([f"Recipe has no ingredient '{old_name}'"])

        name = _clean_name(name, "Ingredient name")
        if name == existing.name:
            existing.update_quantity(quantity)
            return existing

        target = self.get_ingredient(name)
        if target is None:
            existing.rename(name)
            existing.update_quantity(quantity)
            return existing

        target.add(quantity)
        self._ingredients.remove(existing)
        return target

    def scaled_ingredients(self, servings: float) -> List[IngredientReference]:
        """Ingredient references rescaled from this recipe's servings to servings."""
        factor = validate_positive_number(servings, "Servings") / self._servings
        scaled = []
        for ingredient in self._ingredients:
            reference = IngredientReference(ingredient.name, ingredient.quantity)
            reference.scale(factor)
            scaled.append(reference)
        return scaled

    def copy(self) -> "Recipe":
        return Recipe(
            self._name,
            servings=self._servings,
            difficulty=self.difficulty,
            ingredients=[i.copy() for i in self._ingredients],
            step_graph=self.step_graph.copy(),
        )

    def __repr__(self) -> str:
        return f"Recipe(name='{self._name}', servings={self._servings:g})"


class SessionRecipe:
    """
    A recipe being cooked.

    Holds its own copy of the recipe, so edits made to the recipe while
    cooking do not change the session.
    """

    def __init__(self, recipe: Recipe):
        self.recipe = recipe.copy()
        self.step_graph = SessionRecipeStepGraph(self.recipe.step_graph)

    @property
    def name(self) -> str:
        return self.recipe.name

    @property
    def ingredients(self) -> List[RecipeIngredient]:
        return self.recipe.ingredients

    @property
    def is_complete(self) -> bool:
        return self.step_graph.is_complete
