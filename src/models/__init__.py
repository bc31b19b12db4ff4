"""
Models package.

This package contains the in-memory domain models (quantities, step graphs,
recipes, cooking sessions) and the SQLAlchemy ORM models of the ingredient
store.
"""

from .base import Base, BaseModel
from .enums import QuantityType, Difficulty
from .quantity import Quantity
from .graph import Node, Edge, Graph
from .recipe_step import RecipeStep, RecipeStepNode, RecipeStepGraph
from .session_recipe_step import SessionRecipeStepNode, SessionRecipeStepGraph
from .recipe import IngredientReference, RecipeIngredient, Recipe, SessionRecipe
from .ingredient import Ingredient, IngredientBatch

__all__ = [
    "Base",
    "BaseModel",
    # Value types
    "QuantityType",
    "Difficulty",
    "Quantity",
    # Graph engine
    "Node",
    "Edge",
    "Graph",
    # Recipe steps
    "RecipeStep",
    "RecipeStepNode",
    "RecipeStepGraph",
    "SessionRecipeStepNode",
    "SessionRecipeStepGraph",
    # Recipes
    "IngredientReference",
    "RecipeIngredient",
    "Recipe",
    "SessionRecipe",
    # Ingredient store
    "Ingredient",
    "IngredientBatch",
]
