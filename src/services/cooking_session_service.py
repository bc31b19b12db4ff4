"""Cooking Session Service - Running a recipe and deducting what it used.

This module provides:
- start_session: snapshot a recipe into a SessionRecipe with all steps pending
- toggle_step: complete/uncomplete a step, gated by its predecessors
- deductible_ingredients: match recipe ingredients to store ingredients
- complete_session: deduct the used quantities from the ingredient store
- build_recipe_from_text: the paste workflow (ingredient text + instruction
  text -> Recipe with a linear step graph)

Completing a session is all-or-nothing: every deduction is validated first
and, only if all of them can be made, they are applied in one transaction.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.graph import Node
from ..models.quantity import Quantity
from ..models.recipe import Recipe, RecipeIngredient, SessionRecipe
from ..models.recipe_step import RecipeStepGraph
from . import ingredient_service
from .database import session_scope
from .exceptions import DeductionFailed, IncompatibleTypes, StepNotCompletable
from .logging_utils import get_service_logger, log_operation
from .recipe_parser import parse_ingredient_list, parse_instructions

logger = get_service_logger(__name__)

ERROR_INCOMPATIBLE = "Quantity type does not match the stored ingredient. Change type to {suggestion}."
ERROR_INSUFFICIENT = "Insufficient ingredient quantity to deduct ingredient."


@dataclass
class DeductibleIngredient:
    """A recipe ingredient matched to an ingredient in the store.

    Attributes:
        ingredient_name: Name of the matched store ingredient
        recipe_ingredient: The recipe's ingredient line
    """

    ingredient_name: str
    recipe_ingredient: RecipeIngredient

    @property
    def quantity(self) -> Quantity:
        return self.recipe_ingredient.quantity


def start_session(recipe: Recipe) -> SessionRecipe:
    """Start cooking a recipe.

    The session holds a snapshot of the recipe taken now; later edits to the
    recipe do not reach it.

    Raises:
        CycleDetected: If the recipe's step graph is not acyclic
    """
    session_recipe = SessionRecipe(recipe)
    log_operation(
        logger,
        "start_session",
        "success",
        recipe=recipe.name,
        step_count=len(session_recipe.step_graph),
        total_time_taken=session_recipe.step_graph.total_time_taken,
    )
    return session_recipe


def toggle_step(session_recipe: SessionRecipe, node: Node) -> bool:
    """Flip a step between pending and completed.

    Returns:
        The step's new completion state

    Raises:
        StepNotCompletable: If completing a step whose predecessors are pending
        ValidationError: If the node is not part of the session
    """
    try:
        completed = session_recipe.step_graph.toggle_step(node)
    except StepNotCompletable as e:
        log_operation(
            logger,
            "toggle_step",
            "not_completable",
            level=logging.WARNING,
            recipe=session_recipe.name,
            step_id=str(node.id),
            pending_predecessors=e.pending,
        )
        raise

    log_operation(
        logger,
        "toggle_step",
        "completed" if completed else "uncompleted",
        level=logging.DEBUG,
        recipe=session_recipe.name,
        step_id=str(node.id),
        remaining_time_taken=session_recipe.step_graph.remaining_time_taken,
    )
    return completed


def deductible_ingredients(
    recipe: Recipe, session: Optional[Session] = None
) -> List[DeductibleIngredient]:
    """Recipe ingredients that have a counterpart in the ingredient store.

    Matching is by exact name, then case-insensitive, then ignoring plurals.
    Recipe ingredients with no match are left out.
    """
    matched = []
    for recipe_ingredient in recipe.ingredients:
        ingredient = ingredient_service.find_matching_ingredient(
            recipe_ingredient.name, session=session
        )
        if ingredient is not None:
            matched.append(DeductibleIngredient(ingredient.name, recipe_ingredient))
    return matched


def _incompatible_message(quantity: Quantity) -> str:
    suggestion = "mass/volume" if quantity.type.value == "count" else "count"
    return ERROR_INCOMPATIBLE.format(suggestion=suggestion)


def _collect_deductions(
    deductions: List[DeductibleIngredient],
    overrides: Dict[str, Quantity],
    errors: Dict[str, List[str]],
) -> Dict[str, Quantity]:
    # Several recipe lines may match one store ingredient
    quantities: Dict[str, Quantity] = {}
    for deduction in deductions:
        quantity = overrides.get(deduction.recipe_ingredient.name, deduction.quantity)
        if quantity.is_zero:
            continue
        previous = quantities.get(deduction.ingredient_name)
        if previous is None:
            quantities[deduction.ingredient_name] = quantity
            continue
        try:
            quantities[deduction.ingredient_name] = previous + quantity
        except IncompatibleTypes:
            errors.setdefault(deduction.ingredient_name, []).append(_incompatible_message(quantity))
    return quantities


def _validate_deductions(
    quantities: Dict[str, Quantity],
    errors: Dict[str, List[str]],
    sess: Session,
) -> None:
    for ingredient_name, quantity in quantities.items():
        try:
            enough = ingredient_service.contains(ingredient_name, quantity, session=sess)
        except IncompatibleTypes:
            errors.setdefault(ingredient_name, []).append(_incompatible_message(quantity))
            continue
        if not enough:
            errors.setdefault(ingredient_name, []).append(ERROR_INSUFFICIENT)


def complete_session(
    session_recipe: SessionRecipe,
    overrides: Optional[Dict[str, Quantity]] = None,
    session: Optional[Session] = None,
) -> Dict[str, Quantity]:
    """Deduct the ingredients a cooked recipe used from the store.

    Args:
        session_recipe: The session being completed
        overrides: Optional recipe ingredient name -> Quantity actually used,
                   replacing the recipe's quantity. A zero quantity skips the
                   ingredient.
        session: Optional database session

    Returns:
        Dict of store ingredient name -> Quantity deducted

    Raises:
        DeductionFailed: If any deduction has a type mismatch or the store
            holds too little; nothing is deducted
    """
    overrides = overrides or {}
    recipe = session_recipe.recipe

    def _do_complete(sess: Session) -> Dict[str, Quantity]:
        errors: Dict[str, List[str]] = {}
        quantities = _collect_deductions(
            deductible_ingredients(recipe, session=sess), overrides, errors
        )
        _validate_deductions(quantities, errors, sess)
        if errors:
            log_operation(
                logger,
                "complete_session",
                "deduction_failed",
                level=logging.WARNING,
                recipe=recipe.name,
                failed_ingredients=sorted(errors),
            )
            raise DeductionFailed(errors)

        for ingredient_name, quantity in quantities.items():
            ingredient_service.use(ingredient_name, quantity, session=sess)

        log_operation(
            logger,
            "complete_session",
            "success",
            recipe=recipe.name,
            deducted=sorted(quantities),
            steps_completed=len(session_recipe.step_graph.completed_nodes),
        )
        return quantities

    if session is not None:
        return _do_complete(session)
    with session_scope() as sess:
        return _do_complete(sess)


def build_recipe_from_text(
    name: str,
    ingredient_text: str,
    instruction_text: str,
    servings: float = 1,
) -> Recipe:
    """Build a recipe from pasted ingredient and instruction text.

    Ingredients are parsed line by line; instructions become a chain of
    steps, each depending on the one before.

    Raises:
        ValidationError: If the name is blank or servings not positive
    """
    ingredients = parse_ingredient_list(ingredient_text)
    steps = parse_instructions(instruction_text)

    recipe = Recipe(name, servings=servings, step_graph=RecipeStepGraph.from_step_contents(steps))
    for ingredient_name, quantity in ingredients.items():
        recipe.add_ingredient(ingredient_name, quantity)

    logger.debug(
        f"Built recipe '{recipe.name}' with {len(ingredients)} ingredient(s) "
        f"and {len(steps)} step(s)"
    )
    return recipe
