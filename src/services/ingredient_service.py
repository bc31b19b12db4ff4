"""Ingredient Service - Ingredient store with expiry-ordered consumption.

This module provides business logic for the kitchen's ingredient store:
ingredients, the batches they are kept in, and checking and using quantities
when a recipe is cooked.

All functions are stateless and use session_scope() for transaction
management. Every function accepts an optional ``session``; when given, the
caller owns the transaction and nothing is committed here.

Key Features:
- Ingredients have a fixed QuantityType (count, mass or volume)
- Batches carry an optional expiry date
- **Earliest-expiry-first consumption** - batches expiring soonest are used
  first, undated batches last
- Empty batches are deleted after use
- Name matching tolerant of case and plurals ("Eggs" finds "egg")

Example Usage:
    >>> from datetime import date
    >>> from src.models import Quantity, QuantityType
    >>> from src.services.ingredient_service import create_ingredient, add_batch, use
    >>>
    >>> create_ingredient("flour", QuantityType.MASS)
    >>> add_batch("flour", Quantity.mass(1.0), expiry_date=date(2026, 3, 1))
    >>> use("flour", Quantity.mass(0.25))
    >>> get_total_quantity("flour")
    Quantity(type=<QuantityType.MASS: 'mass'>, value=0.75)
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.enums import QuantityType
from ..models.ingredient import Ingredient, IngredientBatch
from ..models.quantity import Quantity
from ..utils import datetime_utils
from ..utils.constants import MAX_NAME_LENGTH
from ..utils.slug_utils import create_slug, names_match
from ..utils.validators import validate_required_string, validate_string_length
from .database import session_scope
from .exceptions import (
    DatabaseError,
    IncompatibleTypes,
    IngredientAlreadyExists,
    IngredientNotFound,
    InsufficientQuantity,
    ServiceError,
)
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


def _run(operation, description: str, session: Optional[Session]):
    """Run operation(sess) in the caller's session or a new session_scope().

    Service errors propagate unchanged; anything else is wrapped in
    DatabaseError.
    """
    try:
        if session is not None:
            return operation(session)
        with session_scope() as sess:
            return operation(sess)
    except ServiceError:
        raise
    except Exception as e:
        log_operation(logger, description, "error", level=logging.ERROR, error=str(e))
        raise DatabaseError(f"Failed to {description.replace('_', ' ')}", original_error=e)


def _clean_name(name: str) -> str:
    name = validate_required_string(name, "Ingredient name")
    validate_string_length(name, MAX_NAME_LENGTH, "Ingredient name")
    return name


def _get_by_name(sess: Session, name: str) -> Ingredient:
    ingredient = sess.query(Ingredient).filter(Ingredient.name == name.strip()).first()
    if ingredient is None:
        raise IngredientNotFound(name)
    return ingredient


def _check_type(ingredient: Ingredient, quantity: Quantity) -> None:
    if QuantityType(ingredient.quantity_type) != quantity.type:
        raise IncompatibleTypes(ingredient.quantity_type, quantity.type)


# ============================================================================
# Ingredients
# ============================================================================


def create_ingredient(
    name: str,
    quantity_type: QuantityType = QuantityType.COUNT,
    session: Optional[Session] = None,
) -> Ingredient:
    """Create an ingredient with no batches.

    Args:
        name: Ingredient name (trimmed, must be unique)
        quantity_type: QuantityType every batch of the ingredient will use
        session: Optional database session for transaction composability

    Returns:
        Ingredient: Created ingredient with generated slug and ID

    Raises:
        ValidationError: If the name is blank or too long
        IngredientAlreadyExists: If an ingredient already has this name
        DatabaseError: If database operation fails
    """
    name = _clean_name(name)
    quantity_type = QuantityType(quantity_type)

    def _do_create(sess: Session) -> Ingredient:
        if sess.query(Ingredient).filter(Ingredient.name == name).first() is not None:
            raise IngredientAlreadyExists(name)
        ingredient = Ingredient(
            name=name,
            slug=create_slug(name, sess),
            quantity_type=quantity_type,
            batches=[],
        )
        sess.add(ingredient)
        sess.flush()
        log_operation(
            logger,
            "create_ingredient",
            "success",
            ingredient=name,
            quantity_type=quantity_type.value,
        )
        return ingredient

    return _run(_do_create, "create_ingredient", session)


def get_ingredient(name: str, session: Optional[Session] = None) -> Ingredient:
    """Retrieve an ingredient by exact name.

    Raises:
        IngredientNotFound: If no ingredient has this name
    """
    return _run(lambda sess: _get_by_name(sess, name), "get_ingredient", session)


def find_matching_ingredient(name: str, session: Optional[Session] = None) -> Optional[Ingredient]:
    """Find the store ingredient a recipe ingredient name refers to.

    Tries, in order:
        1. Exact name
        2. Case-insensitive name
        3. Case-insensitive name ignoring plurals ("Eggs" -> "egg")

    Returns:
        The matching Ingredient, or None if nothing matches
    """
    stripped = name.strip() if name else ""
    if not stripped:
        return None

    def _do_find(sess: Session) -> Optional[Ingredient]:
        exact = sess.query(Ingredient).filter(Ingredient.name == stripped).first()
        if exact is not None:
            return exact

        case_insensitive = (
            sess.query(Ingredient)
            .filter(func.lower(Ingredient.name) == stripped.lower())
            .order_by(Ingredient.id)
            .first()
        )
        if case_insensitive is not None:
            return case_insensitive

        for candidate in sess.query(Ingredient).order_by(Ingredient.id).all():
            if names_match(candidate.name, stripped):
                return candidate
        return None

    return _run(_do_find, "find_matching_ingredient", session)


def list_ingredients(session: Optional[Session] = None) -> List[Ingredient]:
    """All ingredients, sorted by name."""
    return _run(
        lambda sess: sess.query(Ingredient).order_by(Ingredient.name).all(),
        "list_ingredients",
        session,
    )


def delete_ingredient(name: str, session: Optional[Session] = None) -> None:
    """Delete an ingredient and all of its batches.

    Raises:
        IngredientNotFound: If no ingredient has this name
    """

    def _do_delete(sess: Session) -> None:
        ingredient = _get_by_name(sess, name)
        sess.delete(ingredient)
        sess.flush()
        log_operation(logger, "delete_ingredient", "success", ingredient=ingredient.name)

    _run(_do_delete, "delete_ingredient", session)


# ============================================================================
# Batches and quantities
# ============================================================================


def add_batch(
    name: str,
    quantity: Quantity,
    expiry_date: Optional[date] = None,
    session: Optional[Session] = None,
) -> IngredientBatch:
    """Add a batch of an ingredient.

    A batch with the same expiry date as an existing one is merged into it.

    Args:
        name: Ingredient name
        quantity: Quantity to add; its type must match the ingredient's
        expiry_date: Optional date the batch expires
        session: Optional database session

    Returns:
        IngredientBatch: The batch now holding the quantity

    Raises:
        IngredientNotFound: If no ingredient has this name
        IncompatibleTypes: If quantity's type differs from the ingredient's
    """

    def _do_add(sess: Session) -> IngredientBatch:
        ingredient = _get_by_name(sess, name)
        _check_type(ingredient, quantity)

        batch = next(
            (b for b in ingredient.batches if b.expiry_date == expiry_date),
            None,
        )
        if batch is None:
            batch = IngredientBatch(quantity=quantity.value, expiry_date=expiry_date)
            ingredient.batches.append(batch)
        else:
            batch.quantity = batch.as_quantity().add(quantity).value
        sess.flush()

        log_operation(
            logger,
            "add_batch",
            "success",
            ingredient=ingredient.name,
            quantity=str(quantity),
            expiry_date=expiry_date.isoformat() if expiry_date else None,
        )
        return batch

    return _run(_do_add, "add_batch", session)


def get_total_quantity(name: str, session: Optional[Session] = None) -> Quantity:
    """Total quantity of an ingredient over all batches.

    Raises:
        IngredientNotFound: If no ingredient has this name
    """
    return _run(lambda sess: _get_by_name(sess, name).total_quantity, "get_total_quantity", session)


def contains(name: str, quantity: Quantity, session: Optional[Session] = None) -> bool:
    """True if the store holds at least quantity of the ingredient.

    Raises:
        IngredientNotFound: If no ingredient has this name
        IncompatibleTypes: If quantity's type differs from the ingredient's
    """

    def _do_contains(sess: Session) -> bool:
        ingredient = _get_by_name(sess, name)
        _check_type(ingredient, quantity)
        return ingredient.total_quantity >= quantity

    return _run(_do_contains, "contains", session)


def use(name: str, quantity: Quantity, session: Optional[Session] = None) -> Dict[str, Any]:
    """Use up some quantity of an ingredient.

    Algorithm:
        1. Check the total over all batches covers quantity
        2. Take from batches in order of expiry, earliest first, undated last
        3. Delete batches that are left empty

    Args:
        name: Ingredient name
        quantity: Quantity to use
        session: Optional database session. If provided, the caller owns the
                 transaction and this function will NOT commit.

    Returns:
        Dict[str, Any]: Consumption result with keys:
            - "consumed" (Quantity): Amount used
            - "breakdown" (List[Dict]): Per-batch amounts taken
            - "batches_removed" (int): Number of batches emptied and deleted

    Raises:
        IngredientNotFound: If no ingredient has this name
        IncompatibleTypes: If quantity's type differs from the ingredient's
        InsufficientQuantity: If the store holds less than quantity; no batch
            is changed
    """

    def _do_use(sess: Session) -> Dict[str, Any]:
        ingredient = _get_by_name(sess, name)
        _check_type(ingredient, quantity)

        available = ingredient.total_quantity
        if available < quantity and not (quantity - available).is_zero:
            log_operation(
                logger,
                "use_ingredient",
                "insufficient",
                level=logging.WARNING,
                ingredient=ingredient.name,
                required=str(quantity),
                available=str(available),
            )
            raise InsufficientQuantity(ingredient.name, quantity, available)

        remaining = quantity
        breakdown = []
        batches_removed = 0
        for batch in ingredient.sorted_batches():
            if remaining.is_zero:
                break
            held = batch.as_quantity()
            taken = min(held, remaining)
            remaining = Quantity(remaining.type, max(remaining.value - taken.value, 0.0))
            left = Quantity(held.type, max(held.value - taken.value, 0.0))

            breakdown.append(
                {
                    "batch_id": batch.id,
                    "expiry_date": batch.expiry_date,
                    "quantity_used": taken,
                    "remaining_in_batch": left,
                }
            )

            if left.is_zero:
                ingredient.batches.remove(batch)
                batches_removed += 1
            else:
                batch.quantity = left.value
        sess.flush()

        log_operation(
            logger,
            "use_ingredient",
            "success",
            ingredient=ingredient.name,
            consumed=str(quantity),
            batches_consumed=len(breakdown),
            batches_removed=batches_removed,
        )
        return {
            "consumed": quantity,
            "breakdown": breakdown,
            "batches_removed": batches_removed,
        }

    return _run(_do_use, "use_ingredient", session)


def remove_expired_batches(today: Optional[date] = None, session: Optional[Session] = None) -> int:
    """Delete every batch whose expiry date is before today.

    Args:
        today: Reference date (default: the local date)

    Returns:
        Number of batches removed
    """
    reference = today or datetime_utils.today()

    def _do_remove(sess: Session) -> int:
        expired = (
            sess.query(IngredientBatch)
            .filter(IngredientBatch.expiry_date.isnot(None))
            .filter(IngredientBatch.expiry_date < reference)
            .all()
        )
        for batch in expired:
            batch.ingredient.batches.remove(batch)
        sess.flush()
        log_operation(
            logger,
            "remove_expired_batches",
            "success",
            reference_date=reference.isoformat(),
            batches_removed=len(expired),
        )
        return len(expired)

    return _run(_do_remove, "remove_expired_batches", session)
