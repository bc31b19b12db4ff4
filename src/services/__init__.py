"""Services package - Business logic layer for ChopChop.

This package contains the service modules that provide parsing, unit
conversion, ingredient store and cooking session logic.

Architecture:
- Services: Stateless functions organized by domain (parsing, ingredients, sessions)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before any mutation

Service Modules:
- recipe_parser: Free-text instruction and ingredient parsing
- step_time_parser: Time estimates for recipe steps
- unit_converter: Unit word tables and base-unit conversion
- ingredient_service: Ingredient store with earliest-expiry-first consumption
- cooking_session_service: Cooking sessions and ingredient deduction

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Structured operation logging

Service modules are imported directly (``from src.services import
recipe_parser``); this package only re-exports the exception hierarchy so
that models can depend on it without import cycles.
"""

from .exceptions import (
    ServiceError,
    ValidationError,
    QuantityError,
    IncompatibleTypes,
    NegativeQuantity,
    GraphError,
    MissingEndpoint,
    CycleDetected,
    StepNotCompletable,
    IngredientNotFound,
    IngredientAlreadyExists,
    InsufficientQuantity,
    DeductionFailed,
    DatabaseError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "QuantityError",
    "IncompatibleTypes",
    "NegativeQuantity",
    "GraphError",
    "MissingEndpoint",
    "CycleDetected",
    "StepNotCompletable",
    "IngredientNotFound",
    "IngredientAlreadyExists",
    "InsufficientQuantity",
    "DeductionFailed",
    "DatabaseError",
]
