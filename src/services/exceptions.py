"""Service layer exception classes for ChopChop.

This module defines all custom exceptions used by the models and service
layer to provide consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── QuantityError
    │   ├── IncompatibleTypes
    │   └── NegativeQuantity
    ├── GraphError
    │   ├── MissingEndpoint
    │   └── CycleDetected
    ├── StepNotCompletable
    ├── IngredientNotFound
    ├── IngredientAlreadyExists
    ├── InsufficientQuantity
    ├── DeductionFailed
    └── DatabaseError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when data validation fails.

    Args:
        errors: List of human-readable validation messages

    Example:
        >>> raise ValidationError(["Recipe name is required"])
        ValidationError: Validation failed: Recipe name is required
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


# ============================================================================
# Quantity Exceptions
# ============================================================================


class QuantityError(ServiceError):
    """Base exception for quantity arithmetic errors."""

    pass


class IncompatibleTypes(QuantityError):
    """Raised when arithmetic mixes quantities of different types.

    Args:
        left_type: Type of the left-hand quantity
        right_type: Type of the right-hand quantity
    """

    def __init__(self, left_type, right_type):
        self.left_type = left_type
        self.right_type = right_type
        super().__init__(
            f"Cannot combine a {_type_name(left_type)} quantity "
            f"with a {_type_name(right_type)} quantity"
        )


class NegativeQuantity(QuantityError):
    """Raised when a quantity would end up below zero."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Quantity cannot be negative (got {value:g})")


# ============================================================================
# Graph Exceptions
# ============================================================================


class GraphError(ServiceError):
    """Base exception for graph mutation errors."""

    pass


class MissingEndpoint(GraphError):
    """Raised when an edge is constructed without a source or destination."""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(f"Edge is missing its {endpoint}")


class CycleDetected(GraphError):
    """Raised when a graph is not acyclic where acyclicity is required.

    The graph is left unchanged when this is raised from an edge insertion.
    """

    def __init__(self, message: str = "Graph contains a cycle"):
        super().__init__(message)


class StepNotCompletable(ServiceError):
    """Raised when completing a session step whose predecessors are not done.

    Args:
        content: Text of the step that could not be completed
        pending: Number of direct predecessors still pending
    """

    def __init__(self, content: str, pending: int):
        self.content = content
        self.pending = pending
        super().__init__(
            f"Step '{content}' cannot be completed: "
            f"{pending} previous step(s) not completed"
        )


# ============================================================================
# Ingredient Store Exceptions
# ============================================================================


class IngredientNotFound(ServiceError):
    """Raised when an ingredient cannot be found by name.

    Example:
        >>> raise IngredientNotFound("flour")
        IngredientNotFound: Ingredient 'flour' not found
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Ingredient '{name}' not found")


class IngredientAlreadyExists(ServiceError):
    """Raised when creating an ingredient whose name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Ingredient '{name}' already exists")


class InsufficientQuantity(ServiceError):
    """Raised when the store does not hold enough of an ingredient.

    Args:
        name: Ingredient name
        required: Quantity requested
        available: Quantity on hand
    """

    def __init__(self, name: str, required, available):
        self.name = name
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient quantity of {name}: required {required}, available {available}"
        )


class DeductionFailed(ServiceError):
    """Raised when completing a cooking session cannot deduct ingredients.

    Args:
        errors: Mapping of ingredient name to list of messages
    """

    def __init__(self, errors: dict):
        self.errors = errors
        parts = [f"{name}: {' '.join(messages)}" for name, messages in errors.items()]
        super().__init__("Cannot deduct ingredients: " + "; ".join(parts))


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


def _type_name(quantity_type) -> str:
    return getattr(quantity_type, "value", str(quantity_type))
