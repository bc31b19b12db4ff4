"""Pytest configuration and fixtures for ChopChop tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from src.models import (
    Base,
    Edge,
    Quantity,
    QuantityType,
    Recipe,
    RecipeStepGraph,
)
from src.utils.nltk_resources import ensure_resource


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Points the service layer's session factory at it
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import src.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session


@pytest.fixture(scope="session")
def wordnet_data():
    """Skip tests that need WordNet when its data cannot be installed."""
    if not ensure_resource("wordnet"):
        pytest.skip("NLTK WordNet data unavailable")


@pytest.fixture(scope="session")
def punkt_data():
    """Skip tests that need the Punkt sentence models when they cannot be installed."""
    if not ensure_resource("punkt_tab"):
        pytest.skip("NLTK Punkt data unavailable")

@pytest.fixture
def diamond_graph():
    """Step graph shaped like a diamond: prep -> (sauce, pasta) -> serve."""
    graph = RecipeStepGraph()
    prep = graph.add_step("Chop the onions")
    sauce = graph.add_step("Simmer the sauce for 20 minutes")
    pasta = graph.add_step("Boil the pasta for 10 minutes")
    serve = graph.add_step("Serve")
    graph.add_edge(Edge(prep, sauce))
    graph.add_edge(Edge(prep, pasta))
    graph.add_edge(Edge(sauce, serve))
    graph.add_edge(Edge(pasta, serve))
    return graph, prep, sauce, pasta, serve


@pytest.fixture
def pancake_recipe():
    """A small recipe with count, mass and volume ingredients and three steps."""
    steps = RecipeStepGraph.from_step_contents(
        [
            "Whisk the eggs and milk.",
            "Fold in the flour.",
            "Fry each pancake for 2 minutes.",
        ]
    )
    recipe = Recipe("Pancakes", servings=2, step_graph=steps)
    recipe.add_ingredient("eggs", Quantity(QuantityType.COUNT, 2))
    recipe.add_ingredient("flour", Quantity.mass(0.2))
    recipe.add_ingredient("milk", Quantity.volume(0.3))
    return recipe


@pytest.fixture
def stocked_store(test_db):
    """Ingredient store holding eggs, flour and milk."""
    from datetime import date

    from src.services import ingredient_service

    ingredient_service.create_ingredient("egg", QuantityType.COUNT)
    ingredient_service.add_batch("egg", Quantity.count(6), expiry_date=date(2026, 11, 1))
    ingredient_service.create_ingredient("Flour", QuantityType.MASS)
    ingredient_service.add_batch("Flour", Quantity.mass(1.0))
    ingredient_service.create_ingredient("milk", QuantityType.VOLUME)
    ingredient_service.add_batch("milk", Quantity.volume(0.5), expiry_date=date(2026, 10, 25))
    ingredient_service.add_batch("milk", Quantity.volume(1.0), expiry_date=date(2026, 11, 5))
    return test_db
