"""
Tests for the ingredient store service.

Tests cover:
- Ingredient CRUD and slug generation
- Name matching tolerant of case and plurals
- Batches and expiry-ordered consumption
- Transaction ownership and error wrapping
"""

from datetime import date

import pytest

from src.models import Quantity, QuantityType
from src.services import ingredient_service
from src.services.exceptions import (
    DatabaseError,
    IncompatibleTypes,
    IngredientAlreadyExists,
    IngredientNotFound,
    InsufficientQuantity,
    ValidationError,
)


class TestIngredientCrud:
    """Test creating, reading and deleting ingredients."""

    def test_create_ingredient(self, test_db):
        """A new ingredient has a slug, a type and no batches."""
        ingredient = ingredient_service.create_ingredient("Plain Flour", QuantityType.MASS)

        assert ingredient.id is not None
        assert ingredient.slug == "plain_flour"
        assert ingredient.quantity_type == QuantityType.MASS
        assert ingredient.batches == []

    def test_create_accepts_type_string(self, test_db):
        """The quantity type may be given by value."""
        ingredient = ingredient_service.create_ingredient("milk", "volume")
        assert ingredient.quantity_type == QuantityType.VOLUME

    def test_duplicate_name_raises(self, stocked_store):
        """Names are unique."""
        with pytest.raises(IngredientAlreadyExists):
            ingredient_service.create_ingredient("egg")

    def test_blank_name_raises(self, test_db):
        """Ingredients need a name."""
        with pytest.raises(ValidationError):
            ingredient_service.create_ingredient("  ")

    def test_slug_collision_gets_suffix(self, stocked_store):
        """Names differing only in case get distinct slugs."""
        ingredient = ingredient_service.create_ingredient("flour", QuantityType.MASS)
        assert ingredient.slug == "flour_1"

    def test_get_unknown_raises(self, test_db):
        """Looking up a missing ingredient is an error."""
        with pytest.raises(IngredientNotFound):
            ingredient_service.get_ingredient("saffron")

    def test_list_ingredients_sorted_by_name(self, stocked_store):
        """Ingredients are listed by name."""
        names = [i.name for i in ingredient_service.list_ingredients()]
        assert names == sorted(names)
        assert set(names) == {"egg", "Flour", "milk"}

    def test_delete_ingredient(self, stocked_store):
        """Deleted ingredients and their batches are gone."""
        ingredient_service.delete_ingredient("milk")
        with pytest.raises(IngredientNotFound):
            ingredient_service.get_ingredient("milk")
        with pytest.raises(IngredientNotFound):
            ingredient_service.delete_ingredient("milk")


class TestFindMatchingIngredient:
    """Test matching recipe ingredient names to the store."""

    def test_exact(self, stocked_store):
        assert ingredient_service.find_matching_ingredient("egg").name == "egg"

    def test_case_insensitive(self, stocked_store):
        """'flour' finds 'Flour'."""
        assert ingredient_service.find_matching_ingredient("flour").name == "Flour"

    def test_plural(self, stocked_store, wordnet_data):
        """'Eggs' finds 'egg'."""
        assert ingredient_service.find_matching_ingredient("Eggs").name == "egg"

    @pytest.mark.parametrize("name", ["butter", "", "   "])
    def test_no_match(self, stocked_store, name):
        assert ingredient_service.find_matching_ingredient(name) is None


class TestBatches:
    """Test adding batches and reading totals."""

    def test_total_over_batches(self, stocked_store):
        """The total sums every batch."""
        assert ingredient_service.get_total_quantity("milk") == Quantity.volume(1.5)

    def test_same_expiry_merges(self, stocked_store):
        """A batch with an existing expiry date is merged."""
        ingredient_service.add_batch("milk", Quantity.volume(0.25), expiry_date=date(2026, 11, 5))

        ingredient = ingredient_service.get_ingredient("milk")
        assert len(ingredient.batches) == 2
        assert ingredient.total_quantity.value == pytest.approx(1.75)

    def test_new_expiry_adds_batch(self, stocked_store):
        """A new expiry date starts a new batch."""
        ingredient_service.add_batch("milk", Quantity.volume(0.25), expiry_date=date(2026, 12, 1))
        assert len(ingredient_service.get_ingredient("milk").batches) == 3

    def test_wrong_type_raises(self, stocked_store):
        """Batches must match the ingredient's type."""
        with pytest.raises(IncompatibleTypes):
            ingredient_service.add_batch("milk", Quantity.mass(1))
        assert ingredient_service.get_total_quantity("milk") == Quantity.volume(1.5)

    def test_unknown_ingredient_raises(self, test_db):
        with pytest.raises(IngredientNotFound):
            ingredient_service.add_batch("saffron", Quantity.mass(0.001))

    def test_contains(self, stocked_store):
        """contains compares the requested quantity with the total."""
        assert ingredient_service.contains("egg", Quantity.count(6))
        assert not ingredient_service.contains("egg", Quantity.count(7))
        with pytest.raises(IncompatibleTypes):
            ingredient_service.contains("egg", Quantity.mass(1))


class TestUse:
    """Test using quantities from the store."""

    def test_use_earliest_expiry_first(self, stocked_store):
        """The batch expiring first is emptied first and then deleted."""
        result = ingredient_service.use("milk", Quantity.volume(0.7))

        assert result["batches_removed"] == 1
        assert [entry["expiry_date"] for entry in result["breakdown"]] == [
            date(2026, 10, 25),
            date(2026, 11, 5),
        ]
        assert result["breakdown"][0]["quantity_used"].value == pytest.approx(0.5)
        assert result["breakdown"][1]["quantity_used"].value == pytest.approx(0.2)

        ingredient = ingredient_service.get_ingredient("milk")
        assert len(ingredient.batches) == 1
        assert ingredient.batches[0].expiry_date == date(2026, 11, 5)
        assert ingredient.batches[0].quantity == pytest.approx(0.8)

    def test_undated_batches_used_last(self, stocked_store):
        """Dated batches are used before undated ones."""
        ingredient_service.add_batch("Flour", Quantity.mass(0.5), expiry_date=date(2026, 10, 30))

        result = ingredient_service.use("Flour", Quantity.mass(0.3))

        assert len(result["breakdown"]) == 1
        assert result["breakdown"][0]["expiry_date"] == date(2026, 10, 30)
        assert ingredient_service.get_total_quantity("Flour").value == pytest.approx(1.2)

    def test_use_everything(self, stocked_store):
        """Using the whole total leaves no batches."""
        ingredient_service.use("egg", Quantity.count(6))
        assert ingredient_service.get_ingredient("egg").batches == []
        assert ingredient_service.get_total_quantity("egg").is_zero

    def test_insufficient_raises_and_changes_nothing(self, stocked_store):
        """Asking for more than the total fails without touching batches."""
        with pytest.raises(InsufficientQuantity) as exc_info:
            ingredient_service.use("milk", Quantity.volume(2))

        assert exc_info.value.available == Quantity.volume(1.5)
        assert ingredient_service.get_total_quantity("milk") == Quantity.volume(1.5)

    def test_wrong_type_raises(self, stocked_store):
        with pytest.raises(IncompatibleTypes):
            ingredient_service.use("egg", Quantity.volume(0.1))


class TestRemoveExpired:
    """Test removing expired batches."""

    def test_remove_expired_batches(self, stocked_store):
        """Batches expiring before the reference date are deleted."""
        removed = ingredient_service.remove_expired_batches(today=date(2026, 10, 30))

        assert removed == 1
        assert ingredient_service.get_total_quantity("milk") == Quantity.volume(1.0)
        assert ingredient_service.get_total_quantity("Flour") == Quantity.mass(1.0)

    def test_nothing_expired(self, stocked_store):
        assert ingredient_service.remove_expired_batches(today=date(2026, 10, 1)) == 0


class TestTransactions:
    """Test session ownership and error wrapping."""

    def test_caller_session_is_not_committed(self, test_db):
        """With a caller session nothing is committed by the service."""
        sess = test_db()
        ingredient_service.create_ingredient("salt", QuantityType.MASS, session=sess)
        sess.rollback()

        with pytest.raises(IngredientNotFound):
            ingredient_service.get_ingredient("salt")

    def test_unexpected_errors_become_database_errors(self, test_db, monkeypatch):
        """Non-service exceptions are wrapped in DatabaseError."""

        def broken_scope():
            raise RuntimeError("disk I/O error")

        monkeypatch.setattr(ingredient_service, "session_scope", broken_scope)

        with pytest.raises(DatabaseError) as exc_info:
            ingredient_service.list_ingredients()
        assert isinstance(exc_info.value.original_error, RuntimeError)
