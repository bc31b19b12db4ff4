"""Name normalization utilities for ingredient lookups.

This module provides:
- create_slug: deterministic, URL-safe slugs from ingredient names, unique
  within the ingredient store when a session is given
- singularize: English singular form of an ingredient name (WordNet)
- names_match: name comparison used when matching recipe ingredients to
  the store

Examples:
    >>> create_slug("All-Purpose Flour")
    'all_purpose_flour'

    >>> singularize("Brown Eggs")
    'Brown Egg'

    >>> names_match("eggs", "Egg")
    True
"""

import re
import unicodedata
from typing import Optional

from nltk.corpus import wordnet
from nltk.stem import WordNetLemmatizer
from sqlalchemy.orm import Session

from .nltk_resources import ensure_resource

_LEMMATIZER = WordNetLemmatizer()


def create_slug(name: str, session: Optional[Session] = None) -> str:
    """Generate a URL-safe slug from an ingredient name.

    Algorithm:
        1. Normalize Unicode to NFD and drop non-ASCII characters
        2. Lowercase, turn whitespace and hyphens into underscores
        3. Remove everything except letters, digits and underscores
        4. Collapse repeated underscores and strip them from the ends
        5. With a session, append _1, _2, ... until the slug is unused

    Args:
        name: Ingredient name
        session: Optional database session for uniqueness checking

    Returns:
        Slug string (lowercase, alphanumeric + underscores only)

    Examples:
        >>> create_slug("Confectioner's Sugar")
        'confectioners_sugar'
        >>> create_slug("Crème Fraîche")
        'creme_fraiche'
    """
    normalized = unicodedata.normalize("NFD", name)
    slug = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = re.sub(r"[\s\-]+", "_", slug)
    slug = re.sub(r"[^a-z0-9_]", "", slug)
    slug = re.sub(r"_+", "_", slug).strip("_")

    if session is None:
        return slug

    from ..models.ingredient import Ingredient  # Import here to avoid circular dependency

    candidate = slug
    counter = 1
    while session.query(Ingredient).filter_by(slug=candidate).first() is not None:
        candidate = f"{slug}_{counter}"
        counter += 1
    return candidate


def _singular_word(word: str) -> str:
    if not ensure_resource("wordnet"):
        return word
    singular = wordnet.morphy(word.lower(), wordnet.NOUN)
    if not singular or singular == word.lower():
        return word
    # Keep the caller's capitalization of the first letter
    if word[0].isupper():
        singular = singular[0].upper() + singular[1:]
    return singular


def singularize(name: str) -> str:
    """Singular form of an ingredient name; only the last word changes.

    Uses WordNet's morphology, so irregular plurals ("mice", "oxen") are
    handled and words WordNet already knows as nouns ("gas", "molasses")
    are left alone. Without WordNet data the name is returned unchanged.

    Examples:
        >>> singularize("eggs")
        'egg'
        >>> singularize("blueberries")
        'blueberry'
        >>> singularize("rice")
        'rice'
    """
    stripped = name.strip()
    if not stripped:
        return stripped
    head, _, last = stripped.rpartition(" ")
    singular = _singular_word(last)
    return f"{head} {singular}" if head else singular


def _base_form(name: str) -> str:
    head, _, last = name.rpartition(" ")
    lemma = _LEMMATIZER.lemmatize(last, pos="n")
    return f"{head} {lemma}" if head else lemma


def names_match(left: str, right: str, ignore_plurals: bool = True) -> bool:
    """True if two ingredient names match case-insensitively (and, optionally, ignoring plurals).

    Plurals are compared through WordNet: first the singular forms, then
    the lemmatizer's base forms, which also pairs nouns such as "oats"
    that WordNet lists in their plural form. Without WordNet data only the
    case-insensitive comparison applies.
    """
    left_key = left.strip().lower()
    right_key = right.strip().lower()
    if left_key == right_key:
        return True
    if not ignore_plurals or not ensure_resource("wordnet"):
        return False
    if singularize(left_key) == singularize(right_key):
        return True
    return _base_form(left_key) == _base_form(right_key)
