"""
Free-text recipe parser.

This module turns pasted recipe text into structured data:
- parse_instructions: a block of instructions -> ordered list of steps
- parse_ingredient_list / parse_ingredient_lines: ingredient text -> {name: Quantity}
- parse_ingredient: one ingredient line -> (name, Quantity)
- parse_amount: a bare amount ("500g", "1 1/2 cups") -> Quantity

All functions are pure. Text that does not match any known format falls back
to a default (whole line as the step or ingredient name, a zero count) and
never raises.

Instruction splitting, first rule that applies wins:
1. Text containing newlines: one step per non-blank line; a leading step
   marker ("Step 1. ", "2) ") is removed from each line
2. Numbered paragraph: split at each step marker; text before the first
   marker becomes a step of its own
3. Anything else: one step per sentence, using NLTK's Punkt models for the
   requested language

A bare number such as "180. " only counts as a step marker at the start of
the text, after the end of a sentence, or when it continues the numbering
of the previous marker. "Step n" markers count anywhere.

Ingredient line formats, tried in order:
1. "<integer> <fraction> [unit] <ingredient>"       e.g. "1 1/2 cups of flour"
2. "<fraction|decimal|integer>[ ][unit] <ingredient>" e.g. "200g sugar", "2 eggs"
3. "<ingredient>"                                    e.g. "salt" (count of 0)
"""

import logging
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple

from nltk.tokenize import sent_tokenize
from nltk.tokenize.punkt import PunktSentenceTokenizer

from src.models.enums import QuantityType
from src.models.quantity import Quantity
from src.utils.constants import INGREDIENT_CONNECTOR, LIST_BULLETS, SENTENCE_LANGUAGE
from src.utils.nltk_resources import ensure_resource

from .unit_converter import parse_fraction, parse_numeral, parse_quantity, unit_pattern

logger = logging.getLogger(__name__)

# "1. ", "1) ", "Step 1. ", "step 12) "
STEP_MARKER = re.compile(
    r"(?<![\w.])(?P<prefix>step\s+)?(?P<number>[1-9][0-9]*)[.)]\s", re.IGNORECASE
)
_LEADING_STEP_MARKER = re.compile(r"^(?:step\s+)?[1-9][0-9]*[.)]\s+", re.IGNORECASE)
_SENTENCE_CLOSERS = ".!?:;"

_INTEGER = r"\d+"
_FRACTION = r"\d+\s*/\s*\d+"
_DECIMAL = r"\d+(?:\.\d+)?"

_LEADING_CONNECTOR = re.compile(rf"^{INGREDIENT_CONNECTOR}\b\s*", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".;,"


def _unit_group(units: str) -> str:
    # Abbreviated units may carry a period ("2 tbsp. sugar")
    return rf"(?:(?P<unit>{units})\.?)?"


def _build_mixed_number_pattern(units: str) -> "re.Pattern":
    return re.compile(
        rf"^(?P<number>{_INTEGER})\s+(?P<fraction>{_FRACTION})"
        rf"\s*{_unit_group(units)}\s+(?P<ingredient>.+)$",
        re.IGNORECASE | re.DOTALL,
    )


def _build_single_number_pattern(units: str) -> "re.Pattern":
    return re.compile(
        rf"^(?P<number>{_FRACTION}|{_DECIMAL})"
        rf"\s*{_unit_group(units)}\s+(?P<ingredient>.+)$",
        re.IGNORECASE | re.DOTALL,
    )


_UNITS = unit_pattern()
MIXED_NUMBER_PATTERN = _build_mixed_number_pattern(_UNITS)
SINGLE_NUMBER_PATTERN = _build_single_number_pattern(_UNITS)
AMOUNT_PATTERN = re.compile(
    rf"^(?P<number>{_INTEGER}\s+{_FRACTION}|{_FRACTION}|{_DECIMAL})\s*{_unit_group(_UNITS)}$",
    re.IGNORECASE,
)


# ============================================================================
# Instructions
# ============================================================================


def parse_instructions(text: str, language: str = SENTENCE_LANGUAGE) -> List[str]:
    """
    Split a block of instructions into steps.

    Args:
        text: Instructions as pasted by the user
        language: Punkt model used when the text is split into sentences

    Returns:
        Ordered list of non-empty step texts

    Examples:
        >>> parse_instructions("Step 1. Mix\\nStep 2. Bake")
        ['Mix', 'Bake']
        >>> parse_instructions("1. Mix well. 2. Bake for 20 mins.")
        ['Mix well.', 'Bake for 20 mins.']
        >>> parse_instructions("Preheat the oven to 180. Bake until golden.")
        ['Preheat the oven to 180.', 'Bake until golden.']
    """
    trimmed = text.strip() if text else ""
    if not trimmed:
        return []

    if "\n" in trimmed or "\r" in trimmed:
        steps = split_by_newline(trimmed, strip_markers=True)
        mode = "newline"
    elif find_step_markers(trimmed):
        steps = split_by_step_index(trimmed)
        mode = "numbered"
    else:
        steps = split_by_sentence(trimmed, language)
        mode = "sentence"

    logger.debug(f"Parsed {len(steps)} instruction step(s) by {mode}")
    return steps


def split_by_newline(text: str, strip_markers: bool = False) -> List[str]:
    """Non-blank trimmed lines, optionally without a leading step marker."""
    lines = []
    for line in text.splitlines():
        line = line.strip()
        if strip_markers:
            line = _LEADING_STEP_MARKER.sub("", line, count=1).strip()
        if line:
            lines.append(line)
    return lines


def find_step_markers(text: str) -> List["re.Match"]:
    """
    Step markers in a one-line paragraph.

    A bare "n." or "n)" is a marker only at the start of the text, after
    sentence punctuation, or when n follows the previous marker's number,
    so "Preheat the oven to 180. Bake" has no markers.
    """
    markers: List["re.Match"] = []
    for match in STEP_MARKER.finditer(text):
        number = int(match.group("number"))
        before = text[:match.start()].rstrip()
        if (
            match.group("prefix")
            or not before
            or before[-1] in _SENTENCE_CLOSERS
            or (markers and number == int(markers[-1].group("number")) + 1)
        ):
            markers.append(match)
    return markers


def split_by_step_index(text: str) -> List[str]:
    """Segments between consecutive step markers; text before the first marker is its own step."""
    markers = find_step_markers(text)
    if not markers:
        stripped = text.strip()
        return [stripped] if stripped else []

    steps = []
    preamble = text[:markers[0].start()].strip()
    if preamble:
        steps.append(preamble)
    for current, following in zip(markers, markers[1:] + [None]):
        end = following.start() if following is not None else len(text)
        segment = text[current.end():end].strip()
        if segment:
            steps.append(segment)
    return steps


@lru_cache(maxsize=None)
def _untrained_tokenizer() -> PunktSentenceTokenizer:
    logger.warning("Punkt models unavailable; splitting sentences without them")
    return PunktSentenceTokenizer()


def split_by_sentence(text: str, language: str = SENTENCE_LANGUAGE) -> List[str]:
    """
    Split a paragraph into sentences with NLTK's Punkt tokenizer.

    Sentences keep their closing punctuation. Without the Punkt data the
    untrained Punkt tokenizer is used, which splits at every full stop
    followed by whitespace.
    """
    if ensure_resource("punkt_tab"):
        sentences = sent_tokenize(text, language=language)
    else:
        sentences = _untrained_tokenizer().tokenize(text)
    return [sentence.strip() for sentence in sentences if sentence.strip()]


# ============================================================================
# Ingredients
# ============================================================================


def parse_ingredient_list(text: str, language: str = SENTENCE_LANGUAGE) -> Dict[str, Quantity]:
    """
    Parse a block of ingredient text into quantities by ingredient name.

    Lines are split on newlines when there are any, otherwise by sentence.
    When two lines name the same ingredient the later one wins.

    Returns:
        Dict of ingredient name -> Quantity (empty for blank text)
    """
    trimmed = text.strip() if text else ""
    if not trimmed:
        return {}

    if "\n" in trimmed or "\r" in trimmed:
        lines = split_by_newline(trimmed)
    else:
        lines = split_by_sentence(trimmed, language)
    return parse_ingredient_lines(lines)


def parse_ingredient_lines(lines: Iterable[str]) -> Dict[str, Quantity]:
    """
    Parse already-split ingredient lines.

    Blank lines are skipped and a leading list bullet ("-", "*", "•") is
    removed before parsing. Later duplicates win.
    """
    ingredients: Dict[str, Quantity] = {}
    for line in lines:
        line = line.strip().lstrip(LIST_BULLETS).strip()
        if not line:
            continue
        name, quantity = parse_ingredient(line)
        if name:
            ingredients[name] = quantity
    return ingredients


def parse_ingredient(line: str) -> Tuple[str, Quantity]:
    """
    Parse one ingredient line into a name and a Quantity.

    Args:
        line: e.g. "1 1/2 cups of flour", "2 eggs", "salt"

    Returns:
        Tuple of (ingredient name, Quantity). Lines without a leading amount
        give the whole line as the name and a count of 0.

    Examples:
        >>> parse_ingredient("1 1/2 cup flour")
        ('flour', Quantity(type=<QuantityType.VOLUME: 'volume'>, value=0.375))
        >>> parse_ingredient("salt")
        ('salt', Quantity(type=<QuantityType.COUNT: 'count'>, value=0.0))
    """
    text = line.strip() if line else ""

    parsed = _match_mixed_number(text)
    if parsed is None:
        parsed = _match_single_number(text)
    if parsed is not None:
        return parsed

    return text.rstrip(_TRAILING_PUNCTUATION).strip() or text, Quantity(QuantityType.COUNT, 0)


def _match_mixed_number(text: str) -> Optional[Tuple[str, Quantity]]:
    match = MIXED_NUMBER_PATTERN.match(text)
    if match is None:
        return None
    value = float(match.group("number")) + parse_fraction(match.group("fraction"))
    return extract_ingredient(match, value)


def _match_single_number(text: str) -> Optional[Tuple[str, Quantity]]:
    match = SINGLE_NUMBER_PATTERN.match(text)
    if match is None:
        return None
    return extract_ingredient(match, parse_numeral(match.group("number")))


def parse_amount(text: str) -> Optional[Quantity]:
    """
    Parse a bare amount such as "2", "1 1/2 cups" or "500g".

    Returns:
        Quantity, or None if text is not an amount with an optional unit
    """
    match = AMOUNT_PATTERN.match(text.strip() if text else "")
    if match is None:
        return None
    return parse_quantity(parse_numeral(match.group("number")), match.group("unit"))


def extract_ingredient(match: "re.Match", value: float) -> Optional[Tuple[str, Quantity]]:
    """
    Build (name, Quantity) from a matched ingredient pattern.

    Returns:
        None if nothing is left of the ingredient name once the connector
        word and trailing punctuation are removed
    """
    name = _clean_ingredient_name(match.group("ingredient"))
    if not name:
        return None
    return name, parse_quantity(value, match.group("unit"))


def _clean_ingredient_name(text: str) -> str:
    name = _LEADING_CONNECTOR.sub("", text.strip(), count=1)
    return name.rstrip(_TRAILING_PUNCTUATION).strip()
