"""
Time estimation for recipe steps.

Estimates how long a step takes from the durations mentioned in its text:

    >>> parse_time_taken("Simmer for 10-15 minutes, then rest 30 secs.")
    930

Every mention is added up. A range counts as its upper bound. Phrases
without a number ("an hour", "half an hour", "overnight") are recognised
too. Text with no duration gives 0.
"""

import re

from src.utils.constants import TIME_PHRASE_SECONDS, TIME_UNIT_SECONDS

from .unit_converter import parse_numeral

_NUMBER = r"\d+\s+\d+\s*/\s*\d+|\d+\s*/\s*\d+|\d+(?:\.\d+)?"

_TIME_UNITS = "|".join(sorted(TIME_UNIT_SECONDS, key=lambda w: (-len(w), w)))

_DURATION = re.compile(
    rf"(?:(?P<low>{_NUMBER})\s*(?:-|–|to)\s*)?"
    rf"(?P<value>{_NUMBER})\s*"
    rf"(?P<unit>{_TIME_UNITS})\b",
    re.IGNORECASE,
)

_PHRASE = re.compile(
    r"\b(?P<phrase>"
    + "|".join(re.escape(p) for p in sorted(TIME_PHRASE_SECONDS, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)


def parse_time_taken(text: str) -> int:
    """
    Estimate the seconds a step takes.

    Args:
        text: Step content

    Returns:
        Total seconds over all duration mentions, rounded to an int
    """
    if not text:
        return 0

    total = 0.0
    for match in _DURATION.finditer(text):
        seconds_per_unit = TIME_UNIT_SECONDS[match.group("unit").lower()]
        total += parse_numeral(match.group("value")) * seconds_per_unit

    # Numbered durations never contain these phrases, so the two scans don't overlap
    for match in _PHRASE.finditer(text):
        total += TIME_PHRASE_SECONDS[match.group("phrase").lower()]

    return int(round(total))
