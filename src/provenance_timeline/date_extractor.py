"""5-scanner date extractor for provenance text.

Pulls dates of every granularity out of free text using 5 independent
regex scanners, coarsest first:

1. Century:      "7th Century", "15th century BCE"   (Precision.CENTURY)
2. Decade:       "1980s"                             (Precision.DECADE)
3. Year:         "1965", "50 BC"                     (Precision.YEAR)
4. Month + year: "January 1949", "Jan. 1949"         (Precision.MONTH)
5. Full date:    "October 14, 1980", "May 5th 1980"  (Precision.DAY)

Each scanner walks the text left to right and never overlaps its own
matches. Results are concatenated in scanner order, so ``dates[0]`` is the
coarsest date found, not necessarily the leftmost one. There is no
cross-scanner de-duplication: a phrase seen by two scanners yields two
dates. The year scanner carries its own suppressions so that the day and
year of a full date are not re-read as bare years.

A ``?`` immediately after a date phrase marks that date uncertain.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from provenance_timeline.temporal import ImpreciseDate, Precision

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

# Longest spellings first so alternation prefers them.
MONTH_WORDS: tuple[str, ...] = (
    "september", "february", "november", "december", "january", "febuary",
    "october", "august", "march", "april", "june", "july", "sept",
    "jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep",
    "oct", "nov", "dec",
)

_MONTH_BY_PREFIX: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

MONTH_RE_FRAGMENT = "(?:" + "|".join(MONTH_WORDS) + ")"
_ERA = r"(?:\s+(ad|bce|bc|ce))?"

_BCE_ERAS = frozenset({"bc", "bce"})


def month_number(word: str) -> int:
    """Month number for a month name or abbreviation ("Sept." -> 9)."""
    return _MONTH_BY_PREFIX[word.strip(" .,").lower()[:3]]


def _is_bce(era: str | None) -> bool:
    return era is not None and era.lower() in _BCE_ERAS


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_CENTURY_RE = re.compile(
    r"\b(\d{1,2})(?:st|rd|th|nd)?\s+century" + _ERA + r"\b",
    re.IGNORECASE,
)

_DECADE_RE = re.compile(
    r"\b(\d{1,3})0s(?:\s+(?:ad|bce|bc|ce))?\b",
    re.IGNORECASE,
)

# Python look-behinds must be fixed width, so each month spelling gets its
# own assertion, with and without a trailing abbreviation dot.
_YEAR_LOOKBEHINDS = "".join(
    rf"(?<!\b{word}\s)(?<!\b{word}\.\s)" for word in MONTH_WORDS
) + (
    r"(?<!\d,\s)"                   # jan 1, 2014 -> not the 2014
    r"(?<!\d\s)"                    # jan 1 2014
    r"(?<!\d(?:st|rd|th|nd)\s)"     # jan 1st 2014
    r"(?<!\d(?:st|rd|th|nd),\s)"    # jan 1st, 2014
)

_YEAR_RE = re.compile(
    _YEAR_LOOKBEHINDS + r"\b(\d{1,4})" + _ERA + r"\b(?!\s+century)",
    re.IGNORECASE,
)

_MONTH_RE = re.compile(
    r"\b(" + MONTH_RE_FRAGMENT + r")\.?,?\s(\d{1,4})" + _ERA
    + r"(?!,\s*\d)"                 # "October 14, 1980" is a day, not a month
    + r"(?!\s\d)\b",
    re.IGNORECASE,
)

_DAY_RE = re.compile(
    r"\b(" + MONTH_RE_FRAGMENT + r")\.?,?\s(\d{1,2})(?:st|rd|th|nd)?\s?,?\s(\d{1,4})"
    + _ERA + r"\b",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Match -> date builders
# ---------------------------------------------------------------------------

def _century(m: re.Match[str]) -> ImpreciseDate:
    return ImpreciseDate.century(int(m.group(1)), bce=_is_bce(m.group(2)))


def _decade(m: re.Match[str]) -> ImpreciseDate:
    return ImpreciseDate(int(m.group(1) + "0"), precision=Precision.DECADE)


def _year(m: re.Match[str]) -> ImpreciseDate:
    year = int(m.group(1))
    if _is_bce(m.group(2)):
        year = -year
    return ImpreciseDate(year, precision=Precision.YEAR)


def _month(m: re.Match[str]) -> ImpreciseDate:
    year = int(m.group(2))
    if _is_bce(m.group(3)):
        year = -year
    return ImpreciseDate(year, month_number(m.group(1)), precision=Precision.MONTH)


def _day(m: re.Match[str]) -> ImpreciseDate:
    year = int(m.group(3))
    if _is_bce(m.group(4)):
        year = -year
    return ImpreciseDate(year, month_number(m.group(1)), int(m.group(2)), Precision.DAY)


_SCANNERS: tuple[tuple[str, re.Pattern[str], Callable[[re.Match[str]], ImpreciseDate]], ...] = (
    ("century", _CENTURY_RE, _century),
    ("decade", _DECADE_RE, _decade),
    ("year", _YEAR_RE, _year),
    ("month", _MONTH_RE, _month),
    ("day", _DAY_RE, _day),
)

# Removal runs finest first so a full date is removed as one phrase before
# its year could be picked off on its own.
_REMOVAL_ORDER: tuple[re.Pattern[str], ...] = (
    _DAY_RE, _MONTH_RE, _CENTURY_RE, _DECADE_RE, _YEAR_RE,
)

# Centuries and decades render as "the 7th Century" / "the 1950s"; the
# article goes with the date.
_WITH_ARTICLE = frozenset({_CENTURY_RE, _DECADE_RE})
_ARTICLE = r"(?:\bthe\s+)?"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _scan(
    text: str,
    name: str,
    pattern: re.Pattern[str],
    build: Callable[[re.Match[str]], ImpreciseDate],
) -> list[ImpreciseDate]:
    dates: list[ImpreciseDate] = []
    for m in pattern.finditer(text):
        try:
            date = build(m)
        except ValueError as exc:
            log.debug("Dropping unresolved %s date %r: %s", name, m.group(0), exc)
            continue
        if text[m.end():m.end() + 1] == "?":
            date.certain = False
        dates.append(date)
    return dates


def find_dates_in_string(text: str | None) -> list[ImpreciseDate]:
    """Find every date phrase in *text*.

    Example::

        find_dates_in_string("the 15th Century was hard, but the 1980s were harder")
        # -> [ImpreciseDate(1401, CENTURY), ImpreciseDate(1980, DECADE)]

    Returns:
        Dates from the century, decade, year, month and day scanners, in
        that order; each scanner's dates in order of appearance.
    """
    if not text:
        return []
    dates: list[ImpreciseDate] = []
    for name, pattern, build in _SCANNERS:
        dates.extend(_scan(text, name, pattern, build))
    return dates


def remove_dates_in_string(text: str | None) -> str:
    """Strip every date phrase the scanners would find.

    A directly trailing ``?`` goes too, and so does the article of
    "the 1950s" or "the 7th Century".
    """
    if not text:
        return ""
    for pattern in _REMOVAL_ORDER:
        prefix = _ARTICLE if pattern in _WITH_ARTICLE else ""
        text = re.sub(prefix + pattern.pattern + r"\??", "", text, flags=re.IGNORECASE)
    return text
