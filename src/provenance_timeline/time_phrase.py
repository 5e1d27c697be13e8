"""Temporal-phrase resolution for a single provenance clause.

A clause such as ``"David Newbury, Pittsburgh, until sometime before 1950"``
is split into a descriptive remainder (``"David Newbury, Pittsburgh"``) and
a date expression governed by a connector (``until sometime before``).
The connector decides how the date fills the period's ``beginning`` and
``ending`` TimeSpans.

Walk, one step per date expression:
  1. normalize shorthand ranges ("1985-86", "May 5-6, 1980", "c. 1945")
  2. pick the longest connector followed by a date
  3. no connector: grow a comma window from the end of the clause
  4. connector: split the clause at it
  5. apply the connector's TimeSpan rule
  6. feed the remainder back into step 1

A step that finds no date ends the walk. The walk is bounded at
``MAX_DEPTH`` further steps; running past it returns ``Err(RecursionLimit)``
and the caller keeps the partial remainder.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from provenance_timeline.date_extractor import (
    MONTH_RE_FRAGMENT,
    find_dates_in_string,
    remove_dates_in_string,
)
from provenance_timeline.provenance_types import (
    DateError,
    Err,
    Ok,
    RecursionLimit,
    Result,
)
from provenance_timeline.temporal import ImpreciseDate, Precision, TimeSpan

if TYPE_CHECKING:
    from provenance_timeline.period import Period

log = logging.getLogger(__name__)

MAX_DEPTH = 10

# ---------------------------------------------------------------------------
# Connectors
# ---------------------------------------------------------------------------


class Connector(StrEnum):
    """Temporal connector words, each with its own TimeSpan rule."""

    CIRCA = "circa"
    ON = "on"
    BEFORE = "before"
    BY = "by"
    AS_OF = "as of"
    AFTER = "after"
    UNTIL = "until"
    UNTIL_SOMETIME_AFTER = "until sometime after"
    UNTIL_AT_LEAST = "until at least"
    UNTIL_SOMETIME_BEFORE = "until sometime before"
    IN = "in"
    BETWEEN = "between"
    SOMETIME_BETWEEN = "sometime between"
    UNTIL_BETWEEN = "until between"
    UNTIL_SOMETIME_BETWEEN = "until sometime between"
    TO_AT_LEAST = "to at least"


# What may follow a connector for it to count: a capitalized month, a
# digit 1-9, or "the <digit>".
_DATE_LOOKAHEAD = (
    r"(?=\s(?:(?-i:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)|[1-9]|the\s[1-9]))"
)

_CONNECTOR_RES: dict[Connector, re.Pattern[str]] = {
    c: re.compile(r"\b" + re.escape(c.value) + _DATE_LOOKAHEAD + r"\b", re.IGNORECASE)
    for c in Connector
}

# ---------------------------------------------------------------------------
# Shorthand normalization
# ---------------------------------------------------------------------------

_DASH = "[-\u2013\u2014]"
_MONTH = "(" + MONTH_RE_FRAGMENT + ")"

_SHORTHAND_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    # 1985-86 -> 1985 until 1986
    (re.compile(rf"(\d{{2}})(\d{{2}})\s?{_DASH}\s?(\d{{2}})(?!-)\b"), r"\1\2 until \1\3"),
    # 1918-1919 -> 1918 until 1919
    (re.compile(rf"(\d{{4}})\s?{_DASH}\s?(\d{{4}})(?!-)"), r"\1 until \2"),
    # May 5-6, 1980 -> May 5, 1980 until May 6, 1980
    (
        re.compile(rf"{_MONTH}\s(\d{{1,2}})\s?{_DASH}\s?(\d{{1,2}}),\s(\d{{2,4}})", re.IGNORECASE),
        r"\1 \2, \4 until \1 \3, \4",
    ),
    # 30-31 January 1922 -> January 30, 1922 until January 31, 1922
    (
        re.compile(rf"\s(\d{{1,2}})\s?{_DASH}\s?(\d{{1,2}})\s{_MONTH},?\s(\d{{2,4}})", re.IGNORECASE),
        r" \3 \1, \4 until \3 \2, \4",
    ),
    # 23 October - 12 November 1926 -> October 23, 1926 until November 12, 1926
    (
        re.compile(
            rf"\b(\d{{1,2}})\s{_MONTH}\s?{_DASH}\s?(\d{{1,2}})\s{_MONTH}\s(\d{{1,4}})",
            re.IGNORECASE,
        ),
        r" \2 \1, \5 until \4 \3, \5",
    ),
    # c. 1945 / ca. 1945 -> circa 1945
    (re.compile(r"\bc(?:a)?\.\s(\d{4})\b"), r"circa \1"),
)

_TRAILING_COMMA_RE = re.compile(r",$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_time_phrase(text: str) -> str:
    """Rewrite shorthand date ranges into connector form."""
    for pattern, replacement in _SHORTHAND_RULES:
        text = pattern.sub(replacement, text)
    return text


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TimePhrase:
    """A clause split into its descriptive part and its date expression."""

    connector: Connector | None
    description: str
    date_expression: str


def find_connector(text: str) -> Connector | None:
    """The longest connector followed by a date; the rightmost wins a tie.

    "after 1950 until 1960" yields ``until``: the suffix is split off first
    and the next step reads "after 1950".
    """
    best: tuple[int, int, Connector] | None = None
    for connector, pattern in _CONNECTOR_RES.items():
        m = pattern.search(text)
        if m is None:
            continue
        candidate = (len(connector.value), m.start(), connector)
        if best is None or candidate[:2] > best[:2]:
            best = candidate
    return best[2] if best else None


def _split_fields(text: str) -> list[str]:
    """Split on commas, dropping trailing empty fields."""
    fields = text.split(",")
    while fields and fields[-1] == "":
        fields.pop()
    return fields


def _first_date(text: str) -> ImpreciseDate | None:
    dates = find_dates_in_string(text)
    return dates[0] if dates else None


def _comma_window(text: str) -> tuple[str, str]:
    """Grow a suffix of comma fields until the extracted date changes.

    Keeps "October 14, 1980" together even though it spans a comma.
    Returns (description, date_expression).
    """
    fields = _split_fields(text)
    window: list[str] = []
    last: ImpreciseDate | None = None
    while fields:
        window.insert(0, fields.pop())
        current = _first_date(",".join(window))
        if current is not None and current.same_as(last):
            fields.append(window.pop(0))
            break
        last = current
    date_expression = ",".join(window)
    description = ",".join(fields) + remove_dates_in_string(date_expression)
    return _WHITESPACE_RE.sub(" ", description), date_expression


def split_time_phrase(text: str) -> TimePhrase:
    """Split an already-normalized clause at its connector or by comma window."""
    connector = find_connector(text)
    if connector is None:
        description, date_expression = _comma_window(text)
        return TimePhrase(None, description, date_expression)
    m = _CONNECTOR_RES[connector].search(text)
    assert m is not None
    description = text[:m.start()].strip()
    expression = text[m.end():].strip()
    # "1950 and 1955 until 1960": the later connector is left for the next step.
    later = _first_connector_start(expression)
    if later is not None:
        description = f"{description} {expression[later:]}".strip()
        expression = expression[:later].strip()
    return TimePhrase(connector, description, expression)


def _first_connector_start(text: str) -> int | None:
    starts = [m.start() for p in _CONNECTOR_RES.values() if (m := p.search(text))]
    return min(starts) if starts else None


# ---------------------------------------------------------------------------
# Connector semantics
# ---------------------------------------------------------------------------


def _span(earliest: str | None, latest: str | None) -> TimeSpan:
    return TimeSpan.from_strings(earliest, latest)


def _between(expression: str) -> tuple[str, str | None]:
    parts = expression.split(" and ")
    return parts[0], parts[1] if len(parts) > 1 else None


def apply_connector(period: Period, connector: Connector | None, expression: str) -> None:
    """Set the period's beginning/ending from one date expression.

    Raises DateError when the expression holds no date; nothing is assigned
    in that case.
    """
    match connector:
        case None:
            period.beginning = _span(expression, expression)
        case Connector.ON:
            beginning = _span(expression, expression)
            period.beginning = beginning
            assert beginning.earliest_raw is not None
            if beginning.earliest_raw.precision == Precision.DAY:
                period.ending = _span(expression, expression)
        case Connector.CIRCA:
            beginning = _span(expression, expression)
            assert beginning.earliest_raw is not None and beginning.latest_raw is not None
            beginning.earliest_raw.certain = False
            beginning.latest_raw.certain = False
            period.beginning = beginning
        case Connector.BEFORE | Connector.BY | Connector.AS_OF:
            period.beginning = _span(None, expression)
        case Connector.AFTER:
            period.beginning = _span(expression, None)
        case Connector.UNTIL:
            period.ending = _span(expression, expression)
        case Connector.UNTIL_SOMETIME_AFTER | Connector.UNTIL_AT_LEAST | Connector.TO_AT_LEAST:
            period.ending = _span(expression, None)
        case Connector.UNTIL_SOMETIME_BEFORE:
            period.ending = _span(None, expression)
        case Connector.IN:
            beginning = _span(None, expression)
            ending = _span(expression, None)
            period.beginning = beginning
            period.ending = ending
        case Connector.BETWEEN | Connector.SOMETIME_BETWEEN:
            period.beginning = _span(*_between(expression))
        case Connector.UNTIL_BETWEEN | Connector.UNTIL_SOMETIME_BETWEEN:
            period.ending = _span(*_between(expression))


# ---------------------------------------------------------------------------
# Walk
# ---------------------------------------------------------------------------


def _tidy(text: str) -> str:
    return _TRAILING_COMMA_RE.sub("", text.strip()).strip()


def _resolve_step(period: Period, text: str) -> str:
    """Resolve one date expression. Raises DateError when there is none."""
    phrase = split_time_phrase(normalize_time_phrase(text))
    apply_connector(period, phrase.connector, phrase.date_expression)
    description = phrase.description
    if not description.strip():
        description = remove_dates_in_string(phrase.date_expression)
    return _tidy(description)


def walk_time_phrases(
    period: Period,
    text: str,
    *,
    max_depth: int = MAX_DEPTH,
) -> Result[str, RecursionLimit]:
    """Resolve date expressions until none is left or the depth bound is hit."""
    remaining = text
    for _ in range(max_depth + 1):
        try:
            remaining = _resolve_step(period, remaining)
        except DateError:
            return Ok(remaining)
    return Err(RecursionLimit(depth=max_depth + 1, remaining=remaining))


def resolve_time_phrase(period: Period, clause: str, *, max_depth: int = MAX_DEPTH) -> str:
    """Fill *period*'s beginning/ending from *clause*; return the leftover text.

    A blank clause clears both spans. Hitting the depth bound is logged and
    the partial remainder is returned.
    """
    if not clause.strip():
        period.beginning = None
        period.ending = None
        return ""
    match walk_time_phrases(period, clause, max_depth=max_depth):
        case Ok(value=remaining):
            return remaining.strip()
        case Err(error=limit):
            log.warning(
                "Time phrase walk stopped at depth %d; keeping %r",
                limit.depth, limit.remaining,
            )
            return limit.remaining.strip()
