"""Provenance text -> Timeline.

Pipeline (``extract``):

    1. footnotes      asterisks and inline notes -> [n]; split off the notes section
    2. punctuation    ".;" -> ";", "x.[1]" -> "x[1].", ", by whom" -> ";",
                      Lugt collector marks -> "(L.n)"
    3. protect "."    initials, titles, abbreviations, "b. 1900", state codes
    4. split          on "." into sentences, on ";" into direct transfers
    5. per clause     certainty, ownership, life dates, stock numbers,
                      acquisition method, time phrase, party and location

One malformed clause never stops extraction: it is logged and skipped.
"""

from __future__ import annotations

import functools
import logging
import re
from collections.abc import Mapping
from typing import Any

import orjson

from provenance_timeline import acquisition
from provenance_timeline.acquisition import AcquisitionMethod
from provenance_timeline.certainty import extract_leading_certainty, relocate_misplaced_certainty
from provenance_timeline.date_extractor import find_dates_in_string
from provenance_timeline.footnotes import (
    extract_footnote_refs,
    extract_text_and_notes,
    handle_asterisk_footnotes,
    handle_inline_footnotes,
    resolve_footnotes,
    rotate_footnotes,
    split_notes,
)
from provenance_timeline.html_utils import provenance_text_from_html
from provenance_timeline.lexicon import DEFAULT_LEXICON, FAKE_PERIOD, Lexicon
from provenance_timeline.parties import Location, Party
from provenance_timeline.period import Period, period_from_record
from provenance_timeline.provenance_types import Err, Ok, ProvenanceError
from provenance_timeline.temporal import ImpreciseDate
from provenance_timeline.timeline import Timeline

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Record-level normalization
# ---------------------------------------------------------------------------

_BY_WHOM_RE = re.compile(r",? (?:by|from) whom\b")

_LUGT_RE = re.compile(
    r"""
    (?:\((?:Lugt|l).?,?|Lugt)   # "(Lugt", "(L.", "(L.,", "Lugt"
    \s?(?:suppl\.?,?)?          # supplement
    (?:ément,)?                 # French "Supplément,"
    \s?
    (\d{1,6}[a-z]?)             # mark number
    (?:\sand\s)?
    -?
    (\d{1,6}[a-z]?)?            # second mark number
    \)?
    """,
    re.IGNORECASE | re.VERBOSE,
)

_BORN_RE = re.compile(r"\bb\.\s?(\d{4})")
_DIED_RE = re.compile(r"\bd\.\s?(\d{4})")
_INITIALS_RE = re.compile(r"(^|\s|\()((?:[A-Zc]\.)+)")


def convert_lugt_numbers(text: str) -> str:
    """``(Lugt 624-626)`` -> ``(L.624) (L.626)``, with protected dots."""

    def _mark(m: re.Match[str]) -> str:
        out = f"(L{FAKE_PERIOD}{m.group(1)})"
        if m.group(2):
            out += f" (L{FAKE_PERIOD}{m.group(2)})"
        return out

    return _LUGT_RE.sub(_mark, text)


@functools.lru_cache(maxsize=8)
def _protection_rules(lexicon: Lexicon) -> tuple[tuple[re.Pattern[str], str], ...]:
    rules: list[tuple[re.Pattern[str], str]] = []
    for abbreviation in lexicon.abbreviations:
        rules.append((
            re.compile(r"\b" + re.escape(abbreviation)),
            abbreviation.replace(".", FAKE_PERIOD),
        ))
    for state in lexicon.states:
        rules.append((re.compile(r"\b" + re.escape(state[0] + state[1].lower() + ".")), state))
        rules.append((re.compile(re.escape(state + ".,")), state + ","))
    return tuple(rules)


def substitute_periods(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> str:
    """Replace every "." that does not end a clause with FAKE_PERIOD."""
    text = _BORN_RE.sub(rf"b{FAKE_PERIOD} \1", text)
    text = _DIED_RE.sub(rf"d{FAKE_PERIOD} \1", text)
    text = _INITIALS_RE.sub(lambda m: m.group(1) + m.group(2).replace(".", FAKE_PERIOD), text)
    for pattern, replacement in _protection_rules(lexicon):
        text = pattern.sub(lambda _m, r=replacement: r, text)
    return text


def split_clauses(text: str) -> list[tuple[str, bool]]:
    """Split on "." then ";". Returns (clause, follows_semicolon) pairs.

    Blank clauses are dropped; fake periods are restored.
    """
    clauses: list[tuple[str, bool]] = []
    for sentence in text.split("."):
        for position, clause in enumerate(sentence.split(";")):
            clause = clause.replace(FAKE_PERIOD, ".").strip()
            if clause:
                clauses.append((clause, position > 0))
    return clauses


# ---------------------------------------------------------------------------
# Clause-level extraction
# ---------------------------------------------------------------------------

_LIFE_RANGE_RE = re.compile(
    r"""
    \s*?
    [(\[]
    (?!b.)(?!d.)
    \s*?
    (\d{3,4})?      # birth year
    (\?)?
    \s?\D\s?        # separator
    (\d{2,4})?      # death year
    (\?)?
    [)\]]
    """,
    re.IGNORECASE | re.VERBOSE,
)
_DEATH_RE = re.compile(r"\s*?[(\[]\s*?d\.\s(\d{3,4})(\?)?\s*?[)\]]", re.IGNORECASE)
_BIRTH_RE = re.compile(r"\s*?[(\[]\s*?b\.\s(\d{3,4})(\?)?\s*?[)\]]", re.IGNORECASE)

_STOCK_RES: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:stock\s)?no\.\s.*\b", re.IGNORECASE),
    re.compile(r"\blot\.?\s.*\b", re.IGNORECASE),
    re.compile(r"\(L.\d{1,6}[a-z]?\)", re.IGNORECASE),
)

_HIS_GIFT_RE = re.compile(r"\b(?:his|her|their)\s+gift\s+to\b", re.IGNORECASE)
_HIS_SALE_RE = re.compile(r"\b(?:his|her|their)\s+sale,?\s", re.IGNORECASE)
_LEADING_TO_RE = re.compile(r"^to\s")
_LEADING_TO_BY_RE = re.compile(r"^(?:to|by)\b", re.IGNORECASE)
_PARENS_RE = re.compile(r"[()]")
_WRAPPED_RE = re.compile(r"\((.*)\)$")


def _life_date(year: str, uncertain: str | None) -> ImpreciseDate:
    dates = find_dates_in_string(year)
    if not dates:
        raise ProvenanceError(f"Unreadable life year {year!r}")
    date = dates[0]
    date.certain = uncertain is None
    return date


def find_birth_and_death(text: str) -> tuple[ImpreciseDate | None, ImpreciseDate | None, str]:
    """Pull ``(1880-1980)``, ``[1880?-]``, ``(b. 1900)``, ``(d. 1935?)`` out of a clause.

    A two-digit death year takes the birth year's century.
    Returns (birth, death, text_without_them).
    """
    if not text.strip():
        return None, None, text
    birth: ImpreciseDate | None = None
    death: ImpreciseDate | None = None
    m = _LIFE_RANGE_RE.search(text)
    if m:
        born, born_uncertain, died, died_uncertain = m.groups()
        if born is not None and died is not None and len(born) == 4 and len(died) == 2:
            died = born[:2] + died
        if born is not None:
            birth = _life_date(born, born_uncertain)
        if died is not None:
            death = _life_date(died, died_uncertain)
    else:
        if d := _DEATH_RE.search(text):
            death = _life_date(d.group(1), d.group(2))
        if b := _BIRTH_RE.search(text):
            birth = _life_date(b.group(1), b.group(2))
    text = _LIFE_RANGE_RE.sub("", text)
    text = _BIRTH_RE.sub("", text)
    text = _DEATH_RE.sub("", text)
    return birth, death, text


def extract_primary_ownership(text: str) -> tuple[bool, str]:
    """A clause wrapped in parentheses belongs to a dealer or agent, not an owner."""
    stripped = text.strip()
    if stripped.startswith("(") and stripped.endswith(")"):
        m = _WRAPPED_RE.search(stripped)
        if m:
            return False, m.group(1)
    return True, text


def extract_stock_numbers(text: str) -> tuple[str | None, str]:
    """Pull stock, lot and Lugt numbers. Returns (numbers_or_None, text)."""
    found: list[str] = []
    for pattern in _STOCK_RES:
        found.extend(pattern.findall(text))
    for number in found:
        text = text.replace(number, "").strip()
    stock = " ".join(n.strip() for n in found).strip()
    return stock or None, text


def extract_acquisition_method(text: str) -> tuple[str, AcquisitionMethod | None]:
    """Find and remove the acquisition-method wording of a clause."""
    if not text.strip():
        return text, None
    text = _HIS_GIFT_RE.sub("gift to", text)
    text = _HIS_SALE_RE.sub("sale ", text)
    text = _LEADING_TO_RE.sub("", text)
    method = acquisition.find(text)
    if method is not None:
        text = method.strip_form(text)
    return text.strip(), method


def _starts_with_extender(segment: str, lexicon: Lexicon) -> bool:
    return segment.startswith(" ") and segment[1:].startswith(lexicon.name_extenders)


def extract_name_and_location(
    text: str,
    lexicon: Lexicon = DEFAULT_LEXICON,
) -> tuple[str, str | None]:
    """Split "Name, Location" on the first comma that does not extend the name."""
    if not text.strip():
        return text, None
    segments = text.split(",")
    name = segments[0]
    counter = 1
    while counter < len(segments) and _starts_with_extender(segments[counter], lexicon):
        name += ", " + segments[counter].strip()
        counter += 1
    location: str | None = ",".join(segments[counter:]).strip() or None
    if location == name:
        location = None
    name = _LEADING_TO_BY_RE.sub("", name)
    if name.count("(") != name.count(")"):
        name = _PARENS_RE.sub("", name)
    if location is not None and location.count("(") != location.count(")"):
        location = _PARENS_RE.sub("", location)
    return name, location


def build_period(clause: str, notes: dict[str, str], lexicon: Lexicon = DEFAULT_LEXICON) -> Period:
    """Turn one clause (fake periods already restored) into an unlinked Period."""
    refs, text = extract_footnote_refs(clause)
    original_text = text

    certain, text = extract_leading_certainty(text)
    text = relocate_misplaced_certainty(text)
    primary_owner, text = extract_primary_ownership(text)
    birth, death, text = find_birth_and_death(text)
    stock_number, text = extract_stock_numbers(text)
    text, method = extract_acquisition_method(text)

    period = Period(
        acquisition_method=method,
        certain=certain,
        primary_owner=primary_owner,
        stock_number=stock_number,
        footnotes=resolve_footnotes(refs, notes),
        original_text=original_text,
    )
    if text.strip():
        text = period.parse_time_string(text)

    name, location = extract_name_and_location(text, lexicon)
    period.party = Party.from_text(name)
    period.location = Location.from_text(location) if location else None

    if method is None:
        name, period.acquisition_method = extract_acquisition_method(period.party.name)
        period.party.name = name

    period.party.birth = birth
    period.party.death = death
    return period


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract(text: str | None, lexicon: Lexicon | None = None) -> Timeline:
    """Parse a provenance record into a Timeline.

    Example::

        timeline = extract("David Newbury (d. 1935), Pittsburgh; gift to museum, 1968.")
        timeline[0].party.name         # "David Newbury"
        timeline[0].direct_transfer    # True
        timeline[1].time_string()      # "1968"
    """
    lexicon = lexicon or DEFAULT_LEXICON
    timeline = Timeline()
    if text is None or not text.strip():
        return timeline

    text = text.replace("\r", " ").replace("\n", " ")
    text = handle_asterisk_footnotes(text)
    text = handle_inline_footnotes(text, lexicon.footnote_divider)
    body, notes_text = extract_text_and_notes(text, lexicon.footnote_divider)
    notes = split_notes(notes_text)

    body = body.replace(".;", ";")
    body = rotate_footnotes(body)
    body = _BY_WHOM_RE.sub(";", body)
    body = convert_lugt_numbers(body)
    body = substitute_periods(body, lexicon)

    for clause, follows_semicolon in split_clauses(body):
        try:
            period = build_period(clause, notes, lexicon)
        except (ProvenanceError, ValueError) as exc:
            log.warning("Skipping unparsable clause %r: %s", clause, exc)
            continue
        if follows_semicolon:
            timeline.insert_direct(period)
        else:
            timeline.insert(period)
    return timeline


def from_json(data: str | bytes | Mapping[str, Any], lexicon: Lexicon | None = None) -> Timeline:
    """Rebuild a Timeline from ``Timeline.to_json()`` output.

    The records are turned back into provenance text and re-extracted, so
    the result is exactly what ``extract`` makes of the regenerated text.
    Records that cannot be read are logged and skipped.
    """
    if isinstance(data, (str, bytes)):
        data = orjson.loads(data)
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    records = data.get("period")
    if not isinstance(records, list):
        raise ValueError("Expected a 'period' list")

    timeline = Timeline()
    last_was_direct = False
    for index, record in enumerate(records):
        match period_from_record(record, index):
            case Ok(value=period):
                if last_was_direct:
                    timeline.insert_direct(period)
                else:
                    timeline.insert(period)
                last_was_direct = record.get("direct_transfer") in (True, "true")
            case Err(error=problem):
                log.warning(
                    "Skipping period record %d (%s): %s",
                    problem.index, problem.field or "record", problem.reason,
                )
                last_was_direct = False
    return extract(timeline.provenance(), lexicon)


def extract_html(html: str | None, lexicon: Lexicon | None = None) -> Timeline:
    """Parse provenance published as HTML (paragraphs, ``<br>``, ``<sup>`` notes)."""
    if not html:
        return Timeline()
    return extract(provenance_text_from_html(html), lexicon)
