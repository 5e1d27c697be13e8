"""Static vocabularies used when splitting provenance text into clauses.

    TITLES / NAME_SUFFIXES / ABBREVIATIONS - a "." after these never ends a clause
    NAME_EXTENDERS - a ", " before these never ends a party name
    STATES - US state codes; "Pa." is rewritten "PA" so its "." stays put

CO, OH, OK and OR are left out of STATES: as words they are too easy to
confuse with ordinary text.

A :class:`Lexicon` bundles the tables. Callers that need extra vocabulary
load it from JSON with :func:`load_lexicon`; the extra entries are added to
the defaults, never replace them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from provenance_timeline.io_utils import load_json

TITLES: tuple[str, ...] = (
    "Mme.", "Mlle.", "Mr.", "Mrs.", "M.", "Col.", "Sgt.", "Dr.", "Capt.", "Hon.", "Prof.",
)

NAME_SUFFIXES: tuple[str, ...] = ("Esq.", "Ph.D", "Jr.", "Sr.")

ABBREVIATIONS: tuple[str, ...] = TITLES + NAME_SUFFIXES + (
    "no.", "No.", "anon.", "ca.", "lot.", "illus.", "Miss.",
    "Co.", "inc.", "Inc.",
    "Ltd.", "Dept.",
    "P.", "DC.", "D.C.",
    "Thos.",
    "Ave.", "St.", "Rd.",
    "Jan.", "Feb.", "Mar.", "Apr.", "Jun.", "Jul.", "Aug.", "Sept.", "Sep.",
    "Oct.", "Nov.", "Dec.",
)

NAME_EXTENDERS: tuple[str, ...] = (
    "Esq", "Jr", "Sr", "Count", "Earl", "Lord", "MP", "M.P.", "marquis", "Dowager", "Baroness",
    "Inc.", "Ltd", "Ltd.", "LLC", "llc",
    "1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th", "10th",
    "the artist", "the sitter", "the manufacturer",
    "son of", "daughter of", "wife of", "husband of", "nephew of", "niece of",
    "brother of", "sister of", "uncle of", "aunt of",
    "grandparent of", "grandfather of", "grandmother of",
    "his wife", "his nephew", "his son", "his daughter", "his niece",
    "his godson", "his goddaughter", "his sister", "his brother",
    "her husband", "her daughter", "her son", "her nephew", "her niece",
    "her godson", "her goddaughter", "her brother", "her sister",
    "their daughter", "their son",
    "his widow", "her widow", "her widower", "his widower",
    "Carnegie Institute",
)

STATES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH",
    "NJ", "NM", "NY", "NC", "ND", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA",
    "WA", "WV", "WI", "WY",
)

# Separates the clauses of a record from its footnotes.
FOOTNOTE_DIVIDER = "NOTES:"

# Stands in for a "." that does not end a clause while the text is split.
FAKE_PERIOD = "\u2024"

_STATE_RE = re.compile(r"^[A-Z]{2}$")

LEXICON_KEYS: tuple[str, ...] = (
    "titles", "name_suffixes", "abbreviations", "name_extenders", "states",
)


def _merge(base: tuple[str, ...], extra: Iterable[str]) -> tuple[str, ...]:
    seen = set(base)
    merged = list(base)
    for item in extra:
        if item not in seen:
            seen.add(item)
            merged.append(item)
    return tuple(merged)


@dataclass(frozen=True, slots=True)
class Lexicon:
    """The vocabularies one extraction run works with."""

    titles: tuple[str, ...] = TITLES
    name_suffixes: tuple[str, ...] = NAME_SUFFIXES
    abbreviations: tuple[str, ...] = ABBREVIATIONS
    name_extenders: tuple[str, ...] = NAME_EXTENDERS
    states: tuple[str, ...] = STATES
    footnote_divider: str = FOOTNOTE_DIVIDER

    def extended(
        self,
        *,
        titles: Iterable[str] = (),
        name_suffixes: Iterable[str] = (),
        abbreviations: Iterable[str] = (),
        name_extenders: Iterable[str] = (),
        states: Iterable[str] = (),
    ) -> Lexicon:
        """A copy with extra entries. New titles and suffixes are abbreviations too."""
        titles, name_suffixes = tuple(titles), tuple(name_suffixes)
        states = tuple(states)
        for code in states:
            if not _STATE_RE.match(code):
                raise ValueError(f"State codes are two capital letters, got {code!r}")
        return Lexicon(
            titles=_merge(self.titles, titles),
            name_suffixes=_merge(self.name_suffixes, name_suffixes),
            abbreviations=_merge(self.abbreviations, (*titles, *name_suffixes, *abbreviations)),
            name_extenders=_merge(self.name_extenders, name_extenders),
            states=_merge(self.states, states),
            footnote_divider=self.footnote_divider,
        )


DEFAULT_LEXICON = Lexicon()


def load_lexicon(path: Path) -> Lexicon:
    """Read extra vocabulary from a JSON object and add it to the defaults.

    Example file::

        {"titles": ["Rev."], "name_extenders": ["Bart."]}

    Raises ValueError on unknown keys or on values that are not lists of
    strings.
    """
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    unknown = sorted(set(data) - set(LEXICON_KEYS))
    if unknown:
        raise ValueError(f"{path}: unknown lexicon keys {unknown}; expected {list(LEXICON_KEYS)}")
    for key, values in data.items():
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValueError(f"{path}: {key!r} must be a list of strings")
    return DEFAULT_LEXICON.extended(**data)
