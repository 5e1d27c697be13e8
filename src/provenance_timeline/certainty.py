"""Certainty vocabulary shared by dates, parties, locations and periods."""

from __future__ import annotations

import re

# Order matters: the first word found at the head of a clause wins.
CERTAINTY_WORDS: tuple[str, ...] = (
    "?", "Possibly", "possibly", "Probably", "probably", "Likely", "likely",
)

# Leading word written for an uncertain period.
PERIOD_CERTAINTY_STRING = "Possibly"

_MISPLACED_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in CERTAINTY_WORDS if w != "?") + r")\s(.*?)(?=\Z|,)",
    re.IGNORECASE,
)


def strip_certainty_markers(text: str) -> str:
    """Remove every certainty word (and ``?``) from *text*."""
    for word in CERTAINTY_WORDS:
        text = text.replace(word, "")
    return text


def split_certainty(value: str) -> tuple[str, bool]:
    """Split a trailing ``?`` off a name. Returns (name, certain)."""
    value = value.strip()
    if value.endswith("?"):
        return value[:-1].rstrip(), False
    return value, True


def extract_leading_certainty(text: str) -> tuple[bool, str]:
    """Pull a certainty word off the first word of a clause.

    Returns (certain, remaining_text). ``"Probably maybe"`` -> (False, "maybe").
    """
    words = text.split()
    if not words:
        return True, ""
    first = words[0]
    for word in CERTAINTY_WORDS:
        if word in first:
            rest = first.replace(word, "", 1)
            remaining = ([rest] if rest else []) + words[1:]
            return False, " ".join(remaining).strip()
    return True, text.strip()


def relocate_misplaced_certainty(text: str) -> str:
    """Move a mid-clause ``probably X`` to a trailing ``X?`` on the same segment."""
    return _MISPLACED_RE.sub(r"\1?", text)
