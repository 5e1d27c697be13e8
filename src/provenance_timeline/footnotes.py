"""Footnote normalization.

Provenance records mark footnotes several ways:

    Sold to David[1]. NOTES: [1] Receipt in file.      bracket + divider
    Sold to David[1]. 1. Receipt in file.              numbered list
    Sold to David*. NOTES: * Receipt in file.          asterisks
    Sold to David [Receipt in file].                   inline note

Everything is rewritten to ``[n]`` markers and a ``{number: text}`` map
before the record is split into clauses.
"""

from __future__ import annotations

import re

from provenance_timeline.lexicon import FOOTNOTE_DIVIDER

MISSING_FOOTNOTE = "(Missing footnote)"

# The longest asterisk run rewritten as a numbered marker.
_MAX_ASTERISKS = 100

# A bracketed phrase of five or more characters that does not start with a
# digit, "b" or "d" (so "[1880-1980]" and "[b. 1900]" are left alone).
_INLINE_NOTE_RE = re.compile(r"\[(:?[A-Zace-z].{4,}?)\]")

_NUMBERED_LIST_START_RE = re.compile(r"(?<!\s\w\.)\s1\.\s")
_BRACKET_NOTE_RE = re.compile(r"^(\d+)\]?\s*(.*)", re.DOTALL)
_NUMBERED_NOTE_RE = re.compile(
    r"(\d+)\.\s"                 # "2. "
    r"(.*?)"                     # the note
    r"(?=\d+\.\s(?:\D|\d+(?!\.))"  # next "3. " that is not a year ending a sentence
    r"|$)",
)

_MARKER_RE = re.compile(r"\[(\d+)\]")
_NOTE_REFERENCE_RE = re.compile(r"\[.*?note (\d+)\]")
_MISPLACED_MARKER_RE = re.compile(r"([.;])(\[\d+\])")


def handle_asterisk_footnotes(text: str) -> str:
    """``***`` -> ``[3]``, ``*`` -> ``[1]``; longer runs first."""
    if "*" not in text:
        return text
    for count in range(_MAX_ASTERISKS, 0, -1):
        text = text.replace("*" * count, f"[{count}]")
    return text


def handle_inline_footnotes(text: str, divider: str = FOOTNOTE_DIVIDER) -> str:
    """Number inline ``[note text]`` footnotes and append them as a notes block."""
    found = _INLINE_NOTE_RE.findall(text)
    if not found:
        return text
    notes = []
    for n, note in enumerate(found, start=1):
        text = text.replace(f"[{note}]", f"[{n}]", 1)
        notes.append(f"[{n}] {note}")
    return f"{text} {divider} " + " ".join(notes)


def extract_text_and_notes(text: str, divider: str = FOOTNOTE_DIVIDER) -> tuple[str, str | None]:
    """Split a record into its clause text and its notes section.

    Tried in order: the divider word, a `` 1. `` numbered list, a second
    ``[1]`` marker. Returns (text, None) when there are no notes.
    """
    body, _, notes = text.partition(divider)
    if not notes.strip():
        parts = _NUMBERED_LIST_START_RE.split(text, maxsplit=1)
        if len(parts) == 2 and parts[1].strip():
            body, notes = parts[0], "1. " + parts[1]
        else:
            notes = ""
    if not notes.strip():
        parts = text.split("[1]")
        if len(parts) >= 3 and "[1]".join(parts[2:]).strip():
            body = parts[0] + "[1]" + parts[1]
            notes = "[1] " + "[1]".join(parts[2:])
    if not notes.strip():
        return text.strip(), None
    return body.strip(), notes.strip()


def split_notes(notes: str | None) -> dict[str, str]:
    """Map footnote numbers to their text.

    >>> split_notes("[1] Receipt. [2] Letter.")
    {'1': 'Receipt.', '2': 'Letter.'}
    """
    if not notes:
        return {}
    notes = notes.strip()
    out: dict[str, str] = {}
    if notes.startswith("["):
        for chunk in notes.split("["):
            m = _BRACKET_NOTE_RE.match(chunk)
            if m:
                out[m.group(1)] = m.group(2).strip()
    elif notes.startswith("1."):
        for m in _NUMBERED_NOTE_RE.finditer(notes):
            out[m.group(1)] = m.group(2).strip()
    return out


def rotate_footnotes(text: str) -> str:
    """Move a marker in front of the clause terminator: ``x.[1]`` -> ``x[1].``."""
    return _MISPLACED_MARKER_RE.sub(r"\2\1", text)


def extract_footnote_refs(clause: str) -> tuple[list[str], str]:
    """Pull ``[n]`` and ``[see note n]`` references out of one clause.

    Returns (numbers, clause_without_markers).
    """
    refs = _MARKER_RE.findall(clause) + _NOTE_REFERENCE_RE.findall(clause)
    clause = _MARKER_RE.sub("", clause)
    clause = _NOTE_REFERENCE_RE.sub("", clause)
    return refs, clause.strip()


def resolve_footnotes(refs: list[str], notes: dict[str, str]) -> list[str]:
    return [notes.get(n, MISSING_FOOTNOTE) for n in refs]
