"""HTML-to-text preparation and encoding-safe file reading.

Collection web pages publish provenance as HTML: one owner per ``<p>`` or
``<br>``-separated line, footnote markers as ``<sup>1</sup>`` and a notes
list underneath. ``provenance_text_from_html`` flattens that into the plain
single-string form the extractor reads:

- every block element ends a clause (a ``.`` is added when the line has no
  terminator of its own),
- ``<sup>n</sup>`` becomes ``[n]``,
- zero-width characters are dropped, curly quotes straightened and
  non-breaking spaces turned into plain spaces.
"""
from __future__ import annotations

import re
from pathlib import Path

from bs4 import BeautifulSoup
from bs4.element import Tag

# ---------------------------------------------------------------------------
# Block-level tags that end a clause
# ---------------------------------------------------------------------------

_BLOCK_TAGS: list[str] = [
    "p", "div", "br", "tr", "li",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table",
]

# Marks a block boundary; newlines in the source are plain whitespace.
_BLOCK_BREAK = "\u2029"

_CLAUSE_TERMINATORS = (".", ";", ":")

_FOOTNOTE_MARK_RE = re.compile(r"^\s*(\d{1,3}|\*{1,3})\s*$")


# ---------------------------------------------------------------------------
# HTML text extraction
# ---------------------------------------------------------------------------


def provenance_text_from_html(raw_html: str) -> str:
    """Flatten provenance HTML into one line of clause-terminated text.

    Returns an empty string if *raw_html* is empty.
    """
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")
    _mark_footnote_references(soup)
    _insert_block_breaks(soup)
    text = soup.get_text(separator="")
    text = text.replace("\n", " ")

    text = strip_zero_width(text)
    text = normalize_quotes(text)
    text = text.replace("\u00a0", " ")

    lines: list[str] = []
    for line in text.split(_BLOCK_BREAK):
        line = re.sub(r"\s+", " ", line).strip()
        if not line:
            continue
        if not line.endswith(_CLAUSE_TERMINATORS):
            line += "."
        lines.append(line)
    return " ".join(lines)


def _mark_footnote_references(soup: BeautifulSoup) -> None:
    """Rewrite ``<sup>3</sup>`` as ``[3]``; asterisk marks are kept as-is."""
    for sup in soup.find_all("sup"):
        if not isinstance(sup, Tag):
            continue
        m = _FOOTNOTE_MARK_RE.match(sup.get_text())
        if not m:
            continue
        mark = m.group(1)
        sup.replace_with(mark if mark.startswith("*") else f"[{mark}]")


# ---------------------------------------------------------------------------
# Encoding-safe file reading
# ---------------------------------------------------------------------------


def read_file(fpath: Path) -> str:
    """Read a text file with encoding fallback: UTF-8 -> CP1252 -> replace.

    CP1252 covers exports from older collection-management systems with
    smart quotes (0x93/0x94).
    """
    try:
        return fpath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        try:
            return fpath.read_text(encoding="cp1252")
        except UnicodeDecodeError:
            with open(fpath, errors="replace") as f:
                return f.read()


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _insert_block_breaks(soup: BeautifulSoup) -> None:
    """Insert block-break markers before and after block-level HTML elements."""
    for tag in soup.find_all(_BLOCK_TAGS):
        if not isinstance(tag, Tag):
            continue
        tag.insert_before(_BLOCK_BREAK)
        if tag.name != "br":
            tag.insert_after(_BLOCK_BREAK)


# U+200B (ZWSP), U+200C (ZWNJ), U+FEFF (BOM): invisible characters from
# HTML/Word conversions that silently break regex matching.
_ZERO_WIDTH_RE = re.compile("[\u200b\u200c\ufeff]")


def strip_zero_width(text: str) -> str:
    """Remove zero-width Unicode characters that break regex matching."""
    return _ZERO_WIDTH_RE.sub("", text)


_QUOTE_TABLE = str.maketrans({
    "\u201c": '"', "\u201d": '"', "\u201e": '"',
    "\u2018": "'", "\u2019": "'", "\u201a": "'",
})


def normalize_quotes(text: str) -> str:
    """Convert smart quotes to their straight ASCII forms.

    Apostrophes in owner names ("O\u2019Brien") then match the same way
    whether the record was typed or pasted from a word processor.
    """
    return text.translate(_QUOTE_TABLE)
