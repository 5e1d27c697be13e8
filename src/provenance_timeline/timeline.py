"""Ordered arena of Periods with one direct-transfer flag per edge."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, overload

import orjson

from provenance_timeline.lexicon import FOOTNOTE_DIVIDER
from provenance_timeline.period import Period


class Timeline:
    """Periods in traversal order.

    ``_direct[i]`` is the flag on the edge from period ``i`` to ``i + 1``,
    so there is always one flag fewer than there are periods. A Period can
    belong to one timeline only.
    """

    def __init__(self) -> None:
        self._periods: list[Period] = []
        self._direct: list[bool] = []

    # -- construction -------------------------------------------------------

    def _append(self, period: Period, *, direct: bool) -> None:
        if period._timeline is not None:
            raise ValueError("Period already belongs to a timeline")
        if self._periods:
            self._direct.append(direct)
        period._timeline = self
        period._index = len(self._periods)
        self._periods.append(period)

    def insert(self, period: Period) -> None:
        """Append *period*; the edge from the previous last period is not direct."""
        self._append(period, direct=False)

    def insert_direct(self, period: Period) -> None:
        """Append *period*; the previous last period passed the work straight to it."""
        self._append(period, direct=True)

    # -- edges --------------------------------------------------------------

    def direct_transfer_after(self, index: int) -> bool | None:
        if 0 <= index < len(self._direct):
            return self._direct[index]
        return None

    def set_direct_transfer(self, index: int, value: bool) -> None:
        """Set the edge leaving period *index*; a no-op for the last period."""
        if 0 <= index < len(self._direct):
            self._direct[index] = bool(value)

    # -- container protocol -------------------------------------------------

    def __len__(self) -> int:
        return len(self._periods)

    def __iter__(self) -> Iterator[Period]:
        return iter(self._periods)

    @overload
    def __getitem__(self, index: int) -> Period: ...
    @overload
    def __getitem__(self, index: slice) -> list[Period]: ...

    def __getitem__(self, index: int | slice) -> Period | list[Period]:
        return self._periods[index]

    @property
    def first(self) -> Period | None:
        return self._periods[0] if self._periods else None

    @property
    def latest(self) -> Period | None:
        return self._periods[-1] if self._periods else None

    # -- serialization ------------------------------------------------------

    def provenance(self) -> str:
        """Write the whole timeline back out as provenance text.

        Periods are joined by ``; `` after a direct transfer and ``. ``
        otherwise. Footnotes become ``[n]`` markers with a trailing
        ``NOTES:`` block.
        """
        if not self._periods:
            return ""
        parts: list[str] = []
        notes: list[str] = []
        for period in self._periods:
            text = period.provenance()
            for note in period.footnotes:
                notes.append(note)
                text += f"[{len(notes)}]"
            parts.append(text)
            parts.append("; " if period.direct_transfer else ". ")
        parts[-1] = "."
        text = "".join(parts)
        if notes:
            text += f" {FOOTNOTE_DIVIDER} " + " ".join(
                f"[{n}] {note}" for n, note in enumerate(notes, start=1)
            )
        return text

    def to_dict(self) -> dict[str, Any]:
        return {"period": [p.to_dict() for p in self._periods]}

    def to_json(self, *, pretty: bool = False) -> str:
        opts = orjson.OPT_INDENT_2 if pretty else 0
        return orjson.dumps(self.to_dict(), option=opts).decode()

    def __str__(self) -> str:
        return self.provenance()

    def __repr__(self) -> str:
        return f"Timeline({len(self._periods)} periods)"
