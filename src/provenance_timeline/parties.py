"""Party and Location value wrappers."""

from __future__ import annotations

from dataclasses import dataclass

from provenance_timeline.certainty import split_certainty
from provenance_timeline.temporal import ImpreciseDate, Precision


def _life_year(date: ImpreciseDate | None) -> str:
    if date is None:
        return ""
    return str(date.copy(precision=Precision.YEAR))


@dataclass(slots=True)
class Party:
    """The owner of a work during one period."""

    name: str
    birth: ImpreciseDate | None = None
    death: ImpreciseDate | None = None
    certain: bool = True

    @classmethod
    def from_text(cls, text: str | None) -> Party:
        """Build from a name string; a trailing ``?`` marks it uncertain."""
        name, certain = split_certainty(text or "")
        return cls(name=name, certain=certain)

    def name_with_birth_death(self) -> str:
        """``David Newbury [1880-1980]``, ``David Newbury [-1935]``."""
        text = self.name if self.certain else f"{self.name}?"
        if self.birth is None and self.death is None:
            return text
        return f"{text} [{_life_year(self.birth)}-{_life_year(self.death)}]".strip()

    def __str__(self) -> str:
        return self.name if self.certain else f"{self.name}?"


@dataclass(slots=True)
class Location:
    """Where a work was held during one period."""

    name: str
    certain: bool = True

    @classmethod
    def from_text(cls, text: str | None) -> Location:
        name, certain = split_certainty(text or "")
        return cls(name=name, certain=certain)

    def __str__(self) -> str:
        return self.name if self.certain else f"{self.name}?"
