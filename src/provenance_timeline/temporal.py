"""Imprecise dates and uncertainty intervals.

Three value types:
  Precision     - granularity of a date (century .. day), ordered coarse to fine
  ImpreciseDate - calendar fragments + precision + certainty flag
  TimeSpan      - (earliest_raw, latest_raw) bounds on a single instant

Years are astronomical integers: ``-700`` is the year written "700 BCE".
Negative years come straight from era negation in the extractor, so
"50 BCE" is stored as ``-50``.

The derived bounds (``earliest``/``latest``) are always computed from the
stored fragments and the current precision, never cached, so changing
``precision`` after construction moves the bounds with it.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import IntEnum
from functools import total_ordering

from provenance_timeline.provenance_types import DateError

# ---------------------------------------------------------------------------
# Precision
# ---------------------------------------------------------------------------


class Precision(IntEnum):
    """Granularity of an ImpreciseDate, coarsest first."""

    CENTURY = 0
    DECADE = 1
    YEAR = 2
    MONTH = 3
    DAY = 4

    @property
    def fragment_count(self) -> int:
        """Number of leading fragments (year, month, day) that are meaningful."""
        if self <= Precision.YEAR:
            return 1
        if self == Precision.MONTH:
            return 2
        return 3

    @classmethod
    def from_name(cls, name: str) -> Precision:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown precision: {name!r}") from None


MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_ISO_RE = re.compile(r"^(-?)(\d{1,6})-(\d{2})-(\d{2})$")


def days_in_month(year: int, month: int) -> int:
    """Days in *month* of the proleptic Gregorian *year* (any sign)."""
    if month == 2:
        return 29 if calendar.isleap(year) else 28
    if month in (4, 6, 9, 11):
        return 30
    return 31


def ordinal_suffix(n: int) -> str:
    """English ordinal suffix: 1 -> 'st', 12 -> 'th', 23 -> 'rd'."""
    if 10 <= n % 100 <= 20:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def _year_text(year: int) -> str:
    return f"{-year} BCE" if year < 0 else str(year)


# ---------------------------------------------------------------------------
# ImpreciseDate
# ---------------------------------------------------------------------------


@total_ordering
@dataclass(slots=True, eq=False)
class ImpreciseDate:
    """A calendar date known only to a given precision, with a certainty flag.

    Equality and ordering compare the first instant consistent with the
    precision (``earliest``), so a YEAR date read back as 1995-06-15 still
    equals 1995. Use :meth:`same_as` when precision must match as well.

    Invariants (enforced in __post_init__):
        - 1 <= month <= 12
        - 1 <= day <= days_in_month(year, month)
    """

    year: int
    month: int = 1
    day: int = 1
    precision: Precision = Precision.DAY
    certain: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"ImpreciseDate.month must be in 1..12, got {self.month}")
        if not 1 <= self.day <= days_in_month(self.year, self.month):
            raise ValueError(
                f"ImpreciseDate.day {self.day} is out of range for "
                f"{self.year:04d}-{self.month:02d}"
            )

    # -- construction -------------------------------------------------------

    @classmethod
    def century(cls, number: int, *, bce: bool = False) -> ImpreciseDate:
        """The Nth century. CE centuries start at their first year (7 -> 601);
        BCE centuries are anchored so that they run forward from -100*N."""
        if number < 1:
            raise ValueError(f"Century number must be >= 1, got {number}")
        year = -(100 * number) if bce else (number - 1) * 100 + 1
        return cls(year, precision=Precision.CENTURY)

    @classmethod
    def today(cls) -> ImpreciseDate:
        now = datetime.now(UTC).date()
        return cls(now.year, now.month, now.day, Precision.DAY)

    @classmethod
    def from_isoformat(
        cls,
        value: str,
        precision: Precision = Precision.DAY,
        *,
        certain: bool = True,
    ) -> ImpreciseDate:
        """Parse the signed ISO form written by :meth:`isoformat`."""
        m = _ISO_RE.match(value.strip())
        if not m:
            raise ValueError(f"Not an ISO date: {value!r}")
        sign, year, month, day = m.groups()
        y = -int(year) if sign else int(year)
        return cls(y, int(month), int(day), precision, certain)

    def copy(self, **changes: object) -> ImpreciseDate:
        return replace(self, **changes)  # type: ignore[arg-type]

    # -- derived bounds -----------------------------------------------------

    @property
    def fragments(self) -> tuple[int, ...]:
        """The meaningful leading fragments for this precision."""
        return (self.year, self.month, self.day)[: self.precision.fragment_count]

    def _first_year(self) -> int:
        if self.precision == Precision.CENTURY:
            if self.year > 0:
                return ((self.year - 1) // 100) * 100 + 1
            return (self.year // 100) * 100
        if self.precision == Precision.DECADE:
            return self.year - self.year % 10
        return self.year

    @property
    def earliest(self) -> ImpreciseDate:
        """First day consistent with the precision, as a DAY-precision copy."""
        if self.precision <= Precision.YEAR:
            return ImpreciseDate(self._first_year(), 1, 1, Precision.DAY, self.certain)
        if self.precision == Precision.MONTH:
            return ImpreciseDate(self.year, self.month, 1, Precision.DAY, self.certain)
        return self.copy(precision=Precision.DAY)

    @property
    def latest(self) -> ImpreciseDate:
        """Last day consistent with the precision, as a DAY-precision copy."""
        span = {Precision.CENTURY: 99, Precision.DECADE: 9, Precision.YEAR: 0}
        if self.precision in span:
            year = self._first_year() + span[self.precision]
            return ImpreciseDate(year, 12, 31, Precision.DAY, self.certain)
        if self.precision == Precision.MONTH:
            last = days_in_month(self.year, self.month)
            return ImpreciseDate(self.year, self.month, last, Precision.DAY, self.certain)
        return self.copy(precision=Precision.DAY)

    @property
    def century_number(self) -> int:
        first = self._first_year() if self.precision == Precision.CENTURY else self.year
        if first > 0:
            return (first - 1) // 100 + 1
        return -((first // 100) * 100) // 100

    # -- comparison ---------------------------------------------------------

    def _key(self) -> tuple[int, int, int]:
        first = self.earliest
        return (first.year, first.month, first.day)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImpreciseDate):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: ImpreciseDate) -> bool:
        if not isinstance(other, ImpreciseDate):
            return NotImplemented
        return self._key() < other._key()

    __hash__ = None  # type: ignore[assignment]

    def same_as(self, other: ImpreciseDate | None) -> bool:
        """Same normalized instant at the same precision."""
        return other is not None and self == other and self.precision == other.precision

    # -- rendering ----------------------------------------------------------

    def isoformat(self) -> str:
        sign = "-" if self.year < 0 else ""
        return f"{sign}{abs(self.year):04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        if self.precision == Precision.CENTURY:
            n = self.century_number
            text = f"the {n}{ordinal_suffix(n)} Century"
            if self.year <= 0:
                text += " BCE"
        elif self.precision == Precision.DECADE:
            first = self._first_year()
            text = f"the {abs(first)}s" + (" BCE" if first < 0 else "")
        elif self.precision == Precision.YEAR:
            text = _year_text(self.year)
        elif self.precision == Precision.MONTH:
            text = f"{MONTH_NAMES[self.month - 1]} {_year_text(self.year)}"
        else:
            text = f"{MONTH_NAMES[self.month - 1]} {self.day}, {_year_text(self.year)}"
        return text if self.certain else f"{text}?"


# ---------------------------------------------------------------------------
# TimeSpan
# ---------------------------------------------------------------------------


def _date_from_phrase(text: str) -> ImpreciseDate:
    """First date found in *text*; DateError when there is none."""
    from provenance_timeline.date_extractor import find_dates_in_string

    dates = find_dates_in_string(text)
    if not dates:
        raise DateError(f"No date found in {text!r}")
    return dates[0]


def _coerce_bound(value: ImpreciseDate | str | None) -> ImpreciseDate | None:
    if value is None or isinstance(value, ImpreciseDate):
        return value
    return _date_from_phrase(value)


@dataclass(slots=True, eq=False)
class TimeSpan:
    """Uncertainty about when a single instant happened.

    Not a duration: the instant lies somewhere between ``earliest`` and
    ``latest``. Either raw bound may be None, meaning unbounded on that side.
    """

    earliest_raw: ImpreciseDate | None = None
    latest_raw: ImpreciseDate | None = None

    def __post_init__(self) -> None:
        if self.earliest_raw is None and self.latest_raw is None:
            raise ValueError("TimeSpan needs at least one bound")

    @classmethod
    def parse(cls, value: TimeSpan | str | None) -> TimeSpan | None:
        """Both bounds from the first date in one phrase.

        The two bounds are independent objects so their certainty can be
        changed separately. Raises DateError when the phrase holds no date.
        """
        if value is None or isinstance(value, TimeSpan):
            return value
        if not value.strip():
            return None
        return cls(_date_from_phrase(value), _date_from_phrase(value))

    @classmethod
    def from_strings(
        cls,
        earliest: ImpreciseDate | str | None,
        latest: ImpreciseDate | str | None,
    ) -> TimeSpan:
        """Each side parsed independently; None leaves that side unbounded."""
        return cls(_coerce_bound(earliest), _coerce_bound(latest))

    @property
    def earliest(self) -> ImpreciseDate | None:
        return self.earliest_raw.earliest if self.earliest_raw else None

    @property
    def latest(self) -> ImpreciseDate | None:
        return self.latest_raw.latest if self.latest_raw else None

    @property
    def is_precise(self) -> bool:
        return self.earliest_raw is not None and self.earliest_raw.same_as(self.latest_raw)

    def same(self, other: TimeSpan | None) -> bool:
        """Equal outer bounds."""
        return (
            other is not None
            and self.earliest == other.earliest
            and self.latest == other.latest
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSpan):
            return NotImplemented
        return _same_bound(self.earliest_raw, other.earliest_raw) and _same_bound(
            self.latest_raw, other.latest_raw
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.is_precise:
            return str(self.earliest_raw)
        if self.earliest_raw is not None and self.latest_raw is not None:
            return f"sometime between {self.earliest_raw} and {self.latest_raw}"
        if self.latest_raw is not None:
            return f"by {self.latest_raw}"
        return f"after {self.earliest_raw}"


def _same_bound(a: ImpreciseDate | None, b: ImpreciseDate | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.same_as(b)
