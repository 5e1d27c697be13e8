"""A single ownership period within a provenance timeline.

A Period knows its party, location, acquisition method and two TimeSpans:

    beginning  - when the party acquired the work (botb .. eotb)
    ending     - when the party gave it up       (bote .. eote)

Periods live inside a Timeline arena. Neighbours are reached through the
owning timeline by index, so a Period on its own has no previous or next
period and ``direct_transfer`` reads None.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from provenance_timeline import acquisition
from provenance_timeline.acquisition import AcquisitionMethod
from provenance_timeline.certainty import PERIOD_CERTAINTY_STRING, strip_certainty_markers
from provenance_timeline.parties import Location, Party
from provenance_timeline.provenance_types import Err, MalformedPeriodInput, Ok, Result
from provenance_timeline.temporal import ImpreciseDate, Precision, TimeSpan
from provenance_timeline.time_phrase import resolve_time_phrase

if TYPE_CHECKING:
    from provenance_timeline.timeline import Timeline

log = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def _ending_phrase(ending: TimeSpan) -> str:
    text = str(ending)
    if text.startswith("after "):
        return "at least " + text[len("after "):]
    if text.startswith("by "):
        return "sometime before " + text[len("by "):]
    return text


def _squash(text: str) -> str:
    return text.strip().lower().replace(" ", "").replace(",", "")


# ---------------------------------------------------------------------------
# Output record
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PeriodOutput:
    """Denormalized, flat view of a Period.

    Date fields hold ImpreciseDate objects; :meth:`as_dict` renders them as
    signed ISO strings and precisions as lower-case names.
    """

    party: str = ""
    party_certainty: bool = True
    birth: ImpreciseDate | None = None
    birth_certainty: bool | None = None
    death: ImpreciseDate | None = None
    death_certainty: bool | None = None
    location: str | None = None
    location_certainty: bool | None = None
    botb: ImpreciseDate | None = None
    botb_certainty: bool | None = None
    botb_precision: Precision | None = None
    eotb: ImpreciseDate | None = None
    eotb_certainty: bool | None = None
    eotb_precision: Precision | None = None
    bote: ImpreciseDate | None = None
    bote_certainty: bool | None = None
    bote_precision: Precision | None = None
    eote: ImpreciseDate | None = None
    eote_certainty: bool | None = None
    eote_precision: Precision | None = None
    original_text: str | None = None
    provenance: str = ""
    parsable: bool = True
    direct_transfer: bool | None = None
    stock_number: str | None = None
    footnote: str = ""
    primary_owner: bool = True
    period_certainty: bool = True
    acquisition_method: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ImpreciseDate):
                value = value.isoformat()
            elif isinstance(value, Precision):
                value = value.name.lower()
            out[f.name] = value
        return out


# ---------------------------------------------------------------------------
# Period
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class Period:
    """One party's ownership of a work."""

    party: Party = field(default_factory=lambda: Party(""))
    location: Location | None = None
    acquisition_method: AcquisitionMethod | None = None
    beginning: TimeSpan | None = None
    ending: TimeSpan | None = None
    certain: bool = True
    primary_owner: bool = True
    stock_number: str | None = None
    footnotes: list[str] = field(default_factory=list)
    original_text: str | None = None
    _timeline: Timeline | None = field(default=None, init=False, repr=False)
    _index: int = field(default=-1, init=False, repr=False)

    # -- arena navigation ---------------------------------------------------

    @property
    def timeline(self) -> Timeline | None:
        return self._timeline

    @property
    def previous_period(self) -> Period | None:
        if self._timeline is None or self._index <= 0:
            return None
        return self._timeline[self._index - 1]

    @property
    def next_period(self) -> Period | None:
        if self._timeline is None or self._index + 1 >= len(self._timeline):
            return None
        return self._timeline[self._index + 1]

    @property
    def direct_transfer(self) -> bool | None:
        """Whether the work passed straight to the next period (None at the end)."""
        if self._timeline is None:
            return None
        return self._timeline.direct_transfer_after(self._index)

    @direct_transfer.setter
    def direct_transfer(self, value: bool) -> None:
        if self._timeline is not None:
            self._timeline.set_direct_transfer(self._index, value)

    @property
    def was_directly_transferred(self) -> bool | None:
        """Whether the work came straight from the previous period (None at the start)."""
        previous = self.previous_period
        return previous.direct_transfer if previous is not None else None

    def is_before(self, other: Period) -> bool:
        return (
            self._timeline is not None
            and other._timeline is self._timeline
            and other._index > self._index
        )

    def is_after(self, other: Period) -> bool:
        return (
            self._timeline is not None
            and other._timeline is self._timeline
            and other._index < self._index
        )

    def siblings(self) -> list[Period]:
        """Every period of the owning timeline, earliest first."""
        if self._timeline is None:
            return [self]
        return list(self._timeline)

    # -- time ---------------------------------------------------------------

    def parse_time_string(self, text: str) -> str:
        """Set beginning/ending from *text*; return the text left over."""
        return resolve_time_phrase(self, text)

    @property
    def botb(self) -> ImpreciseDate | None:
        """Beginning of the beginning: the last date the party surely did NOT own it."""
        return self.beginning.earliest if self.beginning else None

    @property
    def eotb(self) -> ImpreciseDate | None:
        """End of the beginning: the first date the party surely owned it."""
        return self.beginning.latest if self.beginning else None

    @property
    def bote(self) -> ImpreciseDate | None:
        """Beginning of the end: the last date the party surely owned it."""
        return self.ending.earliest if self.ending else None

    @property
    def eote(self) -> ImpreciseDate | None:
        """End of the end: the first date the party surely no longer owned it."""
        return self.ending.latest if self.ending else None

    def is_ongoing(self) -> bool:
        """Begun, never ended, and nothing after it."""
        return self.next_period is None and self.ending is None and self.beginning is not None

    def max_timespan(self) -> TimeSpan | None:
        if self.is_ongoing():
            return TimeSpan(self.botb, ImpreciseDate.today())
        if self.beginning is None or self.ending is None:
            return None
        if self.botb is None and self.eote is None:
            return None
        return TimeSpan(self.botb, self.eote)

    def earliest_possible(self) -> ImpreciseDate | None:
        """botb, or else the best bound inferred from birth and earlier periods."""
        if self.botb is not None:
            return self.botb
        birth = self.party.birth.earliest if self.party.birth else None
        inferred: ImpreciseDate | None = None
        previous = self.previous_period
        if previous is not None:
            inferred = previous.bote or previous.eotb or previous.botb
            if inferred is None:
                inferred = previous.earliest_possible()
        if inferred is not None and birth is not None:
            return max(inferred, birth)
        return inferred or birth

    def latest_possible(self) -> ImpreciseDate:
        """eote, or else the best bound inferred from death and later periods.

        An ongoing period, and one with nothing to go on, ends today.
        """
        if self.eote is not None:
            return self.eote
        if self.is_ongoing():
            return ImpreciseDate.today()
        death = self.party.death.latest if self.party.death else None
        inferred: ImpreciseDate | None = None
        following = self.next_period
        if following is not None:
            inferred = following.eotb or following.bote or following.eote
            if inferred is None:
                inferred = following.latest_possible()
        if inferred is not None and death is not None:
            return min(inferred, death)
        return inferred or death or ImpreciseDate.today()

    def earliest_definite(self) -> ImpreciseDate | None:
        return self.eotb or self.bote

    def latest_definite(self) -> ImpreciseDate | None:
        if self.is_ongoing():
            return ImpreciseDate.today()
        if self.bote is not None:
            return self.bote
        following = self.next_period
        if (
            self.direct_transfer
            and following is not None
            and following.beginning is not None
            and following.beginning.is_precise
        ):
            return following.botb
        return self.eotb

    def time_string(self) -> str | None:
        """Human phrase for the dates of this period, or None without dates."""
        b, e = self.beginning, self.ending
        if (
            b is not None and e is not None
            and b.earliest_raw is None and e.latest_raw is None
            and b.latest_raw is not None and e.earliest_raw is not None
            and b.latest_raw.precision == e.earliest_raw.precision
            and b.latest_raw.fragments == e.earliest_raw.fragments
        ):
            text = f"in {b.latest_raw}"
        elif (
            b is not None and e is not None
            and b.is_precise and e.is_precise
            and self.botb == self.eote
        ):
            text = f"on {b}"
        else:
            text = str(b) if b is not None else ""
            if e is not None:
                text += " until " + _ending_phrase(e)
        text = _WHITESPACE_RE.sub(" ", text).strip()
        return text or None

    # -- text ---------------------------------------------------------------

    def provenance(self) -> str:
        """Regenerate the provenance clause for this period."""
        name = self.party.name_with_birth_death()
        if self.acquisition_method is not None:
            name = self.acquisition_method.attach_to_name(name)
        pieces = [
            name,
            str(self.location) if self.location is not None else None,
            self.time_string(),
            self.stock_number,
        ]
        text = ", ".join(p for p in pieces if p)
        if not self.certain:
            text = f"{PERIOD_CERTAINTY_STRING} {text}"
        text = text.replace("  ", " ")
        if text and not self.was_directly_transferred:
            text = text[0].upper() + text[1:]
        if not self.primary_owner:
            text = f"({text})"
        return text

    def parsable(self, strict: bool = False) -> bool:
        """Does :meth:`provenance` reproduce ``original_text``?

        Case and certainty words are ignored. Unless *strict*, a difference
        in acquisition-method wording, spacing or commas is tolerated too.
        """
        if self.original_text is None:
            return True
        original = strip_certainty_markers(self.original_text)
        generated = strip_certainty_markers(self.provenance())
        if original.strip().lower() == generated.strip().lower():
            return True
        if strict:
            return False
        method = acquisition.find(original)
        if method is None:
            return False
        original = method.attach_to_name(method.strip_form(original))
        return _squash(original) == _squash(generated)

    def __str__(self) -> str:
        return self.provenance()

    # -- output -------------------------------------------------------------

    def generate_output(self) -> PeriodOutput:
        out = PeriodOutput(
            party=self.party.name,
            party_certainty=self.party.certain,
            original_text=self.original_text,
            provenance=self.provenance(),
            parsable=self.parsable(),
            direct_transfer=self.direct_transfer,
            stock_number=self.stock_number,
            footnote="; ".join(self.footnotes),
            primary_owner=self.primary_owner,
            period_certainty=self.certain,
            acquisition_method=self.acquisition_method.name if self.acquisition_method else None,
        )
        if self.party.birth is not None:
            out.birth = self.party.birth.earliest
            out.birth_certainty = self.party.birth.certain
        if self.party.death is not None:
            out.death = self.party.death.latest
            out.death_certainty = self.party.death.certain
        if self.location is not None:
            out.location = self.location.name
            out.location_certainty = self.location.certain
        for prefix, raw in (
            ("botb", self.beginning.earliest_raw if self.beginning else None),
            ("eotb", self.beginning.latest_raw if self.beginning else None),
            ("bote", self.ending.earliest_raw if self.ending else None),
            ("eote", self.ending.latest_raw if self.ending else None),
        ):
            if raw is None:
                continue
            setattr(out, prefix, raw)
            setattr(out, f"{prefix}_certainty", raw.certain)
            setattr(out, f"{prefix}_precision", raw.precision)
        return out

    def to_dict(self) -> dict[str, Any]:
        return self.generate_output().as_dict()


# ---------------------------------------------------------------------------
# Record -> Period
# ---------------------------------------------------------------------------


def _flag(values: Mapping[str, Any], key: str, default: bool = True) -> bool:
    value = values.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise TypeError(f"expected a boolean, got {value!r}")


def _precision(values: Mapping[str, Any], key: str, default: Precision) -> Precision:
    value = values.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return Precision.from_name(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return Precision(value)
    raise TypeError(f"expected a precision name, got {value!r}")


def _record_date(
    values: Mapping[str, Any],
    key: str,
    default_precision: Precision = Precision.DAY,
) -> ImpreciseDate | None:
    value = values.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO date string, got {value!r}")
    return ImpreciseDate.from_isoformat(
        value,
        _precision(values, f"{key}_precision", default_precision),
        certain=_flag(values, f"{key}_certainty"),
    )


def _span_from_record(values: Mapping[str, Any], first: str, second: str) -> TimeSpan | None:
    earliest = _record_date(values, first)
    latest = _record_date(values, second)
    if earliest is None and latest is None:
        return None
    return TimeSpan(earliest, latest)


def period_from_record(record: Any, index: int = 0) -> Result[Period, MalformedPeriodInput]:
    """Rebuild a Period from a record written by :meth:`PeriodOutput.as_dict`.

    Blank strings count as missing. Birth and death come back at YEAR
    precision. The record's ``direct_transfer`` is left to the caller.
    """
    if not isinstance(record, Mapping):
        return Err(MalformedPeriodInput(
            index=index, field="", reason=f"expected an object, got {type(record).__name__}",
        ))
    values = {
        k: v for k, v in record.items()
        if not (isinstance(v, str) and not v.strip())
    }
    current = ""
    try:
        current = "party"
        party_name = values.get("party") or ""
        if not isinstance(party_name, str):
            raise TypeError(f"expected a string, got {party_name!r}")
        party = Party(party_name.strip(), certain=_flag(values, "party_certainty"))

        current = "birth"
        birth = _record_date(values, "birth")
        if birth is not None:
            party.birth = birth.copy(precision=Precision.YEAR)

        current = "death"
        death = _record_date(values, "death")
        if death is not None:
            party.death = ImpreciseDate(death.year, precision=Precision.YEAR, certain=death.certain)

        current = "location"
        location = None
        if values.get("location") is not None:
            location = Location(str(values["location"]).strip(), _flag(values, "location_certainty"))

        current = "beginning"
        beginning = _span_from_record(values, "botb", "eotb")
        current = "ending"
        ending = _span_from_record(values, "bote", "eote")

        current = "acquisition_method"
        method_name = values.get("acquisition_method")
        if method_name is not None and not isinstance(method_name, str):
            raise TypeError(f"expected a method name, got {method_name!r}")
        method = acquisition.find_by_name(method_name)
        if method is None and method_name:
            log.debug("Unknown acquisition method %r in record %d", method_name, index)

        current = "period_certainty"
        certain = _flag(values, "period_certainty")
        current = "primary_owner"
        primary_owner = _flag(values, "primary_owner")

        footnote = values.get("footnote")
        stock_number = values.get("stock_number")
        period = Period(
            party=party,
            location=location,
            acquisition_method=method,
            beginning=beginning,
            ending=ending,
            certain=certain,
            primary_owner=primary_owner,
            stock_number=str(stock_number) if stock_number is not None else None,
            footnotes=[str(footnote)] if footnote is not None else [],
        )
    except (TypeError, ValueError) as exc:
        return Err(MalformedPeriodInput(index=index, field=current, reason=str(exc)))
    return Ok(period)
