"""Core result and failure types shared by every layer of the pipeline.

Type hierarchy:
  Ok[T] / Err[E]        - Strict algebraic Result type
  RecursionLimit        - Typed failure for the bounded time-phrase walk
  MalformedPeriodInput  - Typed failure for structured-record reconstruction
  ProvenanceError       - Exception base
  DateError             - A phrase that should hold a date holds none

Exceptions are used where the failure is a local control-flow signal
(``DateError`` ends the time-phrase walk). Typed failures are used where the
caller is expected to keep going and report (records skipped during
``from_json``, the recursion guard).
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Result ADT - strict Ok/Err, NOT tuple hack
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Success case of Result[T, E].

    Usage::

        result: Result[Period, MalformedPeriodInput] = Ok(period)
        match result:
            case Ok(value=v): timeline.insert(v)
            case Err(error=e): log.warning(e.reason)
    """
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failure case of Result[T, E].

    Preserves the typed failure reason instead of collapsing it to None.
    """
    error: E


type Result[T, E] = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Typed failures
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RecursionLimit:
    """The time-phrase walk ran past its depth bound."""
    depth: int
    remaining: str  # Partial remainder at the point the walk stopped


@dataclass(frozen=True, slots=True)
class MalformedPeriodInput:
    """A structured period record could not be turned back into a Period."""
    index: int       # Position of the record in the input list
    field: str       # Offending field ("" when the record itself is bad)
    reason: str


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ProvenanceError(Exception):
    """Base class for provenance parsing errors."""


class DateError(ProvenanceError):
    """Raised when a phrase expected to contain a date does not."""
