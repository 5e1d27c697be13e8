"""Acquisition-method lookup table.

Each method has a canonical name, a preferred form written when provenance
is generated, whether that form is a prefix ("sold to NAME") or a suffix
("NAME, by descent"), and the synonym forms recognized in source text.

Lookup picks the longest synonym found anywhere in the text, so
"sold at auction to" beats "sold to" and "by descent to" beats "by descent".
The table is immutable after import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

type FormPosition = Literal["prefix", "suffix"]


def _form_re(form: str) -> re.Pattern[str]:
    return re.compile(r"(?<!\w)" + re.escape(form) + r"(?!\w)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class AcquisitionMethod:
    """A canonical way a work changed hands."""

    name: str                     # "Sale"
    preferred_form: str           # "sold to"
    position: FormPosition        # where preferred_form goes relative to the name
    synonyms: tuple[str, ...]     # forms recognized in source text

    @property
    def forms(self) -> tuple[str, ...]:
        """Every recognized form, longest first."""
        all_forms = {self.preferred_form, *self.synonyms}
        return tuple(sorted(all_forms, key=lambda f: (-len(f), f)))

    def attach_to_name(self, name: str | None) -> str:
        """Write the preferred form around *name*."""
        name = (name or "").strip()
        if not name:
            return self.preferred_form
        if self.position == "prefix":
            return f"{self.preferred_form} {name}"
        return f"{name}, {self.preferred_form}"

    def strip_form(self, text: str) -> str:
        """Remove the longest form of this method found in *text* (once).

        A comma directly before the form goes with it, so
        ``"David, by descent"`` -> ``"David"``.
        """
        for form in self.forms:
            pattern = re.compile(
                r"(?:,\s)?(?<!\w)" + re.escape(form) + r"(?!\w)", re.IGNORECASE,
            )
            new_text = pattern.sub("", text)
            if new_text != text:
                return new_text
        return text

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

SALE = AcquisitionMethod(
    name="Sale",
    preferred_form="sold to",
    position="prefix",
    synonyms=("sold, to", "sale to", "sale", "purchased by", "bought by"),
)
FOR_SALE = AcquisitionMethod(
    name="For Sale",
    preferred_form="for sale at",
    position="prefix",
    synonyms=("offered for sale at", "sold at auction to", "sold at auction", "sold at", "consigned to"),
)
GIFT = AcquisitionMethod(
    name="Gift",
    preferred_form="gift to",
    position="prefix",
    synonyms=("given to", "donated to", "presented to"),
)
BEQUEST = AcquisitionMethod(
    name="Bequest",
    preferred_form="bequest to",
    position="prefix",
    synonyms=("bequeathed to", "by bequest to", "bequest of", "by bequest"),
)
BY_DESCENT = AcquisitionMethod(
    name="By Descent",
    preferred_form="by descent",
    position="suffix",
    synonyms=("by descent to", "by descent through", "by descent from", "descended to", "by inheritance"),
)
INHERITANCE = AcquisitionMethod(
    name="Inheritance",
    preferred_form="inherited by",
    position="prefix",
    synonyms=("inherited from", "by inheritance to"),
)
EXCHANGE = AcquisitionMethod(
    name="Exchange",
    preferred_form="by exchange",
    position="suffix",
    synonyms=("exchanged with", "exchanged to", "traded to", "by trade"),
)
COMMISSION = AcquisitionMethod(
    name="Commission",
    preferred_form="commissioned by",
    position="prefix",
    synonyms=("painted for", "made for", "executed for", "commissioned for"),
)
TRANSFER = AcquisitionMethod(
    name="Transfer",
    preferred_form="transferred to",
    position="prefix",
    synonyms=("by transfer to", "by transfer"),
)
CONFISCATION = AcquisitionMethod(
    name="Confiscation",
    preferred_form="confiscated by",
    position="prefix",
    synonyms=("seized by", "looted by", "expropriated by"),
)
RESTITUTION = AcquisitionMethod(
    name="Restitution",
    preferred_form="restituted to",
    position="prefix",
    synonyms=("returned to", "restored to"),
)
FIELD_COLLECTION = AcquisitionMethod(
    name="Field Collection",
    preferred_form="collected by",
    position="prefix",
    synonyms=("excavated by", "found by", "discovered by"),
)
CONSIGNMENT = AcquisitionMethod(
    name="Consignment",
    preferred_form="on consignment to",
    position="prefix",
    synonyms=("consigned by", "on consignment with"),
)
LOAN = AcquisitionMethod(
    name="Loan",
    preferred_form="on loan to",
    position="prefix",
    synonyms=("lent to", "loaned to", "deposited with"),
)

ACQUISITION_METHODS: tuple[AcquisitionMethod, ...] = (
    SALE, FOR_SALE, GIFT, BEQUEST, BY_DESCENT, INHERITANCE, EXCHANGE,
    COMMISSION, TRANSFER, CONFISCATION, RESTITUTION, FIELD_COLLECTION,
    CONSIGNMENT, LOAN,
)

# (compiled form, method), longest form first
_FORM_INDEX: tuple[tuple[re.Pattern[str], AcquisitionMethod], ...] = tuple(
    (_form_re(form), method)
    for form, method in sorted(
        ((f, m) for m in ACQUISITION_METHODS for f in m.forms),
        key=lambda pair: (-len(pair[0]), pair[0]),
    )
)

_BY_NAME: dict[str, AcquisitionMethod] = {m.name.lower(): m for m in ACQUISITION_METHODS}


def find(text: str | None) -> AcquisitionMethod | None:
    """The method whose longest form occurs in *text*, or None."""
    if not text:
        return None
    for pattern, method in _FORM_INDEX:
        if pattern.search(text):
            return method
    return None


def find_by_name(name: str | None) -> AcquisitionMethod | None:
    """Case-insensitive lookup by canonical name."""
    if not name:
        return None
    return _BY_NAME.get(name.strip().lower())
