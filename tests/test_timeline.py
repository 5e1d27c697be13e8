"""Tests for provenance_timeline.timeline module."""
import orjson
import pytest

from provenance_timeline.acquisition import GIFT
from provenance_timeline.parties import Location, Party
from provenance_timeline.period import Period
from provenance_timeline.timeline import Timeline


def _period(name: str, **kwargs: object) -> Period:
    return Period(party=Party(name), **kwargs)  # type: ignore[arg-type]


class TestContainer:
    def test_empty(self) -> None:
        timeline = Timeline()
        assert len(timeline) == 0
        assert timeline.first is None
        assert timeline.latest is None
        assert timeline.provenance() == ""
        assert repr(timeline) == "Timeline(0 periods)"

    def test_insert_order(self) -> None:
        timeline = Timeline()
        a, b, c = _period("a"), _period("b"), _period("c")
        timeline.insert(a)
        timeline.insert_direct(b)
        timeline.insert(c)
        assert list(timeline) == [a, b, c]
        assert timeline[1] is b
        assert timeline[-1] is c
        assert timeline[1:] == [b, c]
        assert timeline.first is a
        assert timeline.latest is c
        assert a.direct_transfer is True
        assert b.direct_transfer is False
        assert c.direct_transfer is None

    def test_period_belongs_to_one_timeline(self) -> None:
        period = _period("a")
        Timeline().insert(period)
        with pytest.raises(ValueError):
            Timeline().insert(period)

    def test_set_direct_transfer_on_last_period_is_ignored(self) -> None:
        timeline = Timeline()
        period = _period("a")
        timeline.insert(period)
        period.direct_transfer = True
        assert period.direct_transfer is None


class TestProvenance:
    def test_joins_periods(self) -> None:
        timeline = Timeline()
        timeline.insert(_period("David", location=Location("Pittsburgh")))
        timeline.insert_direct(_period("museum", acquisition_method=GIFT))
        timeline.insert(_period("Somebody"))
        assert timeline.provenance() == "David, Pittsburgh; gift to museum. Somebody."
        assert str(timeline) == timeline.provenance()

    def test_footnotes_numbered_in_order(self) -> None:
        timeline = Timeline()
        timeline.insert(_period("David", footnotes=["First note."]))
        timeline.insert(_period("Museum", footnotes=["Second note.", "Third note."]))
        assert timeline.provenance() == (
            "David[1]. Museum[2][3]. "
            "NOTES: [1] First note. [2] Second note. [3] Third note."
        )


class TestSerialization:
    def test_to_dict(self) -> None:
        timeline = Timeline()
        timeline.insert_direct(_period("David"))
        timeline.insert_direct(_period("Museum"))
        records = timeline.to_dict()["period"]
        assert [r["party"] for r in records] == ["David", "Museum"]
        assert records[0]["direct_transfer"] is True
        assert records[1]["direct_transfer"] is None

    def test_to_json(self) -> None:
        timeline = Timeline()
        timeline.insert(_period("David"))
        text = timeline.to_json()
        assert isinstance(text, str)
        assert "\n" not in text
        assert orjson.loads(text) == timeline.to_dict()

    def test_to_json_pretty(self) -> None:
        timeline = Timeline()
        timeline.insert(_period("David"))
        assert "\n" in timeline.to_json(pretty=True)
