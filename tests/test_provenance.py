"""Tests for provenance_timeline.provenance module."""
import logging

import orjson
import pytest

from provenance_timeline import provenance
from provenance_timeline.acquisition import BY_DESCENT, COMMISSION, EXCHANGE, FOR_SALE, GIFT, SALE
from provenance_timeline.lexicon import FAKE_PERIOD, Lexicon
from provenance_timeline.parties import Party
from provenance_timeline.period import Period
from provenance_timeline.provenance_types import ProvenanceError
from provenance_timeline.provenance import (
    convert_lugt_numbers,
    extract,
    extract_acquisition_method,
    extract_html,
    extract_name_and_location,
    extract_primary_ownership,
    extract_stock_numbers,
    find_birth_and_death,
    from_json,
    split_clauses,
    substitute_periods,
)
from provenance_timeline.temporal import ImpreciseDate, TimeSpan
from provenance_timeline.timeline import Timeline

WINOKUR = "Mr. and Mrs. James L. Winokur, Pittsburgh, {} 1965; gift to museum, 1968"


class TestExtract:
    def test_returns_timeline(self) -> None:
        assert isinstance(extract("sample text"), Timeline)

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_nothing(self, text: str | None) -> None:
        timeline = extract(text)
        assert isinstance(timeline, Timeline)
        assert len(timeline) == 0

    def test_line_breaks(self) -> None:
        assert len(extract("sample text\r\n    second line")) == 1

    def test_bad_clause_is_skipped(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture,
    ) -> None:
        build = provenance.build_period

        def fragile(clause: str, notes: dict[str, str], lexicon: Lexicon) -> Period:
            if "Broken" in clause:
                raise ProvenanceError("unreadable")
            return build(clause, notes, lexicon)

        monkeypatch.setattr(provenance, "build_period", fragile)
        with caplog.at_level(logging.WARNING, logger="provenance_timeline.provenance"):
            timeline = extract("David, Pittsburgh. Broken clause. Museum, 1968.")
        assert [p.party.name for p in timeline] == ["David", "Museum"]
        assert "Skipping unparsable clause 'Broken clause'" in caplog.text


class TestStockNumbers:
    def test_stock_no(self) -> None:
        timeline = extract("Sold to David Newbury, stock no. 55512")
        assert timeline[0].to_dict()["stock_number"] == "stock no. 55512"
        assert timeline[0].party.name == "David Newbury"

    def test_no(self) -> None:
        timeline = extract("Sold to David Newbury no. 55512")
        assert timeline[0].to_dict()["stock_number"] == "no. 55512"

    def test_lot(self) -> None:
        stock, text = extract_stock_numbers("Sale, Paris, lot 45")
        assert stock == "lot 45"
        assert text == "Sale, Paris,"


class TestDeath:
    def test_death_note(self) -> None:
        text = "David Newbury (d. 1935), Pittsburgh"
        record = extract(text)[0].to_dict()
        assert record["original_text"] == text
        assert record["provenance"] == "David Newbury [-1935], Pittsburgh"
        assert record["death"] == ImpreciseDate(1935, 12, 31).isoformat()
        assert record["party"] == "David Newbury"


class TestPrimaryOwnership:
    def test_primary(self) -> None:
        period = extract("David Newbury, 1995")[0]
        assert period.primary_owner is True
        assert period.party.name == "David Newbury"
        assert period.beginning == TimeSpan.parse("1995")
        assert period.provenance() == "David Newbury, 1995"
        assert period.to_dict()["original_text"] == "David Newbury, 1995"

    def test_not_primary(self) -> None:
        period = extract("(David Newbury, 1995).")[0]
        assert period.primary_owner is False
        assert period.party.name == "David Newbury"
        assert period.beginning == TimeSpan.parse("1995")
        assert period.provenance() == "(David Newbury, 1995)"
        assert period.to_dict()["primary_owner"] is False
        assert period.to_dict()["original_text"] == "(David Newbury, 1995)"

    def test_not_primary_through_json(self) -> None:
        timeline = from_json(extract("(David Newbury, 1995).").to_json())
        assert timeline[0].provenance() == "(David Newbury, 1995)"

    def test_name_starting_with_parenthesis(self) -> None:
        period = extract("(David) Newbury, 1995.")[0]
        assert period.primary_owner is True
        assert period.party.name == "(David) Newbury"
        assert period.beginning == TimeSpan.parse("1995")
        assert period.provenance() == "(David) Newbury, 1995"

    def test_helper(self) -> None:
        assert extract_primary_ownership("(David)") == (False, "David")
        assert extract_primary_ownership("(David) Newbury") == (True, "(David) Newbury")


class TestAcquisitionMethods:
    def test_no_method(self) -> None:
        assert extract("David Newbury, 1995")[0].acquisition_method is None

    def test_prefix(self) -> None:
        period = extract("Sold to David Newbury")[0]
        assert period.acquisition_method is SALE
        assert period.to_dict()["party"] == "David Newbury"

    def test_suffix(self) -> None:
        period = extract("David Newbury, by exchange")[0]
        assert period.acquisition_method is EXCHANGE
        assert period.to_dict()["party"] == "David Newbury"

    @pytest.mark.parametrize(
        "text,method",
        [
            ("Donated to David Newbury", GIFT),
            ("sold at auction to David Newbury", FOR_SALE),
            ("sold at David Newbury", FOR_SALE),
            ("David Newbury, by descent", BY_DESCENT),
            ("by descent to David Newbury", BY_DESCENT),
        ],
    )
    def test_round_trips(self, text: str, method: object) -> None:
        period = extract(text)[0]
        assert period.acquisition_method is method
        assert period.party.name == "David Newbury"
        assert period.parsable() is True

    def test_his_gift(self) -> None:
        timeline = extract("Kenneth Seaver, Pittsburgh, PA; his gift to Museum, January 1949.")
        assert len(timeline) == 2
        assert timeline[1].party.name == "Museum"
        assert timeline[1].acquisition_method is GIFT
        assert timeline[1].botb == ImpreciseDate(1949, 1, 1)
        assert timeline[1].eotb == ImpreciseDate(1949, 1, 31)

    def test_painted_for(self) -> None:
        timeline = extract(
            "painted for the chapel of Girolamo Ferretti, S. Francesco delle Scale, Ancona"
        )
        assert len(timeline) == 1
        assert timeline[0].acquisition_method is COMMISSION
        assert timeline[0].party.name == "the chapel of Girolamo Ferretti"
        assert timeline[0].provenance() == (
            "Commissioned by the chapel of Girolamo Ferretti, S. Francesco delle Scale, Ancona"
        )

    def test_helper_rewrites_possessives(self) -> None:
        assert extract_acquisition_method("her sale, Paris") == ("Paris", SALE)
        assert extract_acquisition_method("to David") == ("David", None)


class TestCertainty:
    def test_probably(self) -> None:
        assert extract("Probably maybe.")[0].certain is False

    def test_certain(self) -> None:
        assert extract("I am certain.")[0].certain is True

    def test_likely(self) -> None:
        period = extract("Likely David, Pittsburgh.")[0]
        assert period.certain is False
        assert period.party == Party("David")

    def test_uncertain_party(self) -> None:
        period = extract("Sold to David?, Pittsburgh")[0]
        assert period.party.name == "David"
        assert period.party.certain is False


class TestFootnotes:
    def test_no_note(self) -> None:
        record = extract("I do not have a note")[0].to_dict()
        assert record["provenance"] == "I do not have a note"
        assert record["footnote"] == ""

    @pytest.mark.parametrize(
        "text",
        [
            "I have a footnote [1]. 1. I am the note.",
            "I have a footnote [1]. NOTES: 1. I am the note.",
            "I have a footnote*. NOTES: * I am the note.",
            "I have a footnote [I am the note].",
        ],
    )
    def test_notes(self, text: str) -> None:
        record = extract(text)[0].to_dict()
        assert record["provenance"] == "I have a footnote"
        assert "I am the note" in record["footnote"]

    def test_missing_note(self) -> None:
        record = extract("David[2]. NOTES: [1] Only one note.")[0].to_dict()
        assert record["footnote"] == "(Missing footnote)"


class TestPeriodSubstitution:
    @pytest.mark.parametrize(
        "text",
        [
            "I am a sentence.  I am another sentence.",
            "Mr. David was here.  I am another sentence.",
            "Mr. David N. was here.  I am another sentence.",
            "G. David was here.  I am another sentence.",
            "I am a sentence; I am another sentence.",
            "Dr. Mario says I am a sentence. I am another sentence.",
            "Dr. Mario says I am a loca. I am another sentence.",
        ],
    )
    def test_two_clauses(self, text: str) -> None:
        assert len(extract(text)) == 2

    @pytest.mark.parametrize("word", ["circa", "c.", "ca."])
    def test_circa(self, word: str) -> None:
        timeline = extract(WINOKUR.format(word))
        assert len(timeline) == 2
        first = timeline[0]
        assert first.botb == ImpreciseDate(1965, 1, 1)
        assert first.eotb == ImpreciseDate(1965, 12, 31)
        assert first.botb.certain is False
        assert first.eotb.certain is False
        assert first.time_string() == "1965?"
        assert first.party.name == "Mr. and Mrs. James L. Winokur"
        assert first.location is not None
        assert first.location.name == "Pittsburgh"
        assert first.direct_transfer is True

    def test_century(self) -> None:
        timeline = extract("Moses, Egypt, until the 7th Century; gift to museum, 1968")
        assert len(timeline) == 2
        assert timeline[0].bote == ImpreciseDate(601, 1, 1)
        assert timeline[0].eote == ImpreciseDate(700, 12, 31)
        assert timeline[0].time_string() == "until the 7th Century"
        assert timeline[0].party.name == "Moses"
        assert timeline[0].location.name == "Egypt"

    def test_states(self) -> None:
        timeline = extract(
            "Mr. and Mrs. Alvin P. Fenderson, Paoli, Pa., by 1947;  I am another sentence."
        )
        assert len(timeline) == 2
        assert timeline[0].location.name == "Paoli, PA"
        assert timeline[0].eotb == ImpreciseDate(1947, 12, 31)
        assert timeline[0].botb is None

    def test_only_acquisition_method(self) -> None:
        timeline = extract(
            "Louis Majorelle, Villa Jika, Nancy; by descent; "
            "Charles Janoray, New York, LLC in 2007"
        )
        assert len(timeline) == 3
        assert timeline[1].party.name == ""
        assert timeline[1].acquisition_method is BY_DESCENT
        assert isinstance(timeline.to_json(), str)

    def test_substitute_periods(self) -> None:
        text = substitute_periods("Mr. J. Smith (b. 1900), Paoli, Pa., stock no. 5.")
        assert text.count(".") == 1
        assert text.endswith("5.")
        assert f"Mr{FAKE_PERIOD}" in text
        assert "Paoli, PA," in text

    def test_split_clauses(self) -> None:
        clauses = split_clauses(f"Mr{FAKE_PERIOD} David; Museum. Somebody.  .")
        assert clauses == [("Mr. David", False), ("Museum", True), ("Somebody", False)]


class TestBirthAndDeath:
    def test_no_dates(self) -> None:
        record = extract("David, Pittsburgh, PA")[0].to_dict()
        assert record["birth"] is None
        assert record["death"] is None
        assert record["party"] == "David"
        assert record["location"] == "Pittsburgh, PA"

    @pytest.mark.parametrize(
        "text,birth,birth_certain,death,death_certain",
        [
            ("David [1880-1980], Pittsburgh, PA", "1880-01-01", True, "1980-12-31", True),
            ("David (d. 1980), Pittsburgh, PA", None, None, "1980-12-31", True),
            ("David (d. 1980?), Pittsburgh, PA", None, None, "1980-12-31", False),
            ("David (b. 1980), Pittsburgh, PA", "1980-01-01", True, None, None),
            ("David (1980-), Pittsburgh, PA", "1980-01-01", True, None, None),
            ("David (-1980), Pittsburgh, PA", None, None, "1980-12-31", True),
            ("David [1880?-1980?], Pittsburgh, PA", "1880-01-01", False, "1980-12-31", False),
        ],
    )
    def test_life_dates(
        self,
        text: str,
        birth: str | None,
        birth_certain: bool | None,
        death: str | None,
        death_certain: bool | None,
    ) -> None:
        timeline = extract(text)
        assert len(timeline) == 1
        record = timeline[0].to_dict()
        assert record["birth"] == birth
        assert record["birth_certainty"] == birth_certain
        assert record["death"] == death
        assert record["death_certainty"] == death_certain
        assert record["party"] == "David"
        assert record["location"] == "Pittsburgh, PA"

    def test_two_digit_death_year(self) -> None:
        birth, death, text = find_birth_and_death("David (1880-95), Paris")
        assert birth is not None and birth.year == 1880
        assert death is not None and death.year == 1895
        assert text == "David, Paris"


class TestNameAndLocation:
    @pytest.mark.parametrize(
        "text,party,location",
        [
            ("David, Pittsburgh", "David", "Pittsburgh"),
            ("David, Pittsburgh, PA", "David", "Pittsburgh, PA"),
            ("David Newbury", "David Newbury", None),
            ("David, Jr., Pittsburgh", "David, Jr.", "Pittsburgh"),
            ("David, Sr., Pittsburgh", "David, Sr.", "Pittsburgh"),
            ("David, Countess of Northbrook, Pittsburgh", "David, Countess of Northbrook", "Pittsburgh"),
            ("Sgt. David, Pittsburgh", "Sgt. David", "Pittsburgh"),
            ("Col. David Newbury, Pittsburgh", "Col. David Newbury", "Pittsburgh"),
            ("David, his widow, Paris", "David, his widow", "Paris"),
        ],
    )
    def test_split(self, text: str, party: str, location: str | None) -> None:
        record = extract(text)[0].to_dict()
        assert record["party"] == party
        assert record["location"] == location

    def test_helper_drops_unbalanced_parentheses(self) -> None:
        assert extract_name_and_location("David (Newbury, Pittsburgh)") == ("David Newbury", "Pittsburgh")


class TestLugtNumbers:
    NUMBERS = {
        f"(L.{n})"
        for n in ["2451a", "1808h", "633b", "690", "1383", "633b", "1606", "2398",
                  "624", "626", "2187a", "2215b", "657"]
    }

    @pytest.mark.parametrize(
        "mark",
        [
            "(Lugt, suppl., 2451a)",
            "(Lugt Suppl. 1808h)",
            "(L., Supplément, 633b)",
            "(Lugt 690)",
            "(L.1383)",
            "(L.633b)",
            "(Lugt 1606 and 2398)",
            "(Lugt 624-626)",
            "(Lugt suppl. 2187a)",
            "(L. 2215b)",
            "(Lugt. 657)",
        ],
    )
    def test_lugt(self, mark: str) -> None:
        timeline = extract(f"Kenneth Seaver, Pittsburgh, PA {mark}; gift to Museum, January 1949.")
        assert len(timeline) == 2
        assert timeline[0].party.name == "Kenneth Seaver"
        assert timeline[1].party.name == "Museum"
        assert timeline[0].stock_number is not None
        for number in timeline[0].stock_number.split(" "):
            assert number in self.NUMBERS

    def test_range_becomes_two_marks(self) -> None:
        assert convert_lugt_numbers("(Lugt 624-626)") == f"(L{FAKE_PERIOD}624) (L{FAKE_PERIOD}626)"


class TestRoundTrip:
    TEXT = (
        "Mr. and Mrs. James L. Winokur, Pittsburgh, circa 1965; gift to museum, 1968. "
        "David Newbury (d. 1935), Pittsburgh, until sometime before 1950."
    )

    def test_idempotent(self) -> None:
        first = extract(self.TEXT)
        second = extract(first.provenance())
        assert len(second) == len(first)
        assert second.provenance() == first.provenance()
        assert [p.to_dict()["provenance"] for p in second] == [p.to_dict()["provenance"] for p in first]

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("David, Paris, the 1950s", "David, Paris, the 1950s."),
            ("David, 19th century", "David, the 19th Century."),
            ("David, Paris, the 7th Century BCE", "David, Paris, the 7th Century BCE."),
            ("David, Paris, after 1950 until 1960", "David, Paris, after 1950 until 1960."),
            ("David, Paris, circa 1950 until 1960", "David, Paris, 1950? until 1960."),
            (
                "David, sometime between 1950 and 1955 until 1960",
                "David, sometime between 1950 and 1955 until 1960.",
            ),
        ],
    )
    def test_idempotent_time_phrases(self, text: str, expected: str) -> None:
        first = extract(text)
        assert first.provenance() == expected
        second = extract(first.provenance())
        assert second.provenance() == expected
        assert from_json(first.to_json()).provenance() == expected

    def test_after_until_keeps_both_spans(self) -> None:
        period = extract("David, Paris, after 1950 until 1960")[0]
        assert period.location is not None and period.location.name == "Paris"
        assert period.botb == ImpreciseDate(1950, 1, 1)
        assert period.eotb is None
        assert period.bote == ImpreciseDate(1960, 1, 1)
        assert period.eote == ImpreciseDate(1960, 12, 31)

    def test_from_json_string(self) -> None:
        first = extract(self.TEXT)
        rebuilt = from_json(first.to_json())
        assert rebuilt.provenance() == first.provenance()
        assert rebuilt[0].direct_transfer is True

    def test_from_json_dict_and_bytes(self) -> None:
        first = extract(self.TEXT)
        assert len(from_json(first.to_dict())) == 3
        assert len(from_json(orjson.dumps(first.to_dict()))) == 3

    def test_from_json_skips_bad_records(self, caplog: pytest.LogCaptureFixture) -> None:
        data = {
            "period": [
                {"party": "David", "direct_transfer": True},
                {"party": "Broken", "botb": "not a date"},
                {"party": "Museum"},
            ]
        }
        with caplog.at_level(logging.WARNING, logger="provenance_timeline.provenance"):
            timeline = from_json(data)
        assert [p.party.name for p in timeline] == ["David", "Museum"]
        assert timeline[0].direct_transfer is False
        assert "Skipping period record 1 (beginning)" in caplog.text

    def test_from_json_needs_period_list(self) -> None:
        with pytest.raises(ValueError):
            from_json({"records": []})
        with pytest.raises(TypeError):
            from_json("[1, 2]")


class TestExtractHtml:
    def test_paragraphs_and_notes(self) -> None:
        html = (
            "<p>Sold to David Newbury, Pittsburgh<sup>1</sup></p>"
            "<p>Gift to museum, 1968</p>"
            "<p>NOTES: 1. Receipt in file.</p>"
        )
        timeline = extract_html(html)
        assert len(timeline) == 2
        assert timeline[0].party.name == "David Newbury"
        assert timeline[0].footnotes == ["Receipt in file."]
        assert timeline[1].acquisition_method is GIFT

    def test_empty(self) -> None:
        assert len(extract_html("")) == 0
