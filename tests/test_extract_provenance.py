"""Smoke tests for the extract_provenance CLI."""
from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

TEXT = (
    "Mr. and Mrs. James L. Winokur, Pittsburgh, circa 1965; gift to museum, 1968."
)


def _run(*args: str, stdin: str | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    return subprocess.run(
        [sys.executable, str(ROOT / "scripts" / "extract_provenance.py"), *args],
        cwd=str(ROOT),
        env=env,
        input=stdin,
        capture_output=True,
        text=True,
        check=True,
    )


def test_text_argument_to_stdout() -> None:
    proc = _run(TEXT)
    payload = json.loads(proc.stdout)
    assert payload["provenance"] == (
        "Mr. and Mrs. James L. Winokur, Pittsburgh, 1965?; gift to museum, 1968."
    )
    assert [p["party"] for p in payload["period"]] == ["Mr. and Mrs. James L. Winokur", "museum"]
    assert payload["period"][0]["direct_transfer"] is True
    assert payload["period"][0]["botb"] == "1965-01-01"
    assert "Extracted 2 periods" in proc.stderr


def test_stdin_and_output_file(tmp_path: Path) -> None:
    out_path = tmp_path / "out.json"
    _run("--output", str(out_path), stdin=TEXT)
    payload = json.loads(out_path.read_text())
    assert len(payload["period"]) == 2


def test_html_input_file(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text(
        "<p>Sold to David Newbury<sup>1</sup></p><p>NOTES: 1. Receipt in file.</p>",
        encoding="utf-8",
    )
    payload = json.loads(_run("--input", str(page), "--html").stdout)
    assert payload["period"][0]["party"] == "David Newbury"
    assert payload["period"][0]["footnote"] == "Receipt in file."


def test_lines_mode(tmp_path: Path) -> None:
    records = tmp_path / "records.txt"
    records.write_text("David Newbury, 1995\n\nSold to Museum, 1968\n", encoding="utf-8")
    out_path = tmp_path / "out.jsonl"
    _run("--input", str(records), "--lines", "--output", str(out_path))
    rows = [json.loads(line) for line in out_path.read_text().splitlines()]
    assert [row["line"] for row in rows] == [1, 3]
    assert rows[1]["period"][0]["acquisition_method"] == "Sale"


def test_from_json_round_trip(tmp_path: Path) -> None:
    first = tmp_path / "first.json"
    _run(TEXT, "--output", str(first))
    payload = json.loads(_run("--from-json", str(first)).stdout)
    assert payload["provenance"] == json.loads(first.read_text())["provenance"]


def test_lexicon(tmp_path: Path) -> None:
    lexicon = tmp_path / "lexicon.json"
    lexicon.write_text(json.dumps({"titles": ["Rev."]}))
    payload = json.loads(_run("Rev. Smith, Boston.", "--lexicon", str(lexicon)).stdout)
    assert [p["party"] for p in payload["period"]] == ["Rev. Smith"]


def test_bad_lexicon_exits_nonzero(tmp_path: Path) -> None:
    lexicon = tmp_path / "lexicon.json"
    lexicon.write_text(json.dumps({"nicknames": ["Bob"]}))
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    proc = subprocess.run(
        [sys.executable, str(ROOT / "scripts" / "extract_provenance.py"), "x", "--lexicon", str(lexicon)],
        cwd=str(ROOT),
        env=env,
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 2
    assert "Cannot load lexicon" in proc.stderr


def test_runs_from_a_plain_checkout(tmp_path: Path) -> None:
    env = os.environ.copy()
    env.pop("PYTHONPATH", None)
    proc = subprocess.run(
        [sys.executable, str(ROOT / "scripts" / "extract_provenance.py"), "David, Paris, the 1950s"],
        cwd=str(tmp_path),
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    payload = json.loads(proc.stdout)
    assert payload["provenance"] == "David, Paris, the 1950s."
    assert payload["period"][0]["location"] == "Paris"
