#!/usr/bin/env python3
"""Extract structured ownership periods from provenance text.

Reads one provenance record (argument, --input file, or stdin) and writes
the timeline as JSON: the regenerated provenance text plus one record per
period. With --lines every non-blank input line is its own record and the
output is JSON Lines.

Usage::

    python3 scripts/extract_provenance.py "David Newbury (d. 1935), Pittsburgh"
    python3 scripts/extract_provenance.py --input record.txt --output out.json
    python3 scripts/extract_provenance.py --input page.html --html
    python3 scripts/extract_provenance.py --input records.txt --lines --output out.jsonl
    python3 scripts/extract_provenance.py --from-json out.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from provenance_timeline.html_utils import read_file
from provenance_timeline.io_utils import load_json, save_json, save_jsonl
from provenance_timeline.lexicon import Lexicon, load_lexicon
from provenance_timeline.provenance import extract, extract_html, from_json
from provenance_timeline.timeline import Timeline

log = logging.getLogger("extract_provenance")


def _payload(timeline: Timeline) -> dict[str, Any]:
    return {"provenance": timeline.provenance(), **timeline.to_dict()}


def _dump(obj: object) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def _read_input(args: argparse.Namespace) -> str:
    if args.input:
        return read_file(Path(args.input))
    if args.text:
        return args.text
    return sys.stdin.read()


def _parse(text: str, *, html: bool, lexicon: Lexicon | None) -> Timeline:
    return extract_html(text, lexicon) if html else extract(text, lexicon)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n", 1)[0])
    parser.add_argument("text", nargs="?", help="Provenance text (default: read stdin)")
    parser.add_argument("--input", help="Read provenance text from this file")
    parser.add_argument("--html", action="store_true", help="Input is HTML")
    parser.add_argument(
        "--lines", action="store_true",
        help="Treat each non-blank input line as a separate record (JSON Lines out)",
    )
    parser.add_argument("--from-json", help="Rebuild a timeline from records written earlier")
    parser.add_argument("--lexicon", help="JSON file with extra titles, abbreviations, ...")
    parser.add_argument("--output", help="Write JSON here instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    lexicon: Lexicon | None = None
    if args.lexicon:
        try:
            lexicon = load_lexicon(Path(args.lexicon))
        except (OSError, ValueError) as exc:
            log.error("Cannot load lexicon %s: %s", args.lexicon, exc)
            return 2

    if args.from_json:
        try:
            data = load_json(Path(args.from_json))
            timeline = from_json(data, lexicon)
        except (OSError, TypeError, ValueError) as exc:
            log.error("Cannot rebuild timeline from %s: %s", args.from_json, exc)
            return 2
        payloads = [_payload(timeline)]
    elif args.lines:
        payloads = []
        for number, line in enumerate(_read_input(args).splitlines(), start=1):
            if not line.strip():
                continue
            payload = _payload(_parse(line, html=args.html, lexicon=lexicon))
            payloads.append({"line": number, **payload})
    else:
        payloads = [_payload(_parse(_read_input(args), html=args.html, lexicon=lexicon))]

    periods = sum(len(p["period"]) for p in payloads)
    unparsable = sum(1 for p in payloads for r in p["period"] if not r["parsable"])
    log.info("Extracted %d periods (%d not round-tripping)", periods, unparsable)

    if args.lines:
        if args.output:
            save_jsonl(payloads, Path(args.output))
        else:
            for payload in payloads:
                sys.stdout.buffer.write(orjson.dumps(payload) + b"\n")
    elif args.output:
        save_json(payloads[0], Path(args.output))
    else:
        _dump(payloads[0])
    return 0


if __name__ == "__main__":
    sys.exit(main())
