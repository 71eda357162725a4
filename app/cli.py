from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from citations.journals import JournalResolver
from core.enums import SummaryFormat
from core.exceptions import LibraryLoadError, SupraError
from core.models import ParsedDocument, Resolution, SourceLibrary
from data.loaders import load_library, load_user_journals, write_blank_user_journals
from markup.assemble import assemble
from markup.extract import extract
from resolver.engine import resolve

DEFAULT_USER_JOURNALS = Path("user_journals.json")

logger = logging.getLogger("supra")

_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}

# Handlers added by configure_logging, so a second call replaces them.
_INSTALLED: list[logging.Handler] = []


def configure_logging(verbosity: int = 1, debug_log: str | None = None) -> None:
    """Route log records to stderr through rich; optionally mirror them to a file."""
    from rich.console import Console
    from rich.logging import RichHandler

    level = _LEVELS.get(verbosity, logging.DEBUG)

    root = logging.getLogger()
    while _INSTALLED:
        old = _INSTALLED.pop()
        root.removeHandler(old)
        old.close()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbosity >= 3,
        markup=False,
    )
    handler.setLevel(level)
    root.addHandler(handler)
    _INSTALLED.append(handler)
    root.setLevel(level)

    if debug_log:
        fh = logging.FileHandler(debug_log, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(fh)
        _INSTALLED.append(fh)
        root.setLevel(logging.DEBUG)


@dataclass(frozen=True)
class SupraOptions:
    offset: int = 0
    user_journals: Path | None = None
    smallcaps: bool = False
    force_overwrite: bool = False
    summary: SummaryFormat = SummaryFormat.none
    json_path: Path | None = None


@dataclass(frozen=True)
class PassResult:
    output: str
    parsed: ParsedDocument
    resolution: Resolution


def build_journal_resolver(user_journals: Path | None = None) -> JournalResolver:
    user = load_user_journals(user_journals) if user_journals else None
    return JournalResolver(user=user)


def process_document(
    text: str,
    library: SourceLibrary,
    journals: JournalResolver | None = None,
    offset: int = 0,
    smallcaps: bool = False,
) -> PassResult:
    """Extract footnotes, resolve every citation and cross-reference, reassemble."""
    parsed = extract(text, offset=offset)
    resolution = resolve(parsed.footnotes, library, journals=journals)
    output = assemble(parsed, resolution, use_smallcaps=smallcaps)
    return PassResult(output=output, parsed=parsed, resolution=resolution)


def check_output_path(input_path: Path, output_path: Path | None, force: bool) -> None:
    if output_path is None:
        return
    try:
        same = input_path.resolve() == output_path.resolve()
    except OSError:
        same = False
    if same and not force:
        raise SystemExit(
            f"Refusing to overwrite the input file {input_path}; pass -W/--force-overwrite."
        )


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SystemExit(f"Input file not found: {p}") from e


def _report(result: PassResult, opts: SupraOptions, input_path: str, library_path: str) -> None:
    if opts.summary != SummaryFormat.none:
        from app.render import build_summary_rows, render_plain_summary, render_rich_summary

        rows = build_summary_rows(result.resolution)
        if opts.summary == SummaryFormat.rich:
            render_rich_summary(rows, result.resolution.notices)
        else:
            for line in render_plain_summary(rows, result.resolution.notices):
                print(line, file=sys.stderr)

    if opts.json_path is not None:
        from app.json_output import build_json_payload

        payload = build_json_payload(
            resolution=result.resolution,
            input_path=input_path,
            library_path=library_path,
            offset=opts.offset,
        )
        opts.json_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def _check_library(path: str, fmt: str) -> int:
    from app.render import render_library_issues
    from data.validate import validate_library

    issues = validate_library(path)
    for line in render_library_issues(issues, fmt=fmt):
        print(line, file=sys.stderr)
    return 2 if any(i.fatal for i in issues) else 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="supra",
        description=(
            "Resolve legal citations and cross-references in Pandoc markdown "
            "footnotes (full, short, supra and Id. forms)."
        ),
    )
    p.add_argument("input", nargs="?", help="Markdown document ('-' for stdin).")
    p.add_argument("library", nargs="?", help="CSL-JSON bibliography.")
    p.add_argument(
        "output",
        nargs="?",
        help="Where to write the processed document. Default: stdout.",
    )
    p.add_argument(
        "-f",
        "--offset",
        type=int,
        default=0,
        help="Added to every footnote number (may be negative). Default: 0.",
    )
    p.add_argument(
        "-u",
        "--user-journals",
        metavar="PATH",
        help="JSON object of full journal name -> abbreviation, checked before the bundled table.",
    )
    p.add_argument(
        "-W",
        "--force-overwrite",
        action="store_true",
        help="Allow the output path to be the input file.",
    )
    p.add_argument(
        "-s",
        "--smallcaps",
        action="store_true",
        help='Apply the Word style "True Small Caps" to all bold text.',
    )
    p.add_argument(
        "--summary",
        choices=[f.value for f in SummaryFormat],
        default=SummaryFormat.none.value,
        help="Print a per-citation report to stderr. Use 'rich' for a table.",
    )
    p.add_argument("--json", metavar="PATH", help="Write a JSON decision report.")
    p.add_argument(
        "--check-library",
        action="store_true",
        help="Validate the library (first positional argument) and exit.",
    )
    p.add_argument(
        "--new-user-journals",
        nargs="?",
        const=str(DEFAULT_USER_JOURNALS),
        metavar="PATH",
        help=f"Write a blank user-journal file (default: {DEFAULT_USER_JOURNALS}) and exit.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=1,
        help="More log output (repeatable).",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors.",
    )
    p.add_argument("--debug-log", metavar="PATH", help="Also write a DEBUG log to this file.")
    return p


def main(argv: list[str] | None = None) -> None:
    p = build_parser()
    args = p.parse_args(argv)

    configure_logging(0 if args.quiet else args.verbose, args.debug_log)

    if args.new_user_journals:
        try:
            written = write_blank_user_journals(args.new_user_journals)
        except LibraryLoadError as e:
            raise SystemExit(str(e)) from e
        print(f"Wrote {written}", file=sys.stderr)
        return

    if args.check_library:
        target = args.library or args.input
        if not target:
            p.error("--check-library needs a library path")
        try:
            code = _check_library(target, args.summary if args.summary != "none" else "plain")
        except LibraryLoadError as e:
            print(str(e), file=sys.stderr)
            raise SystemExit(2) from e
        raise SystemExit(code)

    if not args.input or not args.library:
        p.error("input and library are required")

    opts = SupraOptions(
        offset=args.offset,
        user_journals=Path(args.user_journals) if args.user_journals else None,
        smallcaps=args.smallcaps,
        force_overwrite=args.force_overwrite,
        summary=SummaryFormat(args.summary),
        json_path=Path(args.json) if args.json else None,
    )

    output_path = Path(args.output) if args.output else None
    if args.input != "-":
        check_output_path(Path(args.input), output_path, opts.force_overwrite)

    text = _read_input(args.input)

    try:
        library = load_library(args.library)
        journals = build_journal_resolver(opts.user_journals)
        result = process_document(
            text,
            library,
            journals=journals,
            offset=opts.offset,
            smallcaps=opts.smallcaps,
        )
    except SupraError as e:
        print(f"error: {e}", file=sys.stderr)
        raise SystemExit(2) from e

    if output_path is None:
        sys.stdout.write(result.output)
    else:
        output_path.write_text(result.output, encoding="utf-8")
        logger.info("Wrote %s", output_path)

    _report(result, opts, args.input, args.library)


if __name__ == "__main__":
    main()
