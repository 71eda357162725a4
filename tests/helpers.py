from __future__ import annotations

from typing import Iterable, Sequence

from app.cli import PassResult, process_document
from citations.journals import JournalResolver
from core.models import ResolvedCitation, SourceLibrary


def doc(*bodies: str) -> str:
    """One sentence per footnote body, numbered from 1."""
    return "".join(f"Sentence {i}.^[{b}]\n" for i, b in enumerate(bodies, start=1))


def notes(result: PassResult) -> list[str]:
    """Resolved footnote texts, in document order."""
    return [rf.text for rf in result.resolution.footnotes]


def kinds(citations: Iterable[ResolvedCitation]) -> list[str]:
    return [c.decision.kind.value for c in citations]


def run_notes(
    bodies: Sequence[str],
    library: SourceLibrary,
    journals: JournalResolver | None = None,
    offset: int = 0,
) -> list[str]:
    result = process_document(doc(*bodies), library, journals=journals, offset=offset)
    return notes(result)


def assert_notes(got: Sequence[str], expected: Sequence[str]) -> None:
    """Compare footnote texts and report every footnote that differs."""
    assert len(got) == len(expected), f"Expected {len(expected)} footnotes, got {len(got)}"
    bad = [
        f"  {i}: expected {e!r}\n  {i}: got      {g!r}"
        for i, (g, e) in enumerate(zip(got, expected), start=1)
        if g != e
    ]
    assert not bad, "Footnotes differ:\n" + "\n".join(bad)
