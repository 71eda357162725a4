from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import assert_never

from citations.formatter import clean_pincite, hereinafter_key, render
from citations.journals import JournalResolver
from core.constants import ends_with_signal
from core.exceptions import (
    InvalidPinciteError,
    MissingRequiredFieldError,
    SourceNotFoundError,
)
from core.models import (
    Case,
    CitationMention,
    CiteBreaker,
    CrossRefAnchor,
    CrossRefUse,
    Decision,
    Footnote,
    Full,
    Id,
    LongCaseForm,
    Resolution,
    ResolvedCitation,
    ResolvedFootnote,
    Segment,
    Short,
    ShortCaseForm,
    SourceEntry,
    Text,
)
from resolver.history import CitationHistory, CrossRefTable

logger = logging.getLogger(__name__)

_CLOSERS = "*_\"')”’"


@dataclass
class _Pending:
    footnote: Footnote
    mention: CitationMention
    entry: SourceEntry
    pincite: str | None
    decision: Decision
    text: str
    parenthetical: str | None = None  # plain-text parentheticals only


def starts_sentence(preceding: Sequence[Segment]) -> bool:
    """
    Whether a citation placed after these segments opens a sentence.

    True at the start of a note and after ".", "!" or "?" (closing quotes,
    brackets and emphasis ignored), so an *Id.* following a full sentence
    in the same note is capitalized too. Signals and a trailing comma or
    semicolon keep it lowercase, as does an open parenthetical.
    """
    for seg in reversed(preceding):
        if isinstance(seg, (CiteBreaker, CrossRefAnchor)):
            continue
        if isinstance(seg, Text):
            t = seg.text.rstrip()
            if not t:
                continue
            if ends_with_signal(t):
                return False
            t = t.rstrip(_CLOSERS)
            return bool(t) and t[-1] in ".!?"
        return False
    return True


def _join(parts: Sequence[str | _Pending]) -> str:
    """Concatenate a footnote's pieces; a citation ending in "." absorbs the next period."""
    out: list[str] = []
    absorb = False
    for x in parts:
        if isinstance(x, str):
            if absorb and x.startswith("."):
                x = x[1:]
            out.append(x)
            absorb = False
        else:
            out.append(x.text)
            absorb = x.text.rstrip("*").endswith(".")
    return "".join(out).strip()


def bind_anchors(footnotes: Iterable[Footnote]) -> CrossRefTable:
    table = CrossRefTable()
    for fn in footnotes:
        for seg in fn.segments:
            if isinstance(seg, CrossRefAnchor):
                table.bind(seg.ref_id, fn.number)
    return table


def _render(
    p: _Pending, decision: Decision, journals: JournalResolver
) -> str:
    try:
        return render(
            p.entry,
            decision,
            pincite=p.pincite,
            journals=journals,
            parenthetical=p.parenthetical,
        )
    except (MissingRequiredFieldError, InvalidPinciteError) as e:
        if e.footnote is None:
            raise replace(e, footnote=p.footnote.number) from e
        raise


class _Pass:
    """One sequential walk over the footnotes. State never outlives the pass."""

    def __init__(self, library: Mapping[str, SourceEntry], journals: JournalResolver):
        self.library = library
        self.journals = journals
        self.history = CitationHistory()
        self.pending: list[_Pending] = []

    def decide(
        self,
        fn: Footnote,
        entry: SourceEntry,
        pin: str | None,
        preceding: Sequence[Segment],
    ) -> Decision:
        h = self.history

        if h.is_id(entry.id, fn.position):
            last_pin = h.last.pincite if h.last else None
            return Id(
                capitalized=starts_sentence(preceding),
                pincite_repeated=pin is not None and pin == last_pin,
            )

        rec = h.get(entry.id)

        if isinstance(entry, Case):
            if rec is None:
                h.first_citation(entry.id, fn.position, fn.number)
                return LongCaseForm()
            if h.case_recent(entry.id, fn.position):
                return ShortCaseForm()
            return LongCaseForm()

        if rec is None:
            h.first_citation(entry.id, fn.position, fn.number)
            key = hereinafter_key(entry)
            if key:
                h.add_author(key, entry.id)
            return Full(hereinafter=h.records[entry.id].hereinafter)

        return Short(note=rec.first_number, hereinafter=rec.hereinafter)

    def mention(
        self, fn: Footnote, m: CitationMention, preceding: Sequence[Segment]
    ) -> _Pending:
        entry = self.library.get(m.source_id)
        if entry is None:
            raise SourceNotFoundError(source_id=m.source_id, footnote=fn.number)

        try:
            pin = clean_pincite(m.pincite, entry.id)
        except InvalidPinciteError as e:
            raise replace(e, footnote=fn.number) from e

        decision = self.decide(fn, entry, pin, preceding)
        self.history.cited(entry.id, fn.position, m.in_string_cite, pin)

        paren = None if m.parenthetical_segments else m.parenthetical
        p = _Pending(fn, m, entry, pin, decision, text="", parenthetical=paren)
        p.text = _render(p, decision, self.journals)
        logger.debug(
            "Footnote %d: %s -> %s", fn.number, entry.id, type(decision).__name__
        )
        return p

    def walk(
        self,
        fn: Footnote,
        segments: Sequence[Segment],
        crossrefs: CrossRefTable,
        parts: list[str | _Pending],
        lead: tuple[Segment, ...] = (),
    ) -> None:
        """Resolve segments in reading order, descending into parentheticals."""
        for i, seg in enumerate(segments):
            if isinstance(seg, Text):
                parts.append(seg.text)
            elif isinstance(seg, CitationMention):
                p = self.mention(fn, seg, lead + tuple(segments[:i]))
                self.pending.append(p)
                parts.append(p)
                if seg.parenthetical_segments:
                    parts.append(" (")
                    self.walk(fn, seg.parenthetical_segments, crossrefs, parts, lead=(Text("("),))
                    parts.append(")")
            elif isinstance(seg, CiteBreaker):
                self.history.cite_break(fn.position)
            elif isinstance(seg, CrossRefUse):
                parts.append(str(crossrefs.lookup(seg.ref_id, fn.number)))
            elif isinstance(seg, CrossRefAnchor):
                continue
            else:
                assert_never(seg)

    def finalize(self, p: _Pending) -> _Pending:
        """Apply hereinafter flags learned after the citation was first rendered."""
        d = p.decision
        if isinstance(d, (Full, Short)):
            flag = self.history.records[p.entry.id].hereinafter
            if flag != d.hereinafter:
                d = replace(d, hereinafter=flag)
                p.decision = d
                p.text = _render(p, d, self.journals)
        return p


def resolve(
    footnotes: Sequence[Footnote],
    library: Mapping[str, SourceEntry],
    journals: JournalResolver | None = None,
) -> Resolution:
    """
    Decide and render every citation, then resolve cross-references.

    Anchors are bound before the walk so a cross-reference may point to a
    later footnote. Errors carry the displayed footnote number and stop the
    pass.
    """
    if journals is None:
        journals = JournalResolver()
    notices_before = len(journals.notices)

    crossrefs = bind_anchors(footnotes)
    run = _Pass(library, journals)

    # footnote index -> list of str | _Pending
    pieces: list[list[str | _Pending]] = []

    for fn in footnotes:
        parts: list[str | _Pending] = []
        run.walk(fn, fn.segments, crossrefs, parts)
        pieces.append(parts)

    result = Resolution(crossrefs=dict(crossrefs.anchors))

    for p in run.pending:
        run.finalize(p)
        result.citations.append(
            ResolvedCitation(
                footnote=p.footnote.number,
                position=p.footnote.position,
                source_id=p.entry.id,
                decision=p.decision,
                text=p.text,
                pincite=p.pincite,
            )
        )

    for fn, parts in zip(footnotes, pieces):
        result.footnotes.append(ResolvedFootnote(footnote=fn, text=_join(parts)))

    result.notices.extend(journals.notices[notices_before:])

    logger.info(
        "Resolved %d citations in %d footnotes", len(result.citations), len(footnotes)
    )
    return result
