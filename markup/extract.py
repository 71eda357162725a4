"""
Footnote extraction.

Pandoc inline notes (``^[ ... ]``) are located in document order and each
body is split into segments:

- ``[@id]`` citation mention, with an optional pincite clause and an
  optional ``(parenthetical)`` after the bracket; a parenthetical may hold
  further mentions, breakers and cross-reference uses
- ``[$]`` cite breaker
- ``[?id]`` cross-reference anchor when it opens the footnote, a use
  anywhere else
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace

from core.exceptions import MalformedCitationTokenError
from core.models import (
    CitationMention,
    CiteBreaker,
    CrossRefAnchor,
    CrossRefUse,
    Footnote,
    ParsedDocument,
    Segment,
    Text,
    iter_mentions,
)

logger = logging.getLogger(__name__)

_MENTION_RE = re.compile(r"@([^\s\[\]@;,]+)")
_CROSSREF_RE = re.compile(r"\?([^\s\[\]?]+)")

# Pincite grammar: optional "at", then one or more locations joined by
# ",", "&" or "and". A location is a page, range, section, paragraph or
# note reference ("5", "5-7", "§ 12", "¶ 3", "12 n.4", "nn.3-5"). A bare
# "at" before punctuation is kept so it can be reported.
_NUM = r"\d+[a-z]?\b(?:[.:]\d+[a-z]?\b)*"
_SPAN = rf"{_NUM}(?:\s*[-–—]\s*{_NUM})?"
_NOTE = rf"nn?\.\s*{_SPAN}"
_LABEL = r"(?:§§?|¶¶?|pt\.|ch\.|para\.?|art\.|cl\.)"
_LOC = rf"(?:(?:{_LABEL}\s*)?{_SPAN}(?:\s*{_NOTE})?|{_NOTE}|pmbl\.)"
_PIN_RE = re.compile(
    rf"\s*(?:at\s+)?(?:tk\b|{_LOC}(?:(?:\s*[,&]\s*|\s+and\s+){_LOC})*)"
    rf"|\s*at(?=\s*(?:[.,;:(\[]|$))",
    re.IGNORECASE,
)

# token openers that make a parenthetical more than plain text
_TOKEN_OPENERS = ("[@", "[$", "[?")


def _closing(s: str, start: int, open_ch: str, close_ch: str) -> int | None:
    """Index of the bracket closing s[start], honouring nesting."""
    depth = 0
    for i in range(start, len(s)):
        c = s[i]
        if c == open_ch:
            depth += 1
        elif c == close_ch:
            depth -= 1
            if depth == 0:
                return i
    return None


def _none_if_blank(s: str) -> str | None:
    s = s.strip()
    return s or None


def _scan_pincite(body: str, p: int) -> tuple[str | None, int]:
    """Return (pincite, index where it ends); (None, p) when prose follows."""
    m = _PIN_RE.match(body, p)
    if m is None:
        return None, p
    return _none_if_blank(m.group(0)), m.end()


def _scan_parenthetical(body: str, p: int, number: int) -> tuple[str | None, int]:
    """Return (parenthetical body, index after ")"); (None, p) when there is none."""
    j = p
    while j < len(body) and body[j].isspace():
        j += 1
    if j >= len(body) or body[j] != "(":
        return None, p
    close = _closing(body, j, "(", ")")
    if close is None:
        raise MalformedCitationTokenError(
            token=body[j:].strip(), reason="unbalanced parenthetical", footnote=number
        )
    return body[j + 1 : close], close + 1


def _tokenize(
    body: str, number: int, ordinal: int, nested: bool
) -> tuple[list[Segment], int]:
    """Segments of body plus the next free ordinal. Nested bodies have no anchor."""
    segments: list[Segment] = []
    buf: list[str] = []
    i = 0
    n = len(body)

    def flush() -> None:
        if buf:
            segments.append(Text("".join(buf)))
            buf.clear()

    def only_whitespace_so_far() -> bool:
        if "".join(buf).strip():
            return False
        return all(isinstance(s, Text) and not s.text.strip() for s in segments)

    while i < n:
        c = body[i]
        nxt = body[i + 1] if i + 1 < n else ""

        if c != "[" or nxt not in "@$?" or not nxt:
            buf.append(c)
            i += 1
            continue

        close = _closing(body, i, "[", "]")
        if close is None:
            raise MalformedCitationTokenError(
                token=body[i:].strip(), reason="unclosed bracket", footnote=number
            )
        token = body[i : close + 1]
        inner = body[i + 1 : close]

        if nxt == "@":
            m = _MENTION_RE.fullmatch(inner)
            if m is None:
                reason = (
                    "more than one identifier"
                    if inner.count("@") > 1
                    else "only the identifier belongs inside the brackets"
                )
                raise MalformedCitationTokenError(token=token, reason=reason, footnote=number)
            pin, i = _scan_pincite(body, close + 1)
            raw_paren, i = _scan_parenthetical(body, i, number)
            paren = _none_if_blank(raw_paren or "")
            index = ordinal
            ordinal += 1
            paren_segments: list[Segment] = []
            if paren is not None and any(t in paren for t in _TOKEN_OPENERS):
                paren_segments, ordinal = _tokenize(paren, number, ordinal, nested=True)
            flush()
            segments.append(
                CitationMention(
                    source_id=m.group(1),
                    index=index,
                    pincite=pin,
                    parenthetical=paren,
                    parenthetical_segments=tuple(paren_segments),
                )
            )
            continue

        if nxt == "$":
            if inner != "$":
                raise MalformedCitationTokenError(
                    token=token, reason="a cite breaker is written [$]", footnote=number
                )
            flush()
            segments.append(CiteBreaker(index=ordinal))
            ordinal += 1
            i = close + 1
            while i < n and body[i].isspace():
                i += 1
            continue

        m = _CROSSREF_RE.fullmatch(inner)
        if m is None:
            raise MalformedCitationTokenError(
                token=token, reason="a cross-reference is written [?id]", footnote=number
            )
        anchor = not nested and only_whitespace_so_far()
        flush()
        if anchor:
            segments.clear()
            segments.append(CrossRefAnchor(m.group(1)))
        else:
            segments.append(CrossRefUse(m.group(1)))
        i = close + 1

    flush()
    return segments, ordinal


def _mark_string_cite(segments: list[Segment]) -> list[Segment]:
    out: list[Segment] = []
    for s in segments:
        if isinstance(s, CitationMention):
            s = replace(
                s,
                in_string_cite=True,
                parenthetical_segments=tuple(_mark_string_cite(list(s.parenthetical_segments))),
            )
        out.append(s)
    return out


def tokenize_footnote(
    body: str, position: int, number: int, start: int = 0, end: int = 0
) -> Footnote:
    """Split one footnote body (without the ``^[`` and ``]``) into segments."""
    segments, _ = _tokenize(body, number, 0, nested=False)

    # a parenthetical citation counts toward the string cite too
    if sum(1 for _ in iter_mentions(segments)) > 1:
        segments = _mark_string_cite(segments)

    return Footnote(
        position=position,
        number=number,
        segments=tuple(segments),
        start=start,
        end=end,
    )


def _is_note_start(doc: str, i: int) -> bool:
    return doc.startswith("^[", i) and (i == 0 or doc[i - 1] != "\\")


def extract(document: str, offset: int = 0) -> ParsedDocument:
    """Locate every inline footnote and tokenise it. Numbers are position + offset."""
    footnotes: list[Footnote] = []
    i = 0
    n = len(document)

    while i < n:
        if not _is_note_start(document, i):
            i += 1
            continue

        position = len(footnotes) + 1
        number = position + offset
        close = _closing(document, i + 1, "[", "]")
        if close is None:
            raise MalformedCitationTokenError(
                token=document[i : i + 40], reason="footnote is never closed", footnote=number
            )

        body = document[i + 2 : close]
        footnotes.append(tokenize_footnote(body, position, number, start=i, end=close + 1))
        i = close + 1

    logger.debug("Extracted %d footnotes", len(footnotes))
    return ParsedDocument(text=document, footnotes=tuple(footnotes))
