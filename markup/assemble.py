from __future__ import annotations

import re

from core.constants import SMALLCAPS_STYLE
from core.models import ParsedDocument, Resolution

_BOLD = re.compile(r"\*\*(?P<inner>.+?)\*\*")


def smallcaps(text: str) -> str:
    """Turn every bold span into the Word "True Small Caps" custom style."""
    return _BOLD.sub(lambda m: f'[{m.group("inner")}]{{custom-style="{SMALLCAPS_STYLE}"}}', text)


def assemble(parsed: ParsedDocument, resolution: Resolution, use_smallcaps: bool = False) -> str:
    """Splice resolved footnote text back into the document, leaving prose untouched."""
    doc = parsed.text
    out: list[str] = []
    cursor = 0

    for rf in resolution.footnotes:
        fn = rf.footnote
        out.append(doc[cursor : fn.start])
        out.append(f"^[{rf.text}]")
        cursor = fn.end
    out.append(doc[cursor:])

    result = "".join(out)
    if use_smallcaps:
        result = smallcaps(result)
    return result
