from __future__ import annotations

from typing import Any

from core.models import Resolution, ResolvedCitation

SCHEMA_VERSION = "1.0"


def _val(x: Any) -> Any:
    """Convert enum-like objects to plain JSON-safe values."""
    if hasattr(x, "value"):
        return x.value
    return x


def _decision_to_dict(c: ResolvedCitation) -> dict[str, Any]:
    d = c.decision
    out: dict[str, Any] = {"kind": _val(d.kind)}
    for name in ("note", "hereinafter", "capitalized", "pincite_repeated"):
        if hasattr(d, name):
            out[name] = getattr(d, name)
    return out


def _citation_to_dict(c: ResolvedCitation) -> dict[str, Any]:
    return {
        "footnote": c.footnote,
        "position": c.position,
        "source_id": c.source_id,
        "pincite": c.pincite,
        "decision": _decision_to_dict(c),
        "text": c.text,
    }


def build_json_payload(
    *,
    resolution: Resolution,
    input_path: str | None = None,
    library_path: str | None = None,
    offset: int = 0,
) -> dict[str, Any]:
    # Citations and footnotes stay in document order; tables are sorted.
    citations = [_citation_to_dict(c) for c in resolution.citations]

    footnotes = [
        {
            "footnote": rf.footnote.number,
            "position": rf.footnote.position,
            "text": rf.text,
        }
        for rf in resolution.footnotes
    ]

    sources: dict[str, dict[str, Any]] = {}
    for c in resolution.citations:
        s = sources.setdefault(c.source_id, {"first_footnote": c.footnote, "footnotes": []})
        if c.footnote not in s["footnotes"]:
            s["footnotes"].append(c.footnote)

    notices = sorted(
        ({"journal": n.full_name, "abbreviation": n.abbreviation} for n in resolution.notices),
        key=lambda n: n["journal"],
    )

    payload: dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "input": {
            "document": input_path,
            "library": library_path,
            "offset": offset,
        },
        "footnotes": footnotes,
        "citations": citations,
        "sources": {k: sources[k] for k in sorted(sources)},
        "crossrefs": {k: resolution.crossrefs[k] for k in sorted(resolution.crossrefs)},
        "journal_notices": notices,
    }
    return payload
