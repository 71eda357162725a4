from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from data.loaders import SUPPORTED_TYPES, read_json, csl_items

# Fields each supported CSL type needs before any citation form can be built.
_REQUIRED: dict[str, tuple[str, ...]] = {
    "book": ("title",),
    "chapter": ("title", "container-title"),
    "article-journal": ("title", "container-title", "volume", "page"),
    "article": ("title", "container-title", "volume", "page"),
    "article-magazine": ("title", "container-title", "page"),
    "article-newspaper": ("title", "container-title", "page"),
    "manuscript": ("title",),
    "legal_case": ("title", "container-title", "volume", "page"),
}

# Ids must be writable inside a "[@id]" token.
_ID_RE = re.compile(r"^[^\s\[\]@;$?]+$")


@dataclass(frozen=True)
class LibraryIssue:
    path: str
    message: str
    fatal: bool = True


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip()) or v == []


def validate_items(raw: Any, origin: str = "<library>") -> list[LibraryIssue]:
    if not isinstance(raw, (list, dict)):
        return [LibraryIssue(origin, "Root must be a CSL-JSON array.")]

    issues: list[LibraryIssue] = []
    seen: dict[str, int] = {}

    for i, item in enumerate(csl_items(raw)):
        prefix = f"items[{i}]"

        sid = item.get("id")
        if not isinstance(sid, str) or not sid.strip():
            issues.append(LibraryIssue(prefix + ".id", "Missing or empty id."))
            continue
        sid = sid.strip()
        prefix = f"{prefix}({sid})"

        if sid in seen:
            issues.append(
                LibraryIssue(prefix + ".id", f"Duplicate id; first seen at items[{seen[sid]}].")
            )
        else:
            seen[sid] = i

        if not _ID_RE.match(sid):
            issues.append(
                LibraryIssue(prefix + ".id", "Id cannot be written inside a [@id] token.")
            )

        ctype = item.get("type")
        if not isinstance(ctype, str) or not ctype:
            issues.append(LibraryIssue(prefix + ".type", "Missing type."))
            continue
        if ctype not in SUPPORTED_TYPES:
            issues.append(
                LibraryIssue(
                    prefix + ".type",
                    f"Unsupported type {ctype!r}; the entry will be skipped.",
                    fatal=False,
                )
            )
            continue

        for fname in _REQUIRED.get(ctype, ()):
            if _blank(item.get(fname)):
                issues.append(LibraryIssue(f"{prefix}.{fname}", "Missing required field."))

        if ctype == "legal_case" and _blank(item.get("title-short")):
            issues.append(
                LibraryIssue(
                    prefix + ".title-short",
                    "No short case name; short forms will repeat the full name.",
                    fatal=False,
                )
            )

        for role in ("author", "editor", "translator"):
            names = item.get(role)
            if names is None:
                continue
            if not isinstance(names, list):
                issues.append(LibraryIssue(f"{prefix}.{role}", "Expected a list of names."))
                continue
            for j, n in enumerate(names):
                if not isinstance(n, dict) or not (n.get("family") or n.get("literal")):
                    issues.append(
                        LibraryIssue(f"{prefix}.{role}[{j}]", "Name needs 'family' or 'literal'.")
                    )

    return issues


def validate_library(path: Path | str) -> list[LibraryIssue]:
    p = Path(path)
    return validate_items(read_json(p), origin=str(p))
