from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.enums import PinMode
from core.exceptions import LibraryLoadError
from core.models import (
    Article,
    Book,
    Case,
    Chapter,
    Manuscript,
    Name,
    SourceEntry,
    SourceLibrary,
)

DATA_DIR = Path(__file__).parent
BUILTIN_JOURNALS_PATH = DATA_DIR / "journals.json"

logger = logging.getLogger(__name__)

# CSL item type -> loader for that type
_ARTICLE_TYPES = {"article-journal", "article", "article-magazine", "article-newspaper"}
_NONCONSECUTIVE_TYPES = {"article-magazine", "article-newspaper"}
SUPPORTED_TYPES = _ARTICLE_TYPES | {"book", "chapter", "manuscript", "legal_case"}


def read_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LibraryLoadError(str(path), e.strerror or str(e)) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise LibraryLoadError(str(path), f"invalid JSON ({e.msg}, line {e.lineno})") from e


def _journal_pairs(raw: Any) -> dict[str, str]:
    out: dict[str, str] = {}

    # {"version": 1, "journals": {...}} wrapper
    if isinstance(raw, dict) and isinstance(raw.get("journals"), (dict, list)):
        raw = raw["journals"]

    # Case 1: list of objects: [{"name": "...", "abbreviation": "..."}]
    if isinstance(raw, list):
        for item in raw:
            if not isinstance(item, dict):
                continue
            name = item.get("name") or item.get("full")
            abbr = item.get("abbreviation") or item.get("short")
            if isinstance(name, str) and isinstance(abbr, str) and name.strip():
                out[name.strip()] = abbr.strip()
        return out

    # Case 2: plain mapping: {"Harvard Law Review": "Harv. L. Rev."}
    if isinstance(raw, dict):
        for k, v in raw.items():
            if isinstance(v, str) and str(k).strip():
                out[str(k).strip()] = v.strip()
        return out

    return out


def load_builtin_journals(path: Path | None = None) -> dict[str, str]:
    """Load the bundled full name -> abbreviation table (data/journals.json)."""
    if path is None:
        path = BUILTIN_JOURNALS_PATH
    return _journal_pairs(read_json(path))


def load_user_journals(path: Path | str) -> dict[str, str]:
    p = Path(path)
    raw = read_json(p)
    if not isinstance(raw, (dict, list)):
        raise LibraryLoadError(str(p), "expected a JSON object of journal name -> abbreviation")
    table = _journal_pairs(raw)
    logger.info("Loaded %d user journal abbreviations from %s", len(table), p)
    return table


BLANK_USER_JOURNALS = {
    "Full Journal Name": "Abbreviated J. Name",
}


def write_blank_user_journals(path: Path | str) -> Path:
    """Write a starter user-journal file. Refuses to overwrite an existing one."""
    p = Path(path)
    if p.exists():
        raise LibraryLoadError(str(p), "file already exists")
    p.write_text(json.dumps(BLANK_USER_JOURNALS, indent=2) + "\n", encoding="utf-8")
    return p


# CSL-JSON library


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _names(raw: Any) -> tuple[Name, ...]:
    if not isinstance(raw, list):
        return ()
    out: list[Name] = []
    for n in raw:
        if not isinstance(n, dict):
            continue
        out.append(
            Name(
                family=_str_or_none(n.get("family")),
                given=_str_or_none(n.get("given")),
                particle=_str_or_none(n.get("non-dropping-particle")),
                suffix=_str_or_none(n.get("suffix")),
                literal=_str_or_none(n.get("literal")),
            )
        )
    return tuple(out)


def _date_parts(item: dict[str, Any]) -> list[Any]:
    issued = item.get("issued")
    if not isinstance(issued, dict):
        return []
    parts = issued.get("date-parts")
    if isinstance(parts, list) and parts and isinstance(parts[0], list):
        return parts[0]
    return []


def _year(item: dict[str, Any]) -> int | None:
    parts = _date_parts(item)
    if parts:
        try:
            return int(parts[0])
        except (TypeError, ValueError):
            return None
    issued = item.get("issued")
    if isinstance(issued, dict):
        raw = str(issued.get("raw") or issued.get("literal") or "")
        digits = "".join(ch for ch in raw[:4] if ch.isdigit())
        if len(digits) == 4:
            return int(digits)
    return None


_MONTHS = (
    "Jan.", "Feb.", "Mar.", "Apr.", "May", "June",
    "July", "Aug.", "Sept.", "Oct.", "Nov.", "Dec.",
)


def _issue_date(item: dict[str, Any]) -> str | None:
    parts = _date_parts(item)
    try:
        nums = [int(p) for p in parts]
    except (TypeError, ValueError):
        return None
    if len(nums) < 2 or not 1 <= nums[1] <= 12:
        return None
    month = _MONTHS[nums[1] - 1]
    if len(nums) >= 3:
        return f"{month} {nums[2]}, {nums[0]}"
    return f"{month} {nums[0]}"


def _first_page(raw: Any) -> str | None:
    s = _str_or_none(raw)
    if s is None:
        return None
    for sep in ("-", "–", "—"):
        if sep in s:
            s = s.split(sep, 1)[0].strip()
    return s or None


def entry_from_csl(item: dict[str, Any]) -> SourceEntry | None:
    """Convert one CSL-JSON item. Returns None for unsupported types."""
    sid = _str_or_none(item.get("id"))
    ctype = _str_or_none(item.get("type"))
    if sid is None:
        return None

    common: dict[str, Any] = {
        "id": sid,
        "title": _str_or_none(item.get("title")),
        "authors": _names(item.get("author")),
        "short_title": _str_or_none(item.get("title-short") or item.get("shortTitle")),
        "year": _year(item),
    }

    if ctype == "book":
        return Book(
            **common,
            edition=_str_or_none(item.get("edition")),
            editors=_names(item.get("editor")),
            translators=_names(item.get("translator")),
            volume=_str_or_none(item.get("volume")),
        )

    if ctype == "chapter":
        return Chapter(
            **common,
            container_title=_str_or_none(item.get("container-title")),
            editors=_names(item.get("editor")),
            translators=_names(item.get("translator")),
            edition=_str_or_none(item.get("edition")),
            volume=_str_or_none(item.get("volume")),
            page=_first_page(item.get("page")),
        )

    if ctype in _ARTICLE_TYPES:
        consecutive = ctype not in _NONCONSECUTIVE_TYPES
        return Article(
            **common,
            container_title=_str_or_none(item.get("container-title")),
            container_short=_str_or_none(
                item.get("container-title-short") or item.get("journalAbbreviation")
            ),
            volume=_str_or_none(item.get("volume")),
            page=_first_page(item.get("page")),
            year_as_volume=bool(item.get("volume-is-year", False)),
            consecutive=consecutive,
            issue_date=None if consecutive else _issue_date(item),
        )

    if ctype == "manuscript":
        container = _str_or_none(item.get("container-title"))
        status = (_str_or_none(item.get("status")) or "").lower()
        page = _first_page(item.get("page"))
        return Manuscript(
            **common,
            forthcoming=(
                "forthcoming" in status
                or container is not None
                or (common["year"] is not None and "unpublished" not in status)
            ),
            container_title=container,
            container_short=_str_or_none(
                item.get("container-title-short") or item.get("journalAbbreviation")
            ),
            volume=_str_or_none(item.get("volume")),
            page=page,
            pin_mode=PinMode.page if page else PinMode.manuscript,
            url=_str_or_none(item.get("URL")),
        )

    if ctype == "legal_case":
        return Case(
            **common,
            reporter=_str_or_none(item.get("container-title")),
            volume=_str_or_none(item.get("volume")),
            page=_first_page(item.get("page")),
            court=_str_or_none(item.get("authority")),
        )

    return None


def csl_items(raw: Any) -> list[dict[str, Any]]:
    """Accept a CSL-JSON array, {"items": [...]}, or an id -> item mapping."""
    if isinstance(raw, list):
        return [x for x in raw if isinstance(x, dict)]
    if isinstance(raw, dict):
        for key in ("items", "references"):
            if isinstance(raw.get(key), list):
                return [x for x in raw[key] if isinstance(x, dict)]
        out: list[dict[str, Any]] = []
        for k, v in raw.items():
            if isinstance(v, dict):
                item = dict(v)
                item.setdefault("id", k)
                out.append(item)
        return out
    return []


def parse_library(raw: Any, origin: str = "<library>") -> SourceLibrary:
    if not isinstance(raw, (list, dict)):
        raise LibraryLoadError(origin, "expected a CSL-JSON array of items")

    entries: dict[str, SourceEntry] = {}
    for item in csl_items(raw):
        entry = entry_from_csl(item)
        if entry is None:
            logger.warning(
                "Skipping %s: type %r is not supported",
                item.get("id", "<no id>"),
                item.get("type"),
            )
            continue
        if entry.id in entries:
            raise LibraryLoadError(origin, f"duplicate id '{entry.id}'")
        entries[entry.id] = entry

    logger.debug("Parsed %d library entries from %s", len(entries), origin)
    return SourceLibrary(entries)


def load_library(path: Path | str) -> SourceLibrary:
    p = Path(path)
    library = parse_library(read_json(p), origin=str(p))
    logger.info("Loaded %d sources from %s", len(library), p)
    return library
