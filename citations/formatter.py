from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import assert_never

from core.constants import (
    PLACEHOLDER_PIN,
    SUPREME_COURT_AUTHORITIES,
    normalize_pincite,
    pincite_takes_at,
)
from core.enums import PinMode
from core.exceptions import InvalidPinciteError, MissingRequiredFieldError
from core.models import (
    Article,
    Book,
    Case,
    Chapter,
    Decision,
    Full,
    Id,
    LongCaseForm,
    Manuscript,
    Name,
    Short,
    ShortCaseForm,
    SourceEntry,
)
from citations.journals import JournalResolver

logger = logging.getLogger(__name__)

_ITAL_EDGES = re.compile(r"^<i>|</i>$")
_ITAL_OPEN = re.compile(r"(\s+?)<i>")
_ITAL_CLOSE = re.compile(r"</i>(\s+?)")
_ITAL_ANY = re.compile(r"<i>|</i>")


# Text helpers


def bold(s: str) -> str:
    return f"**{s}**"


def italic(s: str) -> str:
    return f"*{s}*"


def reverse_italicize(title: str) -> str:
    """Italicise a title, setting any <i>...</i> span back in roman."""
    s = title
    if not s.startswith("<i>"):
        s = "*" + s
    if not s.endswith("</i>"):
        s = s + "*"
    s = _ITAL_EDGES.sub("", s)
    s = _ITAL_OPEN.sub(r"*\1", s)
    s = _ITAL_CLOSE.sub(r"\1*", s)
    return _ITAL_ANY.sub("*", s)


def case_name(title: str) -> str:
    s = title.replace("In re ", "*In re* ")
    return s.replace(" ex rel. ", " *ex rel.* ")


def _full_name(n: Name) -> str:
    if n.literal:
        return n.literal
    parts = [p for p in (n.given, n.particle, n.family) if p]
    out = " ".join(parts)
    if n.suffix:
        sep = ", " if n.suffix in ("Jr.", "Sr.") else " "
        out += sep + n.suffix
    return out


def _surname(n: Name) -> str:
    if n.literal:
        return n.literal
    return " ".join(p for p in (n.particle, n.family) if p)


def long_author(names: Sequence[Name]) -> str:
    full = [_full_name(n) for n in names]
    if len(full) <= 1:
        return "".join(full)
    return ", ".join(full[:-1]) + " & " + full[-1]


def short_author(names: Sequence[Name]) -> str:
    if not names:
        return ""
    lead = _surname(names[0])
    if len(names) == 2:
        return f"{lead} & {_surname(names[1])}"
    if len(names) > 2:
        return f"{lead} et al."
    return lead


def hereinafter_key(entry: SourceEntry) -> str | None:
    """Lead author used to detect sources that need a hereinafter."""
    if isinstance(entry, Case) or not entry.authors:
        return None
    return " ".join(_surname(entry.authors[0]).split()).casefold()


def edition_label(edition: str) -> str:
    e = edition.strip()
    if not e.isdigit():
        return e
    n = int(e)
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "d", 3: "d"}.get(n % 10, "th")
    return f"{n}{suffix}"


def clean_pincite(raw: str | None, source_id: str) -> str | None:
    """Normalise a pincite clause; a clause that is only "at" is an error."""
    if raw is None:
        return None
    if raw.strip().lower() == "at":
        raise InvalidPinciteError(pincite=raw.strip(), source_id=source_id)
    return normalize_pincite(raw)


def _at(pin: str) -> str:
    if pin == PLACEHOLDER_PIN or pincite_takes_at(pin):
        return f"at {pin}"
    return pin


def _require(entry: SourceEntry, field: str) -> str:
    value = getattr(entry, field, None)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingRequiredFieldError(source_id=entry.id, field=field)
    return str(value)


def _short_title(entry: SourceEntry) -> str:
    title = entry.short_title
    if not title:
        logger.warning("No short title for %s; using the full title", entry.id)
        title = _require(entry, "title")
    if isinstance(entry, Book):
        return bold(title)
    if isinstance(entry, Case):
        return italic(title)
    return reverse_italicize(title)


def _short_author_text(entry: SourceEntry) -> str:
    s = short_author(entry.authors)
    if s and isinstance(entry, Book):
        return bold(s)
    return s


def _hereinafter(entry: SourceEntry) -> str:
    author = _short_author_text(entry)
    title = _short_title(entry)
    if author:
        return f" [hereinafter {author}, {title}]"
    return f" [hereinafter {title}]"


def _authors_lead(entry: SourceEntry) -> str:
    if not entry.authors:
        return ""
    names = long_author(entry.authors)
    if isinstance(entry, Book):
        names = bold(names)
    return names + ", "


def _publication_paren(
    edition: str | None,
    editors: Sequence[Name],
    translators: Sequence[Name],
    year: int | None,
) -> str:
    bits: list[str] = []
    if edition:
        bits.append(f"{edition_label(edition)} ed.")
    if editors:
        bits.append(f"{long_author(editors)} {'eds.' if len(editors) > 1 else 'ed.'}")
    if translators:
        bits.append(f"{long_author(translators)} trans.")

    body = ", ".join(bits)
    if year is not None:
        if not bits:
            body = str(year)
        elif edition and not editors and not translators:
            body = f"{body} {year}"
        else:
            body = f"{body}, {year}"

    return f" ({body})" if body else ""


def _journal(
    entry: Article | Manuscript, journals: JournalResolver
) -> str:
    full_name = _require(entry, "container_title")
    return bold(journals.resolve(full_name, override=entry.container_short).abbreviation)


# Full citations: (before pin, pin joiner, after pin, trailer)


def _book_parts(entry: Book) -> tuple[str, str, str, str]:
    title = _require(entry, "title")
    pre = f"{entry.volume} " if entry.volume else ""
    pre += _authors_lead(entry) + bold(title)
    post = _publication_paren(entry.edition, entry.editors, entry.translators, entry.year)
    return pre, " {pin}", post, ""


def _chapter_parts(entry: Chapter) -> tuple[str, str, str, str]:
    title = _require(entry, "title")
    container = _require(entry, "container_title")
    pre = _authors_lead(entry) + reverse_italicize(title) + ", *in* "
    if entry.volume:
        pre += f"{entry.volume} "
    pre += bold(container)
    if entry.page:
        pre += f" {entry.page}"
    post = _publication_paren(entry.edition, entry.editors, entry.translators, entry.year)
    return pre, ", {pin}", post, ""


def _article_parts(
    entry: Article, journals: JournalResolver
) -> tuple[str, str, str, str]:
    title = _require(entry, "title")
    page = _require(entry, "page")
    journal = _journal(entry, journals)
    pre = _authors_lead(entry) + reverse_italicize(title) + ", "

    if not entry.consecutive:
        pre += journal
        if entry.issue_date:
            pre += f", {entry.issue_date}"
        elif entry.year is not None:
            pre += f", {entry.year}"
        return pre + f", at {page}", ", {pin}", "", ""

    volume = _require(entry, "volume")
    pre += f"{volume} {journal} {page}"
    post = ""
    if not entry.volume_is_year and entry.year is not None:
        post = f" ({entry.year})"
    return pre, ", {pin}", post, ""


def _manuscript_parts(
    entry: Manuscript, journals: JournalResolver
) -> tuple[str, str, str, str]:
    title = _require(entry, "title")
    pre = _authors_lead(entry) + reverse_italicize(title)

    if entry.container_title:
        pre += ", "
        if entry.volume:
            pre += f"{entry.volume} "
        pre += _journal(entry, journals)
    trailer = f", {entry.url}" if entry.url else ""

    if entry.pin_mode == PinMode.page and entry.page:
        post = f" ({entry.year})" if entry.year is not None else ""
        return pre + f" {entry.page}", ", {pin}", post, trailer

    if entry.forthcoming:
        pre += f" (forthcoming {entry.year})" if entry.year is not None else " (forthcoming)"
    else:
        if entry.year is not None:
            pre += f" ({entry.year})"
        pre += " (unpublished manuscript)"
    return pre, " (manuscript at {pin})", "", trailer


def _case_long(entry: Case, pin: str | None) -> str:
    title = _require(entry, "title")
    reporter = _require(entry, "reporter")
    volume = _require(entry, "volume")
    page = _require(entry, "page")

    out = f"{case_name(title)}, {volume} {reporter} {page}"
    if pin:
        out += f", {pin}"

    paren: list[str] = []
    if entry.court and entry.court not in SUPREME_COURT_AUTHORITIES:
        paren.append(entry.court)
    if entry.year is not None:
        paren.append(str(entry.year))
    if paren:
        out += f" ({' '.join(paren)})"
    return out


def _case_short(entry: Case, pin: str | None) -> str:
    reporter = _require(entry, "reporter")
    volume = _require(entry, "volume")
    page = _require(entry, "page")

    out = f"{_short_title(entry)}, {volume} {reporter}"
    if pin:
        return f"{out} {_at(pin)}"
    return f"{out} {page}"


def _full(
    entry: SourceEntry,
    hereinafter: bool,
    pin: str | None,
    journals: JournalResolver,
) -> str:
    if isinstance(entry, Book):
        pre, joiner, post, trailer = _book_parts(entry)
    elif isinstance(entry, Chapter):
        pre, joiner, post, trailer = _chapter_parts(entry)
    elif isinstance(entry, Article):
        pre, joiner, post, trailer = _article_parts(entry, journals)
    elif isinstance(entry, Manuscript):
        pre, joiner, post, trailer = _manuscript_parts(entry, journals)
    elif isinstance(entry, Case):
        return _case_long(entry, pin)
    else:
        assert_never(entry)

    out = pre
    if pin:
        out += joiner.format(pin=pin)
    out += post
    if hereinafter:
        out += _hereinafter(entry)
    return out + trailer


def _supra(entry: SourceEntry, note: int, hereinafter: bool, pin: str | None) -> str:
    if isinstance(entry, Case):
        return _case_short(entry, pin)

    author = _short_author_text(entry)
    if author and hereinafter:
        head = f"{author}, {_short_title(entry)}"
    elif author:
        head = author
    else:
        head = _short_title(entry)

    out = f"{head}, *supra* note {note}"
    if not pin:
        return out
    if isinstance(entry, Manuscript) and entry.pin_mode == PinMode.manuscript:
        return f"{out} (manuscript at {pin})"
    return f"{out}, {_at(pin)}"


def _id(decision: Id, pin: str | None) -> str:
    out = "*Id.*" if decision.capitalized else "*id.*"
    if pin and not decision.pincite_repeated:
        out += f" {_at(pin)}"
    return out


def render(
    entry: SourceEntry,
    decision: Decision,
    pincite: str | None = None,
    journals: JournalResolver | None = None,
    parenthetical: str | None = None,
) -> str:
    """Render one citation in the form chosen by the resolver.

    Without a journal resolver a fresh one is used for this call only.
    """
    if journals is None:
        journals = JournalResolver()
    pin = clean_pincite(pincite, entry.id)

    if isinstance(decision, Full):
        text = _full(entry, decision.hereinafter, pin, journals)
    elif isinstance(decision, Short):
        text = _supra(entry, decision.note, decision.hereinafter, pin)
    elif isinstance(decision, Id):
        text = _id(decision, pin)
    elif isinstance(decision, LongCaseForm):
        text = _case_long(_as_case(entry), pin)
    elif isinstance(decision, ShortCaseForm):
        text = _case_short(_as_case(entry), pin)
    else:
        assert_never(decision)

    if parenthetical:
        text += f" ({parenthetical})"
    return text


def _as_case(entry: SourceEntry) -> Case:
    if not isinstance(entry, Case):
        raise TypeError(f"{entry.id} is a {entry.source_type}, not a case")
    return entry
