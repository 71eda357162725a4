# source types, decision kinds, journal lookup provenance

from __future__ import annotations

from enum import StrEnum


class SourceType(StrEnum):
    book = "book"
    chapter = "chapter"
    article = "article"
    manuscript = "manuscript"
    case = "case"


class DecisionKind(StrEnum):
    full = "full"
    short = "short"
    id = "id"
    short_case = "short_case"
    long_case = "long_case"


class JournalSource(StrEnum):
    record = "record"
    user = "user"
    builtin = "builtin"
    fallback = "fallback"


class PinMode(StrEnum):
    manuscript = "manuscript"
    page = "page"


class SummaryFormat(StrEnum):
    none = "none"
    plain = "plain"
    rich = "rich"
