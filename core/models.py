# dataclasses for library sources, footnote segments and resolution results
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Union

from core.enums import DecisionKind, JournalSource, PinMode, SourceType


@dataclass(frozen=True)
class Name:
    family: str | None = None
    given: str | None = None
    particle: str | None = None
    suffix: str | None = None
    literal: str | None = None  # institutional authors


# Library sources


@dataclass(frozen=True)
class _SourceBase:
    id: str
    title: str | None = None
    authors: tuple[Name, ...] = ()
    short_title: str | None = None
    year: int | None = None


@dataclass(frozen=True)
class Book(_SourceBase):
    edition: str | None = None
    editors: tuple[Name, ...] = ()
    translators: tuple[Name, ...] = ()
    volume: str | None = None

    source_type: ClassVar[SourceType] = SourceType.book


@dataclass(frozen=True)
class Chapter(_SourceBase):
    container_title: str | None = None
    editors: tuple[Name, ...] = ()
    translators: tuple[Name, ...] = ()
    edition: str | None = None
    volume: str | None = None
    page: str | None = None

    source_type: ClassVar[SourceType] = SourceType.chapter


@dataclass(frozen=True)
class Article(_SourceBase):
    container_title: str | None = None
    container_short: str | None = None
    volume: str | None = None
    page: str | None = None
    year_as_volume: bool = False
    consecutive: bool = True  # pagination continues across issues
    issue_date: str | None = None  # "Mar. 3, 2021"; used when not consecutive

    source_type: ClassVar[SourceType] = SourceType.article

    @property
    def volume_is_year(self) -> bool:
        if self.year_as_volume:
            return True
        v = (self.volume or "").strip()
        return len(v) == 4 and v.isdigit()


@dataclass(frozen=True)
class Manuscript(_SourceBase):
    forthcoming: bool = False
    container_title: str | None = None
    container_short: str | None = None
    volume: str | None = None
    page: str | None = None
    pin_mode: PinMode = PinMode.manuscript
    url: str | None = None

    source_type: ClassVar[SourceType] = SourceType.manuscript


@dataclass(frozen=True)
class Case(_SourceBase):
    reporter: str | None = None
    volume: str | None = None
    page: str | None = None
    court: str | None = None

    source_type: ClassVar[SourceType] = SourceType.case


SourceEntry = Union[Book, Chapter, Article, Manuscript, Case]


class SourceLibrary(Mapping[str, SourceEntry]):
    """Read-only id -> SourceEntry mapping shared by one resolution pass."""

    def __init__(self, entries: Mapping[str, SourceEntry] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def of(cls, *entries: SourceEntry) -> SourceLibrary:
        return cls({e.id: e for e in entries})

    def __getitem__(self, key: str) -> SourceEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SourceLibrary({len(self._entries)} entries)"


# Footnote segments


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class CitationMention:
    source_id: str
    index: int  # ordinal among the footnote's mentions and breakers
    in_string_cite: bool = False
    pincite: str | None = None
    parenthetical: str | None = None
    # set when the parenthetical itself holds citations or cross-references
    parenthetical_segments: tuple[Segment, ...] = ()


@dataclass(frozen=True)
class CiteBreaker:
    index: int


@dataclass(frozen=True)
class CrossRefAnchor:
    ref_id: str


@dataclass(frozen=True)
class CrossRefUse:
    ref_id: str


Segment = Union[Text, CitationMention, CiteBreaker, CrossRefAnchor, CrossRefUse]


@dataclass(frozen=True)
class Footnote:
    position: int  # 1-based
    number: int  # position + offset
    segments: tuple[Segment, ...]
    start: int = 0  # span of "^[...]" in the source document
    end: int = 0

    @property
    def mentions(self) -> tuple[CitationMention, ...]:
        """Every mention in reading order, including those inside parentheticals."""
        return tuple(iter_mentions(self.segments))


def iter_mentions(segments: Iterable[Segment]) -> Iterator[CitationMention]:
    for s in segments:
        if isinstance(s, CitationMention):
            yield s
            yield from iter_mentions(s.parenthetical_segments)


@dataclass(frozen=True)
class ParsedDocument:
    text: str
    footnotes: tuple[Footnote, ...]


# Rendering decisions (closed set)


@dataclass(frozen=True)
class Full:
    hereinafter: bool = False

    kind: ClassVar[DecisionKind] = DecisionKind.full


@dataclass(frozen=True)
class Short:
    note: int
    hereinafter: bool = False

    kind: ClassVar[DecisionKind] = DecisionKind.short


@dataclass(frozen=True)
class Id:
    capitalized: bool = True
    pincite_repeated: bool = False

    kind: ClassVar[DecisionKind] = DecisionKind.id


@dataclass(frozen=True)
class ShortCaseForm:
    kind: ClassVar[DecisionKind] = DecisionKind.short_case


@dataclass(frozen=True)
class LongCaseForm:
    kind: ClassVar[DecisionKind] = DecisionKind.long_case


Decision = Union[Full, Short, Id, ShortCaseForm, LongCaseForm]


# Results


@dataclass(frozen=True)
class JournalAbbreviation:
    abbreviation: str
    source: JournalSource


@dataclass(frozen=True)
class JournalNotice:
    full_name: str
    abbreviation: str


@dataclass(frozen=True)
class ResolvedCitation:
    footnote: int  # displayed number
    position: int
    source_id: str
    decision: Decision
    text: str
    pincite: str | None = None


@dataclass(frozen=True)
class ResolvedFootnote:
    footnote: Footnote
    text: str


@dataclass
class Resolution:
    footnotes: list[ResolvedFootnote] = field(default_factory=list)
    citations: list[ResolvedCitation] = field(default_factory=list)
    crossrefs: dict[str, int] = field(default_factory=dict)
    notices: list[JournalNotice] = field(default_factory=list)
