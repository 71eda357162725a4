# per-pass resolver state
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from core.constants import CASE_WINDOW
from core.exceptions import DuplicateCrossRefIdError, UnknownCrossRefIdError


@dataclass(frozen=True)
class LastCited:
    source_id: str | None  # None after a cite breaker
    position: int
    in_string_cite: bool = False
    pincite: str | None = None


@dataclass
class SourceRecord:
    first_position: int
    first_number: int
    hereinafter: bool = False
    recent: deque[int] = field(default_factory=lambda: deque(maxlen=CASE_WINDOW))


@dataclass
class CitationHistory:
    records: dict[str, SourceRecord] = field(default_factory=dict)
    last: LastCited | None = None
    # hereinafter key -> ids of cited sources sharing it, in first-cited order
    authors: dict[str, list[str]] = field(default_factory=dict)

    def get(self, source_id: str) -> SourceRecord | None:
        return self.records.get(source_id)

    def first_citation(self, source_id: str, position: int, number: int) -> SourceRecord:
        rec = SourceRecord(first_position=position, first_number=number)
        self.records[source_id] = rec
        return rec

    def add_author(self, key: str, source_id: str) -> None:
        """Register a newly cited source under its lead author."""
        ids = self.authors.setdefault(key, [])
        if source_id not in ids:
            ids.append(source_id)
        if len(ids) > 1:
            for sid in ids:
                self.records[sid].hereinafter = True

    def is_id(self, source_id: str, position: int) -> bool:
        last = self.last
        if last is None or last.source_id != source_id:
            return False
        return not last.in_string_cite or last.position == position

    def case_recent(self, source_id: str, position: int) -> bool:
        rec = self.records.get(source_id)
        if rec is None:
            return False
        return any(position - p < CASE_WINDOW for p in rec.recent)

    def cited(
        self,
        source_id: str,
        position: int,
        in_string_cite: bool,
        pincite: str | None,
    ) -> None:
        rec = self.records.get(source_id)
        if rec is not None:
            rec.recent.append(position)
        self.last = LastCited(source_id, position, in_string_cite, pincite)

    def cite_break(self, position: int) -> None:
        self.last = LastCited(None, position)


@dataclass
class CrossRefTable:
    anchors: dict[str, int] = field(default_factory=dict)

    def bind(self, ref_id: str, number: int) -> None:
        if ref_id in self.anchors:
            raise DuplicateCrossRefIdError(
                ref_id=ref_id, first_footnote=self.anchors[ref_id], footnote=number
            )
        self.anchors[ref_id] = number

    def lookup(self, ref_id: str, number: int) -> int:
        try:
            return self.anchors[ref_id]
        except KeyError as e:
            raise UnknownCrossRefIdError(ref_id=ref_id, footnote=number) from e
