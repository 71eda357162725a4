from __future__ import annotations

import json
import logging

import pytest

from core.enums import PinMode, SourceType
from core.exceptions import LibraryLoadError
from core.models import Article, Book, Case, Chapter, Manuscript, Name
from data.loaders import (
    BLANK_USER_JOURNALS,
    csl_items,
    entry_from_csl,
    load_library,
    load_user_journals,
    parse_library,
    write_blank_user_journals,
)
from data.validate import validate_items, validate_library


def _write(tmp_path, name, payload):
    p = tmp_path / name
    p.write_text(json.dumps(payload), encoding="utf-8")
    return p


# CSL-JSON conversion


def test_fixture_library_maps_every_type(library):
    types = {entry.source_type for entry in library.values()}
    assert types == {
        SourceType.book,
        SourceType.chapter,
        SourceType.article,
        SourceType.manuscript,
        SourceType.case,
    }
    assert isinstance(library["authorBookChapterTitle2021"], Chapter)


def test_case_fields(library):
    case = library["DoeState2022"]
    assert isinstance(case, Case)
    assert (case.reporter, case.volume, case.page, case.court, case.year) == (
        "F.4th",
        "123",
        "456",
        "7th Cir.",
        2022,
    )
    assert case.short_title == "Doe"


def test_name_parts_are_kept():
    entry = entry_from_csl(
        {
            "id": "b",
            "type": "book",
            "title": "T",
            "author": [
                {"family": "Beethoven", "given": "Ludwig", "non-dropping-particle": "van"},
                {"literal": "American Law Institute"},
            ],
            "translator": [{"family": "Tran", "given": "Sue"}],
        }
    )
    assert isinstance(entry, Book)
    assert entry.authors == (
        Name(family="Beethoven", given="Ludwig", particle="van"),
        Name(literal="American Law Institute"),
    )
    assert entry.translators == (Name(family="Tran", given="Sue"),)


def test_article_page_range_and_year_volume_flag():
    entry = entry_from_csl(
        {
            "id": "a",
            "type": "article-journal",
            "title": "T",
            "container-title": "J",
            "volume": "12",
            "page": "101-120",
            "volume-is-year": True,
            "issued": {"date-parts": [[2020]]},
        }
    )
    assert isinstance(entry, Article)
    assert entry.page == "101"
    assert entry.volume_is_year
    assert entry.consecutive


def test_magazine_article_is_not_consecutively_paginated():
    entry = entry_from_csl(
        {
            "id": "m",
            "type": "article-magazine",
            "title": "Profile",
            "container-title": "The New Yorker",
            "page": "12",
            "issued": {"date-parts": [[2021, 3, 3]]},
        }
    )
    assert isinstance(entry, Article)
    assert not entry.consecutive
    assert entry.issue_date == "Mar. 3, 2021"


@pytest.mark.parametrize(
    "extra, forthcoming",
    [
        ({"issued": {"date-parts": [[2021]]}}, True),
        ({"container-title": "Some Law Review"}, True),
        ({"status": "Forthcoming"}, True),
        ({"issued": {"date-parts": [[2021]]}, "status": "unpublished"}, False),
        ({}, False),
    ],
)
def test_manuscript_forthcoming_detection(extra, forthcoming):
    entry = entry_from_csl({"id": "ms", "type": "manuscript", "title": "Draft", **extra})
    assert isinstance(entry, Manuscript)
    assert entry.forthcoming is forthcoming
    assert entry.pin_mode == PinMode.manuscript


def test_paginated_manuscript_uses_page_pins():
    entry = entry_from_csl({"id": "ms", "type": "manuscript", "title": "Draft", "page": "45-60"})
    assert entry.pin_mode == PinMode.page
    assert entry.page == "45"


def test_csl_items_accepts_wrappers_and_mappings():
    item = {"id": "x", "type": "book", "title": "T"}
    assert csl_items([item, "junk"]) == [item]
    assert csl_items({"items": [item]}) == [item]
    assert csl_items({"x": {"type": "book", "title": "T"}}) == [item]


def test_unsupported_types_are_skipped_with_warning(caplog):
    raw = [
        {"id": "ok", "type": "book", "title": "T"},
        {"id": "web", "type": "webpage", "title": "Site"},
    ]
    with caplog.at_level(logging.WARNING, logger="data.loaders"):
        lib = parse_library(raw)
    assert list(lib) == ["ok"]
    assert any("web" in rec.getMessage() for rec in caplog.records)


def test_duplicate_ids_fail_to_load():
    raw = [{"id": "x", "type": "book", "title": "A"}, {"id": "x", "type": "book", "title": "B"}]
    with pytest.raises(LibraryLoadError) as exc:
        parse_library(raw, origin="lib.json")
    assert "duplicate" in exc.value.reason


def test_load_library_reports_bad_json(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("[{", encoding="utf-8")
    with pytest.raises(LibraryLoadError) as exc:
        load_library(p)
    assert exc.value.path == str(p)
    assert exc.value.reason.startswith("invalid JSON")


def test_load_library_reports_missing_file(tmp_path):
    with pytest.raises(LibraryLoadError):
        load_library(tmp_path / "nope.json")


# User journals


def test_user_journals_accept_mapping_list_and_wrapper(tmp_path):
    mapping = _write(tmp_path, "a.json", {"Journal of Things": "J. Things"})
    listed = _write(tmp_path, "b.json", [{"name": "Journal of Things", "abbreviation": "J. Things"}])
    wrapped = _write(tmp_path, "c.json", {"version": 1, "journals": {"Journal of Things": "J. Things"}})
    for p in (mapping, listed, wrapped):
        assert load_user_journals(p) == {"Journal of Things": "J. Things"}


def test_user_journals_must_be_an_object(tmp_path):
    with pytest.raises(LibraryLoadError):
        load_user_journals(_write(tmp_path, "bad.json", "just a string"))


def test_write_blank_user_journals_refuses_to_overwrite(tmp_path):
    target = tmp_path / "user_journals.json"
    write_blank_user_journals(target)
    assert json.loads(target.read_text(encoding="utf-8")) == BLANK_USER_JOURNALS

    with pytest.raises(LibraryLoadError) as exc:
        write_blank_user_journals(target)
    assert exc.value.reason == "file already exists"


# Validation


def test_fixture_library_is_valid(library_path):
    assert validate_library(library_path) == []


def test_validate_reports_each_problem():
    raw = [
        {"id": "", "type": "book"},
        {"id": "dup", "type": "book", "title": "A"},
        {"id": "dup", "type": "book", "title": "B"},
        {"id": "bad id", "type": "book", "title": "C"},
        {"id": "art", "type": "article-journal", "title": "T", "container-title": "J"},
        {"id": "case", "type": "legal_case", "title": "A v. B", "container-title": "F.3d",
         "volume": "1", "page": "2"},
        {"id": "web", "type": "webpage"},
        {"id": "named", "type": "book", "title": "D", "author": [{"given": "Only"}]},
    ]
    issues = validate_items(raw, origin="lib.json")
    paths = {i.path: i for i in issues}

    assert "items[0].id" in paths
    assert paths["items[2](dup).id"].message.startswith("Duplicate id")
    assert "items[3](bad id).id" in paths
    assert "items[4](art).volume" in paths
    assert "items[4](art).page" in paths
    assert paths["items[5](case).title-short"].fatal is False
    assert paths["items[6](web).type"].fatal is False
    assert "items[7](named).author[0]" in paths


def test_validate_rejects_non_array_root():
    (issue,) = validate_items("nope", origin="lib.json")
    assert issue.path == "lib.json"
    assert issue.fatal
