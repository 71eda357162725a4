from __future__ import annotations

import logging

import pytest

from citations.journals import JournalResolver, abbreviate
from core.enums import JournalSource
from core.models import JournalNotice
from data.loaders import load_builtin_journals


def test_builtin_table_loads_known_journals():
    table = load_builtin_journals()
    assert table["Harvard Law Review"] == "Harv. L. Rev."
    assert len(table) > 300


def test_builtin_lookup():
    r = JournalResolver()
    got = r.resolve("Harvard Law Review")
    assert got.abbreviation == "Harv. L. Rev."
    assert got.source == JournalSource.builtin
    assert r.notices == []


def test_lookup_ignores_case_and_spacing():
    r = JournalResolver(builtin={"Yale Law Journal": "Yale L.J."})
    assert r.resolve("yale  law journal").abbreviation == "Yale L.J."


def test_user_table_wins_over_builtin():
    r = JournalResolver(
        user={"harvard law review": "HLR"},
        builtin={"Harvard Law Review": "Harv. L. Rev."},
    )
    got = r.resolve("Harvard Law Review")
    assert got == got.__class__("HLR", JournalSource.user)


def test_record_short_name_wins_over_tables():
    r = JournalResolver(user={"Journal of Things": "J. Things"})
    got = r.resolve("Journal of Things", override="J. Thingz")
    assert got.abbreviation == "J. Thingz"
    assert got.source == JournalSource.record


@pytest.mark.parametrize(
    "full, expected",
    [
        ("Journal of Journal Articles", "J. J. Articles"),
        ("The Other Journal of Journal Articles", "The Other J. J. Articles"),
        ("University of Manuscripts Law Review", "U. Manuscripts L. Rev."),
    ],
)
def test_abbreviate_rules(full, expected):
    assert abbreviate(full) == expected


def test_fallback_warns_once_and_records_notice(caplog):
    r = JournalResolver(builtin={})

    with caplog.at_level(logging.WARNING, logger="citations.journals"):
        first = r.resolve("Journal of Journal Articles")
        second = r.resolve("Journal of Journal Articles")

    assert first == second
    assert first.source == JournalSource.fallback
    assert r.notices == [JournalNotice("Journal of Journal Articles", "J. J. Articles")]
    warnings = [rec for rec in caplog.records if "No abbreviation found" in rec.getMessage()]
    assert len(warnings) == 1
