from __future__ import annotations

import logging
from collections.abc import Mapping

from core.constants import ABBREVIATIONS, GEOGRAPHY, INSTITUTIONS, MULTIWORD, REMOVALS
from core.enums import JournalSource
from core.models import JournalAbbreviation, JournalNotice
from data.loaders import load_builtin_journals

logger = logging.getLogger(__name__)


def abbreviate(full_name: str) -> str:
    """Rule-based abbreviation for journals missing from every table."""
    name = " ".join(full_name.split())

    for phrase, abbr in MULTIWORD.items():
        if phrase in name:
            name = name.replace(phrase, abbr)

    out: list[str] = []
    for raw in name.split():
        word = raw.rstrip(",:")
        if not word:
            continue
        if word in INSTITUTIONS:
            out.append(INSTITUTIONS[word])
        elif word in ABBREVIATIONS:
            out.append(ABBREVIATIONS[word])
        elif word in GEOGRAPHY:
            out.append(GEOGRAPHY[word])
        elif word in REMOVALS:
            continue
        else:
            out.append(word)

    return " ".join(out)


class JournalResolver:
    """
    Full journal name -> abbreviation.

    Lookup order: the record's own short name, the user table, the bundled
    table, then abbreviate(). Results are memoised so a name resolves the
    same way for the whole run, and each fallback is reported once.
    """

    def __init__(
        self,
        user: Mapping[str, str] | None = None,
        builtin: Mapping[str, str] | None = None,
    ):
        self._user = {k.strip().casefold(): v for k, v in (user or {}).items()}
        if builtin is None:
            builtin = load_builtin_journals()
        self._builtin = {k.strip().casefold(): v for k, v in builtin.items()}
        self._cache: dict[str, JournalAbbreviation] = {}
        self.notices: list[JournalNotice] = []

    def resolve(self, full_name: str, override: str | None = None) -> JournalAbbreviation:
        if override and override.strip():
            return JournalAbbreviation(override.strip(), JournalSource.record)

        name = " ".join((full_name or "").split())
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        key = name.casefold()
        if key in self._user:
            result = JournalAbbreviation(self._user[key], JournalSource.user)
        elif key in self._builtin:
            result = JournalAbbreviation(self._builtin[key], JournalSource.builtin)
        else:
            abbr = abbreviate(name)
            logger.warning("No abbreviation found for %r; using %r", name, abbr)
            self.notices.append(JournalNotice(full_name=name, abbreviation=abbr))
            result = JournalAbbreviation(abbr, JournalSource.fallback)

        self._cache[name] = result
        return result
