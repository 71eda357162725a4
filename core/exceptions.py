from __future__ import annotations

from dataclasses import dataclass


class SupraError(Exception):
    """Base exception for project-level, domain-specific errors."""


def _where(footnote: int | None) -> str:
    if footnote is None:
        return ""
    return f"Footnote {footnote}: "


@dataclass(frozen=True)
class LibraryLoadError(SupraError):
    """
    Raised when a library or journal table cannot be read or parsed.

    path: the file that failed to load
    reason: short human-readable description of the failure
    """

    path: str
    reason: str

    def __str__(self) -> str:
        return f"Could not load {self.path}: {self.reason}"


@dataclass(frozen=True)
class SourceNotFoundError(SupraError):
    source_id: str
    footnote: int | None = None

    def __str__(self) -> str:
        return f"{_where(self.footnote)}no source with id '{self.source_id}' in the library"


@dataclass(frozen=True)
class MalformedCitationTokenError(SupraError):
    """
    Raised by the footnote extractor.

    token: the offending markup, as written
    reason: what is wrong with it
    """

    token: str
    reason: str
    footnote: int | None = None

    def __str__(self) -> str:
        return f"{_where(self.footnote)}malformed citation token {self.token!r} ({self.reason})"


@dataclass(frozen=True)
class MissingRequiredFieldError(SupraError):
    source_id: str
    field: str
    footnote: int | None = None

    def __str__(self) -> str:
        return (
            f"{_where(self.footnote)}source '{self.source_id}' "
            f"is missing required field '{self.field}'"
        )


@dataclass(frozen=True)
class InvalidPinciteError(SupraError):
    pincite: str
    source_id: str
    footnote: int | None = None

    def __str__(self) -> str:
        return (
            f"{_where(self.footnote)}pincite {self.pincite!r} "
            f"for '{self.source_id}' has no location"
        )


@dataclass(frozen=True)
class DuplicateCrossRefIdError(SupraError):
    ref_id: str
    first_footnote: int
    footnote: int | None = None

    def __str__(self) -> str:
        return (
            f"{_where(self.footnote)}cross-reference id '{self.ref_id}' "
            f"is already anchored in footnote {self.first_footnote}"
        )


@dataclass(frozen=True)
class UnknownCrossRefIdError(SupraError):
    ref_id: str
    footnote: int | None = None

    def __str__(self) -> str:
        return f"{_where(self.footnote)}cross-reference id '{self.ref_id}' is never anchored"
