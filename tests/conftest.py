from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path so tests can import `app`, `resolver`, etc.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FIXTURES = ROOT / "tests" / "fixtures"


@pytest.fixture(scope="session")
def library_path() -> Path:
    return FIXTURES / "library.json"


@pytest.fixture(scope="session")
def library(library_path):
    """The sample bibliography shared by the end-to-end tests."""
    from data.loaders import load_library

    return load_library(library_path)


@pytest.fixture
def journals():
    # Fresh per test: fallback notices accumulate on the resolver.
    from citations.journals import JournalResolver

    return JournalResolver()
