from __future__ import annotations

import json
import logging

import pytest

from app import cli as cli_mod
from app.cli import check_output_path, configure_logging, main, process_document
from app.json_output import SCHEMA_VERSION, build_json_payload
from app.render import build_summary_rows, render_plain_summary
from tests.helpers import doc

DOCUMENT = doc(
    "[@authorBookTitleTitle2021] at 3.",
    "[@authorBookTitleTitle2021] at 4.",
    "[?here] *See* [@PlaintiffDefendant1991].",
    "*Cf.* *supra* note [?here]; [@authorJournalArticleTitle2021] at 1001.",
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    while cli_mod._INSTALLED:
        h = cli_mod._INSTALLED.pop()
        root.removeHandler(h)
        h.close()
    root.setLevel(level)


@pytest.fixture
def document(tmp_path):
    p = tmp_path / "paper.md"
    p.write_text(DOCUMENT, encoding="utf-8")
    return p


def test_main_writes_processed_document_to_stdout(document, library_path, capsys):
    main([str(document), str(library_path)])
    out = capsys.readouterr().out
    assert out.startswith(
        "Sentence 1.^[**Book Author**, **Book Title: A Title for the Dummy Book** 3 "
        "(4th ed. 2021) [hereinafter **Author**, **Book Title**].]\n"
    )
    assert "Sentence 2.^[*Id.* at 4.]" in out
    assert "Sentence 4.^[*Cf.* *supra* note 3; " in out


def test_main_writes_output_file_with_offset_and_smallcaps(document, library_path, tmp_path):
    target = tmp_path / "out.md"
    main([str(document), str(library_path), str(target), "-f", "2", "-s", "-q"])
    text = target.read_text(encoding="utf-8")
    assert "*Cf.* *supra* note 5; " in text
    assert '{custom-style="True Small Caps"}' in text
    assert "**" not in text


def test_main_reports_resolution_errors_and_exits_2(tmp_path, library_path, capsys):
    bad = tmp_path / "bad.md"
    bad.write_text(doc("Fine.", "[@missingSource]."), encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main([str(bad), str(library_path), "-q"])

    assert exc.value.code == 2
    assert "error: Footnote 2: no source with id 'missingSource'" in capsys.readouterr().err


def test_main_refuses_to_overwrite_input(document, library_path):
    with pytest.raises(SystemExit) as exc:
        main([str(document), str(library_path), str(document)])
    assert "Refusing to overwrite" in str(exc.value.code)
    assert document.read_text(encoding="utf-8") == DOCUMENT


def test_force_overwrite_replaces_input(document, library_path):
    main([str(document), str(library_path), str(document), "-W", "-q"])
    assert "[@" not in document.read_text(encoding="utf-8")


def test_check_output_path(tmp_path):
    src = tmp_path / "a.md"
    src.write_text("x", encoding="utf-8")
    check_output_path(src, None, force=False)
    check_output_path(src, tmp_path / "b.md", force=False)
    check_output_path(src, src, force=True)
    with pytest.raises(SystemExit):
        check_output_path(src, tmp_path / "." / "a.md", force=False)


def test_main_requires_input_and_library(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2
    assert "input and library are required" in capsys.readouterr().err


def test_new_user_journals(tmp_path, capsys):
    target = tmp_path / "journals.json"
    main(["--new-user-journals", str(target)])
    assert json.loads(target.read_text(encoding="utf-8")) == {
        "Full Journal Name": "Abbreviated J. Name"
    }
    assert "Wrote" in capsys.readouterr().err

    with pytest.raises(SystemExit) as exc:
        main(["--new-user-journals", str(target)])
    assert "file already exists" in str(exc.value.code)


def test_user_journals_flag_overrides_fallback(tmp_path, library_path, capsys):
    table = tmp_path / "mine.json"
    table.write_text(json.dumps({"Journal of Journal Articles": "JJA"}), encoding="utf-8")
    src = tmp_path / "in.md"
    src.write_text(doc("[@dauthorTwoAuthorJournalArticle2021]."), encoding="utf-8")

    main([str(src), str(library_path), "-u", str(table), "-q"])

    assert "51 **JJA** 101 (2021)" in capsys.readouterr().out


def test_check_library(library_path, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--check-library", str(library_path)])
    assert exc.value.code == 0

    broken = tmp_path / "lib.json"
    broken.write_text(json.dumps([{"id": "x", "type": "legal_case", "title": "A v. B"}]), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--check-library", str(broken)])
    assert exc.value.code == 2
    assert "Missing required field" in capsys.readouterr().err


def test_json_report(document, library_path, tmp_path, capsys):
    report = tmp_path / "report.json"
    main([str(document), str(library_path), "--json", str(report), "-q"])
    capsys.readouterr()

    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["input"]["offset"] == 0
    assert payload["crossrefs"] == {"here": 3}
    assert [c["decision"]["kind"] for c in payload["citations"]] == [
        "full",
        "id",
        "long_case",
        "full",
    ]
    assert payload["citations"][0]["decision"]["hereinafter"] is True
    assert payload["sources"]["authorBookTitleTitle2021"] == {
        "first_footnote": 1,
        "footnotes": [1, 2],
    }
    assert payload["journal_notices"] == []


def test_json_payload_lists_journal_fallbacks(library, journals):
    result = process_document(doc("[@dauthorTwoAuthorJournalArticle2021]."), library, journals=journals)
    payload = build_json_payload(resolution=result.resolution, input_path="paper.md")
    assert payload["input"]["document"] == "paper.md"
    assert payload["journal_notices"] == [
        {"journal": "Journal of Journal Articles", "abbreviation": "J. J. Articles"}
    ]


def test_plain_summary(library, journals):
    result = process_document(DOCUMENT, library, journals=journals)
    lines = render_plain_summary(build_summary_rows(result.resolution), result.resolution.notices)
    assert lines[0].split() == ["1", "full", "authorBookTitleTitle2021"]
    assert lines[1].split() == ["2", "id.", "authorBookTitleTitle2021"]
    assert lines[2].split() == ["3", "full", "(case)", "PlaintiffDefendant1991"]


def test_summary_flag_prints_to_stderr(document, library_path, capsys):
    main([str(document), str(library_path), "--summary", "plain", "-q"])
    err = capsys.readouterr().err
    assert "authorJournalArticleTitle2021" in err


def test_configure_logging_replaces_its_own_handlers(tmp_path):
    from rich.logging import RichHandler

    configure_logging(2)
    configure_logging(3, debug_log=str(tmp_path / "debug.log"))

    root = logging.getLogger()
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert rich_handlers[0].level == logging.DEBUG
    assert root.level == logging.DEBUG

    logging.getLogger("supra.test").debug("hello from the test")
    for h in root.handlers:
        h.flush()
    assert "hello from the test" in (tmp_path / "debug.log").read_text(encoding="utf-8")
