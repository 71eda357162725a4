from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from core.models import JournalNotice, Resolution
from data.validate import LibraryIssue

# Text styles per decision kind
_KIND_STYLE = {
    "full": "bold green",
    "long_case": "bold green",
    "short": "cyan",
    "short_case": "cyan",
    "id": "magenta",
}

_KIND_LABEL = {
    "full": "full",
    "long_case": "full (case)",
    "short": "supra",
    "short_case": "short (case)",
    "id": "id.",
}


def _mk_console():
    """
    Reports go to stderr so stdout can carry the processed document.
    Keep this in one place so every report behaves identically.
    """
    from rich.console import Console

    return Console(stderr=True, highlight=False)


@dataclass(frozen=True)
class SummaryRow:
    footnote: int
    source_id: str
    kind: str
    text: str


def build_summary_rows(resolution: Resolution) -> list[SummaryRow]:
    return [
        SummaryRow(
            footnote=c.footnote,
            source_id=c.source_id,
            kind=str(c.decision.kind.value),
            text=c.text,
        )
        for c in resolution.citations
    ]


def render_plain_summary(
    rows: Iterable[SummaryRow], notices: Iterable[JournalNotice] = ()
) -> list[str]:
    lines: list[str] = []
    for r in rows:
        lines.append(f"{r.footnote:>4}  {_KIND_LABEL.get(r.kind, r.kind):<12}  {r.source_id}")
    notices = list(notices)
    if notices:
        lines.append("")
        lines.append("Journal abbreviations built from rules (check these):")
        for n in notices:
            lines.append(f"- {n.full_name} -> {n.abbreviation}")
    return lines


def render_rich_summary(
    rows: list[SummaryRow], notices: Iterable[JournalNotice] = ()
) -> None:
    from rich.table import Table
    from rich.text import Text

    console = _mk_console()

    table = Table(title="Citations", show_lines=False)
    table.add_column("Note", justify="right", no_wrap=True)
    table.add_column("Form", justify="center", no_wrap=True)
    table.add_column("Source", no_wrap=True)
    # Let the rendered citation wrap
    table.add_column("Rendered", overflow="fold", no_wrap=False)

    for r in rows:
        style = _KIND_STYLE.get(r.kind, "")
        table.add_row(
            str(r.footnote),
            Text(_KIND_LABEL.get(r.kind, r.kind), style=style),
            r.source_id,
            Text(r.text),
        )

    console.print(table)

    notices = list(notices)
    if notices:
        from rich.panel import Panel

        body = "\n".join(f"{n.full_name} -> {n.abbreviation}" for n in notices)
        console.print(
            Panel(body, title="Journal abbreviations built from rules", border_style="yellow", expand=False)
        )


def render_library_issues(issues: list[LibraryIssue], fmt: str = "plain") -> list[str]:
    """Print validation issues; rich mode draws a table, plain mode returns lines."""
    if fmt != "rich":
        return [
            f"{'ERROR' if i.fatal else 'WARN '} {i.path}: {i.message}" for i in issues
        ]

    from rich.table import Table
    from rich.text import Text

    console = _mk_console()
    if not issues:
        console.print(Text("Library OK", style="bold green"))
        return []

    table = Table(title="Library issues")
    table.add_column("Level", no_wrap=True)
    table.add_column("Where", overflow="fold")
    table.add_column("Problem", overflow="fold")
    for i in issues:
        level = Text("error", style="bold red") if i.fatal else Text("warn", style="yellow")
        table.add_row(level, i.path, i.message)
    console.print(table)
    return []
