"""Render a Report as a single static HTML page with sortable, searchable tables."""

import html
import os
import tempfile
from datetime import datetime
from pathlib import Path
from urllib.parse import quote

from issuedash.models import DashboardConfig, IssueRow, Label, Report

_API_REPO_PREFIX = "https://api.github.com/repos/"

_COLUMNS = ("Repository", "Issue", "Labels", "Comments", "Created", "Updated")

_STYLE = """\
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif; margin: 2rem; }
table { border-collapse: collapse; width: 100%; margin-bottom: 2.5rem; }
th, td { padding: 0.35rem 0.6rem; border-bottom: 1px solid #d0d7de; text-align: left; vertical-align: top; }
th { cursor: pointer; user-select: none; background: #f6f8fa; }
.label { display: inline-block; padding: 0 0.5rem; margin: 0 0.2rem 0.2rem 0; border-radius: 1rem;
         font-size: 0.8rem; line-height: 1.4rem; text-decoration: none; }
.search { margin-bottom: 0.5rem; padding: 0.3rem; width: 20rem; }
.empty { color: #57606a; font-style: italic; }
"""

# Click a header to sort by that column, type in the box above a table to filter its rows.
_SCRIPT = """\
document.querySelectorAll("table.issues").forEach(function (table) {
  var body = table.tBodies[0];
  table.querySelectorAll("th").forEach(function (th, col) {
    var ascending = false;
    th.addEventListener("click", function () {
      ascending = !ascending;
      var rows = Array.prototype.slice.call(body.rows);
      rows.sort(function (a, b) {
        var x = a.cells[col].dataset.sort, y = b.cells[col].dataset.sort;
        var cmp = isNaN(x) || isNaN(y) ? x.localeCompare(y) : Number(x) - Number(y);
        return ascending ? cmp : -cmp;
      });
      rows.forEach(function (row) { body.appendChild(row); });
    });
  });
  var search = document.getElementById(table.id + "-search");
  search.addEventListener("input", function () {
    var needle = search.value.toLowerCase();
    Array.prototype.forEach.call(body.rows, function (row) {
      row.style.display = row.textContent.toLowerCase().indexOf(needle) === -1 ? "none" : "";
    });
  });
});
"""


def short_repository(repository_url: str) -> str:
    """https://api.github.com/repos/owner/name → owner/name"""
    return repository_url.removeprefix(_API_REPO_PREFIX)


def text_color(background: str) -> str:
    """Black or white, whichever contrasts better with a hex background (WCAG relative luminance)."""
    channels = []
    for i in (0, 2, 4):
        c = int(background[i : i + 2], 16) / 255
        channels.append(c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4)
    r, g, b = channels
    luminance = 0.2126 * r + 0.7152 * g + 0.0722 * b
    # Contrast against black beats contrast against white above ~0.179.
    return "#000000" if luminance > 0.179 else "#ffffff"


def sort_rows(rows: list[IssueRow]) -> list[IssueRow]:
    """Most recently updated first."""
    return sorted(rows, key=lambda row: row.updated_at, reverse=True)


def _label_chip(label: Label, repo: str) -> str:
    href = f"https://github.com/{repo}/labels/{quote(label.name, safe='')}"
    return (
        f'<a class="label" href="{html.escape(href)}" '
        f'style="background:#{label.color};color:{text_color(label.color)}">{html.escape(label.name)}</a>'
    )


def _cell(content: str, sort_key: str) -> str:
    return f'<td data-sort="{html.escape(sort_key)}">{content}</td>'


def _row(row: IssueRow) -> str:
    repo = short_repository(row.repository)
    cells = [
        _cell(f'<a href="https://github.com/{html.escape(repo)}">{html.escape(repo)}</a>', repo),
        _cell(f'<a href="{html.escape(row.url)}">{html.escape(row.title)}</a>', row.title),
        _cell("".join(_label_chip(label, repo) for label in row.labels), " ".join(label.name for label in row.labels)),
        _cell(str(row.comments), str(row.comments)),
        _cell(row.created_at[:10], row.created_at),
        _cell(row.updated_at[:10], row.updated_at),
    ]
    return "<tr>" + "".join(cells) + "</tr>"


def render_table(table_id: str, heading: str, rows: list[IssueRow]) -> str:
    parts = [f"<h2>{html.escape(heading, quote=False)} ({len(rows)})</h2>"]
    if not rows:
        parts.append('<p class="empty">No open issues.</p>')
        return "\n".join(parts)
    parts.append(f'<input class="search" id="{table_id}-search" type="search" placeholder="Search">')
    parts.append(f'<table class="issues" id="{table_id}">')
    parts.append("<thead><tr>" + "".join(f"<th>{name}</th>" for name in _COLUMNS) + "</tr></thead>")
    parts.append("<tbody>")
    parts.extend(_row(row) for row in sort_rows(rows))
    parts.append("</tbody></table>")
    return "\n".join(parts)


def render_report(report: Report, config: DashboardConfig, generated_at: datetime, title: str = "Issue dashboard") -> str:
    orgs = ", ".join(config.orgs) or "none"
    sections = [
        render_table("personal", f"{config.user}'s repositories", report.personal_other),
        render_table("bots", "Dependency updates", report.personal_bot),
        render_table("orgs", f"Organizations ({orgs})", report.organizational),
    ]
    return "\n".join(
        [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{html.escape(title)}</title>",
            f"<style>\n{_STYLE}</style>",
            "</head>",
            "<body>",
            f"<h1>{html.escape(title)}</h1>",
            f"<p>Updated {generated_at.strftime('%Y-%m-%d %H:%M %Z').strip()}</p>",
            *sections,
            f"<script>\n{_SCRIPT}</script>",
            "</body>",
            "</html>",
            "",
        ]
    )


def write_report(content: str, path: Path) -> None:
    """Replace path with content; a reader never sees a half-written file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
