"""tbl(1) block handler: turns a ``.TS`` ... ``.TE`` region into HTML.

A table block has two parts.  The header holds option lines (ending in
``;``) and format lines; the last format line ends with ``.``.  Every line
after that up to ``.TE`` is a data row, with fields separated by a tab or
by the character given in ``tab(x)``.

Column format codes are parsed but not applied to the output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from man2html.escapes import expand_text
from man2html.parser import CONTROL_CHARS

if TYPE_CHECKING:
    from man2html.parser import LineSource

_TAB_OPTION_RE = re.compile(r"\btab\s*\((.)\)", re.IGNORECASE)
_CENTER_OPTION_RE = re.compile(r"\bcent(?:er|re)\b", re.IGNORECASE)
_COLUMN_CODE_RE = re.compile(r"[lrcnas^_=][^lrcnas^_=]*")
_RULE_LINES = frozenset({"_", "=", "|"})


@dataclass
class TableSpec:
    """Layout read from a table header."""

    formats: list[list[str]] = field(default_factory=list)
    center: bool = False
    separator: str = "\t"

    def format_for_row(self, row_idx: int) -> list[str]:
        """Format row used by body row *row_idx*; the last one repeats."""
        if not self.formats:
            return []
        return self.formats[min(row_idx, len(self.formats) - 1)]

    def is_header_row(self, row_idx: int) -> bool:
        return row_idx < len(self.formats) - 1


def parse_format_line(line: str) -> list[list[str]]:
    """Split one format line into its rows of column codes.

    ``"c s, l l."`` gives ``[["c", "s"], ["l", "l"]]``.
    """
    rows: list[list[str]] = []
    for chunk in line.rstrip(".").split(","):
        compact = re.sub(r"[\s|]+", "", chunk.lower())
        if compact:
            rows.append(_COLUMN_CODE_RE.findall(compact))
    return rows


def _is_table_end(line: str) -> bool:
    return line[:1] in CONTROL_CHARS and line[1:].lstrip().startswith("TE")


class TableHandler:
    """Reads a table block from a line source and renders it."""

    def parse_header(self, source: LineSource) -> TableSpec:
        """Consume option and format lines up to the one ending in ``.``.

        Running out of input ends the header early; the table is then
        rendered from whatever was read.
        """
        spec = TableSpec()
        while True:
            line = source.next_line()
            if line is None:
                break
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.endswith(";"):
                self._apply_options(spec, stripped)
                continue
            spec.formats.extend(parse_format_line(stripped))
            if stripped.endswith("."):
                break
        return spec

    def read_rows(self, source: LineSource, spec: TableSpec) -> list[list[str]]:
        """Consume data rows up to ``.TE`` (or the end of input)."""
        rows: list[list[str]] = []
        while True:
            line = source.next_line()
            if line is None or _is_table_end(line):
                break
            if line[:1] in CONTROL_CHARS or line.strip() in _RULE_LINES:
                continue
            rows.append([cell.strip() for cell in line.split(spec.separator)])
        return rows

    def render(self, source: LineSource) -> str:
        """Read a complete table block from *source* and return its HTML."""
        spec = self.parse_header(source)
        rows = self.read_rows(source, spec)
        return self.render_table(spec, rows)

    def render_table(self, spec: TableSpec, rows: list[list[str]]) -> str:
        parts = ['<table align="center">' if spec.center else "<table>"]
        for row_idx, cells in enumerate(rows):
            parts.append(self._render_row(spec, row_idx, cells))
        parts.append("</table>")
        return "".join(parts)

    def _render_row(self, spec: TableSpec, row_idx: int, cells: list[str]) -> str:
        tag = "th" if spec.is_header_row(row_idx) else "td"
        col_count = max(len(cells), len(spec.format_for_row(row_idx)))
        # Pad short rows with empty cells
        cells = cells + [""] * (col_count - len(cells))
        rendered = "".join(f"<{tag}>{expand_text(cell)}</{tag}>" for cell in cells)
        return f"<tr>{rendered}</tr>"

    def _apply_options(self, spec: TableSpec, line: str) -> None:
        if _CENTER_OPTION_RE.search(line):
            spec.center = True
        match = _TAB_OPTION_RE.search(line)
        if match:
            spec.separator = match.group(1)
