"""Fixed-width human report and one-line machine summary."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from ipacheck.domain.checks import Check
from ipacheck.domain.models import (
    ERROR,
    AuditReport,
    ComparableUnit,
    Server,
    Severity,
    Verdict,
)

FIRST_COLUMN_WIDTH: Final = 20
MIDDLE_COLUMN_MIN_WIDTH: Final = 8
LAST_COLUMN_WIDTH: Final = 5
MIDDLE_COLUMN_PADDING: Final = 4

HEADER_LABEL: Final = "FreeIPA servers:"
STATE_LABEL: Final = "STATE"
RULE_CHAR: Final = "="


@dataclass(frozen=True)
class ColumnWidths:
    first: int
    middle: int
    last: int
    columns: int

    @property
    def total(self) -> int:
        return self.first + self.columns * self.middle + self.last


def column_widths(
    servers: Sequence[Server],
    *,
    first: int = FIRST_COLUMN_WIDTH,
    middle_min: int = MIDDLE_COLUMN_MIN_WIDTH,
    last: int = LAST_COLUMN_WIDTH,
) -> ColumnWidths:
    longest = max((len(server.short_name) for server in servers), default=0)
    return ColumnWidths(
        first=first,
        middle=max(middle_min, longest + MIDDLE_COLUMN_PADDING),
        last=last,
        columns=len(servers),
    )


def _fit(text: str, width: int) -> str:
    # keep at least one space between columns
    if len(text) >= width:
        text = text[: max(width - 1, 0)]
    return text.ljust(width)


def format_unit(unit: ComparableUnit) -> str:
    if unit is ERROR:
        return "ERROR"
    if isinstance(unit, tuple):
        return ", ".join(str(record) for record in unit)
    return str(unit)


def render_row(label: str, cells: Sequence[str], state: str, widths: ColumnWidths) -> str:
    line = _fit(label, widths.first)
    line += "".join(_fit(cell, widths.middle) for cell in cells)
    line += state.ljust(widths.last)
    return line.rstrip()


def render_header(servers: Sequence[Server], widths: ColumnWidths) -> str:
    return render_row(HEADER_LABEL, [server.short_name for server in servers], STATE_LABEL, widths)


def render_rule(widths: ColumnWidths) -> str:
    return RULE_CHAR * widths.total


def _replication_cells(unit: ComparableUnit) -> list[str]:
    if unit is ERROR:
        return ["ERROR"]
    if isinstance(unit, tuple):
        return [str(record) for record in unit]
    if unit == "":
        return []
    return [str(unit)]


def render_replication_rows(
    label: str, units: Sequence[ComparableUnit], widths: ColumnWidths
) -> tuple[str, ...]:
    """One row per agreement, sized by the server with the most agreements."""

    columns = [_replication_cells(unit) for unit in units]
    height = max((len(cells) for cells in columns), default=0) or 1
    rows: list[str] = []
    for index in range(height):
        cells = [cells[index] if index < len(cells) else "" for cells in columns]
        rows.append(render_row(label if index == 0 else "", cells, "", widths))
    return tuple(rows)


def render_check_rows(
    check: Check,
    values: Mapping[Server, ComparableUnit],
    verdict: Verdict | None,
    widths: ColumnWidths,
) -> tuple[str, ...]:
    units = list(values.values())
    if not check.contributes:
        return render_replication_rows(check.label, units, widths)
    state = verdict.value if verdict is not None else ""
    return (render_row(check.label, [format_unit(unit) for unit in units], state, widths),)


def render_human(report: AuditReport, widths: ColumnWidths) -> str:
    rule = render_rule(widths)
    lines = [render_header(report.servers, widths), rule]
    for outcome in report.outcomes:
        lines.extend(outcome.rows)
    lines.append(rule)
    return "\n".join(lines)


def render_machine(report: AuditReport, severity: Severity) -> str:
    return f"{severity.value} - {report.passed}/{report.total} checks passed"


__all__ = [
    "ColumnWidths",
    "FIRST_COLUMN_WIDTH",
    "HEADER_LABEL",
    "LAST_COLUMN_WIDTH",
    "MIDDLE_COLUMN_MIN_WIDTH",
    "STATE_LABEL",
    "column_widths",
    "format_unit",
    "render_check_rows",
    "render_header",
    "render_human",
    "render_machine",
    "render_replication_rows",
    "render_row",
    "render_rule",
]
