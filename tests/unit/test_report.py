from __future__ import annotations

from ipacheck.application.report import (
    HEADER_LABEL,
    column_widths,
    format_unit,
    render_check_rows,
    render_header,
    render_human,
    render_machine,
    render_replication_rows,
    render_row,
    render_rule,
)
from ipacheck.domain.checks import CHECKS_BY_NAME
from ipacheck.domain.models import (
    ERROR,
    AuditReport,
    CheckOutcome,
    ReplicationRecord,
    Server,
    Severity,
    Verdict,
)


def test_middle_column_grows_with_short_names(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    assert widths.middle == 9
    assert widths.columns == 3
    assert widths.total == 20 + 3 * 9 + 5


def test_middle_column_has_a_floor() -> None:
    widths = column_widths((Server("a.example.com"), Server("b.example.com")))
    assert widths.middle == 8


def test_header_lists_short_names(servers: tuple[Server, ...]) -> None:
    header = render_header(servers, column_widths(servers))
    assert header.startswith(HEADER_LABEL)
    assert header.split()[2:] == ["ipa01", "ipa02", "ipa03", "STATE"]
    assert header.index("ipa01") == 20
    assert header.index("ipa02") == 29


def test_row_columns_are_fixed_width(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    row = render_row("Active Users", ["42", "42", "42"], "OK", widths)
    assert row.split() == ["Active", "Users", "42", "42", "42", "OK"]
    assert row.index("OK") == 20 + 3 * 9


def test_long_cells_are_truncated(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    row = render_row("A very long check label here", ["1234567890123", "1", "1"], "OK", widths)
    assert row[19] == " "
    assert row.index("1234") == 20
    assert row.split()[-1] == "OK"


def test_rule_spans_every_column(servers: tuple[Server, ...]) -> None:
    rule = render_rule(column_widths(servers))
    assert set(rule) == {"="}
    assert len(rule) == 52


def test_format_unit_variants() -> None:
    assert format_unit(ERROR) == "ERROR"
    assert format_unit(7) == "7"
    assert format_unit("") == ""
    records = (ReplicationRecord("ipa02", "0"), ReplicationRecord("ipa03", "1"))
    assert format_unit(records) == "ipa02 0, ipa03 1"


def test_replication_rows_pad_missing_cells(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    units = [
        (ReplicationRecord("ipa02", "0"), ReplicationRecord("ipa03", "0")),
        (ReplicationRecord("ipa01", "0"),),
        ERROR,
    ]
    rows = render_replication_rows("Replication Status", units, widths)
    assert len(rows) == 2
    assert rows[0].split() == ["Replication", "Status", "ipa02", "0", "ipa01", "0", "ERROR"]
    assert rows[1].split() == ["ipa03", "0"]
    assert rows[1][:20].strip() == ""


def test_replication_without_agreements_keeps_one_row(servers: tuple[Server, ...]) -> None:
    rows = render_replication_rows("Replication Status", ["", "", ""], column_widths(servers))
    assert rows == ("Replication Status",)


def test_check_rows_use_verdict_state(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    check = CHECKS_BY_NAME["hosts"]
    values = {servers[0]: 10, servers[1]: ERROR, servers[2]: 10}
    (row,) = render_check_rows(check, values, Verdict.FAIL, widths)
    assert row.split() == ["Hosts", "10", "ERROR", "10", "FAIL"]


def _outcome(name: str, servers: tuple[Server, ...], verdict: Verdict | None) -> CheckOutcome:
    check = CHECKS_BY_NAME[name]
    values = {server: 1 for server in servers}
    return CheckOutcome(
        check=check,
        values=values,
        verdict=verdict,
        rows=render_check_rows(check, values, verdict, column_widths(servers)),
    )


def test_human_report_is_framed_by_rules(servers: tuple[Server, ...]) -> None:
    widths = column_widths(servers)
    report = AuditReport(
        servers=servers,
        outcomes=(_outcome("users", servers, Verdict.OK), _outcome("hosts", servers, Verdict.OK)),
    )
    lines = render_human(report, widths).splitlines()
    assert lines[0].startswith(HEADER_LABEL)
    assert lines[1] == lines[-1] == "=" * 52
    assert [line.split()[0] for line in lines[2:-1]] == ["Active", "Hosts"]


def test_machine_line_counts_contributing_checks(servers: tuple[Server, ...]) -> None:
    report = AuditReport(
        servers=servers,
        outcomes=(
            _outcome("users", servers, Verdict.OK),
            _outcome("hosts", servers, Verdict.FAIL),
            _outcome("replication", servers, None),
        ),
    )
    assert render_machine(report, Severity.WARNING) == "WARNING - 1/2 checks passed"
