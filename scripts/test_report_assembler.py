"""
scripts/test_report_assembler.py — сборка таблиц и запись xlsx.

Run:
    python -m scripts.test_report_assembler
"""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

from openpyxl import load_workbook

from scripts.report_fixtures import RecordingSink, ensure_project_root_on_path, make_store, utc

ensure_project_root_on_path()

from core.entity_query import EntityQuery  # noqa: E402
from core.errors import ExportFailure, NoData, NotFound  # noqa: E402
from core.report_assembler import LOG_HEADERS, ReportAssembler  # noqa: E402
from core.types_report import ProjectMembership, ReportFilter, Wallet  # noqa: E402
from tools.reports.export_xlsx import XlsxReportSink  # noqa: E402

NOW = utc(2024, 7, 1, 14, 5, 9)


def _assembler(sink, store=None) -> ReportAssembler:
    store = store or make_store()
    query = EntityQuery(projects=store, wallets=store, logs=store)
    return ReportAssembler(query, sink, clock=lambda: NOW)


def test_project_tables() -> None:
    sink = RecordingSink()
    flt = ReportFilter(label="project_report", project_name="Alpha")
    tables = asyncio.run(_assembler(sink).build_tables(flt))

    assert tables.info[0] == ["Report type: project_report"]
    assert tables.info[1] == ["Project: Alpha"]
    assert tables.info[2] == ["Start Date: "]
    assert tables.info[-1] == ["Generated: 01.07.24 14:05:09"]

    assert tables.metrics[0] == ["Index", "Wallet", "Points", "Rank"]
    assert len(tables.metrics) == 3

    assert tables.logs[0] == LOG_HEADERS
    assert tables.logs[1] == [1, "0xAA", "Alpha", "01.02.25", "00:00:00", "WARN", "claim", "late", ""]
    assert tables.logs[2][3:5] == ["15.06.24", "12:30:05"]
    assert tables.logs[2][-1] == "Traceback: boom"


def test_metrics_follow_project_id_not_stale_name() -> None:
    store = make_store()
    store.wallets.append(
        Wallet(address="0xEE", index=5, projects=[ProjectMembership("p1", "Alpha-old", metrics={"points": 99})])
    )
    flt = ReportFilter(label="project_report", project_name="Alpha")
    tables = asyncio.run(_assembler(RecordingSink(), store).build_tables(flt))
    assert [r[1] for r in tables.metrics[1:]] == ["0xAA", "0xBb", "0xEE"]


def test_full_report_has_no_metrics() -> None:
    flt = ReportFilter(label="full_report", start_date=utc(2024, 1, 1), end_date=utc(2024, 3, 31, 23, 59, 59))
    tables = asyncio.run(_assembler(RecordingSink()).build_tables(flt))
    assert tables.metrics is None
    assert [r[6] for r in tables.logs[1:]] == ["bridge", "claim"]
    assert tables.info[2] == ["Start Date: 01.01.24 00:00:00"]
    assert tables.info[3] == ["End Date: 31.03.24 23:59:59"]


def test_wallet_report_info_counts() -> None:
    flt = ReportFilter(label="wallet_report", wallet_addresses=["0xaa", "0xzz"])
    tables = asyncio.run(_assembler(RecordingSink()).build_tables(flt))
    assert ["Wallets: 2 requested, 1 found"] in tables.info


def test_no_logs_is_no_data_and_nothing_written() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        sink = XlsxReportSink(Path(tmp) / "reports", clock=lambda: NOW)
        flt = ReportFilter(label="project_report", project_name="Beta", start_date=utc(2030, 1, 1))
        try:
            asyncio.run(_assembler(sink).build_report(flt))
        except NoData:
            pass
        else:
            raise AssertionError("NoData expected")
        reports = Path(tmp) / "reports"
        assert not reports.exists() or list(reports.iterdir()) == []


def test_unknown_project_is_not_found() -> None:
    sink = RecordingSink()
    try:
        asyncio.run(_assembler(sink).build_report(ReportFilter(label="project_report", project_name="Nope")))
    except NotFound:
        pass
    else:
        raise AssertionError("NotFound expected")
    assert sink.calls == []


def test_sink_error_becomes_export_failure() -> None:
    try:
        asyncio.run(_assembler(RecordingSink(fail=True)).build_report(ReportFilter(label="full_report")))
    except ExportFailure as e:
        assert "disk full" in str(e)
    else:
        raise AssertionError("ExportFailure expected")


def test_workbook_sheets_and_file_name() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        sink = XlsxReportSink(Path(tmp), clock=lambda: NOW)
        path = asyncio.run(
            _assembler(sink).build_report(ReportFilter(label="project_report", project_name="Alpha"))
        )
        assert path.name == "project_report_14-05-09_01.07.24.xlsx"
        assert path.parent == Path(tmp)

        wb = load_workbook(path)
        assert wb.sheetnames == ["Info", "Metrics", "Logs"]
        assert wb["Info"]["A1"].value == "Report type: project_report"
        assert [c.value for c in wb["Metrics"][1]] == ["Index", "Wallet", "Points", "Rank"]
        assert [c.value for c in wb["Logs"][1]] == LOG_HEADERS
        assert wb["Logs"]["H2"].value == "late"
        assert wb["Logs"].max_row == 4
        assert wb["Logs"]["A1"].font.bold


def test_workbook_without_metrics() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        sink = XlsxReportSink(Path(tmp), clock=lambda: NOW)
        path = asyncio.run(_assembler(sink).build_report(ReportFilter(label="full_report")))
        assert load_workbook(path).sheetnames == ["Info", "Logs"]


def main() -> None:
    for name, fn in sorted(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
            print(f"ok  {name}")
    print("OK: report assembler")


if __name__ == "__main__":
    main()
