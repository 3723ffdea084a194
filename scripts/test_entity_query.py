from __future__ import annotations

import asyncio

from scripts.report_fixtures import ensure_project_root_on_path, make_store, utc

ensure_project_root_on_path()

from core.entity_query import EntityQuery  # noqa: E402
from core.errors import NotFound  # noqa: E402
from core.types_report import LogQuery, ReportFilter  # noqa: E402


def _query():
    store = make_store()
    return EntityQuery(projects=store, wallets=store, logs=store), store


def test_addresses_are_case_insensitive() -> None:
    q, _ = _query()
    flt = ReportFilter(label="wallet_report", wallet_addresses=["0xaa", "0XBB", "0xnope"])
    wallets = asyncio.run(q.resolve_wallets(flt))
    assert sorted(w.address for w in wallets) == ["0xAA", "0xBb"]


def test_address_list_wins_over_project() -> None:
    q, _ = _query()
    flt = ReportFilter(label="x", project_name="Beta", wallet_addresses=["0xaa"])
    wallets = asyncio.run(q.resolve_wallets(flt))
    assert [w.address for w in wallets] == ["0xAA"]


def test_project_wallets_by_membership() -> None:
    q, _ = _query()
    wallets = asyncio.run(q.resolve_wallets(ReportFilter(label="x", project_name="Alpha")))
    assert [w.address for w in wallets] == ["0xAA", "0xBb", "0xDD"]


def test_no_scope_means_no_wallets() -> None:
    q, _ = _query()
    assert asyncio.run(q.resolve_wallets(ReportFilter(label="full_report"))) == []


def test_unknown_project_raises_not_found() -> None:
    q, _ = _query()
    for coro in (
        q.resolve_wallets(ReportFilter(label="x", project_name="Gamma")),
        q.resolve_logs(ReportFilter(label="x", project_name="Gamma")),
    ):
        try:
            asyncio.run(coro)
        except NotFound as e:
            assert e.name == "Gamma"
        else:
            raise AssertionError("NotFound expected")


def test_logs_unbounded_when_no_dates() -> None:
    q, store = _query()
    logs = asyncio.run(q.resolve_logs(ReportFilter(label="full_report")))
    assert len(logs) == 4
    assert store.log_queries[-1] == LogQuery()
    # newest first
    assert [e.date for e in logs] == sorted((e.date for e in logs), reverse=True)


def test_logs_project_and_date_bounds() -> None:
    q, store = _query()
    flt = ReportFilter(
        label="project_report",
        project_name="Alpha",
        start_date=utc(2024, 1, 1),
        end_date=utc(2024, 12, 31, 23, 59, 59),
    )
    logs = asyncio.run(q.resolve_logs(flt))
    assert [e.action for e in logs] == ["swap", "claim"]
    assert store.log_queries[-1].project_name == "Alpha"


def test_logs_ignore_wallet_list() -> None:
    q, _ = _query()
    flt = ReportFilter(label="wallet_report", wallet_addresses=["0xcc"], start_date=utc(2025, 1, 1))
    logs = asyncio.run(q.resolve_logs(flt))
    assert [e.message for e in logs] == ["late"]


def main() -> None:
    for name, fn in sorted(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
            print(f"ok  {name}")
    print("OK: entity query")


if __name__ == "__main__":
    main()
