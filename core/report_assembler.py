from __future__ import annotations

"""
core/report_assembler.py — сборка отчёта.

ReportFilter -> (Info, Metrics?, Logs) -> DocumentSink.

Read-only: only queries the stores; the single write is the workbook the
sink produces. An empty logs table is NoData, never an empty file.
"""

import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Callable, List, Optional

from core.entity_query import EntityQuery
from core.errors import ExportFailure, NoData, ReportError
from core.metrics_aggregator import aggregate_metrics
from core.stores import DocumentSink
from core.types_report import LogEntry, ReportFilter, ReportTables, Row
from tools.formatting import fmt_date_time, fmt_stamp

log = logging.getLogger(__name__)

LOG_HEADERS = ["Index", "Wallet", "Project", "Date", "Time", "Level", "Action", "Message", "Stack Trace"]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportAssembler:
    def __init__(
        self,
        query: EntityQuery,
        sink: DocumentSink,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._query = query
        self._sink = sink
        self._tz = tz
        self._clock = clock

    # ------------------------------------------------------------------ #
    # tables
    # ------------------------------------------------------------------ #

    def _log_rows(self, entries: List[LogEntry]) -> List[Row]:
        rows: List[Row] = [list(LOG_HEADERS)]
        for e in entries:
            date_str, time_str = fmt_date_time(e.date, self._tz)
            rows.append([
                "" if e.index is None else e.index,
                e.wallet or "",
                e.project_name or "",
                date_str,
                time_str,
                e.level or "",
                e.action or "",
                e.message or "",
                e.stack_trace or "",
            ])
        return rows

    def _info_rows(self, flt: ReportFilter, generated_at: datetime, wallets_found: Optional[int]) -> List[Row]:
        rows: List[Row] = [
            [f"Report type: {flt.label}"],
            [f"Project: {flt.project_name or ''}"],
            [f"Start Date: {fmt_stamp(flt.start_date, self._tz)}"],
            [f"End Date: {fmt_stamp(flt.end_date, self._tz)}"],
        ]
        if flt.wallet_addresses:
            rows.append([f"Wallets: {len(flt.wallet_addresses)} requested, {wallets_found or 0} found"])
        rows.append([f"Generated: {fmt_stamp(generated_at, self._tz)}"])
        return rows

    async def build_tables(self, flt: ReportFilter, generated_at: Optional[datetime] = None) -> ReportTables:
        entries = await self._query.resolve_logs(flt)
        if not entries:
            log.warning("no logs were found for the specified filters: %s", flt.to_dict())
            raise NoData("no log rows in scope")

        wallets_found = None
        if flt.wallet_addresses:
            wallets_found = len(await self._query.resolve_wallets(flt))

        metrics = None
        if flt.project_name:
            project = await self._query.resolve_project(flt.project_name)
            wallets = await self._query.wallets_in_project(project)
            metrics = aggregate_metrics(project, wallets).to_rows()

        return ReportTables(
            info=self._info_rows(flt, generated_at or self._clock(), wallets_found),
            metrics=metrics,
            logs=self._log_rows(entries),
        )

    # ------------------------------------------------------------------ #
    # public
    # ------------------------------------------------------------------ #

    async def build_report(self, flt: ReportFilter) -> Path:
        log.info("start report generation for project: %s", flt.project_name or "-")
        generated_at = self._clock()
        try:
            tables = await self.build_tables(flt, generated_at)
            path = self._sink.write(tables, flt.label, generated_at=generated_at)
        except ReportError:
            raise
        except Exception as e:
            log.exception("error generating report for project %s", flt.project_name or "-")
            raise ExportFailure(str(e)) from e
        log.info("report generated successfully: %s", path)
        return path
