from __future__ import annotations

from dataclasses import dataclass

from core.config import BotConfig
from core.entity_query import EntityQuery
from core.filter_session import FilterSessionStore
from core.report_assembler import ReportAssembler
from core.report_flow import ChatTransport, ReportFlow
from runtime.entity_store import JsonEntityStore
from tools.reports.export_xlsx import XlsxReportSink


@dataclass
class ReportServices:
    store: JsonEntityStore
    sessions: FilterSessionStore
    assembler: ReportAssembler

    def make_flow(self, transport: ChatTransport) -> ReportFlow:
        return ReportFlow(self.sessions, self.assembler, transport)


def build_report_services(cfg: BotConfig) -> ReportServices:
    """Wire stores -> query -> assembler -> sink for one process."""
    tz = cfg.tz
    store = JsonEntityStore(cfg.data_dir)
    store.ensure_files()

    query = EntityQuery(projects=store, wallets=store, logs=store)
    sink = XlsxReportSink(cfg.reports_dir, tz=tz)
    return ReportServices(
        store=store,
        sessions=FilterSessionStore(store, tz=tz),
        assembler=ReportAssembler(query, sink, tz=tz),
    )
