from __future__ import annotations

import logging
from typing import List

from core.errors import NotFound
from core.stores import LogStore, ProjectDirectory, WalletStore
from core.types_report import LogEntry, LogQuery, Project, ReportFilter, Wallet

log = logging.getLogger(__name__)


class EntityQuery:
    """
    Scope resolution: ReportFilter -> wallets / log entries.

    A project name that does not exist raises NotFound; it is an operator
    error and must abort the report.
    """

    def __init__(self, projects: ProjectDirectory, wallets: WalletStore, logs: LogStore) -> None:
        self._projects = projects
        self._wallets = wallets
        self._logs = logs

    async def resolve_project(self, name: str) -> Project:
        project = await self._projects.find_by_name(name)
        if project is None:
            log.error("project %r not found", name)
            raise NotFound(name)
        return project

    async def resolve_wallets(self, flt: ReportFilter) -> List[Wallet]:
        log.info(
            "resolving wallets: project=%s wallets=%s",
            flt.project_name or "Not specified",
            len(flt.wallet_addresses) or "Not specified",
        )
        if flt.wallet_addresses:
            lowered = {a.strip().lower() for a in flt.wallet_addresses if a.strip()}
            return await self._wallets.find_by_addresses(lowered)
        if flt.project_name:
            project = await self.resolve_project(flt.project_name)
            return await self._wallets.find_by_project(project.project_id)
        return []

    async def wallets_in_project(self, project: Project) -> List[Wallet]:
        return await self._wallets.find_by_project(project.project_id)

    def log_query(self, flt: ReportFilter, project_name=None) -> LogQuery:
        return LogQuery(
            project_name=project_name,
            start_date=flt.start_date,
            end_date=flt.end_date,
        )

    async def resolve_logs(self, flt: ReportFilter) -> List[LogEntry]:
        project_name = None
        if flt.project_name:
            project_name = (await self.resolve_project(flt.project_name)).name
        query = self.log_query(flt, project_name)
        entries = await self._logs.find(query)
        log.info("logs received for project %s: %d", project_name or "-", len(entries))
        return entries
