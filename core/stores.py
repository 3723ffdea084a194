from __future__ import annotations

"""
Collaborator interfaces the report core talks to.

Implementations live in runtime/ (JSON files, memory) and xlsx export in
tools/reports/. All reads are async; report assembly never writes entities.
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from core.types_report import LogEntry, LogQuery, Project, ReportTables, Wallet


class ProjectDirectory(Protocol):
    async def list_project_names(self) -> Sequence[str]:
        ...

    async def find_by_name(self, name: str) -> Optional[Project]:
        ...


class WalletStore(Protocol):
    async def find_by_addresses(self, lowercased: Iterable[str]) -> List[Wallet]:
        ...

    async def find_by_project(self, project_id: str) -> List[Wallet]:
        ...


class LogStore(Protocol):
    async def find(self, query: LogQuery) -> List[LogEntry]:
        """Matching entries, newest first."""
        ...


class DocumentSink(Protocol):
    def write(
        self,
        tables: ReportTables,
        file_name_prefix: str,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        """Persist tables as one document; raises on failure."""
        ...
