from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from core.types_report import LogEntry, LogQuery, Project, Wallet


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------- #
# pure query helpers (shared with JsonEntityStore)
# ---------------------------------------------------------------------- #

def distinct_project_names(projects: Iterable[Project]) -> List[str]:
    out: List[str] = []
    seen = set()
    for p in projects:
        if p.name and p.name not in seen:
            seen.add(p.name)
            out.append(p.name)
    return out


def project_by_name(projects: Iterable[Project], name: str) -> Optional[Project]:
    for p in projects:
        if p.name == name:
            return p
    return None


def wallets_by_addresses(wallets: Iterable[Wallet], lowercased: Iterable[str]) -> List[Wallet]:
    wanted = {a.lower() for a in lowercased}
    return [w for w in wallets if w.address_lower in wanted]


def wallets_by_project(wallets: Iterable[Wallet], project_id: str) -> List[Wallet]:
    return [w for w in wallets if any(m.project_id == project_id for m in w.projects)]


def match_logs(entries: Iterable[LogEntry], query: LogQuery) -> List[LogEntry]:
    start = _aware(query.start_date) if query.start_date else None
    end = _aware(query.end_date) if query.end_date else None

    out: List[LogEntry] = []
    for e in entries:
        if query.project_name and e.project_name != query.project_name:
            continue
        if start is not None or end is not None:
            if e.date is None:
                continue
            d = _aware(e.date)
            if start is not None and d < start:
                continue
            if end is not None and d > end:
                continue
        out.append(e)
    # newest first, undated at the bottom
    out.sort(key=lambda e: _aware(e.date) if e.date else _OLDEST, reverse=True)
    return out


class MemoryEntityStore:
    """ProjectDirectory + WalletStore + LogStore over plain lists."""

    def __init__(
        self,
        projects: Sequence[Project] = (),
        wallets: Sequence[Wallet] = (),
        logs: Sequence[LogEntry] = (),
    ) -> None:
        self.projects: List[Project] = list(projects)
        self.wallets: List[Wallet] = list(wallets)
        self.logs: List[LogEntry] = list(logs)
        self.log_queries: List[LogQuery] = []

    async def list_project_names(self) -> List[str]:
        return distinct_project_names(self.projects)

    async def find_by_name(self, name: str) -> Optional[Project]:
        return project_by_name(self.projects, name)

    async def find_by_addresses(self, lowercased: Iterable[str]) -> List[Wallet]:
        return wallets_by_addresses(self.wallets, lowercased)

    async def find_by_project(self, project_id: str) -> List[Wallet]:
        return wallets_by_project(self.wallets, project_id)

    async def find(self, query: LogQuery) -> List[LogEntry]:
        self.log_queries.append(query)
        return match_logs(self.logs, query)
