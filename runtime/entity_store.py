from __future__ import annotations

"""
runtime/entity_store.py — file-backed wallets / projects / logs.

    <data_dir>/wallets.json    JSON array
    <data_dir>/projects.json   JSON array
    <data_dir>/logs.jsonl      one log entry per line, append-only

Every query re-reads the file in a worker thread, so data written by the
tracking side shows up in the next report without a restart. The report
flow only reads; writes are for import / seeding / retention.
"""

import asyncio
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from core.types_report import LogEntry, LogQuery, Project, Wallet
from runtime import entity_codec as codec
from runtime.json_files import append_jsonl, ensure_file, iter_jsonl, read_json_list, write_json_atomic
from runtime.memory_store import (
    distinct_project_names,
    match_logs,
    project_by_name,
    wallets_by_addresses,
    wallets_by_project,
)

logger = logging.getLogger("mongolog.entity_store")

DEFAULT_DATA_DIR = Path("runtime") / "data"
LOG_RETENTION_DAYS = 90


class JsonEntityStore:
    def __init__(self, data_dir: Path = DEFAULT_DATA_DIR) -> None:
        self.data_dir = Path(data_dir)
        self.wallets_path = self.data_dir / "wallets.json"
        self.projects_path = self.data_dir / "projects.json"
        self.logs_path = self.data_dir / "logs.jsonl"
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # bootstrap
    # ------------------------------------------------------------------ #

    def ensure_files(self) -> None:
        """Create missing data files [1/1]; idempotent."""
        created = [
            ensure_file(self.wallets_path, "[]\n"),
            ensure_file(self.projects_path, "[]\n"),
            ensure_file(self.logs_path, ""),
        ]
        logger.info("data files verified in %s (created %d)", self.data_dir, sum(created))

    # ------------------------------------------------------------------ #
    # sync loaders
    # ------------------------------------------------------------------ #

    def load_wallets(self) -> List[Wallet]:
        return [codec.wallet_from_dict(d) for d in read_json_list(self.wallets_path)]

    def load_projects(self) -> List[Project]:
        return [codec.project_from_dict(d) for d in read_json_list(self.projects_path)]

    def load_logs(self) -> List[LogEntry]:
        return [codec.log_from_dict(d) for d in iter_jsonl(self.logs_path)]

    # ------------------------------------------------------------------ #
    # async collaborator API
    # ------------------------------------------------------------------ #

    async def list_project_names(self) -> List[str]:
        logger.info("getting all project names")
        projects = await asyncio.to_thread(self.load_projects)
        return distinct_project_names(projects)

    async def find_by_name(self, name: str) -> Optional[Project]:
        projects = await asyncio.to_thread(self.load_projects)
        return project_by_name(projects, name)

    async def find_by_addresses(self, lowercased: Iterable[str]) -> List[Wallet]:
        wanted = list(lowercased)
        wallets = await asyncio.to_thread(self.load_wallets)
        return wallets_by_addresses(wallets, wanted)

    async def find_by_project(self, project_id: str) -> List[Wallet]:
        wallets = await asyncio.to_thread(self.load_wallets)
        return wallets_by_project(wallets, project_id)

    async def find(self, query: LogQuery) -> List[LogEntry]:
        def _run() -> List[LogEntry]:
            return match_logs(self.load_logs(), query)

        return await asyncio.to_thread(_run)

    # ------------------------------------------------------------------ #
    # writes (import / seed / retention)
    # ------------------------------------------------------------------ #

    def save_wallets(self, wallets: Iterable[Wallet]) -> None:
        with self._write_lock:
            write_json_atomic(self.wallets_path, [codec.wallet_to_dict(w) for w in wallets])

    def save_projects(self, projects: Iterable[Project]) -> None:
        with self._write_lock:
            write_json_atomic(self.projects_path, [codec.project_to_dict(p) for p in projects])

    def append_logs(self, entries: Iterable[LogEntry]) -> None:
        with self._write_lock:
            append_jsonl(self.logs_path, [codec.log_to_dict(e) for e in entries])

    def prune_logs(self, days: int = LOG_RETENTION_DAYS, now: Optional[datetime] = None) -> int:
        """Drop log lines older than `days`; undated lines are kept. Returns removed count."""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=int(days))
        with self._write_lock:
            kept = []
            removed = 0
            for raw in iter_jsonl(self.logs_path):
                ts = codec.parse_ts(raw.get("date"))
                if ts is not None and ts < cutoff:
                    removed += 1
                    continue
                kept.append(raw)
            if removed:
                write_json_atomic(self.logs_path, kept)
        logger.info("log retention: removed %d entries older than %d days", removed, days)
        return removed
