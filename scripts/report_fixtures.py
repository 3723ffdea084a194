"""Shared in-memory data for the report sanity scripts."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Sequence, Tuple


def ensure_project_root_on_path() -> None:
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)


ensure_project_root_on_path()

from core.types_report import LogEntry, Project, ProjectMembership, Wallet  # noqa: E402
from runtime.memory_store import MemoryEntityStore  # noqa: E402


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_store() -> MemoryEntityStore:
    projects = [
        Project(project_id="p1", name="Alpha", wallet_ids=["w1", "w2", "w4"]),
        Project(project_id="p2", name="Beta", wallet_ids=["w3"]),
    ]
    wallets = [
        Wallet(
            address="0xAA",
            index=1,
            projects=[ProjectMembership("p1", "Alpha", metrics={"points": "10", "last_updated": "2024-01-01"})],
            balances={"ETH": {"balance": {"amount": 1.5}}},
        ),
        Wallet(
            address="0xBb",
            index=2,
            projects=[ProjectMembership("p1", "Alpha", metrics={"points": 5, "Rank": 3})],
        ),
        Wallet(
            address="0xCC",
            index=3,
            projects=[ProjectMembership("p2", "Beta", metrics={"volume": 100})],
        ),
        Wallet(
            address="0xDD",
            index=4,
            projects=[ProjectMembership("p1", "Alpha", metrics={})],
        ),
    ]
    logs = [
        LogEntry(date=utc(2024, 1, 1, 10, 0, 0), level="INFO", action="claim", message="ok",
                 wallet="0xAA", project_name="Alpha", index=1),
        LogEntry(date=utc(2024, 6, 15, 12, 30, 5), level="ERROR", action="swap", message="fail",
                 wallet="0xBb", project_name="Alpha", stack_trace="Traceback: boom", index=2),
        LogEntry(date=utc(2024, 3, 1, 8, 0, 0), level="INFO", action="bridge", message="done",
                 wallet="0xCC", project_name="Beta", index=3),
        LogEntry(date=utc(2025, 2, 1, 0, 0, 0), level="WARN", action="claim", message="late",
                 wallet="0xAA", project_name="Alpha", index=1),
    ]
    return MemoryEntityStore(projects=projects, wallets=wallets, logs=logs)


class RecordingSink:
    """DocumentSink that keeps the tables instead of writing a workbook."""

    def __init__(self, path: Path = Path("reports") / "fake.xlsx", fail: bool = False) -> None:
        self.path = path
        self.fail = fail
        self.calls: List[Tuple[object, str]] = []

    def write(self, tables, file_name_prefix, generated_at=None) -> Path:
        self.calls.append((tables, file_name_prefix))
        if self.fail:
            raise OSError("disk full")
        return self.path


class FakeTransport:
    """ChatTransport that records what would have been sent."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, int, object]] = []
        self.cleared: Dict[int, List[str]] = {}

    async def send_main_menu(self, chat_id: int) -> None:
        self.events.append(("menu", chat_id, None))

    async def send_text(self, chat_id: int, text: str) -> None:
        self.events.append(("text", chat_id, text))

    async def send_project_choice(self, chat_id: int, names: Sequence[str]) -> None:
        self.events.append(("projects", chat_id, list(names)))

    async def send_date_options(self, chat_id: int) -> None:
        self.events.append(("date_options", chat_id, None))

    async def send_date_prompt(self, chat_id: int) -> None:
        self.events.append(("date_prompt", chat_id, None))

    async def send_document(self, chat_id: int, path: Path) -> None:
        self.events.append(("document", chat_id, path))

    async def clear_prompts(self, chat_id: int, group: str) -> None:
        self.cleared.setdefault(chat_id, []).append(group)

    def kinds(self, chat_id: int) -> List[str]:
        return [k for k, c, _ in self.events if c == chat_id]

    def texts(self, chat_id: int) -> List[str]:
        return [str(p) for k, c, p in self.events if c == chat_id and k == "text"]
