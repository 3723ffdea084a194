"""
scripts/test_tg_bot.py — обработка нажатий кнопок без сети.

Run:
    python -m scripts.test_tg_bot
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from types import SimpleNamespace
from typing import List

from scripts.report_fixtures import ensure_project_root_on_path

ensure_project_root_on_path()

from bot.tg_bot import handle_callback  # noqa: E402
from core.config import BotConfig  # noqa: E402

CHAT = 7


def _cfg(*allowed: int) -> BotConfig:
    return BotConfig(
        bot_token="x",
        allowed_users=frozenset(allowed),
        reports_dir=Path("reports"),
        data_dir=Path("data"),
        tz_name="UTC",
        log_level="INFO",
    )


class _Journal:
    def __init__(self) -> None:
        self.steps: List[str] = []


class _Flow:
    def __init__(self, journal: _Journal) -> None:
        self.journal = journal

    async def on_selection(self, chat_id: int, choice: str) -> None:
        self.journal.steps.append(f"flow:{chat_id}:{choice}")


def _call(journal: _Journal, chat_id: int, data: str):
    async def answer() -> None:
        journal.steps.append("answer")

    return SimpleNamespace(message=SimpleNamespace(chat=SimpleNamespace(id=chat_id)), data=data, answer=answer)


def test_callback_is_answered_before_the_step_runs() -> None:
    journal = _Journal()
    asyncio.run(handle_callback(_call(journal, CHAT, "filter_no"), _Flow(journal), _cfg(CHAT)))
    assert journal.steps == ["answer", f"flow:{CHAT}:filter_no"]


def test_callback_from_unknown_chat_is_dropped() -> None:
    journal = _Journal()
    asyncio.run(handle_callback(_call(journal, 99, "filter_no"), _Flow(journal), _cfg(CHAT)))
    assert journal.steps == []


def main() -> None:
    for name, fn in sorted(globals().items()):
        if name.startswith("test_") and callable(fn):
            fn()
            print(f"ok  {name}")
    print("OK: telegram callbacks")


if __name__ == "__main__":
    main()
