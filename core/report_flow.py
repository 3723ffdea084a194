from __future__ import annotations

"""
core/report_flow.py — chat-facing controller.

Transport events -> FilterSessionStore transitions -> prompts / report.

Ordering: every handler takes the per-user lock before its first await,
so one user's events run strictly in arrival order while different users
proceed concurrently.
"""

import logging
from pathlib import Path
from typing import Protocol, Sequence

from core.errors import ExportFailure, InvalidInput, ReportError
from core.filter_session import (
    CHOICE_FILTER_NO,
    CHOICE_FILTER_YES,
    CHOICE_GO_BACK,
    FilterSessionStore,
    StepReason,
    StepResult,
)
from core.report_assembler import ReportAssembler
from core.types_report import ReportFilter

log = logging.getLogger(__name__)

# prompt groups the transport tracks for later cleanup
PROMPT_MENU = "menu"
PROMPT_FILTER = "filter"

TEXT_ENTER_WALLETS = "💼 Enter wallets (one per line):"
TEXT_NO_PROJECTS = "No projects available"


class ChatTransport(Protocol):
    async def send_main_menu(self, chat_id: int) -> None: ...

    async def send_text(self, chat_id: int, text: str) -> None: ...

    async def send_project_choice(self, chat_id: int, names: Sequence[str]) -> None: ...

    async def send_date_options(self, chat_id: int) -> None: ...

    async def send_date_prompt(self, chat_id: int) -> None: ...

    async def send_document(self, chat_id: int, path: Path) -> None: ...

    async def clear_prompts(self, chat_id: int, group: str) -> None: ...


class ReportFlow:
    def __init__(self, sessions: FilterSessionStore, assembler: ReportAssembler, transport: ChatTransport) -> None:
        self.sessions = sessions
        self._assembler = assembler
        self._transport = transport

    # ------------------------------------------------------------------ #
    # events
    # ------------------------------------------------------------------ #

    async def on_start(self, chat_id: int) -> None:
        async with self.sessions.lock(chat_id):
            log.info("user %s started working with the bot", chat_id)
            await self._transport.clear_prompts(chat_id, PROMPT_MENU)
            await self._transport.clear_prompts(chat_id, PROMPT_FILTER)
            result = self.sessions.start_session(chat_id)
            await self._render(chat_id, result)

    async def on_selection(self, chat_id: int, choice: str) -> None:
        async with self.sessions.lock(chat_id):
            if choice in (CHOICE_FILTER_YES, CHOICE_FILTER_NO, CHOICE_GO_BACK):
                await self._transport.clear_prompts(chat_id, PROMPT_FILTER)
            if choice == CHOICE_GO_BACK:
                await self._transport.clear_prompts(chat_id, PROMPT_MENU)
            result = await self.sessions.submit_selection(chat_id, choice)
            await self._render(chat_id, result)

    async def on_text(self, chat_id: int, text: str) -> None:
        async with self.sessions.lock(chat_id):
            result = self.sessions.submit_text(chat_id, text)
            if result.reason == StepReason.DATE_DECISION:
                n = len(self.sessions.get(chat_id).wallet_addresses)
                await self._transport.send_text(chat_id, f"💼 {n} wallets received")
            await self._render(chat_id, result)

    # ------------------------------------------------------------------ #
    # internals
    # ------------------------------------------------------------------ #

    async def _render(self, chat_id: int, result: StepResult) -> None:
        t = self._transport
        reason = result.reason

        if reason == StepReason.COMPLETED and result.completed_filter is not None:
            await self._generate(chat_id, result.completed_filter)
        elif reason == StepReason.CHOOSE_REPORT_KIND:
            await t.send_main_menu(chat_id)
        elif reason == StepReason.ENTER_WALLETS:
            await t.send_text(chat_id, TEXT_ENTER_WALLETS)
        elif reason == StepReason.CHOOSE_PROJECT:
            await t.send_project_choice(chat_id, result.projects)
        elif reason == StepReason.DATE_DECISION:
            await t.send_date_options(chat_id)
        elif reason == StepReason.ENTER_DATES:
            await t.send_date_prompt(chat_id)
        elif reason == StepReason.INVALID_INPUT:
            await t.send_text(chat_id, InvalidInput.user_message)
        elif reason == StepReason.NO_PROJECTS:
            await t.send_text(chat_id, TEXT_NO_PROJECTS)
        # UNEXPECTED / IGNORED: nothing to say

    async def _generate(self, chat_id: int, flt: ReportFilter) -> None:
        try:
            path = await self._assembler.build_report(flt)
            await self._transport.send_document(chat_id, path)
            log.info("report sent to user %s", chat_id)
        except ReportError as e:
            log.warning("report for user %s failed: %s: %s", chat_id, type(e).__name__, e)
            await self._transport.send_text(chat_id, e.user_message)
        except Exception:
            log.exception("error delivering report to user %s", chat_id)
            await self._transport.send_text(chat_id, ExportFailure.user_message)
        finally:
            self.sessions.finish(chat_id)
        await self._transport.clear_prompts(chat_id, PROMPT_MENU)
        await self._transport.send_main_menu(chat_id)
