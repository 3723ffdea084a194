from __future__ import annotations

"""
bot/tg_bot.py — Telegram transport (aiogram 3).

- static allow-list: chats not in TG_ALLOWED_USERS get one refusal and are
  otherwise ignored;
- menu / date-option messages are remembered per chat so ReportFlow can
  delete them when the step is over (best-effort).
"""

import logging
from pathlib import Path
from typing import Dict, List, Sequence

from aiogram import Bot, Dispatcher, F
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.types import CallbackQuery, FSInputFile, Message

from bot.keyboards import date_options_keyboard, main_menu_keyboard, project_keyboard
from core.config import BotConfig
from core.report_flow import PROMPT_FILTER, PROMPT_MENU, ReportFlow

log = logging.getLogger(__name__)

WELCOME_TEXT = (
    "👋 *Welcome!*\n\n"
    "ℹ️ I'm *MongoLog* — a bot for generating reports from the wallet/project logs.\n\n"
    "Choose a report type:"
)

DATE_PROMPT_TEXT = (
    "✍️ Enter dates in the format *DD\\.MM\\.YY* \\- *DD\\.MM\\.YY*\n"
    "\\(leave one date blank for an open range\\)\n\n"
    "❗️ _For example:_\n"
    "`01.01.24 \\- 31.12.24`\n"
    "`01.01.24 \\-`\n"
    "`\\- 01.01.24`"
)

ACCESS_DENIED_TEXT = "Sorry, you don't have access."


class TelegramTransport:
    """ChatTransport over an aiogram Bot."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot
        self._sent: Dict[int, Dict[str, List[int]]] = {}

    def _remember(self, chat_id: int, group: str, message: Message) -> None:
        self._sent.setdefault(chat_id, {}).setdefault(group, []).append(message.message_id)

    async def send_main_menu(self, chat_id: int) -> None:
        msg = await self._bot.send_message(
            chat_id, WELCOME_TEXT, parse_mode=ParseMode.MARKDOWN, reply_markup=main_menu_keyboard()
        )
        self._remember(chat_id, PROMPT_MENU, msg)

    async def send_text(self, chat_id: int, text: str) -> None:
        # plain text: project names and addresses may contain markdown symbols
        await self._bot.send_message(chat_id, text)

    async def send_project_choice(self, chat_id: int, names: Sequence[str]) -> None:
        await self._bot.send_message(chat_id, "📁 Select project:", reply_markup=project_keyboard(names))

    async def send_date_options(self, chat_id: int) -> None:
        msg = await self._bot.send_message(chat_id, "📆 Filter by date?", reply_markup=date_options_keyboard())
        self._remember(chat_id, PROMPT_FILTER, msg)

    async def send_date_prompt(self, chat_id: int) -> None:
        await self._bot.send_message(chat_id, DATE_PROMPT_TEXT, parse_mode=ParseMode.MARKDOWN_V2)

    async def send_document(self, chat_id: int, path: Path) -> None:
        await self._bot.send_document(chat_id, FSInputFile(path, filename=Path(path).name))

    async def clear_prompts(self, chat_id: int, group: str) -> None:
        ids = self._sent.get(chat_id, {}).pop(group, [])
        for message_id in ids:
            try:
                await self._bot.delete_message(chat_id, message_id)
            except TelegramAPIError as e:
                log.warning("failed to delete message %s: %s", message_id, e)


async def handle_callback(call: CallbackQuery, flow: ReportFlow, cfg: BotConfig) -> None:
    """Button press: acknowledge first, then run the step (may build a whole report)."""
    if call.message is None or not cfg.is_allowed(call.message.chat.id):
        return
    try:
        await call.answer()
    except TelegramAPIError as e:
        log.debug("callback answer failed: %s", e)
    await flow.on_selection(call.message.chat.id, call.data or "")


def build_dispatcher(flow: ReportFlow, cfg: BotConfig) -> Dispatcher:
    dp = Dispatcher()

    @dp.message(Command("start"))
    async def on_start(message: Message) -> None:
        chat_id = message.chat.id
        if not cfg.is_allowed(chat_id):
            log.warning("access denied for user %s", chat_id)
            await message.answer(ACCESS_DENIED_TEXT)
            return
        await flow.on_start(chat_id)

    @dp.callback_query()
    async def on_callback(call: CallbackQuery) -> None:
        await handle_callback(call, flow, cfg)

    @dp.message(F.text)
    async def on_text(message: Message) -> None:
        if not cfg.is_allowed(message.chat.id):
            return
        await flow.on_text(message.chat.id, message.text or "")

    return dp


async def run_bot(flow_factory, cfg: BotConfig) -> None:
    """flow_factory(transport) -> ReportFlow; polls until cancelled."""
    if not cfg.bot_token:
        raise RuntimeError("TG_BOT_TOKEN is not set")
    bot = Bot(token=cfg.bot_token)
    flow = flow_factory(TelegramTransport(bot))
    dp = build_dispatcher(flow, cfg)
    log.info("bot is ready to go, allowed users: %d", len(cfg.allowed_users))
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
