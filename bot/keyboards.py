from __future__ import annotations

import logging
from typing import List, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from core.filter_session import (
    CHOICE_FILTER_NO,
    CHOICE_FILTER_YES,
    CHOICE_GO_BACK,
    PROJECT_INDEX_PREFIX,
    PROJECT_PREFIX,
)
from core.types_report import ReportKind

log = logging.getLogger(__name__)

# Telegram limit for callback_data
CALLBACK_DATA_MAX_BYTES = 64


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="📊 Full Report", callback_data=ReportKind.FULL.value)],
            [
                InlineKeyboardButton(text="💼 Wallet Report", callback_data=ReportKind.WALLET.value),
                InlineKeyboardButton(text="📁 Project Report", callback_data=ReportKind.PROJECT.value),
            ],
        ]
    )


def date_options_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="✅ Yes", callback_data=CHOICE_FILTER_YES),
                InlineKeyboardButton(text="🚫 No", callback_data=CHOICE_FILTER_NO),
            ],
            [InlineKeyboardButton(text="⬅️ Back", callback_data=CHOICE_GO_BACK)],
        ]
    )


def project_keyboard(names: Sequence[str]) -> InlineKeyboardMarkup:
    rows: List[List[InlineKeyboardButton]] = []
    for i, name in enumerate(names):
        data = f"{PROJECT_PREFIX}{name}"
        if len(data.encode("utf-8")) > CALLBACK_DATA_MAX_BYTES:
            log.info("project name %r is too long for a button payload, using its position", name)
            data = f"{PROJECT_INDEX_PREFIX}{i}"
        rows.append([InlineKeyboardButton(text=name, callback_data=data)])
    return InlineKeyboardMarkup(inline_keyboard=rows)
