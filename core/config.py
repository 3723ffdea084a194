from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import FrozenSet, List, Optional
from zoneinfo import ZoneInfo


def _csv(env: str) -> Optional[List[str]]:
    v = os.getenv(env)
    if not v:
        return None
    return [x.strip() for x in v.split(",") if x.strip()]


def _int_set(env: str) -> FrozenSet[int]:
    out = set()
    for item in _csv(env) or []:
        try:
            out.add(int(item))
        except ValueError:
            raise ValueError(f"{env}: {item!r} is not a chat id") from None
    return frozenset(out)


@dataclass(frozen=True)
class BotConfig:
    bot_token: str
    allowed_users: FrozenSet[int]

    reports_dir: Path
    data_dir: Path

    tz_name: str
    log_level: str

    @property
    def tz(self) -> tzinfo:
        return ZoneInfo(self.tz_name)

    def is_allowed(self, chat_id: int) -> bool:
        return int(chat_id) in self.allowed_users

    @classmethod
    def from_env(cls) -> "BotConfig":
        cfg = cls(
            bot_token=os.getenv("TG_BOT_TOKEN", "").strip(),
            allowed_users=_int_set("TG_ALLOWED_USERS"),

            reports_dir=Path(os.getenv("REPORTS_DIR") or "reports"),
            data_dir=Path(os.getenv("DATA_DIR") or os.path.join("runtime", "data")),

            tz_name=(os.getenv("REPORT_TZ") or "UTC").strip(),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        )
        # fail fast on a bad zone name
        cfg.tz
        return cfg
