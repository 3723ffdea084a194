import asyncio
import logging

from bot.tg_bot import run_bot
from core.config import BotConfig
from tools.env_force_load import ensure_env_loaded
from tools.log_setup import setup_logging
from tools.runtime_bootstrap import build_report_services

log = logging.getLogger("mongolog.main")


def main() -> int:
    ensure_env_loaded()
    cfg = BotConfig.from_env()
    setup_logging(cfg.log_level)

    services = build_report_services(cfg)
    try:
        asyncio.run(run_bot(services.make_flow, cfg))
    except KeyboardInterrupt:
        log.info("bot stopped by user")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
