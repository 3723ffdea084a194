"""Build a report without the chat.

    python -m scripts.build_report --kind project --project Alpha --dates "01.01.24 - 31.12.24"
    python -m scripts.build_report --kind wallet --wallets 0xAA,0xbb
    python -m scripts.build_report --prune 90

Uses the same stores / assembler / xlsx writer as the bot (DATA_DIR,
REPORTS_DIR, REPORT_TZ from the environment or .env).
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional


def _ensure_project_root_on_path() -> None:
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)


def _read_wallets(arg: str) -> List[str]:
    p = Path(arg)
    text = p.read_text(encoding="utf-8") if p.is_file() else arg.replace(",", "\n")
    from core.filter_session import split_wallet_lines

    return split_wallet_lines(text)


def main(argv: Optional[List[str]] = None) -> int:
    _ensure_project_root_on_path()

    from core.config import BotConfig
    from core.date_range import parse_date_range
    from core.errors import ReportError
    from core.types_report import DateRange, ReportFilter, ReportKind
    from tools.env_force_load import ensure_env_loaded
    from tools.log_setup import setup_logging
    from tools.runtime_bootstrap import build_report_services

    parser = argparse.ArgumentParser(description="Build an XLSX log report")
    parser.add_argument("--kind", choices=["full", "wallet", "project"], default="full")
    parser.add_argument("--project", help="project name (project report)")
    parser.add_argument("--wallets", help="comma-separated addresses or a file with one per line")
    parser.add_argument("--dates", help='range "DD.MM.YY - DD.MM.YY", either side may be blank')
    parser.add_argument("--prune", type=int, metavar="DAYS", help="drop logs older than DAYS and exit")
    args = parser.parse_args(argv)

    ensure_env_loaded()
    cfg = BotConfig.from_env()
    setup_logging(cfg.log_level)
    services = build_report_services(cfg)

    if args.prune is not None:
        removed = services.store.prune_logs(days=args.prune)
        print(f"pruned: {removed}")
        return 0

    dr = DateRange()
    if args.dates:
        dr = parse_date_range(args.dates, cfg.tz)
        if dr.is_empty:
            print("Invalid date format. Use DD.MM.YY - DD.MM.YY", file=sys.stderr)
            return 2

    kind = {"full": ReportKind.FULL, "wallet": ReportKind.WALLET, "project": ReportKind.PROJECT}[args.kind]
    flt = ReportFilter(
        label=kind.value,
        project_name=args.project or None,
        wallet_addresses=_read_wallets(args.wallets) if args.wallets else [],
        start_date=dr.start,
        end_date=dr.end,
    )

    try:
        path = asyncio.run(services.assembler.build_report(flt))
    except ReportError as e:
        print(e.user_message, file=sys.stderr)
        return 1
    print(f"XLSX exported to: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
