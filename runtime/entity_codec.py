from __future__ import annotations

"""
runtime/entity_codec.py — dict <-> entity conversion for the file stores.

Field names follow the collection dumps the bot was built around
(``addressLowCase``, ``project_name``, ``stack_trace``, ``_id``...), so a
mongoexport --jsonArray of wallets/projects and a JSON-lines dump of logs
load as-is. Extended-JSON dates ({"$date": ...}) and ids ({"$oid": ...})
are unwrapped.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.types_report import LogEntry, Project, ProjectMembership, Wallet


def _unwrap(value: Any, key: str) -> Any:
    if isinstance(value, dict) and key in value:
        return value[key]
    return value


def parse_ts(value: Any) -> Optional[datetime]:
    """ISO string, epoch seconds/ms or {"$date": ...} -> aware UTC datetime."""
    value = _unwrap(value, "$date")
    value = _unwrap(value, "$numberLong")
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        secs = float(value) / 1000.0 if abs(value) > 1e11 else float(value)
        return datetime.fromtimestamp(secs, tz=timezone.utc)
    s = str(value).strip()
    if s.isdigit():
        return parse_ts(int(s))
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def format_ts(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _str_id(value: Any) -> str:
    value = _unwrap(value, "$oid")
    return "" if value is None else str(value)


def _opt_int(value: Any) -> Optional[int]:
    value = _unwrap(value, "$numberInt")
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value)
    return s if s else None


# ---------------------------------------------------------------------- #
# wallets
# ---------------------------------------------------------------------- #

def membership_from_dict(d: Dict[str, Any]) -> ProjectMembership:
    metrics = d.get("metrics") or {}
    if not isinstance(metrics, dict):
        metrics = {}
    return ProjectMembership(
        project_id=_str_id(d.get("project_id")),
        project_name=str(d.get("project_name") or ""),
        added_at=parse_ts(d.get("added_at")),
        metrics=dict(metrics),
    )


def wallet_from_dict(d: Dict[str, Any]) -> Wallet:
    address = str(d.get("address") or "")
    balances = d.get("balances")
    return Wallet(
        address=address,
        address_lower=str(d.get("addressLowCase") or address.lower()),
        index=_opt_int(d.get("index")),
        projects=[membership_from_dict(p) for p in (d.get("projects") or []) if isinstance(p, dict)],
        # храним как есть, отчёт балансы не читает
        balances=balances if isinstance(balances, dict) else {},
    )


def wallet_to_dict(w: Wallet) -> Dict[str, Any]:
    return {
        "address": w.address,
        "addressLowCase": w.address_lower,
        "index": w.index,
        "projects": [
            {
                "project_id": m.project_id,
                "project_name": m.project_name,
                "added_at": format_ts(m.added_at),
                "metrics": dict(m.metrics),
            }
            for m in w.projects
        ],
        "balances": w.balances,
    }


# ---------------------------------------------------------------------- #
# projects / logs
# ---------------------------------------------------------------------- #

def project_from_dict(d: Dict[str, Any]) -> Project:
    return Project(
        project_id=_str_id(d.get("_id") if d.get("_id") is not None else d.get("project_id")),
        name=str(d.get("name") or ""),
        wallet_ids=[_str_id(x) for x in (d.get("wallet_ids") or [])],
        created_at=parse_ts(d.get("created_at")),
        updated_at=parse_ts(d.get("updated_at")),
    )


def project_to_dict(p: Project) -> Dict[str, Any]:
    return {
        "_id": p.project_id,
        "name": p.name,
        "wallet_ids": list(p.wallet_ids),
        "created_at": format_ts(p.created_at),
        "updated_at": format_ts(p.updated_at),
    }


def log_from_dict(d: Dict[str, Any]) -> LogEntry:
    return LogEntry(
        date=parse_ts(d.get("date")),
        level=str(d.get("level") or ""),
        action=str(d.get("action") or ""),
        message=str(d.get("message") or ""),
        wallet=_opt_str(d.get("wallet")),
        project_name=_opt_str(d.get("project_name")),
        stack_trace=_opt_str(d.get("stack_trace")),
        index=_opt_int(d.get("index")),
    )


def log_to_dict(e: LogEntry) -> Dict[str, Any]:
    return {
        "index": e.index,
        "wallet": e.wallet,
        "project_name": e.project_name,
        "level": e.level,
        "action": e.action,
        "message": e.message,
        "stack_trace": e.stack_trace,
        "date": format_ts(e.date),
    }
