from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ReportKind(str, Enum):
    FULL = "full_report"
    WALLET = "wallet_report"
    PROJECT = "project_report"


class SessionState(str, Enum):
    IDLE = "IDLE"
    AWAITING_REPORT_KIND = "AWAITING_REPORT_KIND"
    AWAITING_WALLET_LIST = "AWAITING_WALLET_LIST"
    AWAITING_PROJECT_CHOICE = "AWAITING_PROJECT_CHOICE"
    AWAITING_DATE_DECISION = "AWAITING_DATE_DECISION"
    AWAITING_DATE_RANGE = "AWAITING_DATE_RANGE"
    COMPLETE = "COMPLETE"


class Awaiting(str, Enum):
    """Which free-text input a session currently expects."""
    NONE = "none"
    WALLET_LIST = "wallet-list"
    DATE_RANGE = "date-range"


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None


@dataclass
class ProjectMembership:
    project_id: str
    project_name: str
    added_at: Optional[datetime] = None
    metrics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Wallet:
    """
    Tracked wallet.

    balances is opaque for reporting: the store keeps it as loaded and
    writes it back unchanged.
    """
    address: str
    address_lower: str = ""
    index: Optional[int] = None
    projects: List[ProjectMembership] = field(default_factory=list)
    balances: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.address_lower:
            self.address_lower = self.address.lower()

    def membership(self, project_id: str) -> Optional[ProjectMembership]:
        # by id: project_name on a membership may be stale
        for m in self.projects:
            if m.project_id == project_id:
                return m
        return None


@dataclass(frozen=True)
class LogEntry:
    date: Optional[datetime]
    level: str = ""
    action: str = ""
    message: str = ""
    wallet: Optional[str] = None
    project_name: Optional[str] = None
    stack_trace: Optional[str] = None
    index: Optional[int] = None


@dataclass
class Project:
    project_id: str
    name: str
    wallet_ids: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class LogQuery:
    project_name: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass(frozen=True)
class ReportFilter:
    """
    Completed report scope.

    wallet_addresses and project_name come from different chat paths, but
    both may be set: addresses win for wallet lookup, the project still
    scopes metrics and logs.
    """
    label: str
    project_name: Optional[str] = None
    wallet_addresses: List[str] = field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Row = List[Any]


@dataclass
class ReportTables:
    info: List[Row]
    logs: List[Row]
    metrics: Optional[List[Row]] = None
