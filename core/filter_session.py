from __future__ import annotations

"""
core/filter_session.py — per-user report filter FSM.

Один пользователь -> одна сессия. Сессия накапливает выбор отчёта по шагам
(кнопки и свободный текст) и отдаёт готовый ReportFilter.

Invariants:
- only the transition methods of FilterSessionStore mutate a session;
- restart / go_back / a new report-kind pick REPLACE the session object,
  nothing from the previous one survives;
- sessions of different users share no mutable state.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Sequence

from core.date_range import parse_date_range
from core.stores import ProjectDirectory
from core.types_report import (
    Awaiting,
    DateRange,
    ReportFilter,
    ReportKind,
    SessionState,
)

log = logging.getLogger(__name__)


# callback payloads coming from the chat buttons
CHOICE_FILTER_YES = "filter_yes"
CHOICE_FILTER_NO = "filter_no"
CHOICE_GO_BACK = "go_back"
PROJECT_PREFIX = "project_"
# position in the offered list, for names too long for a button payload
PROJECT_INDEX_PREFIX = "projectidx_"


class StepReason(str, Enum):
    CHOOSE_REPORT_KIND = "choose_report_kind"
    ENTER_WALLETS = "enter_wallets"
    CHOOSE_PROJECT = "choose_project"
    DATE_DECISION = "date_decision"
    ENTER_DATES = "enter_dates"
    INVALID_INPUT = "invalid_input"
    NO_PROJECTS = "no_projects"
    UNEXPECTED = "unexpected"
    IGNORED = "ignored"
    COMPLETED = "completed"


_AWAITING_BY_STATE = {
    SessionState.AWAITING_WALLET_LIST: Awaiting.WALLET_LIST,
    SessionState.AWAITING_DATE_RANGE: Awaiting.DATE_RANGE,
}


@dataclass
class FilterSession:
    user_id: int
    state: SessionState = SessionState.IDLE
    report_kind: Optional[ReportKind] = None
    wallet_addresses: List[str] = field(default_factory=list)
    project_choices: List[str] = field(default_factory=list)
    offered_projects: List[str] = field(default_factory=list)
    date_range: Optional[DateRange] = None

    @property
    def awaiting(self) -> Awaiting:
        return _AWAITING_BY_STATE.get(self.state, Awaiting.NONE)

    @property
    def project_selection(self) -> Optional[str]:
        # повторный выбор проекта дописывается, но учитывается только первый
        return self.project_choices[0] if self.project_choices else None

    def to_filter(self) -> ReportFilter:
        dr = self.date_range or DateRange()
        kind = self.report_kind.value if self.report_kind else "report"
        return ReportFilter(
            label=kind,
            project_name=self.project_selection,
            wallet_addresses=list(self.wallet_addresses),
            start_date=dr.start,
            end_date=dr.end,
        )


@dataclass(frozen=True)
class StepResult:
    needs_more_input: bool
    reason: StepReason
    projects: Sequence[str] = ()
    completed_filter: Optional[ReportFilter] = None

    @staticmethod
    def more(reason: StepReason, projects: Sequence[str] = ()) -> "StepResult":
        return StepResult(needs_more_input=True, reason=reason, projects=tuple(projects))

    @staticmethod
    def done(flt: ReportFilter) -> "StepResult":
        return StepResult(needs_more_input=False, reason=StepReason.COMPLETED, completed_filter=flt)


def split_wallet_lines(text: str) -> List[str]:
    """One address per line; trimmed, lower-cased, blank lines dropped."""
    return [line.strip().lower() for line in (text or "").splitlines() if line.strip()]


class FilterSessionStore:
    """
    user_id -> FilterSession.

    Callers serialize one user's events with ``async with store.lock(uid)``;
    the lock table is the only structure shared between users.
    """

    def __init__(self, projects: ProjectDirectory, tz: tzinfo = timezone.utc) -> None:
        self._projects = projects
        self._tz = tz
        self._sessions: Dict[int, FilterSession] = {}
        self._locks: Dict[int, asyncio.Lock] = {}

    # ------------------------------------------------------------------ #
    # access
    # ------------------------------------------------------------------ #

    def lock(self, user_id: int) -> asyncio.Lock:
        lk = self._locks.get(user_id)
        if lk is None:
            lk = asyncio.Lock()
            self._locks[user_id] = lk
        return lk

    def get(self, user_id: int) -> FilterSession:
        s = self._sessions.get(user_id)
        if s is None:
            s = FilterSession(user_id=user_id)
            self._sessions[user_id] = s
        return s

    def _replace(self, user_id: int, state: SessionState) -> FilterSession:
        s = FilterSession(user_id=user_id, state=state)
        self._sessions[user_id] = s
        return s

    # ------------------------------------------------------------------ #
    # transitions
    # ------------------------------------------------------------------ #

    def start_session(self, user_id: int) -> StepResult:
        self._replace(user_id, SessionState.AWAITING_REPORT_KIND)
        log.info("session started for user %s", user_id)
        return StepResult.more(StepReason.CHOOSE_REPORT_KIND)

    def finish(self, user_id: int) -> None:
        """Drop everything collected; called once the report attempt returned."""
        self._replace(user_id, SessionState.IDLE)

    async def submit_selection(self, user_id: int, choice: str) -> StepResult:
        choice = (choice or "").strip()

        try:
            kind = ReportKind(choice)
        except ValueError:
            kind = None
        if kind is not None:
            return await self._select_report_kind(user_id, kind)

        if choice == CHOICE_GO_BACK:
            return self.start_session(user_id)

        session = self.get(user_id)

        if choice.startswith(PROJECT_INDEX_PREFIX):
            name = self._offered_name(session, choice[len(PROJECT_INDEX_PREFIX):])
            if name is None:
                log.warning("user %s: unknown project button %r", user_id, choice)
                return StepResult.more(StepReason.UNEXPECTED)
            choice = PROJECT_PREFIX + name

        if choice.startswith(PROJECT_PREFIX):
            name = choice[len(PROJECT_PREFIX):]
            if session.state == SessionState.AWAITING_PROJECT_CHOICE:
                session.project_choices.append(name)
                session.state = SessionState.AWAITING_DATE_DECISION
                return StepResult.more(StepReason.DATE_DECISION)
            if session.report_kind == ReportKind.PROJECT and session.project_choices:
                session.project_choices.append(name)
                log.warning("user %s picked project %r twice, keeping %r",
                            user_id, name, session.project_selection)
            return StepResult.more(StepReason.UNEXPECTED)

        if session.state == SessionState.AWAITING_DATE_DECISION:
            if choice == CHOICE_FILTER_NO:
                session.date_range = DateRange()
                session.state = SessionState.COMPLETE
                return StepResult.done(session.to_filter())
            if choice == CHOICE_FILTER_YES:
                session.state = SessionState.AWAITING_DATE_RANGE
                return StepResult.more(StepReason.ENTER_DATES)

        log.debug("user %s: choice %r ignored in state %s", user_id, choice, session.state.value)
        return StepResult.more(StepReason.UNEXPECTED)

    async def _select_report_kind(self, user_id: int, kind: ReportKind) -> StepResult:
        # выбор типа отчёта всегда начинает сессию с чистого листа
        session = self._replace(user_id, SessionState.AWAITING_REPORT_KIND)
        session.report_kind = kind

        if kind == ReportKind.FULL:
            session.state = SessionState.AWAITING_DATE_DECISION
            return StepResult.more(StepReason.DATE_DECISION)

        if kind == ReportKind.WALLET:
            session.state = SessionState.AWAITING_WALLET_LIST
            return StepResult.more(StepReason.ENTER_WALLETS)

        names = list(await self._projects.list_project_names())
        if self._sessions.get(user_id) is not session:
            # сессию перезапустили, пока ждали список проектов
            return StepResult.more(StepReason.IGNORED)
        if not names:
            self._replace(user_id, SessionState.IDLE)
            return StepResult.more(StepReason.NO_PROJECTS)
        session.offered_projects = names
        session.state = SessionState.AWAITING_PROJECT_CHOICE
        return StepResult.more(StepReason.CHOOSE_PROJECT, projects=names)

    @staticmethod
    def _offered_name(session: FilterSession, raw_index: str) -> Optional[str]:
        if not raw_index.isdigit():
            return None
        i = int(raw_index)
        if i >= len(session.offered_projects):
            return None
        return session.offered_projects[i]

    def submit_text(self, user_id: int, text: str) -> StepResult:
        session = self.get(user_id)

        if session.awaiting == Awaiting.WALLET_LIST:
            wallets = split_wallet_lines(text)
            if not wallets:
                return StepResult.more(StepReason.ENTER_WALLETS)
            session.wallet_addresses = wallets
            session.state = SessionState.AWAITING_DATE_DECISION
            return StepResult.more(StepReason.DATE_DECISION)

        if session.awaiting == Awaiting.DATE_RANGE:
            dr = parse_date_range(text, self._tz)
            if dr.is_empty:
                return StepResult.more(StepReason.INVALID_INPUT)
            session.date_range = dr
            session.state = SessionState.COMPLETE
            return StepResult.done(session.to_filter())

        return StepResult.more(StepReason.IGNORED)
