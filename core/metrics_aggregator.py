from __future__ import annotations

"""
Metrics sheet builder.

Набор метрик у кошельков разный и меняется со временем, поэтому колонки
собираются как объединение всех имён полей (в порядке первого появления)
до того, как строится хоть одна строка.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.types_report import Project, Row, Wallet

log = logging.getLogger(__name__)

BOOKKEEPING_FIELDS = frozenset({"last_updated"})

BASE_HEADERS = ["Index", "Wallet"]


def header_for(field_name: str) -> str:
    return field_name[:1].upper() + field_name[1:]


@dataclass
class WalletMetricsRow:
    address: str
    index: Optional[int]
    values: Dict[str, Any] = field(default_factory=dict)  # lower-cased field -> value


@dataclass
class MetricsTable:
    metric_fields: List[str]
    rows: List[WalletMetricsRow]

    @property
    def headers(self) -> List[str]:
        return BASE_HEADERS + [header_for(f) for f in self.metric_fields]

    def to_rows(self) -> List[Row]:
        out: List[Row] = [self.headers]
        for r in self.rows:
            line: Row = ["" if r.index is None else r.index, r.address or "Unknown"]
            for h in self.headers[len(BASE_HEADERS):]:
                value = r.values.get(h.lower())
                line.append("" if value is None else value)
            out.append(line)
        return out


def aggregate_metrics(project: Project, wallets: Iterable[Wallet]) -> MetricsTable:
    fields: List[str] = []
    seen = set()
    rows: List[WalletMetricsRow] = []

    for w in wallets:
        membership = w.membership(project.project_id)
        if membership is None:
            log.debug("wallet %s has no membership in project %s", w.address, project.name)
            continue
        if not membership.metrics:
            continue
        values: Dict[str, Any] = {}
        for name, value in membership.metrics.items():
            if name.lower() in BOOKKEEPING_FIELDS:
                continue
            key = name.lower()
            if key not in seen:
                seen.add(key)
                fields.append(name)
            values[key] = value
        if not values:
            continue
        rows.append(WalletMetricsRow(address=w.address, index=w.index, values=values))

    return MetricsTable(metric_fields=fields, rows=rows)
