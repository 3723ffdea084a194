"""
XLSX report writer (openpyxl).

One workbook per report, sheets in fixed order:
    Info, Metrics (only for project-scoped reports), Logs

File name: <prefix>_<HH-MM-SS>_<DD.MM.YY>.xlsx, taken from the generation
instant. Two reports with the same prefix in the same second collide; the
later one overwrites.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Callable, List, Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from core.types_report import ReportTables, Row
from tools.formatting import report_file_name

log = logging.getLogger(__name__)

REPORTS_DIR = Path("reports")

SHEET_INFO = "Info"
SHEET_METRICS = "Metrics"
SHEET_LOGS = "Logs"

# Excel cell hard limit
_MAX_CELL_CHARS = 32767
_MAX_COL_WIDTH = 80


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) if value.tzinfo else value
    s = ILLEGAL_CHARACTERS_RE.sub("", str(value))
    return s[:_MAX_CELL_CHARS]


def _fit_columns(ws, rows: List[Row]) -> None:
    widths: dict[int, int] = {}
    for row in rows:
        for i, v in enumerate(row, start=1):
            text = str(v) if v is not None else ""
            longest = max((len(line) for line in text.splitlines()), default=0)
            widths[i] = max(widths.get(i, 0), longest)
    for i, w in widths.items():
        ws.column_dimensions[get_column_letter(i)].width = min(max(w + 2, 8), _MAX_COL_WIDTH)


def _fill_sheet(ws, rows: List[Row], bold_header: bool = True) -> None:
    for row in rows:
        ws.append([_cell(v) for v in row])
    if bold_header and rows:
        for c in ws[1]:
            c.font = Font(bold=True)
    _fit_columns(ws, rows)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class XlsxReportSink:
    """DocumentSink writing .xlsx files into a fixed reports directory."""

    def __init__(
        self,
        reports_dir: Path = REPORTS_DIR,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.reports_dir = Path(reports_dir)
        self._tz = tz
        self._clock = clock

    def build_workbook(self, tables: ReportTables) -> Workbook:
        wb = Workbook()
        ws_info = wb.active
        ws_info.title = SHEET_INFO
        _fill_sheet(ws_info, tables.info, bold_header=False)

        if tables.metrics is not None:
            _fill_sheet(wb.create_sheet(SHEET_METRICS), tables.metrics)

        _fill_sheet(wb.create_sheet(SHEET_LOGS), tables.logs)
        return wb

    def write(self, tables: ReportTables, file_name_prefix: str, generated_at: Optional[datetime] = None) -> Path:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        name = report_file_name(file_name_prefix, generated_at or self._clock(), self._tz)
        out_path = self.reports_dir / name

        wb = self.build_workbook(tables)
        wb.save(out_path)
        log.info("excel file created successfully: %s", out_path)
        return out_path
