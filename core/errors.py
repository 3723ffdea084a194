from __future__ import annotations

# core/errors.py — report error kinds and the text the chat shows for them


class ReportError(Exception):
    """Base for every failure the report flow surfaces to the operator."""

    user_message = "❌ Error generating report"


class InvalidInput(ReportError):
    """Malformed operator input; the same step is asked again."""

    user_message = "❌ Invalid date format.\nPlease use the format `DD.MM.YY - DD.MM.YY`"


class NotFound(ReportError):
    """A named project does not exist at query time."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Project with name {name!r} was not found")
        self.name = name

    @property
    def user_message(self) -> str:  # type: ignore[override]
        return f"❌ Project {self.name} was not found"


class NoData(ReportError):
    """Scope is valid but there are no log rows to report."""

    user_message = "The report was not found."


class ExportFailure(ReportError):
    """Building or writing the workbook failed."""

    user_message = "❌ Error generating report"
