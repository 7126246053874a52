"""
pipelines/comparison.py

Pick exactly two reports and fetch a server-side comparison.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from services.errors import ComparisonError, ServerError, TransportError, ValidationError
from services.reports import ReportService
from stores.models import ComparisonResult
from stores.report_store import ReportStore

logger = logging.getLogger(__name__)

MAX_SELECTION = 2
EMPTY_COMPARISON_MESSAGE = "No comparison possible"


def visible_sections(result: ComparisonResult) -> list[tuple[str, str]]:
    """(heading, text) for every non-blank field, in display order."""
    return result.sections()


def has_content(result: ComparisonResult) -> bool:
    return bool(visible_sections(result))


class ComparisonOrchestrator:
    def __init__(self, service: ReportService, store: Optional[ReportStore] = None) -> None:
        self.service = service
        self.store = store
        self._selected: list[str] = []

    @property
    def selected(self) -> tuple[str, ...]:
        return tuple(self._selected)

    def is_selected(self, report_id: str) -> bool:
        return report_id in self._selected

    def toggle_selection(self, report_id: str) -> bool:
        """
        Select or deselect *report_id*. A third pick is ignored.

        Returns:
            Whether *report_id* is selected afterwards.
        """
        if report_id in self._selected:
            self._selected.remove(report_id)
            return False
        if len(self._selected) < MAX_SELECTION:
            self._selected.append(report_id)
            return True
        return False

    def clear_selection(self) -> None:
        self._selected = []

    def compare(self, selected_ids: Optional[Sequence[str]] = None) -> ComparisonResult:
        """
        Compare exactly two reports (defaults to the current selection).

        Raises:
            ValidationError: Not exactly two ids; nothing is sent.
            ComparisonError: The request failed; the selection is kept.
        """
        ids = list(self._selected if selected_ids is None else selected_ids)
        if len(ids) != MAX_SELECTION:
            raise ValidationError("Please select exactly two reports to compare")

        try:
            result = self.service.compare_reports(ids)
        except (TransportError, ServerError) as e:
            logger.warning("Comparison of %s failed: %s", ids, e)
            raise ComparisonError(f"Failed to compare reports: {e}") from e

        logger.info("Compared reports %s (%d section(s))", ids, len(visible_sections(result)))
        return result

    def titles_for(self, result: ComparisonResult) -> list[str]:
        titles = []
        for report_id in result.report_ids:
            report = self.store.get(report_id) if self.store is not None else None
            titles.append(report.title if report is not None else report_id)
        return titles
