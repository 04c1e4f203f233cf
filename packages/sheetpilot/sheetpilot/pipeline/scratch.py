"""Pipeline — Scratch sheet lifecycle.

The scatter chart reads its numbers from a hidden helper worksheet.  The
sheet is a scoped resource owned by the executor for one execution:

    async with ScratchSheet(document, "__chart_data_temp") as scratch:
        await document.write_range(scratch.name, "A1", rows)
        chart_id = await document.add_chart("scatter", scratch.name, "A1:A2")
        scratch.track_chart(chart_id)
        ...
        await scratch.transfer()

Entering resets the sheet (delete-if-exists, then create) so at most one
scratch sheet ever exists.  ``transfer()`` hands ownership to the document:
the sheet is hidden and kept alive for the chart that references it.  If the
block exits before ``transfer()``, the sheet and any tracked charts are
deleted and the original exception propagates.
"""

from __future__ import annotations

from types import TracebackType

from sheetpilot.document.base import SpreadsheetDocument
from sheetpilot.logging import get_logger

log = get_logger(__name__)


class ScratchSheet:
    """Async context manager owning one scratch worksheet."""

    def __init__(self, document: SpreadsheetDocument, name: str) -> None:
        self._document = document
        self.name = name
        self._charts: list[str] = []
        self._transferred = False

    @property
    def transferred(self) -> bool:
        return self._transferred

    async def reset(self) -> None:
        """Delete the sheet if it exists, then create it empty."""
        if self.name in await self._document.sheet_names():
            await self._document.delete_sheet(self.name)
            log.debug("scratch_sheet_removed", sheet=self.name)
        await self._document.create_sheet(self.name)

    def track_chart(self, chart_id: str) -> None:
        """Register a chart bound to this sheet for removal on failure."""
        self._charts.append(chart_id)

    async def transfer(self) -> None:
        """Hide the sheet and leave it to the document."""
        await self._document.hide_sheet(self.name)
        self._transferred = True
        log.debug("scratch_sheet_transferred", sheet=self.name)

    async def __aenter__(self) -> "ScratchSheet":
        await self.reset()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._transferred:
            return
        await self._discard(reason=exc_type.__name__ if exc_type else "not_transferred")

    async def _discard(self, reason: str) -> None:
        # A cleanup failure must not mask the error that triggered it.
        for chart_id in reversed(self._charts):
            try:
                await self._document.delete_chart(chart_id)
            except Exception as cleanup_exc:
                log.warning("scratch_chart_cleanup_failed", chart_id=chart_id, error=str(cleanup_exc))
        self._charts.clear()
        try:
            await self._document.delete_sheet(self.name)
        except Exception as cleanup_exc:
            log.warning("scratch_sheet_cleanup_failed", sheet=self.name, error=str(cleanup_exc))
        else:
            log.info("scratch_sheet_discarded", sheet=self.name, reason=reason)
