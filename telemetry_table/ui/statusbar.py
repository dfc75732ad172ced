"""Status bar widget for row counts, loading state and the last error."""

from __future__ import annotations
from typing import TYPE_CHECKING

from PySide6.QtWidgets import QStatusBar

if TYPE_CHECKING:
    from telemetry_table.app.controller import TelemetryTableController


class TableStatusBar:
    """Manages status bar updates for one telemetry table."""

    def __init__(self, status_bar: QStatusBar, controller: TelemetryTableController) -> None:
        self._status_bar = status_bar
        self._controller = controller

        # ── monospaced so the counters don't jitter ─────────────────────
        status_bar.setStyleSheet(
            "QStatusBar { font-family: 'Courier New', monospace; }"
        )

    def message(self) -> str:
        """Construct the status line."""
        rows = self._controller.rows
        state = self._controller.state

        msg = f"rows:{len(rows):7d}/{rows.capacity}"
        msg += f"   appended:{rows.append_count:8d}  evicted:{rows.evict_count:8d}"
        if state.loading:
            msg += "   loading…"
        if state.default_sort:
            msg += f"   sort:{state.default_sort}"
        live_errors = self._controller.live.error_count
        if live_errors:
            msg += f"   live errors:{live_errors}"
        if state.error is not None:
            msg += f"   error: {state.error}"
        return msg

    def refresh(self) -> None:
        self._status_bar.showMessage(self.message())

    def show_message(self, message: str, timeout: int = 0) -> None:
        """Show a custom message in the status bar."""
        self._status_bar.showMessage(message, timeout)
