"""
GRC AI Assist - AI audit trail dashboard
Terminal view of the AI audit trail: filterable table, newest first.
"""

import sys
from typing import List, Optional

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Header, Input, Static

from src.ai.types import AuditLogEntry
from util.logging import logger
from .audit_viewer import AuditLogViewer, AuditSearchCriteria

COLUMNS = ("Timestamp", "User", "Module", "Action", "Model", "Response")


class AuditTrailApp(App):
    """Oversight register of AI interactions recorded by the API."""

    CSS = """
    .title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
        color: blue;
    }

    .summary {
        color: gray;
        margin-bottom: 1;
    }

    #trail-container {
        padding: 1;
    }
    """

    TITLE = "GRC AI Audit Trail"

    BINDINGS = [
        ("r", "refresh", "Refresh"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, viewer: Optional[AuditLogViewer] = None, entries: Optional[List[AuditLogEntry]] = None):
        super().__init__()
        self.viewer = viewer or AuditLogViewer()
        self.entries: List[AuditLogEntry] = list(entries) if entries is not None else []
        self._preloaded = entries is not None
        self.search_text = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("AI Audit Trail", classes="title"),
            Static("", id="summary", classes="summary"),
            Input(id="filter", placeholder="Filter logs by user, module or action..."),
            DataTable(id="trail"),
            id="trail-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#trail", DataTable)
        table.add_columns(*COLUMNS)
        if self._preloaded:
            self.render_table()
        else:
            self.action_refresh()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter":
            self.search_text = event.value
            self.render_table()

    def action_refresh(self) -> None:
        """Reload entries from the API."""
        self.entries = self.viewer.fetch_entries()
        logger.info(f"Audit trail refreshed: {len(self.entries)} entries")
        self.render_table()

    def render_table(self) -> None:
        criteria = AuditSearchCriteria(search_text=self.search_text or None, limit=len(self.entries) or 1)
        rows, total = self.viewer.search_entries(self.entries, criteria)

        table = self.query_one("#trail", DataTable)
        table.clear()
        for row in rows:
            table.add_row(
                row.timestamp,
                row.user_name,
                row.module,
                row.action,
                row.model_id,
                row.response_preview,
                key=row.id,
            )

        summary = self.viewer.get_audit_summary(self.entries)
        self.query_one("#summary", Static).update(
            f"{summary['total_entries']} recorded cycles, {total} shown, "
            f"{summary['degraded_responses']} degraded"
        )


def main(api_url: str = "http://localhost:8000"):
    """Audit trail dashboard entry point."""
    try:
        AuditTrailApp(viewer=AuditLogViewer(api_url=api_url)).run()
    except KeyboardInterrupt:
        logger.info("Audit trail dashboard exited via keyboard interrupt")
    except Exception as e:
        error_msg = f"Audit trail dashboard startup failed: {e}"
        print(f"❌ {error_msg}")
        logger.error(error_msg)
        sys.exit(1)


if __name__ == "__main__":
    main()
