"""pysmem - interactive Textual browser for one scan."""

from collections.abc import Sequence

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from pysmem.config import Options
from pysmem.fields import Field, format_field
from pysmem.models import ProcessRecord, ProcessSizes, total_sizes
from pysmem.report import sort_records
from pysmem.sizes import format_size


class TotalsBar(Static):
    """Header widget showing the process count and summed sizes."""

    DEFAULT_CSS = """
    TotalsBar {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize TotalsBar."""
        super().__init__(*args, **kwargs)
        self._count = 0
        self._totals = ProcessSizes()

    def update_totals(self, records: Sequence[ProcessRecord]) -> None:
        """Recompute the totals from ``records`` and redraw."""
        self._count = len(records)
        self._totals = total_sizes(records)
        self.update(self.describe())

    def describe(self) -> str:
        """One-line summary of the count and totals."""
        totals = self._totals
        return (
            f"Processes: {self._count}  "
            f"Pss: {format_size(totals.pss)}  "
            f"Rss: {format_size(totals.rss)}  "
            f"Uss: {format_size(totals.uss)}  "
            f"Swap: {format_size(totals.swap)}"
        )


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(
        self,
        options: Options,
        records: Sequence[ProcessRecord] = (),
        *args,
        **kwargs,
    ) -> None:
        """
        Initialize ProcessTable.

        Args:
            options: Run configuration; supplies columns, sort field and direction.
            records: Records to show.
        """
        super().__init__(*args, **kwargs)
        self._settings = options
        self._fields = options.active_fields
        self._sort_key: Field = options.sort_field
        self._sort_reverse: bool = options.reverse
        self._records: list[ProcessRecord] = list(records)

    @property
    def sort_key(self) -> Field:
        """Get current sort field."""
        return self._sort_key

    @property
    def sort_reverse(self) -> bool:
        """Whether the sort is descending."""
        return self._sort_reverse

    @property
    def rows(self) -> list[ProcessRecord]:
        """Records in display order."""
        return sort_records(self._records, self._sort_key, self._sort_reverse, self._settings.numeric)

    def cycle_sort(self) -> Field:
        """Cycle to the next shown column and return it."""
        if self._sort_key in self._fields:
            index = (self._fields.index(self._sort_key) + 1) % len(self._fields)
        else:
            index = 0
        self._sort_key = self._fields[index]
        self._refresh_rows()
        return self._sort_key

    def toggle_reverse(self) -> bool:
        """Flip the sort direction and return the new one."""
        self._sort_reverse = not self._sort_reverse
        self._refresh_rows()
        return self._sort_reverse

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Add the columns and fill the table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        for field in self._fields:
            table.add_column(field.title, key=field.value)
        self._refresh_rows()

    def _refresh_rows(self) -> None:
        """Redraw every row in the current sort order."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        settings = self._settings
        for record in self.rows:
            table.add_row(
                *(format_field(field, record, settings.numeric, settings.abbreviate) for field in self._fields),
                key=str(record.pid),
            )


class PysmemApp(App):
    """Browse the result of one scan."""

    TITLE = "pysmem"
    SUB_TITLE = "Memory usage per process"

    CSS = """
    Screen {
        layout: vertical;
    }

    #totals {
        dock: top;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
        ("r", "reverse", "Reverse"),
    ]

    def __init__(self, records: Sequence[ProcessRecord], options: Options | None = None) -> None:
        """Initialize the PysmemApp with the records of one scan."""
        super().__init__()
        self._records = list(records)
        self._settings = options or Options()

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield TotalsBar(id="totals")
        yield ProcessTable(self._settings, self._records)
        yield Footer()

    def on_mount(self) -> None:
        """Fill the totals bar when the app is mounted."""
        self.query_one("#totals", TotalsBar).update_totals(self._records)

    def action_sort(self) -> None:
        """Cycle the sort column."""
        new_sort_key = self.query_one(ProcessTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.title}")

    def action_reverse(self) -> None:
        """Handle reverse action - toggle the sort direction."""
        reverse = self.query_one(ProcessTable).toggle_reverse()
        self.notify("Sort: descending" if reverse else "Sort: ascending")

    def action_quit(self) -> None:
        """Handle quit action."""
        self.exit()
