from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from avb.domain.events import (
    DiscoveryStarted,
    DuplicateRemoved,
    DurationMismatch,
    EncodeFailed,
    EncodeSaved,
    EncodeSaving,
    EncodeStarted,
    FailedFileMoved,
    FileSkipped,
    JunkRemoved,
    OriginalRemoved,
    RunFinished,
)
from avb.domain.models import FileOutcome
from avb.infrastructure.event_bus import EventBus

# Saves faster than this are not worth a timing line.
SLOW_SAVE_SECONDS = 10.0


class ConsoleReporter:
    """Subscribes to EventBus and prints pipeline notices to stdout."""

    def __init__(self, bus: EventBus, console: Optional[Console] = None):
        self.bus = bus
        self.console = console or Console(highlight=False)
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryStarted, self.on_discovery_started)
        self.bus.subscribe(JunkRemoved, self.on_junk_removed)
        self.bus.subscribe(FileSkipped, self.on_file_skipped)
        self.bus.subscribe(DuplicateRemoved, self.on_duplicate_removed)
        self.bus.subscribe(DurationMismatch, self.on_duration_mismatch)
        self.bus.subscribe(EncodeStarted, self.on_encode_started)
        self.bus.subscribe(EncodeSaving, self.on_encode_saving)
        self.bus.subscribe(EncodeSaved, self.on_encode_saved)
        self.bus.subscribe(EncodeFailed, self.on_encode_failed)
        self.bus.subscribe(OriginalRemoved, self.on_original_removed)
        self.bus.subscribe(FailedFileMoved, self.on_failed_file_moved)
        self.bus.subscribe(RunFinished, self.on_run_finished)

    def _print(self, message: str, style: Optional[str] = None):
        self.console.print(escape(message), style=style)

    def on_discovery_started(self, event: DiscoveryStarted):
        self._print(f"Scanning: {event.directory}", style="bold")

    def on_junk_removed(self, event: JunkRemoved):
        self._print(f"Removing junk file: {event.path}", style="dim")

    def on_file_skipped(self, event: FileSkipped):
        self._print(f"Skipping {event.reason}: {event.path}", style="dim")

    def on_duplicate_removed(self, event: DuplicateRemoved):
        self._print(
            f"Removing a file having duplicate name, almost equal duration video: {event.path}",
            style="yellow",
        )

    def on_duration_mismatch(self, event: DurationMismatch):
        self._print(
            f"Skipping video for now, duplicated names, but different durations "
            f"({event.saved_duration} != {event.source_duration}): {event.saved_path}",
            style="yellow",
        )

    def on_encode_started(self, event: EncodeStarted):
        self._print(f"Encoding video: {event.path}", style="cyan")

    def on_encode_saving(self, event: EncodeSaving):
        self._print(f"Saving video to: {event.save_path}")

    def on_encode_saved(self, event: EncodeSaved):
        if event.elapsed_seconds > SLOW_SAVE_SECONDS:
            self._print(f"Saved in {event.elapsed_seconds:.2f} sec")

    def on_encode_failed(self, event: EncodeFailed):
        self._print(f"Encoding failed for {event.path}: {event.error_message}", style="red")

    def on_original_removed(self, event: OriginalRemoved):
        self._print(f"Removed original video: {event.path}")

    def on_failed_file_moved(self, event: FailedFileMoved):
        self._print(f"Moved failed video to: {event.failed_copy_path}", style="red")

    def on_run_finished(self, event: RunFinished):
        summary = event.summary
        table = Table(title="Summary", show_header=True)
        table.add_column("Outcome")
        table.add_column("Files", justify="right")
        for outcome in FileOutcome:
            count = summary.count(outcome)
            if count:
                table.add_row(outcome.value.lower().replace("_", " "), str(count))
        table.add_row("total", str(summary.total), style="bold")
        self.console.print(table)
