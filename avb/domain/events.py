"""Domain events for the encoding pipeline.

The orchestrator never prints. It publishes these events on the EventBus and
the console reporter turns them into the notices the operator reads.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pathlib import Path
from pydantic import BaseModel

from .models import RunSummary


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class FileEvent(Event):
    """Base class for events about one discovered file."""

    path: Path


class DiscoveryStarted(Event):
    directory: Path


class JunkRemoved(FileEvent):
    pass


class FileSkipped(FileEvent):
    """Emitted when a file is left untouched (non-video, invalid, already saved)."""

    reason: str


class DuplicateRemoved(FileEvent):
    """Source deleted because the save dir holds a same-named, same-length video."""

    saved_path: Path
    duration: float


class DurationMismatch(FileEvent):
    """Same destination name, different durations: both files are kept."""

    saved_path: Path
    saved_duration: float
    source_duration: float


class EncodeStarted(FileEvent):
    encoding_path: Path


class EncodeSaving(FileEvent):
    save_path: Path


class EncodeSaved(FileEvent):
    save_path: Path
    elapsed_seconds: float


class EncodeFailed(FileEvent):
    error_message: str


class OriginalRemoved(FileEvent):
    pass


class FailedFileMoved(FileEvent):
    failed_copy_path: Path


class RunFinished(Event):
    summary: RunSummary
