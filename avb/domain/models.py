from enum import Enum
from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, Field


class FileOutcome(str, Enum):
    JUNK_REMOVED = "JUNK_REMOVED"
    SKIPPED_NON_VIDEO = "SKIPPED_NON_VIDEO"
    SKIPPED_INVALID = "SKIPPED_INVALID"
    SKIPPED_EXISTING = "SKIPPED_EXISTING"
    DUPLICATE_REMOVED = "DUPLICATE_REMOVED"
    DURATION_MISMATCH = "DURATION_MISMATCH"
    SAVED = "SAVED"
    FAILED = "FAILED"


class EncodePaths(BaseModel):
    """Every path the pipeline may touch for one source file."""

    source: Path
    save_path: Path
    # only resolved when failed sources are moved into the save directory
    failed_copy_path: Optional[Path] = None
    encoding_path: Path


class RunSummary(BaseModel):
    counts: Dict[FileOutcome, int] = Field(default_factory=dict)

    def record(self, outcome: FileOutcome) -> None:
        self.counts[outcome] = self.counts.get(outcome, 0) + 1

    def count(self, outcome: FileOutcome) -> int:
        return self.counts.get(outcome, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())
