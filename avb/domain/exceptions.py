"""Exception types for the AV1 batch encoder.

Fatal errors stop the whole run: they mean the filesystem is in a state that
needs a human (a leftover encode, a corrupted saved file) or that an external
tool is not behaving as expected. Only ``EncoderProcessFailed`` is recovered
per file by the orchestrator.

All exceptions inherit from ``AvbError``.
"""

from pathlib import Path
from typing import Optional


class AvbError(Exception):
    """Base class for all avb errors."""

    pass


class DirectoryUnreadable(AvbError):
    """Raised when the scanned tree (root or any subdirectory) cannot be listed."""

    def __init__(self, directory: Path, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Failed to read directory {directory}: {reason}")


class InvalidVideoPath(AvbError):
    """Raised for a path with no file name component."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Invalid video path: {path}")


# --- ffprobe ---
class ProbeFailed(AvbError):
    """ffprobe could not be launched or printed something unexpected."""

    pass


class DurationParseFailed(AvbError):
    """ffprobe duration output is not a non-negative number of seconds."""

    pass


# --- Encoders ---
class EncoderProcessFailed(AvbError):
    """An encoder exited with a non-zero status.

    The output path may hold a truncated file; removing it is the caller's job.
    """

    tool = "encoder"

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"Failed to execute {self.tool} command: exit status {returncode}")


class AutoEncodeFailed(EncoderProcessFailed):
    """ab-av1 auto-encode failed."""

    tool = "ab-av1"


class ForceCrfFailed(EncoderProcessFailed):
    """Fixed-quality ffmpeg encode failed."""

    tool = "force crf ffmpeg"


# --- Path conflicts ---
class ConflictError(AvbError):
    """A path this run is about to write is already taken.

    Either another avb instance is working on the same source or a previous run
    crashed. The leftover has to be resolved manually before re-running.
    """

    kind = "path"

    def __init__(self, video_path: Path, conflict_path: Path):
        self.video_path = video_path
        self.conflict_path = conflict_path
        super().__init__(f"Conflict {self.kind} {conflict_path} for video {video_path}")


class EncodingConflict(ConflictError):
    kind = "encoding video path"


class FailedCopyConflict(ConflictError):
    kind = "failed copy path"


class InvalidSavedFile(AvbError):
    """A file already in the save directory does not probe as a valid video."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Found invalid video file in saved path: {path}")


# --- Single file commands ---
class SavePathAlreadyExists(AvbError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Save path already exists for single encode: {path}")


class InvalidEncodedFile(AvbError):
    def __init__(self, video_path: Path, encoded_path: Path):
        self.video_path = video_path
        self.encoded_path = encoded_path
        super().__init__(
            f"Single encode failed with invalid encoded file {encoded_path} for video {video_path}"
        )


# --- Renamer ---
class RenamerProcessFailed(AvbError):
    def __init__(self, stderr: str, returncode: Optional[int]):
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"Renamer command failed (exit status {returncode}): {stderr.strip()}")


class RenamedNameTooLong(AvbError):
    """The renamer returned a name that still exceeds a configured limit."""

    unit = "characters"

    def __init__(self, name: str, limit: int):
        self.name = name
        self.limit = limit
        super().__init__(f"Too many {self.unit} in renamed filename (limit {limit}): {name}")


class RenamedNameTooManyChars(RenamedNameTooLong):
    unit = "characters"


class RenamedNameTooManyBytes(RenamedNameTooLong):
    unit = "bytes"
