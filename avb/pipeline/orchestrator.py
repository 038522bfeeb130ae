"""Per-file encoding pipeline.

Walks a directory and drives every file through:
classify → validate → resolve paths → conflict checks → encode → validate
output → promote or discard → (optionally) remove the original.

One file at a time, on the calling thread. There is no lock and no record of
processed files: whether a file still needs work is read from the filesystem
on every run, so the run can be repeated safely after a crash once any
reported conflict has been resolved by hand.

Error handling:
- EncoderProcessFailed (and an invalid encode output) is a per-file failure;
  the partial output is removed and the loop continues.
- Every other exception (conflicts, probe errors, filesystem errors) aborts
  the run. An encoder that cannot be launched releases its reserved
  encoding path first, so the next run does not see a conflict.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from avb.config.models import AppConfig
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
from avb.domain.exceptions import (
    EncoderProcessFailed,
    EncodingConflict,
    FailedCopyConflict,
    InvalidEncodedFile,
    InvalidSavedFile,
    SavePathAlreadyExists,
)
from avb.domain.models import EncodePaths, FileOutcome, RunSummary
from avb.infrastructure.classifier import guess_video, is_junk
from avb.infrastructure.encoder import EncoderAdapter, inherited_log_level
from avb.infrastructure.event_bus import EventBus
from avb.infrastructure.ffprobe import FFprobeAdapter
from avb.infrastructure.file_scanner import FileScanner
from avb.infrastructure.identity import destination_slug, encoding_path
from avb.infrastructure.promotion import promote, remove_if_exists, reserve
from avb.infrastructure.renamer import NameRenamer


def almost_equal(a: float, b: float, tolerance: float) -> bool:
    """Relative comparison: |a - b| <= tolerance * max(|a|, |b|)."""
    return abs(a - b) <= tolerance * max(abs(a), abs(b))


class Orchestrator:
    """AV1 batch encoding pipeline.

    Args:
        config: AppConfig with directories, CRF bounds and file policies.
        event_bus: EventBus for progress/skip/save notices.
        file_scanner: FileScanner for discovering files.
        ffprobe_adapter: FFprobeAdapter for validity and duration checks.
        encoder_adapter: EncoderAdapter running ab-av1 / ffmpeg.
        renamer: NameRenamer deriving destination file names.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        file_scanner: FileScanner,
        ffprobe_adapter: FFprobeAdapter,
        encoder_adapter: EncoderAdapter,
        renamer: NameRenamer,
    ):
        self.config = config
        self.event_bus = event_bus
        self.file_scanner = file_scanner
        self.ffprobe_adapter = ffprobe_adapter
        self.encoder_adapter = encoder_adapter
        self.renamer = renamer
        self.logger = logging.getLogger(__name__)

    def _prepare_dirs(self) -> None:
        self.config.encoding_dir.mkdir(parents=True, exist_ok=True)
        self.config.save_dir.mkdir(parents=True, exist_ok=True)

    def destination_paths(self, video_path: Path) -> EncodePaths:
        save_dir = self.config.save_dir
        save_path = save_dir / self.renamer.resolve(destination_slug(save_dir, video_path))
        failed_copy_path = None
        if self.config.move_failed_files:
            failed_copy_path = save_dir / self.renamer.resolve(video_path)
        return EncodePaths(
            source=video_path,
            save_path=save_path,
            failed_copy_path=failed_copy_path,
            encoding_path=encoding_path(self.config.encoding_dir, video_path),
        )

    def _reserve_encoding_path(self, paths: EncodePaths) -> None:
        try:
            reserve(paths.encoding_path)
        except FileExistsError:
            raise EncodingConflict(paths.source, paths.encoding_path)

    def _release_reservation(self, paths: EncodePaths) -> None:
        # The encoder never started; a leftover here would read as a crashed encode.
        if remove_if_exists(paths.encoding_path):
            self.logger.warning(f"ENCODER_LAUNCH_FAILED: released {paths.encoding_path}")

    def _save(self, video_path: Path, encoded_path: Path, save_path: Path) -> None:
        self.event_bus.publish(EncodeSaving(path=video_path, save_path=save_path))
        start = time.monotonic()
        promote(encoded_path, save_path)
        elapsed = time.monotonic() - start
        self.logger.info(f"SAVED: {video_path} -> {save_path} elapsed={elapsed:.2f}s")
        self.event_bus.publish(EncodeSaved(path=video_path, save_path=save_path, elapsed_seconds=elapsed))

        if not self.config.keep_original:
            video_path.unlink()
            self.logger.debug(f"Removed original video {video_path}")
            self.event_bus.publish(OriginalRemoved(path=video_path))

    def _handle_existing_save(self, video_path: Path, save_path: Path) -> FileOutcome:
        if not self.config.delete_almost_same_files:
            self.event_bus.publish(FileSkipped(path=video_path, reason="already exists in save directory"))
            return FileOutcome.SKIPPED_EXISTING

        if not self.ffprobe_adapter.is_valid_video(save_path):
            raise InvalidSavedFile(save_path)

        saved_duration = self.ffprobe_adapter.rough_duration_seconds(save_path)
        source_duration = self.ffprobe_adapter.rough_duration_seconds(video_path)

        if almost_equal(saved_duration, source_duration, self.config.duration_tolerance):
            video_path.unlink()
            self.logger.info(
                f"DUPLICATE_REMOVED: {video_path} (saved={saved_duration:.2f}s source={source_duration:.2f}s)"
            )
            self.event_bus.publish(DuplicateRemoved(path=video_path, saved_path=save_path, duration=source_duration))
            return FileOutcome.DUPLICATE_REMOVED

        self.logger.info(
            f"DURATION_MISMATCH: {video_path} (saved={saved_duration:.2f}s source={source_duration:.2f}s)"
        )
        self.event_bus.publish(DurationMismatch(
            path=video_path,
            saved_path=save_path,
            saved_duration=saved_duration,
            source_duration=source_duration,
        ))
        return FileOutcome.DURATION_MISMATCH

    def _handle_failure(self, paths: EncodePaths, error_message: str) -> FileOutcome:
        remove_if_exists(paths.encoding_path)
        self.logger.warning(f"ENCODE_FAILED: {paths.source} ({error_message})")
        self.event_bus.publish(EncodeFailed(path=paths.source, error_message=error_message))
        if self.config.move_failed_files:
            promote(paths.source, paths.failed_copy_path)
            self.event_bus.publish(FailedFileMoved(path=paths.source, failed_copy_path=paths.failed_copy_path))
        return FileOutcome.FAILED

    def process_file(self, video_path: Path, target_vmaf: int) -> FileOutcome:
        """Runs one discovered file through the pipeline."""
        self.logger.debug(f"Iterate path: {video_path}")

        if is_junk(video_path):
            video_path.unlink()
            self.logger.info(f"JUNK_REMOVED: {video_path}")
            self.event_bus.publish(JunkRemoved(path=video_path))
            return FileOutcome.JUNK_REMOVED

        if not guess_video(video_path):
            self.event_bus.publish(FileSkipped(path=video_path, reason="non-video file"))
            return FileOutcome.SKIPPED_NON_VIDEO

        if not self.ffprobe_adapter.is_valid_video(video_path):
            self.event_bus.publish(FileSkipped(path=video_path, reason="invalid video file"))
            return FileOutcome.SKIPPED_INVALID

        paths = self.destination_paths(video_path)

        if paths.save_path.exists():
            return self._handle_existing_save(video_path, paths.save_path)

        if self.config.move_failed_files and paths.failed_copy_path.exists():
            raise FailedCopyConflict(video_path, paths.failed_copy_path)

        self._reserve_encoding_path(paths)

        self.event_bus.publish(EncodeStarted(path=video_path, encoding_path=paths.encoding_path))
        try:
            self.encoder_adapter.auto_encode(
                video_path,
                paths.encoding_path,
                target_vmaf,
                log_level=inherited_log_level(),
            )
        except EncoderProcessFailed as e:
            return self._handle_failure(paths, str(e))
        except OSError:
            self._release_reservation(paths)
            raise

        if paths.encoding_path.exists() and not self.ffprobe_adapter.is_valid_video(
            paths.encoding_path, encoded_output=True
        ):
            return self._handle_failure(paths, "invalid video file produced")

        self._save(video_path, paths.encoding_path, paths.save_path)
        return FileOutcome.SAVED

    def run(self, video_dir: Path, target_vmaf: int) -> RunSummary:
        """Processes every file under ``video_dir``; stops at the first fatal error."""
        self.logger.info(f"RUN_START: {video_dir} (vmaf={target_vmaf})")
        self.event_bus.publish(DiscoveryStarted(directory=video_dir))
        summary = RunSummary()
        for video_path in self.file_scanner.scan(video_dir):
            self._prepare_dirs()
            summary.record(self.process_file(video_path, target_vmaf))
        self.logger.info(f"RUN_END: {video_dir} processed={summary.total}")
        self.event_bus.publish(RunFinished(summary=summary))
        return summary

    def debug_single(self, video_path: Path, target_vmaf: int, output_path: Optional[Path] = None) -> Path:
        """Encodes one file keeping ab-av1's intermediate files in the current directory."""
        output_path = output_path or self.config.save_dir / "output.mp4"
        self.config.save_dir.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"Running debug single command: {video_path} vmaf={target_vmaf} output={output_path}")
        self.event_bus.publish(EncodeStarted(path=video_path, encoding_path=output_path))
        self.encoder_adapter.auto_encode(
            video_path,
            output_path,
            target_vmaf,
            debug_intermediate_files=True,
            log_level="debug",
        )
        return output_path

    def force_crf_single(self, video_path: Path, crf: int) -> Path:
        """Encodes one file at a fixed CQ and saves it like the batch pipeline would."""
        self._prepare_dirs()
        paths = self.destination_paths(video_path)

        if paths.save_path.exists():
            raise SavePathAlreadyExists(paths.save_path)

        self._reserve_encoding_path(paths)

        self.event_bus.publish(EncodeStarted(path=video_path, encoding_path=paths.encoding_path))
        try:
            self.encoder_adapter.force_crf(video_path, paths.encoding_path, crf)
        except EncoderProcessFailed:
            remove_if_exists(paths.encoding_path)
            raise
        except OSError:
            self._release_reservation(paths)
            raise

        if paths.encoding_path.exists() and not self.ffprobe_adapter.is_valid_video(
            paths.encoding_path, encoded_output=True
        ):
            paths.encoding_path.unlink()
            raise InvalidEncodedFile(video_path, paths.encoding_path)

        self._save(video_path, paths.encoding_path, paths.save_path)
        return paths.save_path
