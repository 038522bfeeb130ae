import logging
import math
from pathlib import Path

from avb.domain.exceptions import DurationParseFailed, ProbeFailed
from avb.infrastructure.process import ToolRunner


class FFprobeAdapter:
    """Wrapper around ffprobe for stream geometry and container duration."""

    def __init__(self, runner: ToolRunner):
        self.runner = runner
        self.logger = logging.getLogger(__name__)

    def is_valid_video(self, file_path: Path, encoded_output: bool = False) -> bool:
        """True when the first video stream reports a positive width and height.

        A non-zero ffprobe exit means "not valid (yet)": a source may still be
        downloading. Output that cannot be parsed is a ProbeFailed for sources
        and plain invalid for a file we just encoded.
        """
        cmd = [
            "ffprobe",
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "csv=p=0",
            str(file_path),
        ]
        try:
            result = self.runner.run(cmd)
        except OSError as e:
            raise ProbeFailed(f"Failed to execute ffprobe check valid video: {e}") from e

        if not result.success:
            self.logger.info(f"FFPROBE_INVALID: {file_path} (exit {result.returncode})")
            return False

        try:
            width, height = self._parse_geometry(result.stdout)
        except ProbeFailed:
            if encoded_output:
                self.logger.warning(f"FFPROBE_INVALID: {file_path} (unparseable output {result.stdout!r})")
                return False
            raise

        return width > 0 and height > 0

    @staticmethod
    def _parse_geometry(stdout: str):
        first_line = stdout.split("\n", 1)[0].strip()
        parts = first_line.split(",")
        if len(parts) < 2:
            raise ProbeFailed(f"Failed to get width,height: {first_line!r}")
        width_str, height_str = parts[0].strip(), parts[1].strip()
        try:
            width = int(width_str)
        except ValueError:
            raise ProbeFailed(f"Failed to parse width ({width_str!r})")
        try:
            height = int(height_str)
        except ValueError:
            raise ProbeFailed(f"Failed to parse height ({height_str!r})")
        return width, height

    def rough_duration_seconds(self, file_path: Path) -> float:
        """Container-reported duration in seconds."""
        cmd = [
            "ffprobe",
            "-v", "quiet",
            "-show_entries", "format=duration",
            "-of", "csv=p=0",
            str(file_path),
        ]
        try:
            result = self.runner.run(cmd)
        except OSError as e:
            raise ProbeFailed(f"Failed to execute ffprobe show duration: {e}") from e

        secs_str = result.stdout.strip()
        try:
            secs = float(secs_str)
        except ValueError:
            raise DurationParseFailed(f"Failed to parse duration seconds string: {secs_str!r}")
        if not math.isfinite(secs) or secs < 0:
            raise DurationParseFailed(f"Failed to parse duration seconds string: {secs_str!r}")
        return secs
