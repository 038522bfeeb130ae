import logging
import os
from pathlib import Path
from typing import List

from avb.config.models import AppConfig
from avb.domain.exceptions import AutoEncodeFailed, ForceCrfFailed
from avb.infrastructure.process import ToolRunner

DEFAULT_ENCODER_LOG_LEVEL = "warn"


def inherited_log_level() -> str:
    """ab-av1 verbosity taken from our own RUST_LOG, 'warn' when unset."""
    return os.environ.get("RUST_LOG") or DEFAULT_ENCODER_LOG_LEVEL


class EncoderAdapter:
    """Runs the two AV1 encode modes, both NVENC, both blocking.

    Neither mode removes a partial output on failure; the caller owns that.
    """

    def __init__(self, runner: ToolRunner, config: AppConfig):
        self.runner = runner
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _build_auto_encode_command(
        self,
        input_path: Path,
        output_path: Path,
        target_vmaf: int,
        temp_dir: Path,
        keep: bool,
    ) -> List[str]:
        """Constructs the ab-av1 auto-encode command line arguments."""
        cmd = [
            "ab-av1", "auto-encode",
            "-e", "av1_nvenc",
            "--cuda",
            "--enc", "v:b=0",
            "--enc", "rc=vbr",
            "--enc", "temporal-aq=1",
            "--enc", "tune=hq",
            "--enc", "rc-lookahead=32",
            "--enc", "fps_mode=passthrough",
            "--enc", "sn",
            "--enc", "dn",
            "--acodec", "aac",
            "--preset", "p7",
            "--min-vmaf", str(target_vmaf),
            "--min-crf", str(self.config.min_crf),
            "--max-crf", str(self.config.max_crf),
            "--max-encoded-percent", str(self.config.max_encoded_percent),
            "--temp-dir", str(temp_dir),
            "-i", str(input_path),
            "-o", str(output_path),
        ]
        if keep:
            cmd.append("--keep")
        return cmd

    def auto_encode(
        self,
        input_path: Path,
        output_path: Path,
        target_vmaf: int,
        debug_intermediate_files: bool = False,
        log_level: str = DEFAULT_ENCODER_LOG_LEVEL,
    ) -> None:
        """Encodes to the lowest quality that still meets ``target_vmaf``.

        With ``debug_intermediate_files`` the sample encodes stay in the
        current directory for inspection instead of the scratch dir.
        """
        if debug_intermediate_files:
            temp_dir = Path(".")
        else:
            temp_dir = self.config.encoder_scratch_dir
        temp_dir.mkdir(parents=True, exist_ok=True)

        cmd = self._build_auto_encode_command(
            input_path, output_path, target_vmaf, temp_dir, keep=debug_intermediate_files
        )
        env = {
            "RUST_BACKTRACE": "1",
            "RUST_LOG": f"ab_av1={log_level}",
        }
        self.logger.info(f"AB_AV1_START: {input_path.name} (vmaf={target_vmaf}, out={output_path})")
        result = self.runner.run(cmd, env=env, capture=False)
        if not result.success:
            self.logger.warning(f"AB_AV1_END: {input_path.name} status=failed code={result.returncode}")
            raise AutoEncodeFailed(result.returncode)
        self.logger.info(f"AB_AV1_END: {input_path.name} status=completed")

    def _build_force_crf_command(self, input_path: Path, output_path: Path, crf: int) -> List[str]:
        """Constructs the fixed-quality ffmpeg command line arguments."""
        return [
            "ffmpeg",
            "-y",
            "-hwaccel", "cuda",
            "-hwaccel_output_format", "cuda",
            "-i", str(input_path),
            "-c:v", "av1_nvenc",
            "-b:v", "0",
            "-rc", "vbr",
            "-preset", "p7",
            "-fps_mode", "passthrough",
            "-tune", "hq",
            "-temporal-aq", "1",
            "-rc-lookahead", "32",
            "-g", "300",
            "-cq", str(crf),
            "-highbitdepth", "1",
            "-sn", "-dn",
            "-acodec", "aac",
            str(output_path),
        ]

    # VMAF misjudges some sources (e.g. VHS captures with frame vibration);
    # this lets the operator pick the quality by eye instead.
    def force_crf(self, input_path: Path, output_path: Path, crf: int) -> None:
        cmd = self._build_force_crf_command(input_path, output_path, crf)
        self.logger.info(f"FFMPEG_START: {input_path.name} (cq={crf}, out={output_path})")
        result = self.runner.run(cmd, capture=False)
        if not result.success:
            self.logger.warning(f"FFMPEG_END: {input_path.name} status=failed code={result.returncode}")
            raise ForceCrfFailed(result.returncode)
        self.logger.info(f"FFMPEG_END: {input_path.name} status=completed")
