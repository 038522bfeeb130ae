import logging
import typer
from pathlib import Path
from typing import Optional

from avb.config.loader import DEFAULT_CONFIG_PATH, load_config
from avb.config.models import AppConfig
from avb.domain.exceptions import AvbError
from avb.infrastructure.logging import setup_logging
from avb.infrastructure.event_bus import EventBus
from avb.infrastructure.process import ToolRunner
from avb.infrastructure.file_scanner import FileScanner
from avb.infrastructure.ffprobe import FFprobeAdapter
from avb.infrastructure.encoder import EncoderAdapter
from avb.infrastructure.renamer import NameRenamer
from avb.pipeline.orchestrator import Orchestrator
from avb.ui.console import ConsoleReporter

app = typer.Typer(help="avb - AV1 batch encoder (ab-av1 / NVENC)")

ConfigOption = typer.Option(None, "--config", "-c", help=f"Path to YAML config (default: {DEFAULT_CONFIG_PATH})")
LogPathOption = typer.Option(None, "--log-path", help="Path to log file (overrides config)")
DebugOption = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")


def _load(config_path: Optional[Path], log_path: Optional[Path], debug: bool) -> AppConfig:
    if config_path is None:
        config = load_config(DEFAULT_CONFIG_PATH, required=False)
    else:
        config = load_config(config_path)
    if log_path is not None:
        config.log_path = str(log_path)
    if debug:
        config.debug = True
    return config


def _build_orchestrator(config: AppConfig) -> Orchestrator:
    bus = EventBus()
    ConsoleReporter(bus)
    runner = ToolRunner()
    return Orchestrator(
        config=config,
        event_bus=bus,
        file_scanner=FileScanner(),
        ffprobe_adapter=FFprobeAdapter(runner),
        encoder_adapter=EncoderAdapter(runner, config),
        renamer=NameRenamer(runner, config.renamer),
    )


def _run_guarded(command_name: str, config_path: Optional[Path], log_path: Optional[Path], debug: bool, action):
    try:
        config = _load(config_path, log_path, debug)
        logger = setup_logging(config.tmp_dir, debug=config.debug, log_path=config.resolved_log_path)
        logger.info(f"avb {command_name} started")
        logger.debug(f"Config: {config.model_dump()}")
        action(_build_orchestrator(config))
        logger.info(f"avb {command_name} finished")

    except KeyboardInterrupt:
        typer.secho("\nStopped by user (Ctrl+C)", fg=typer.colors.YELLOW)
        raise typer.Exit(code=130)

    except (AvbError, OSError, ValueError) as e:
        logging.getLogger(__name__).error(f"Fatal Error: {e}", exc_info=True)
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("all")
def run_all(
    video_dir: Path = typer.Argument(..., help="Directory to encode recursively"),
    target_vmaf: int = typer.Argument(..., min=0, max=100, help="Target VMAF score"),
    config_path: Optional[Path] = ConfigOption,
    log_path: Optional[Path] = LogPathOption,
    debug: bool = DebugOption,
):
    """Encode every video under VIDEO_DIR into the save directory."""
    _run_guarded("all", config_path, log_path, debug, lambda orch: orch.run(video_dir, target_vmaf))


@app.command("debug-single")
def debug_single(
    video_path: Path = typer.Argument(..., help="Video file to encode"),
    target_vmaf: int = typer.Argument(..., min=0, max=100, help="Target VMAF score"),
    config_path: Optional[Path] = ConfigOption,
    log_path: Optional[Path] = LogPathOption,
    debug: bool = DebugOption,
):
    """Encode one file, keeping ab-av1 intermediate files in the current directory."""
    _run_guarded("debug-single", config_path, log_path, debug, lambda orch: orch.debug_single(video_path, target_vmaf))


@app.command("force-crf-single")
def force_crf_single(
    video_path: Path = typer.Argument(..., help="Video file to encode"),
    crf: int = typer.Argument(..., min=0, max=63, help="Constant quality value passed to NVENC"),
    config_path: Optional[Path] = ConfigOption,
    log_path: Optional[Path] = LogPathOption,
    debug: bool = DebugOption,
):
    """Encode one file at a fixed quality and save it."""
    _run_guarded("force-crf-single", config_path, log_path, debug, lambda orch: orch.force_crf_single(video_path, crf))


if __name__ == "__main__":
    app()
