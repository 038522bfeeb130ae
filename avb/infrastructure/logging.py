import logging
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "avb.log"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(log_dir: Path, debug: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """
    Route avb's log records to a single file.

    At INFO the file gets one status line per pipeline step (RUN_START,
    JUNK_REMOVED, AB_AV1_START/END, SAVED, ENCODE_FAILED, ...). With ``debug``
    every external command line (ffprobe, ab-av1, ffmpeg, renamer), its
    environment overrides and its exit status are added. Console notices are
    not logged here; they come from the event bus.

    Args:
        log_dir: Working directory (``tmp_dir``) holding the default avb.log
        debug: Log at DEBUG instead of INFO
        log_path: Explicit log file, from config or --log-path
    """
    log_file = Path(log_path) if log_path else (log_dir / LOG_FILE_NAME)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_file)],
        force=True  # a second call (tests, re-entry) replaces the old file handler
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Logging to {log_file} (level={'DEBUG' if debug else 'INFO'})")

    return logger
