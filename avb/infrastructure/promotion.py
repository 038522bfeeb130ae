import errno
import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def partial_path(dst: Path) -> Path:
    """Hidden sibling that a cross-device copy is written to before it is swapped in."""
    return dst.with_name(f".{dst.name}.partial")


def promote(src: Path, dst: Path) -> None:
    """Moves ``src`` to ``dst``, atomically when both are on one filesystem.

    Across devices the copy goes to a hidden ``.partial`` sibling first and is
    swapped onto ``dst`` only once complete, so ``dst`` never holds a
    truncated file. A crash after the swap leaves both files, which the next
    run reads as "already saved".
    """
    try:
        os.rename(src, dst)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    staging = partial_path(dst)
    logger.info(f"PROMOTE_COPY: {src} -> {dst} (cross-device, via {staging.name})")
    try:
        shutil.copy2(src, staging)
        os.replace(staging, dst)
    except BaseException:
        remove_if_exists(staging)
        raise
    os.remove(src)


def reserve(path: Path) -> None:
    """Creates ``path`` empty, failing with FileExistsError if it is already there."""
    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    os.close(fd)


def remove_if_exists(path: Path) -> bool:
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True
