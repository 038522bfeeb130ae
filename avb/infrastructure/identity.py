import hashlib
import os
from pathlib import Path

from avb.domain.exceptions import InvalidVideoPath

TARGET_SUFFIX = ".mkv"


def location_hash(path: Path) -> str:
    """Hex BLAKE2b digest of the path bytes (not the file contents).

    Names the in-flight encode, so it has to be stable across runs and must
    work before the file exists.
    """
    hasher = hashlib.blake2b(digest_size=32)
    hasher.update(os.fsencode(os.fspath(path)))
    return hasher.hexdigest()


def encoding_path(encoding_dir: Path, path: Path) -> Path:
    return encoding_dir / f"{location_hash(path)}{TARGET_SUFFIX}"


def split_slug(filename: str):
    """Splits off the last dot-delimited segment only: 'a.b.c.mkv' -> ('a.b.c', 'mkv')."""
    stem, dot, ext = filename.rpartition(".")
    if not dot or not stem:
        # 'movie' and '.hidden' have no extension to replace
        return filename, ""
    return stem, ext


def destination_slug(save_dir: Path, path: Path) -> Path:
    """Save path for ``path`` before any renaming: '<save_dir>/<stem>.mkv'."""
    filename = Path(path).name
    if not filename:
        raise InvalidVideoPath(Path(path))
    stem, _ = split_slug(filename)
    return save_dir / f"{stem}{TARGET_SUFFIX}"
