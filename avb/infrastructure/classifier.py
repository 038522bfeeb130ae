"""Name-only file classification: junk artifacts and likely videos."""

import mimetypes
import re
from pathlib import Path

# OS and editor leftovers that are never part of a media library.
JUNK_PATTERNS = [
    r"^npm-debug\.log$",
    r"^\..*\.swp$",
    r"^\.DS_Store$",
    r"^\.AppleDouble$",
    r"^\.LSOverride$",
    r"^Icon\r$",
    r"^\._.*",
    r"^\.AppleDB$",
    r"^\.AppleDesktop$",
    r"^\.Spotlight-V100$",
    r"\.Trashes",
    r"^__MACOSX$",
    r"~$",
    r"^Thumbs\.db$",
    r"^ehthumbs\.db$",
    r"^[Dd]esktop\.ini$",
    r"@eaDir$",
    r"^~\$.*",
    r"^\.~lock\..*#$",
    r"^\.directory$",
]

_JUNK_RE = re.compile("|".join(f"(?:{p})" for p in JUNK_PATTERNS))

# Containers the platform mime table often lacks.
_EXTRA_VIDEO_TYPES = {
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".flv": "video/x-flv",
    ".m2ts": "video/mp2t",
    ".mts": "video/mp2t",
    ".ts": "video/mp2t",
    ".m4v": "video/x-m4v",
    ".wmv": "video/x-ms-wmv",
    ".3gp": "video/3gpp",
    ".ogv": "video/ogg",
    ".vob": "video/dvd",
    ".rmvb": "video/vnd.rn-realvideo",
}

for _ext, _mime in _EXTRA_VIDEO_TYPES.items():
    mimetypes.add_type(_mime, _ext)


def is_junk(path: Path) -> bool:
    return bool(_JUNK_RE.search(Path(path).name))


def guess_video(path: Path) -> bool:
    """True when the file name alone suggests a video (no content sniffing)."""
    mime, _ = mimetypes.guess_type(Path(path).name, strict=False)
    if not mime:
        return False
    return mime.split("/", 1)[0] == "video"
