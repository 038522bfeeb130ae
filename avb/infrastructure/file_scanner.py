import os
from pathlib import Path
from typing import Generator
from avb.domain.exceptions import DirectoryUnreadable

class FileScanner:
    """Recursively lists every regular file under a directory."""

    def scan(self, root_dir: Path) -> Generator[Path, None, None]:
        """Yields absolute file paths in sorted order.

        Each call starts a fresh walk. Raises DirectoryUnreadable as soon as the
        root or any subdirectory cannot be listed, since a partial listing would
        silently skip files.
        """
        root_dir = Path(root_dir).absolute()
        if not root_dir.is_dir():
            raise DirectoryUnreadable(root_dir, "not a directory")

        def _on_error(error: OSError):
            raise DirectoryUnreadable(Path(error.filename or root_dir), error.strerror or str(error))

        for root, dirs, files in os.walk(str(root_dir), onerror=_on_error):
            root_path = Path(root)

            # Ensure deterministic traversal: sort directories and files
            dirs.sort()
            files.sort()

            for file_name in files:
                file_path = root_path / file_name
                # os.walk lists symlinks and specials next to files
                if file_path.is_file():
                    yield file_path
