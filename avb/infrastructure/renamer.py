import logging
from pathlib import Path
from typing import Optional

from avb.config.models import RenamerConfig
from avb.domain.exceptions import (
    InvalidVideoPath,
    RenamerProcessFailed,
    RenamedNameTooManyBytes,
    RenamedNameTooManyChars,
)
from avb.infrastructure.process import ToolRunner


def fits_limits(name: str, chars_limit: int, bytes_limit: int) -> bool:
    return len(name) <= chars_limit and len(name.encode("utf-8")) <= bytes_limit


class NameRenamer:
    """Derives destination file names, shortening long ones with an external command.

    Names are never truncated here: two long names cut to the same prefix
    would overwrite each other in the save directory.
    """

    def __init__(self, runner: ToolRunner, rule: Optional[RenamerConfig] = None):
        self.runner = runner
        self.rule = rule
        self.logger = logging.getLogger(__name__)

    def resolve(self, path: Path) -> str:
        filename = Path(path).name
        if not filename:
            raise InvalidVideoPath(Path(path))
        rule = self.rule
        if rule is None or fits_limits(filename, rule.chars_limit, rule.bytes_limit):
            return filename

        self.logger.info(
            f"RENAME: {filename} exceeds limits (chars={rule.chars_limit}, bytes={rule.bytes_limit})"
        )
        try:
            result = self.runner.run([rule.command, *rule.args, str(path)])
        except OSError as e:
            raise RenamerProcessFailed(str(e), None) from e
        if not result.success:
            raise RenamerProcessFailed(result.stderr, result.returncode)

        renamed = result.stdout.strip()
        if len(renamed) > rule.chars_limit:
            raise RenamedNameTooManyChars(renamed, rule.chars_limit)
        if len(renamed.encode("utf-8")) > rule.bytes_limit:
            raise RenamedNameTooManyBytes(renamed, rule.bytes_limit)
        self.logger.info(f"RENAME: {filename} -> {renamed}")
        return renamed
