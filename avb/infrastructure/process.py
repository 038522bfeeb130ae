import logging
import os
import subprocess
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel


class ToolResult(BaseModel):
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ToolRunner:
    """Runs an external tool to completion.

    The only place avb starts child processes, so tests can swap it for a fake.
    There is no timeout: a hung tool hangs the run.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def run(
        self,
        args: Sequence[str],
        env: Optional[Dict[str, str]] = None,
        capture: bool = True,
    ) -> ToolResult:
        """Runs ``args`` and waits for it.

        ``env`` entries are added on top of the current environment. With
        ``capture=False`` the child writes straight to our stdout/stderr.
        Raises OSError when the executable cannot be started.
        """
        cmd: List[str] = [str(a) for a in args]
        child_env = None
        if env:
            child_env = os.environ.copy()
            child_env.update(env)

        self.logger.debug(f"Command: {cmd} env={env or {}}")
        if capture:
            completed = subprocess.run(
                cmd,
                env=child_env,
                capture_output=True,
                text=True,
                errors="replace",
            )
            result = ToolResult(
                returncode=completed.returncode,
                stdout=completed.stdout or "",
                stderr=completed.stderr or "",
            )
        else:
            completed = subprocess.run(cmd, env=child_env)
            result = ToolResult(returncode=completed.returncode)
        self.logger.debug(f"Command status: {result.returncode} ({cmd[0]})")
        return result
