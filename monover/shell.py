"""Shell and git utilities.

Provides a thin wrapper around subprocess calls for running git, plus the
phase header used to separate the stages of a release run in the log.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

log = logging.getLogger(__name__)


def git(*args: str, check: bool = True, cwd: Path | str | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).
        cwd: Directory to run git in. Defaults to the process cwd.

    Returns:
        Stripped stdout from the git command.

    Raises:
        subprocess.CalledProcessError: If check is True and git fails. The
            captured stderr is available on the exception.
    """
    log.debug("git %s", " ".join(args))
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=check, cwd=cwd
    )
    return result.stdout.strip()


def step(msg: str) -> None:
    """Log a visually distinct step header.

    Used to separate major phases of a release run in terminal output.
    """
    log.info("\n%s\n%s\n%s", "─" * 60, msg, "─" * 60)
