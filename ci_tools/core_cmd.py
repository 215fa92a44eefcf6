"""ci_tools/core_cmd.py

Command-execution helper shared by the git queries.

:func:`run_cmd` runs a subprocess (no ``shell=True``), captures its output and
reports the exit code instead of raising on failure.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def run_cmd(
    cmd: List[str],
    *,
    cwd: Optional[Path] = None,
    timeout_seconds: int = 0,
    env: Optional[Dict[str, str]] = None,
) -> CmdResult:
    """Run a subprocess and capture stdout/stderr.

    Never raises on non-zero exit codes. A missing executable is reported as
    exit code 127 so callers can treat "git not installed" like any other
    failed query.
    """
    t0 = time.time()

    # If env is provided, merge it onto the current process environment.
    env2 = None
    if env is not None:
        env2 = os.environ.copy()
        env2.update(env)

    command_str = " ".join(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            text=True,
            capture_output=True,
            timeout=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
            env=env2,
        )
    except FileNotFoundError as e:
        logger.debug("Command not found: %s (%s)", command_str, e)
        return CmdResult(
            exit_code=127,
            elapsed_seconds=time.time() - t0,
            command_str=command_str,
            stdout="",
            stderr=str(e),
        )

    elapsed = time.time() - t0
    if proc.returncode != 0 and proc.stderr:
        logger.debug("%s exited %s: %s", command_str, proc.returncode, proc.stderr.strip())

    return CmdResult(
        exit_code=proc.returncode,
        elapsed_seconds=elapsed,
        command_str=command_str,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
