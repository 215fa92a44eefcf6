"""ci_tools/core_git.py

Git metadata helpers for the checkout being analyzed.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

from .core_cmd import run_cmd

logger = logging.getLogger(__name__)


def get_commit_oid(checkout_path: Optional[Union[str, Path]] = None) -> str:
    """Return the SHA of the commit currently checked out.

    Falls back to ``GITHUB_SHA`` when git is unavailable or the path is not a
    repository (e.g. a shallow runner workspace without ``.git``).
    """
    cmd = ["git"]
    if checkout_path:
        cmd += ["-C", str(checkout_path)]
    cmd += ["rev-parse", "HEAD"]

    res = run_cmd(cmd, timeout_seconds=20)
    sha = (res.stdout or "").strip()
    if res.ok and sha:
        return sha

    logger.info("Failed to call git to get current commit. Continuing with data from environment: %s", res.stderr.strip())
    return os.environ.get("GITHUB_SHA", "")
