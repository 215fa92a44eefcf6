"""ci_tools/refs.py

Which ref and analysis identity a run reports results for.

Pull request runs check out the synthetic merge commit
(``refs/pull/<n>/merge``). If the workflow moved HEAD away from it, results
belong to the PR head instead, and the reported ref has to say so.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Callable, Optional

from .core_git import get_commit_oid as _git_commit_oid
from .env import export_variable, get_required_env, is_local_run

logger = logging.getLogger(__name__)

ANALYSIS_KEY_ENV_VAR = "CODEQL_ACTION_ANALYSIS_KEY"
UNKNOWN_JOB = "UNKNOWN-JOB"

_PULL_MERGE_REF_RE = re.compile(r"refs/pull/(\d+)/merge")


def get_ref(get_commit_oid: Callable[[], str] = _git_commit_oid) -> str:
    """Return the ref to report, e.g. ``refs/heads/main`` or ``refs/pull/1/head``.

    Raises ValueError if ``GITHUB_REF`` (or, for PR merge refs,
    ``GITHUB_SHA``) is unset or empty.
    """
    ref = get_required_env("GITHUB_REF")
    if not _PULL_MERGE_REF_RE.search(ref):
        return ref

    checkout_sha = get_commit_oid()
    if checkout_sha != get_required_env("GITHUB_SHA"):
        head_ref = _PULL_MERGE_REF_RE.sub(r"refs/pull/\1/head", ref)
        logger.debug("HEAD is not the merge commit; reporting %s instead of %s", head_ref, ref)
        return head_ref
    return ref


def prepare_local_run_environment() -> None:
    """Fill in job identity for runs outside the hosted runner.

    Only acts when ``CODEQL_LOCAL_RUN`` is truthy; non-empty values are kept.
    """
    if not is_local_run():
        return

    logger.debug("Action is running locally.")
    if not os.environ.get("GITHUB_JOB"):
        export_variable("GITHUB_JOB", UNKNOWN_JOB)
    if not os.environ.get(ANALYSIS_KEY_ENV_VAR):
        export_variable(ANALYSIS_KEY_ENV_VAR, f"LOCAL-RUN:{os.environ['GITHUB_JOB']}")


def get_analysis_key(workflow_path: Optional[str] = None) -> str:
    """Return ``<workflow path>:<job>``, reusing an earlier exported key."""
    existing = os.environ.get(ANALYSIS_KEY_ENV_VAR)
    if existing:
        return existing

    if not workflow_path:
        raise ValueError(f"{ANALYSIS_KEY_ENV_VAR} is not set and no workflow path was given")

    analysis_key = f"{workflow_path}:{get_required_env('GITHUB_JOB')}"
    export_variable(ANALYSIS_KEY_ENV_VAR, analysis_key)
    return analysis_key


def get_workflow_run_id() -> int:
    value = get_required_env("GITHUB_RUN_ID")
    try:
        run_id = int(value)
    except ValueError:
        run_id = -1
    if run_id < 0:
        raise ValueError(f"GITHUB_RUN_ID must define a non-negative integer, got {value!r}")
    return run_id
