"""workflow_gate/validate.py

Structural checks over a parsed CI workflow document.

The input is whatever a YAML/JSON loader produced, so nothing about its shape
is trusted. Every lookup goes through a small accessor that answers "not
applicable" on a type mismatch instead of raising. The only output is an
ordered list of :class:`WorkflowErrors`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, List, Optional

from .patterns import GLOBSTAR, pattern_is_superset

WRONG_HEAD_CHECKOUT = "git checkout HEAD^2"

_MISSING = object()


class WorkflowErrors(Enum):
    MissingHooks = "MissingHooks"
    MissingPushHook = "MissingPushHook"
    MissingPullRequestHook = "MissingPullRequestHook"
    PathsSpecified = "PathsSpecified"
    MismatchedBranches = "MismatchedBranches"
    CheckoutWrongHead = "CheckoutWrongHead"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _get(obj: Any, key: Any, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key, default)
    return default


def _get_triggers(doc: Any) -> Any:
    """Return the ``on`` block, or ``_MISSING``.

    PyYAML follows YAML 1.1 and loads a bare ``on:`` key as boolean True, so
    both spellings are accepted.
    """
    if not isinstance(doc, Mapping):
        return _MISSING
    if "on" in doc:
        return doc["on"]
    for key, value in doc.items():
        # identity check: ``1 == True`` would otherwise match integer keys
        if key is True:
            return value
    return _MISSING


def branch_patterns(trigger: Any) -> List[str]:
    """Normalize a trigger's ``branches`` filter to a list of glob patterns.

    Anything that is not a usable filter means "all branches" (``["**"]``).
    Scalars inside a list are stringified, so YAML ``4.1`` compares as
    ``"4.1"``.
    """
    branches = _get(trigger, "branches")
    if isinstance(branches, str):
        return [branches]
    if _is_sequence(branches):
        patterns = [str(b) for b in branches if b is not None]
        if patterns:
            return patterns
    return [GLOBSTAR]


def branches_are_covered(push_trigger: Any, pull_request_trigger: Any) -> bool:
    """True if every pull_request branch pattern is covered by a push pattern."""
    push = branch_patterns(push_trigger)
    return all(
        any(pattern_is_superset(q, p) for q in push)
        for p in branch_patterns(pull_request_trigger)
    )


def _has_paths_filter(push_trigger: Any) -> bool:
    paths = _get(push_trigger, "paths")
    if paths is None:
        return False
    if isinstance(paths, (str, Mapping)) or _is_sequence(paths):
        return len(paths) > 0
    return True


def _checks_out_wrong_head(doc: Any) -> bool:
    jobs = _get(doc, "jobs")
    if not isinstance(jobs, Mapping):
        return False
    for job in jobs.values():
        steps = _get(job, "steps")
        if not _is_sequence(steps):
            continue
        for step in steps:
            run = _get(step, "run")
            if isinstance(run, str) and WRONG_HEAD_CHECKOUT in run:
                return True
    return False


def _hook_error(missing_push: bool, missing_pull_request: bool) -> Optional[WorkflowErrors]:
    if missing_push and missing_pull_request:
        return WorkflowErrors.MissingHooks
    if missing_push:
        return WorkflowErrors.MissingPushHook
    if missing_pull_request:
        return WorkflowErrors.MissingPullRequestHook
    return None


def _sequence_hook_error(events: Sequence[Any]) -> Optional[WorkflowErrors]:
    # push is looked up first, so a list naming neither event reports push
    if "push" not in events:
        return WorkflowErrors.MissingPushHook
    if "pull_request" not in events:
        return WorkflowErrors.MissingPullRequestHook
    return None


def validate_workflow(doc: Any) -> List[WorkflowErrors]:
    """Return the diagnostics for a parsed workflow, in check order.

    Order: hook presence, ``PathsSpecified``, ``MismatchedBranches``,
    ``CheckoutWrongHead``. Never raises.

    The filter checks only look at the mapping form. ``PathsSpecified`` needs a
    ``push`` key and ``MismatchedBranches`` needs both keys; neither runs once
    ``MissingHooks`` has fired.
    """
    errors: List[WorkflowErrors] = []

    triggers = _get_triggers(doc)
    trigger_map: Optional[Mapping[Any, Any]] = None

    if isinstance(triggers, str):
        hook_error = _hook_error(triggers != "push", triggers != "pull_request")
    elif isinstance(triggers, Mapping):
        trigger_map = triggers
        hook_error = _hook_error("push" not in triggers, "pull_request" not in triggers)
    elif _is_sequence(triggers):
        hook_error = _sequence_hook_error(triggers)
    else:
        hook_error = WorkflowErrors.MissingHooks

    if hook_error is not None:
        errors.append(hook_error)

    if trigger_map is not None and hook_error is not WorkflowErrors.MissingHooks:
        if "push" in trigger_map and _has_paths_filter(trigger_map["push"]):
            errors.append(WorkflowErrors.PathsSpecified)
        if "push" in trigger_map and "pull_request" in trigger_map:
            if not branches_are_covered(trigger_map["push"], trigger_map["pull_request"]):
                errors.append(WorkflowErrors.MismatchedBranches)

    if _checks_out_wrong_head(doc):
        errors.append(WorkflowErrors.CheckoutWrongHead)

    return errors
