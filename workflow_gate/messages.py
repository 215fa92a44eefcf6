"""workflow_gate/messages.py

Human-readable and machine-readable renderings of workflow diagnostics.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from .validate import WorkflowErrors

WORKFLOW_ERROR_MESSAGES: Dict[WorkflowErrors, str] = {
    WorkflowErrors.MissingHooks: (
        "Please specify on.push and on.pull_request hooks so that code scanning "
        "can compare pull requests against the state of the base branch."
    ),
    WorkflowErrors.MissingPushHook: (
        "Please specify an on.push hook so that code scanning can compare pull "
        "requests against the state of the base branch."
    ),
    WorkflowErrors.MissingPullRequestHook: (
        "Please specify an on.pull_request hook so that code scanning is "
        "explicitly run against pull requests."
    ),
    WorkflowErrors.PathsSpecified: (
        "Using on.push.paths can prevent code scanning from annotating new "
        "alerts in your pull requests."
    ),
    WorkflowErrors.MismatchedBranches: (
        "Please make sure that every branch in on.pull_request is also in "
        "on.push so that code scanning can compare pull requests against the "
        "state of the base branch."
    ),
    WorkflowErrors.CheckoutWrongHead: (
        "git checkout HEAD^2 is no longer necessary. Please remove this step: "
        "the merge commit is the analysis target for pull requests."
    ),
}


def format_workflow_errors(errors: Sequence[WorkflowErrors]) -> str:
    """Summary line plus one remediation bullet per diagnostic."""
    issues_were = "issue was" if len(errors) == 1 else "issues were"
    lines = [f"{len(errors)} {issues_were} detected with this workflow:"]
    for e in errors:
        lines.append(f"- {WORKFLOW_ERROR_MESSAGES[e]}")
    return "\n".join(lines)


def format_workflow_cause(errors: Sequence[WorkflowErrors]) -> Optional[str]:
    """Comma-joined diagnostic names (input order), or None when clean."""
    if not errors:
        return None
    return ",".join(e.name for e in errors)
