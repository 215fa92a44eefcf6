"""workflow_gate

Checks that a CI workflow triggers code scanning in a way that lets pull
request results be compared against a baseline.

Pure logic only: no subprocess, network or environment access. Import
boundaries are enforced by ``tests/test_dependency_boundaries.py``.
"""

from .messages import format_workflow_cause, format_workflow_errors
from .patterns import pattern_is_superset
from .validate import WorkflowErrors, validate_workflow

__all__ = [
    "WorkflowErrors",
    "format_workflow_cause",
    "format_workflow_errors",
    "pattern_is_superset",
    "validate_workflow",
]
