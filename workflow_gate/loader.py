"""workflow_gate/loader.py

Reading workflow files from a checkout.

PyYAML is imported lazily so the pure checks in :mod:`workflow_gate.validate`
stay importable without it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Union

from .validate import WorkflowErrors, validate_workflow

WORKFLOWS_DIR = Path(".github") / "workflows"


def load_workflow(path: Union[str, Path]) -> Any:
    """Parse a workflow file with ``yaml.safe_load``.

    Raises FileNotFoundError for a missing file and ValueError for YAML that
    does not parse.
    """
    import yaml  # type: ignore

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Workflow file not found: {p}")
    try:
        return yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Unable to parse workflow {p}: {e}") from e


def get_workflow_errors(path: Union[str, Path]) -> List[WorkflowErrors]:
    return validate_workflow(load_workflow(path))


def find_workflow_files(root: Union[str, Path]) -> List[Path]:
    """Return ``.github/workflows/*.yml`` and ``*.yaml`` under ``root``, sorted."""
    wf_dir = Path(root) / WORKFLOWS_DIR
    if not wf_dir.is_dir():
        return []
    found = [p for p in wf_dir.iterdir() if p.is_file() and p.suffix in (".yml", ".yaml")]
    return sorted(found, key=lambda p: p.name)
