"""sarif_upload/sarif.py

SARIF file helpers for the upload path.

* :func:`find_sarif_files`            - a file, or every ``*.sarif`` in a directory
* :func:`validate_sarif_file_schema`  - structural check before anything is sent
* :func:`combine_sarif_files`         - one log with every run, single version
* :func:`count_results_in_sarif` / :func:`get_tool_names` - upload metadata
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from jsonschema import Draft7Validator

from ci_tools.io import read_json

logger = logging.getLogger(__name__)

SARIF_SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "sarif-2.1.0-structure.json"


@lru_cache(maxsize=1)
def _sarif_validator() -> Draft7Validator:
    return Draft7Validator(read_json(SARIF_SCHEMA_PATH))


def _load_sarif(path: Union[str, Path]) -> Dict[str, Any]:
    try:
        return read_json(path)
    except json.JSONDecodeError as e:
        raise ValueError(f'Unable to parse "{path}" as JSON: {e}') from e


def find_sarif_files(sarif_path: Union[str, Path]) -> List[Path]:
    """Resolve the upload input to a list of SARIF files.

    A directory contributes its direct ``*.sarif`` children (sorted). Raises
    FileNotFoundError for a missing path and ValueError for a directory with
    no SARIF files.
    """
    p = Path(sarif_path)
    if not p.exists():
        raise FileNotFoundError(f"Path does not exist: {p}")
    if not p.is_dir():
        return [p]

    files = sorted(f.resolve() for f in p.iterdir() if f.is_file() and f.name.endswith(".sarif"))
    if not files:
        raise ValueError(f'No SARIF files found to upload in "{p}".')
    return files


def validate_sarif_file_schema(sarif_file: Union[str, Path]) -> None:
    """Raise ValueError if the file is not a structurally valid SARIF log."""
    sarif = _load_sarif(sarif_file)
    errors = sorted(_sarif_validator().iter_errors(sarif), key=lambda e: e.json_path)
    if not errors:
        return

    for e in errors:
        logger.debug("SARIF error details for %s at %s: %s", sarif_file, e.json_path, e.message)
    details = "\n".join(f"- {e.json_path}: {e.message}" for e in errors)
    raise ValueError(f'Unable to upload "{sarif_file}" as it is not valid SARIF:\n{details}')


def combine_sarif_files(sarif_files: Sequence[Union[str, Path]]) -> str:
    """Merge several SARIF logs into one JSON string.

    All inputs must declare the same ``version``.
    """
    combined: Dict[str, Any] = {"version": None, "runs": []}

    for sarif_file in sarif_files:
        sarif = _load_sarif(sarif_file)
        if not isinstance(sarif, dict):
            raise ValueError(f'"{sarif_file}" does not contain a SARIF log object')
        version = sarif.get("version")
        if combined["version"] is None:
            combined["version"] = version
        elif combined["version"] != version:
            raise ValueError(
                f"Different SARIF versions encountered: {combined['version']} and {version}"
            )
        combined["runs"].extend(sarif.get("runs") or [])

    return json.dumps(combined)


def count_results_in_sarif(sarif: str) -> int:
    total = 0
    for run in json.loads(sarif).get("runs") or []:
        total += len(run.get("results") or [])
    return total


def get_tool_names(sarif: str) -> List[str]:
    """Unique ``runs[].tool.driver.name`` values, first-seen order."""
    names: List[str] = []
    for run in json.loads(sarif).get("runs") or []:
        name = ((run.get("tool") or {}).get("driver") or {}).get("name")
        if isinstance(name, str) and name and name not in names:
            names.append(name)
    return names
