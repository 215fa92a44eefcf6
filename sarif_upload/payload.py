"""sarif_upload/payload.py

Request body construction for the ingestion API.

Two shapes exist:

* ``actions`` - uploads from a workflow job; carries analysis identity
  (key, name, run id, environment) and, for pull requests, the base ref/SHA.
* ``runner``  - uploads from a standalone runner; commit, ref and SARIF only.
"""

from __future__ import annotations

import base64
import gzip
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ci_tools.io import read_json

from .types import GitHubVersion

logger = logging.getLogger(__name__)

WORKFLOW_STARTED_AT_ENV_VAR = "CODEQL_WORKFLOW_STARTED_AT"


def zip_sarif(sarif: str) -> str:
    """gzip + base64, the encoding the API expects in the ``sarif`` field."""
    return base64.b64encode(gzip.compress(sarif.encode("utf-8"))).decode("ascii")


def to_checkout_uri(checkout_path: str) -> str:
    return Path(checkout_path).resolve().as_uri()


def pull_request_base() -> Tuple[Optional[str], Optional[str]]:
    """Return (base_ref, base_sha) for pull_request events, else (None, None)."""
    if os.environ.get("GITHUB_EVENT_NAME") != "pull_request":
        return None, None
    event_path = os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return None, None

    event = read_json(event_path)
    base = ((event or {}).get("pull_request") or {}).get("base") or {}
    base_ref = base.get("ref")
    return (f"refs/heads/{base_ref}" if base_ref else None), base.get("sha")


def build_payload(
    *,
    commit_oid: str,
    ref: str,
    analysis_key: Optional[str],
    analysis_name: Optional[str],
    zipped_sarif: str,
    workflow_run_id: Optional[int],
    checkout_uri: str,
    environment: Optional[str],
    tool_names: List[str],
    github_version: GitHubVersion,
    mode: str,
) -> Dict[str, Any]:
    if mode == "actions":
        payload: Dict[str, Any] = {
            "commit_oid": commit_oid,
            "ref": ref,
            "analysis_key": analysis_key,
            "analysis_name": analysis_name,
            "sarif": zipped_sarif,
            "workflow_run_id": workflow_run_id,
            "checkout_uri": checkout_uri,
            "environment": environment,
            "started_at": os.environ.get(WORKFLOW_STARTED_AT_ENV_VAR),
            "tool_names": tool_names,
            "base_ref": None,
            "base_sha": None,
        }
        # TODO: drop the version gate once GHES 3.0 is out of support.
        if github_version.supports_base_ref():
            payload["base_ref"], payload["base_sha"] = pull_request_base()
        return payload

    return {
        "commit_sha": commit_oid,
        "ref": ref,
        "sarif": zipped_sarif,
        "checkout_uri": checkout_uri,
        "tool_name": tool_names[0] if tool_names else None,
    }
