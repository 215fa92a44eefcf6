"""sarif_upload/api.py

All ingestion-API HTTP calls live here.

Network I/O stays separate from SARIF handling and payload construction so
those can be tested without a server.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import requests

from .types import ApiDetails, RepositoryNwo

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 60


def _headers(api_details: ApiDetails) -> Dict[str, str]:
    return {
        "Authorization": f"token {api_details.auth}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "sarif-gate",
    }


def is_test_mode() -> bool:
    return os.environ.get("TEST_MODE") == "true"


def upload_payload(
    payload: Dict[str, Any],
    repository_nwo: RepositoryNwo,
    api_details: ApiDetails,
    mode: str,
) -> None:
    """Send one analysis upload. Raises ``requests.HTTPError`` on a non-2xx reply."""
    logger.info("Uploading results")

    # Test runs exercise everything up to the request itself.
    if is_test_mode():
        return

    base = f"{api_details.api_url}/repos/{repository_nwo.owner}/{repository_nwo.repo}"
    if mode == "actions":
        method, url = "PUT", f"{base}/code-scanning/analysis"
    else:
        method, url = "POST", f"{base}/code-scanning/sarifs"

    resp = requests.request(method, url, json=payload, headers=_headers(api_details), timeout=TIMEOUT_SECONDS)
    logger.debug("response status: %s", resp.status_code)
    resp.raise_for_status()
    logger.info("Successfully uploaded results")


def get_workflow_path(repository_nwo: RepositoryNwo, run_id: int, api_details: ApiDetails) -> str:
    """Return the repo-relative path of the workflow that started ``run_id``."""
    headers = _headers(api_details)
    run_url = f"{api_details.api_url}/repos/{repository_nwo.owner}/{repository_nwo.repo}/actions/runs/{run_id}"

    resp = requests.get(run_url, headers=headers, timeout=30)
    resp.raise_for_status()
    workflow_url = (resp.json() or {}).get("workflow_url")
    if not workflow_url:
        raise RuntimeError(f"Workflow run {run_id} has no workflow_url")

    resp = requests.get(workflow_url, headers=headers, timeout=30)
    resp.raise_for_status()
    path = (resp.json() or {}).get("path")
    if not path:
        raise RuntimeError(f"Workflow {workflow_url} has no path")
    return path
