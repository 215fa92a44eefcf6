"""sarif_upload/upload.py

End-to-end SARIF upload: resolve files, validate, combine, encode, send.

Only one upload is allowed per workflow job in ``actions`` mode. The guard is
an environment sentinel exported for the rest of the job.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ci_tools.env import export_variable

from .api import upload_payload
from .fingerprints import add_fingerprints
from .payload import build_payload, to_checkout_uri, zip_sarif
from .sarif import (
    combine_sarif_files,
    count_results_in_sarif,
    find_sarif_files,
    get_tool_names,
    validate_sarif_file_schema,
)
from .types import ApiDetails, GitHubVersion, RepositoryNwo, UploadStats

logger = logging.getLogger(__name__)

UPLOAD_SENTINEL_ENV_VAR = "CODEQL_UPLOAD_SARIF"


def upload(
    sarif_path: Union[str, Path],
    *,
    repository_nwo: RepositoryNwo,
    commit_oid: str,
    ref: str,
    analysis_key: Optional[str],
    analysis_name: Optional[str],
    workflow_run_id: Optional[int],
    checkout_path: str,
    environment: Optional[str],
    github_version: GitHubVersion,
    api_details: ApiDetails,
    mode: str,
) -> UploadStats:
    """Upload a single SARIF file or every ``*.sarif`` file in a directory."""
    return upload_files(
        find_sarif_files(sarif_path),
        repository_nwo=repository_nwo,
        commit_oid=commit_oid,
        ref=ref,
        analysis_key=analysis_key,
        analysis_name=analysis_name,
        workflow_run_id=workflow_run_id,
        checkout_path=checkout_path,
        environment=environment,
        github_version=github_version,
        api_details=api_details,
        mode=mode,
    )


def upload_files(
    sarif_files: Sequence[Union[str, Path]],
    *,
    repository_nwo: RepositoryNwo,
    commit_oid: str,
    ref: str,
    analysis_key: Optional[str],
    analysis_name: Optional[str],
    workflow_run_id: Optional[int],
    checkout_path: str,
    environment: Optional[str],
    github_version: GitHubVersion,
    api_details: ApiDetails,
    mode: str,
) -> UploadStats:
    logger.info("Uploading sarif files: %s", [str(f) for f in sarif_files])

    if mode == "actions":
        # Exported variables only persist between steps on a workflow runner.
        if os.environ.get(UPLOAD_SENTINEL_ENV_VAR):
            raise RuntimeError(
                "Aborting upload: only one SARIF upload is allowed per job"
            )
        export_variable(UPLOAD_SENTINEL_ENV_VAR, UPLOAD_SENTINEL_ENV_VAR)

    for f in sarif_files:
        validate_sarif_file_schema(f)

    sarif_payload = combine_sarif_files(sarif_files)
    sarif_payload = add_fingerprints(sarif_payload, checkout_path)
    logger.debug("SARIF payload after fingerprinting: %s", sarif_payload)
    zipped_sarif = zip_sarif(sarif_payload)
    tool_names: List[str] = get_tool_names(sarif_payload)

    payload = build_payload(
        commit_oid=commit_oid,
        ref=ref,
        analysis_key=analysis_key,
        analysis_name=analysis_name,
        zipped_sarif=zipped_sarif,
        workflow_run_id=workflow_run_id,
        checkout_uri=to_checkout_uri(checkout_path),
        environment=environment,
        tool_names=tool_names,
        github_version=github_version,
        mode=mode,
    )

    stats = UploadStats(
        raw_upload_size_bytes=len(sarif_payload),
        zipped_upload_size_bytes=len(zipped_sarif),
        num_results_in_sarif=count_results_in_sarif(sarif_payload),
    )
    logger.debug("Raw upload size: %s bytes", stats.raw_upload_size_bytes)
    logger.debug("Base64 zipped upload size: %s bytes", stats.zipped_upload_size_bytes)
    logger.debug("Number of results in upload: %s", stats.num_results_in_sarif)

    upload_payload(payload, repository_nwo, api_details, mode)
    return stats
