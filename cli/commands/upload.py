from __future__ import annotations

import argparse
import os
from dataclasses import asdict
from typing import Optional

import requests

from ci_tools.core_git import get_commit_oid
from ci_tools.env import get_required_env
from ci_tools.refs import (
    ANALYSIS_KEY_ENV_VAR,
    get_analysis_key,
    get_ref,
    get_workflow_run_id,
    prepare_local_run_environment,
)
from cli.common import ExitCode
from sarif_upload.api import get_workflow_path
from sarif_upload.types import ApiDetails, GitHubVersion, RepositoryNwo
from sarif_upload.upload import upload


def _resolve_analysis_key(nwo: RepositoryNwo, run_id: int, api_details: ApiDetails) -> str:
    if os.environ.get(ANALYSIS_KEY_ENV_VAR):
        return get_analysis_key()
    return get_analysis_key(get_workflow_path(nwo, run_id, api_details))


def run_upload(args: argparse.Namespace) -> int:
    checkout_path = str(args.checkout_path)
    try:
        nwo = RepositoryNwo.parse(args.repository or get_required_env("GITHUB_REPOSITORY"))
        api_details = ApiDetails.from_env()

        commit_oid = args.commit or get_commit_oid(checkout_path)
        ref = args.ref or get_ref(lambda: get_commit_oid(checkout_path))

        analysis_key: Optional[str] = None
        analysis_name: Optional[str] = None
        workflow_run_id: Optional[int] = None
        if args.mode == "actions":
            prepare_local_run_environment()
            workflow_run_id = get_workflow_run_id()
            analysis_key = _resolve_analysis_key(nwo, workflow_run_id, api_details)
            analysis_name = args.analysis_name or os.environ.get("GITHUB_WORKFLOW")

        github_version = GitHubVersion("ghes", args.ghes_version) if args.ghes_version else GitHubVersion()

        print("\n🚀 Uploading SARIF")
        print(f"  Repository : {nwo}")
        print(f"  Ref        : {ref}")
        print(f"  Commit     : {commit_oid}")

        stats = upload(
            args.sarif_path,
            repository_nwo=nwo,
            commit_oid=commit_oid,
            ref=ref,
            analysis_key=analysis_key,
            analysis_name=analysis_name,
            workflow_run_id=workflow_run_id,
            checkout_path=checkout_path,
            environment=args.environment,
            github_version=github_version,
            api_details=api_details,
            mode=args.mode,
        )
    except (FileNotFoundError, ValueError, RuntimeError, requests.RequestException) as e:
        raise SystemExit(f"Upload failed: {e}")

    for k, v in asdict(stats).items():
        print(f"  {k:<26}: {v}")
    print("\n✅ Upload completed.")
    return ExitCode.ok
