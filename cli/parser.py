from __future__ import annotations

import argparse

from sarif_upload.types import UPLOAD_MODES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sarif-gate",
        description="Check code-scanning workflow triggers and upload SARIF results.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging (DEBUG level)")

    sub = parser.add_subparsers(dest="cmd", required=True)

    vw = sub.add_parser("validate-workflow", help="Check workflow trigger configuration")
    vw.add_argument(
        "paths",
        nargs="*",
        help="Workflow files. Default: every file under .github/workflows of --checkout-path.",
    )
    vw.add_argument("--checkout-path", default=".", help="Repository checkout (default: cwd)")
    vw.add_argument("--json", action="store_true", help="JSON output")

    sub.add_parser("resolve-ref", help="Print the ref results should be reported against")

    up = sub.add_parser("upload", help="Upload a SARIF file or a directory of SARIF files")
    up.add_argument("sarif_path", help="SARIF file, or directory containing *.sarif files")
    up.add_argument(
        "--repository",
        default=None,
        help="owner/repo (default: $GITHUB_REPOSITORY)",
    )
    up.add_argument("--mode", choices=UPLOAD_MODES, default="actions", help="Upload endpoint flavour")
    up.add_argument("--checkout-path", default=".", help="Repository checkout (default: cwd)")
    up.add_argument("--ref", default=None, help="Override the resolved ref")
    up.add_argument("--commit", default=None, help="Override the resolved commit SHA")
    up.add_argument("--analysis-name", default=None, help="(actions mode) analysis name")
    up.add_argument("--environment", default=None, help="(actions mode) matrix environment as JSON")
    up.add_argument(
        "--ghes-version",
        default=None,
        help="Target GitHub Enterprise Server version (default: github.com)",
    )
    return parser
