from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict, List

from cli.common import ExitCode, print_json
from workflow_gate.loader import find_workflow_files, get_workflow_errors
from workflow_gate.messages import format_workflow_cause, format_workflow_errors


def run_validate_workflow(args: argparse.Namespace) -> int:
    paths = [Path(p) for p in args.paths] or find_workflow_files(args.checkout_path)
    if not paths:
        print(f"No workflow files found under {Path(args.checkout_path).resolve()}/.github/workflows")
        return ExitCode.usage

    reports: List[Dict[str, Any]] = []
    for path in paths:
        try:
            errors = get_workflow_errors(path)
        except (FileNotFoundError, ValueError) as e:
            raise SystemExit(str(e))

        reports.append(
            {
                "path": str(path),
                "errors": [e.name for e in errors],
                "cause": format_workflow_cause(errors),
            }
        )
        if args.json:
            continue
        if errors:
            print(f"⚠️ {path}")
            print(format_workflow_errors(errors))
        else:
            print(f"✅ {path}: no issues")

    if args.json:
        print_json(reports)

    return ExitCode.findings if any(r["errors"] for r in reports) else ExitCode.ok
