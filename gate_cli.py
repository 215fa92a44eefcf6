#!/usr/bin/env python3
"""
CLI for code-scanning workflow checks and SARIF uploads.

Commands:
  1) validate-workflow - check that workflows trigger on push and pull_request consistently
  2) resolve-ref       - print the ref results are reported against
  3) upload            - validate, combine and upload SARIF files

Usage:
  python gate_cli.py validate-workflow
  python gate_cli.py validate-workflow .github/workflows/codeql.yml --json
  python gate_cli.py resolve-ref
  python gate_cli.py upload results/ --repository octo/hello --mode runner
"""

from __future__ import annotations

from cli.dispatch import main


if __name__ == "__main__":
    raise SystemExit(main())
