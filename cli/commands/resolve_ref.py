from __future__ import annotations

import argparse

from ci_tools.refs import get_ref
from cli.common import ExitCode


def run_resolve_ref(args: argparse.Namespace) -> int:
    try:
        ref = get_ref()
    except ValueError as e:
        raise SystemExit(str(e))
    print(ref)
    return ExitCode.ok
