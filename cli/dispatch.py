from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict, List, Optional

from ci_tools.env import load_env
from cli.commands.resolve_ref import run_resolve_ref
from cli.commands.upload import run_upload
from cli.commands.validate_workflow import run_validate_workflow
from cli.parser import build_parser

COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "validate-workflow": run_validate_workflow,
    "resolve-ref": run_resolve_ref,
    "upload": run_upload,
}


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    # Always load .env from repo root so local runs behave like CI runs
    load_env()

    args = build_parser().parse_args(argv)
    configure_logging(bool(args.debug))
    return int(COMMANDS[args.cmd](args))
