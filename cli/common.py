"""cli.common

Small shared helpers for CLI command modules.
"""

from __future__ import annotations

import json
from typing import Any


class ExitCode:
    ok = 0
    error = 1
    usage = 2
    findings = 3


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=False))
