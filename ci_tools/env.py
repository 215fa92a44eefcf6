"""ci_tools/env.py

Environment-variable access for the CI runtime.

Actions steps communicate through environment variables: a value exported by
one step is visible to later steps only if it is also appended to the file
named by ``GITHUB_ENV``. :func:`export_variable` does both.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Repo root = parent of ci_tools/
ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"


def load_env(dotenv_path: Optional[Path] = None) -> bool:
    """Load a ``.env`` file (repo root by default) without overriding the shell."""
    path = dotenv_path or ENV_PATH
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


def get_required_env(name: str) -> str:
    """Return ``$name`` or raise ValueError if it is unset or empty."""
    value = os.environ.get(name)
    if not value:
        raise ValueError(f"{name} environment variable must be set")
    return value


def is_local_run() -> bool:
    flag = os.environ.get("CODEQL_LOCAL_RUN", "")
    return bool(flag) and flag not in ("false", "0")


def export_variable(name: str, value: str) -> None:
    """Set ``name`` for this process and for later steps of the job."""
    os.environ[name] = value

    env_file = os.environ.get("GITHUB_ENV")
    if not env_file:
        return

    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        line = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
    else:
        line = f"{name}={value}\n"
    with open(env_file, "a", encoding="utf-8") as f:
        f.write(line)
    logger.debug("Exported %s to %s", name, env_file)
