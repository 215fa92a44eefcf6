from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

from packaging.version import InvalidVersion, Version

UploadMode = Literal["actions", "runner"]
UPLOAD_MODES: Tuple[str, ...] = ("actions", "runner")

DEFAULT_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class RepositoryNwo:
    """Repository "name with owner" (``owner/repo``)."""
    owner: str
    repo: str

    @classmethod
    def parse(cls, nwo: str) -> "RepositoryNwo":
        parts = (nwo or "").strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f'"{nwo}" is not a valid repository name')
        return cls(owner=parts[0], repo=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ApiDetails:
    """Connection settings for the results-ingestion API."""
    auth: str
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls) -> "ApiDetails":
        token = os.environ.get("GITHUB_TOKEN") or ""
        if not token:
            raise ValueError("GITHUB_TOKEN environment variable must be set")
        api_url = (os.environ.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/")
        return cls(auth=token, api_url=api_url)


@dataclass(frozen=True)
class GitHubVersion:
    """Server flavour: ``dotcom`` or ``ghes`` with its version string."""
    type: str = "dotcom"
    version: Optional[str] = None

    def supports_base_ref(self) -> bool:
        """dotcom, or GHES >= 3.1, accepts ``base_ref``/``base_sha``."""
        if self.type == "dotcom":
            return True
        if not self.version:
            return False
        try:
            return Version(self.version) >= Version("3.1")
        except InvalidVersion:
            return False


@dataclass(frozen=True)
class UploadStats:
    raw_upload_size_bytes: int
    zipped_upload_size_bytes: int
    num_results_in_sarif: int
