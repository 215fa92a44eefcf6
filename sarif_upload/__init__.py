"""sarif_upload

Packaging and upload of SARIF result files to the code-scanning API.
"""

from .types import ApiDetails, GitHubVersion, RepositoryNwo, UploadStats
from .upload import upload, upload_files

__all__ = [
    "ApiDetails",
    "GitHubVersion",
    "RepositoryNwo",
    "UploadStats",
    "upload",
    "upload_files",
]
