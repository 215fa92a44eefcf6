import base64
import gzip
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from sarif_upload.api import get_workflow_path, upload_payload
from sarif_upload.types import ApiDetails, GitHubVersion, RepositoryNwo
from sarif_upload.upload import UPLOAD_SENTINEL_ENV_VAR, upload


NWO = RepositoryNwo("octo", "hello")
API = ApiDetails(auth="t0ken", api_url="https://ghe.example.com/api/v3")


def _sarif(tool: str, n_results: int) -> dict:
    return {
        "version": "2.1.0",
        "runs": [
            {
                "tool": {"driver": {"name": tool}},
                "results": [{"message": {"text": "x"}} for _ in range(n_results)],
            }
        ],
    }


def _response(status: int = 202, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body or {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"HTTP {status}")
    return resp


def _upload(sarif_path: Path, checkout: str, mode: str):
    return upload(
        sarif_path,
        repository_nwo=NWO,
        commit_oid="a" * 40,
        ref="refs/heads/main",
        analysis_key="wf.yml:analyze",
        analysis_name="CodeQL",
        workflow_run_id=7,
        checkout_path=checkout,
        environment=None,
        github_version=GitHubVersion(),
        api_details=API,
        mode=mode,
    )


class TestUpload(unittest.TestCase):
    def setUp(self) -> None:
        self._env = patch.dict(
            os.environ,
            {UPLOAD_SENTINEL_ENV_VAR: "", "GITHUB_ENV": "", "TEST_MODE": "", "GITHUB_EVENT_NAME": "push"},
            clear=False,
        )
        self._env.start()
        self.addCleanup(self._env.stop)

    def test_runner_mode_posts_combined_sarif(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "a.sarif").write_text(json.dumps(_sarif("semgrep", 2)), encoding="utf-8")
            (root / "b.sarif").write_text(json.dumps(_sarif("snyk", 1)), encoding="utf-8")

            with patch("sarif_upload.api.requests.request", return_value=_response()) as req:
                stats = _upload(root, td, "runner")

            self.assertEqual(3, stats.num_results_in_sarif)
            method, url = req.call_args.args
            self.assertEqual("POST", method)
            self.assertEqual("https://ghe.example.com/api/v3/repos/octo/hello/code-scanning/sarifs", url)

            body = req.call_args.kwargs["json"]
            self.assertEqual("a" * 40, body["commit_sha"])
            self.assertEqual("semgrep", body["tool_name"])
            self.assertTrue(body["checkout_uri"].startswith("file://"))
            sarif = json.loads(gzip.decompress(base64.b64decode(body["sarif"])))
            self.assertEqual(2, len(sarif["runs"]))
            self.assertEqual("token t0ken", req.call_args.kwargs["headers"]["Authorization"])
            # runner mode does not claim the per-job sentinel
            self.assertEqual("", os.environ[UPLOAD_SENTINEL_ENV_VAR])

    def test_uploaded_sarif_carries_line_fingerprints(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            (root / "app.py").write_text("print('hi')\n", encoding="utf-8")
            sarif = _sarif("semgrep", 1)
            sarif["runs"][0]["results"][0]["locations"] = [
                {"physicalLocation": {"artifactLocation": {"uri": "app.py"}, "region": {"startLine": 1}}}
            ]
            p = root / "r.sarif"
            p.write_text(json.dumps(sarif), encoding="utf-8")

            with patch("sarif_upload.api.requests.request", return_value=_response()) as req:
                _upload(p, td, "runner")

        body = req.call_args.kwargs["json"]
        uploaded = json.loads(gzip.decompress(base64.b64decode(body["sarif"])))
        result = uploaded["runs"][0]["results"][0]
        self.assertRegex(result["partialFingerprints"]["primaryLocationLineHash"], r"^[0-9a-f]+:1$")

    def test_actions_mode_allows_one_upload_per_job(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "r.sarif"
            p.write_text(json.dumps(_sarif("semgrep", 0)), encoding="utf-8")

            with patch("sarif_upload.api.requests.request", return_value=_response()) as req:
                _upload(p, td, "actions")
                method, url = req.call_args.args
                self.assertEqual("PUT", method)
                self.assertTrue(url.endswith("/repos/octo/hello/code-scanning/analysis"))
                self.assertEqual(7, req.call_args.kwargs["json"]["workflow_run_id"])

                with self.assertRaises(RuntimeError):
                    _upload(p, td, "actions")
                self.assertEqual(1, req.call_count)

    def test_invalid_sarif_is_not_sent(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "bad.sarif"
            p.write_text(json.dumps({"version": "2.1.0", "runs": [{}]}), encoding="utf-8")

            with patch("sarif_upload.api.requests.request") as req:
                with self.assertRaises(ValueError):
                    _upload(p, td, "runner")
            req.assert_not_called()

    def test_http_error_propagates(self) -> None:
        with patch("sarif_upload.api.requests.request", return_value=_response(403)):
            with self.assertRaises(requests.HTTPError):
                upload_payload({}, NWO, API, "runner")

    def test_test_mode_skips_request(self) -> None:
        with patch.dict(os.environ, {"TEST_MODE": "true"}, clear=False):
            with patch("sarif_upload.api.requests.request") as req:
                upload_payload({}, NWO, API, "actions")
        req.assert_not_called()


class TestWorkflowPath(unittest.TestCase):
    def test_follows_workflow_url(self) -> None:
        responses = [
            _response(200, {"workflow_url": "https://ghe.example.com/api/v3/repos/octo/hello/actions/workflows/9"}),
            _response(200, {"path": ".github/workflows/codeql.yml"}),
        ]
        with patch("sarif_upload.api.requests.get", side_effect=responses) as get:
            self.assertEqual(".github/workflows/codeql.yml", get_workflow_path(NWO, 7, API))
        self.assertEqual(
            "https://ghe.example.com/api/v3/repos/octo/hello/actions/runs/7",
            get.call_args_list[0].args[0],
        )

    def test_missing_workflow_url_raises(self) -> None:
        with patch("sarif_upload.api.requests.get", return_value=_response(200, {})):
            with self.assertRaises(RuntimeError):
                get_workflow_path(NWO, 7, API)


class TestApiDetails(unittest.TestCase):
    def test_from_env(self) -> None:
        env = {"GITHUB_TOKEN": "abc", "GITHUB_API_URL": "https://ghe.example.com/api/v3/"}
        with patch.dict(os.environ, env, clear=False):
            details = ApiDetails.from_env()
        self.assertEqual("abc", details.auth)
        self.assertEqual("https://ghe.example.com/api/v3", details.api_url)

    def test_token_required(self) -> None:
        with patch.dict(os.environ, {"GITHUB_TOKEN": ""}, clear=False):
            with self.assertRaises(ValueError):
                ApiDetails.from_env()


if __name__ == "__main__":
    unittest.main()
