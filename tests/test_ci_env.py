import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from ci_tools.core_cmd import run_cmd
from ci_tools.core_git import get_commit_oid
from ci_tools.env import export_variable, get_required_env, is_local_run, load_env


class TestRequiredEnv(unittest.TestCase):
    def test_set_value_is_returned(self) -> None:
        with patch.dict(os.environ, {"SARIF_GATE_TEST_VAR": "x"}, clear=False):
            self.assertEqual("x", get_required_env("SARIF_GATE_TEST_VAR"))

    def test_unset_or_empty_raises(self) -> None:
        with patch.dict(os.environ, {"SARIF_GATE_TEST_VAR": ""}, clear=False):
            with self.assertRaises(ValueError) as ctx:
                get_required_env("SARIF_GATE_TEST_VAR")
            self.assertIn("SARIF_GATE_TEST_VAR environment variable must be set", str(ctx.exception))


class TestIsLocalRun(unittest.TestCase):
    def test_flag_values(self) -> None:
        for value, expected in [("", False), ("false", False), ("0", False), ("true", True), ("1", True)]:
            with self.subTest(value=value):
                with patch.dict(os.environ, {"CODEQL_LOCAL_RUN": value}, clear=False):
                    self.assertEqual(expected, is_local_run())


class TestExportVariable(unittest.TestCase):
    def test_appends_to_github_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            env_file = Path(td) / "github_env"
            env_file.write_text("", encoding="utf-8")
            with patch.dict(os.environ, {"GITHUB_ENV": str(env_file)}, clear=False):
                export_variable("SARIF_GATE_TEST_VAR", "value")
                export_variable("SARIF_GATE_TEST_MULTI", "a\nb")

                self.assertEqual("value", os.environ["SARIF_GATE_TEST_VAR"])
                text = env_file.read_text(encoding="utf-8")
                self.assertIn("SARIF_GATE_TEST_VAR=value\n", text)
                self.assertIn("SARIF_GATE_TEST_MULTI<<ghadelimiter_", text)
                self.assertIn("\na\nb\n", text)

    def test_without_github_env_only_sets_process_env(self) -> None:
        with patch.dict(os.environ, {"GITHUB_ENV": ""}, clear=False):
            export_variable("SARIF_GATE_TEST_VAR", "v2")
            self.assertEqual("v2", os.environ["SARIF_GATE_TEST_VAR"])


class TestLoadEnv(unittest.TestCase):
    def test_does_not_override_shell(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            dotenv = Path(td) / ".env"
            dotenv.write_text("SARIF_GATE_A=from_file\nSARIF_GATE_B=from_file\n", encoding="utf-8")
            with patch.dict(os.environ, {"SARIF_GATE_A": "from_shell"}, clear=False):
                os.environ.pop("SARIF_GATE_B", None)
                self.assertTrue(load_env(dotenv))
                self.assertEqual("from_shell", os.environ["SARIF_GATE_A"])
                self.assertEqual("from_file", os.environ["SARIF_GATE_B"])

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            self.assertFalse(load_env(Path(td) / ".env"))


class TestCommitOid(unittest.TestCase):
    def test_falls_back_to_github_sha_outside_a_repo(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with patch.dict(os.environ, {"GITHUB_SHA": "c" * 40}, clear=False):
                self.assertEqual("c" * 40, get_commit_oid(td))

    def test_missing_executable_is_an_exit_code(self) -> None:
        res = run_cmd(["sarif-gate-no-such-binary"])
        self.assertEqual(127, res.exit_code)
        self.assertFalse(res.ok)


if __name__ == "__main__":
    unittest.main()
