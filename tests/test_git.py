"""Unit tests for shipline.git."""

from __future__ import annotations

import subprocess
import unittest
from pathlib import Path
from unittest.mock import patch

from shipline import git

_WS = Path("/tmp/workspace")


def _proc(stdout: str = "", rc: int = 0) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=rc, stdout=stdout, stderr="")


class TestSubjects(unittest.TestCase):

    @patch("shipline.git.process.run", return_value=_proc("feat: a\n\nfix: b\n"))
    def test_range(self, mock_run):
        self.assertEqual(git.subjects(_WS, "origin/main..HEAD"), ["feat: a", "fix: b"])
        self.assertEqual(
            mock_run.call_args.args[0],
            ["git", "log", "--format=%s", "origin/main..HEAD"],
        )
        self.assertEqual(mock_run.call_args.kwargs["cwd"], str(_WS))

    @patch("shipline.git.process.run", return_value=_proc("feat: a\n"))
    def test_head_only(self, mock_run):
        git.subjects(_WS)
        self.assertEqual(mock_run.call_args.args[0], ["git", "log", "--format=%s", "-1", "HEAD"])


class TestBranch(unittest.TestCase):

    @patch("shipline.git.process.run", return_value=_proc("main\n"))
    def test_branch(self, _mock_run):
        self.assertEqual(git.current_branch(_WS), "main")

    @patch("shipline.git.process.run", return_value=_proc("HEAD\n"))
    def test_detached(self, _mock_run):
        self.assertIsNone(git.current_branch(_WS))


class TestIsRepo(unittest.TestCase):

    def test_missing_dir(self):
        self.assertFalse(git.is_repo(Path("/nonexistent/shipline/ws")))

    @patch("shipline.git.process.run", return_value=_proc("true\n"))
    @patch.object(Path, "is_dir", return_value=True)
    def test_repo(self, _mock_dir, _mock_run):
        self.assertTrue(git.is_repo(_WS))

    @patch("shipline.git.process.run", return_value=_proc("", rc=128))
    @patch.object(Path, "is_dir", return_value=True)
    def test_not_repo(self, _mock_dir, _mock_run):
        self.assertFalse(git.is_repo(_WS))


class TestClone(unittest.TestCase):

    @patch("shipline.git.process.run", return_value=_proc())
    def test_clone_and_checkout(self, mock_run):
        git.clone("https://example.com/r.git", _WS, "abc123")
        cmds = [c.args[0] for c in mock_run.call_args_list]
        self.assertEqual(cmds[0], ["git", "clone", "https://example.com/r.git", str(_WS)])
        self.assertEqual(cmds[1], ["git", "checkout", "--quiet", "abc123"])


if __name__ == "__main__":
    unittest.main()
