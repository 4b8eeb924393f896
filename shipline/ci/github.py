"""GitHub Actions CI backend.

Reads configuration from the GITHUB_* environment variables that GitHub
Actions injects into every workflow run.
"""

from __future__ import annotations

from collections.abc import Mapping

from shipline import git
from shipline.ci import CIBase
from shipline.errors import CommandError

_PR_EVENTS = {"pull_request", "pull_request_target"}


class GitHubCI(CIBase):
    """CI backend for GitHub Actions."""

    name = "github"

    @staticmethod
    def detect(env: Mapping[str, str]) -> bool:
        return env.get("GITHUB_ACTIONS") == "true"

    def sha(self) -> str | None:
        return self.env.get("GITHUB_SHA") or None

    def branch(self) -> str | None:
        """Return the head branch for PRs, the ref name otherwise."""
        if self.is_pr():
            return self.env.get("GITHUB_HEAD_REF") or None
        return self.env.get("GITHUB_REF_NAME") or None

    def is_pr(self) -> bool:
        return self.env.get("GITHUB_EVENT_NAME") in _PR_EVENTS

    def build_url(self) -> str | None:
        repo = self.env.get("GITHUB_REPOSITORY")
        run_id = self.env.get("GITHUB_RUN_ID")
        if not (repo and run_id):
            return None
        server = self.env.get("GITHUB_SERVER_URL", "https://github.com")
        return f"{server}/{repo}/actions/runs/{run_id}"

    def get_commit_message(self) -> str:
        """Return ``SHIPLINE_COMMIT_MESSAGE`` if set, else ask git.

        GitHub Actions does not expose the commit message as an env var.
        """
        msg = self.env.get("SHIPLINE_COMMIT_MESSAGE")
        if msg:
            return msg
        try:
            return git.last_message(self.workspace)
        except CommandError:
            return ""
