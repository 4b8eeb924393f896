"""Jenkins CI backend.

Reads the variables Jenkins (and the multibranch/git plugins) inject into
every build: ``GIT_COMMIT``, ``BRANCH_NAME`` or ``GIT_BRANCH``,
``CHANGE_ID`` for pull requests, and ``BUILD_URL``.
"""

from __future__ import annotations

from collections.abc import Mapping

from shipline import git
from shipline.ci import CIBase
from shipline.errors import CommandError


class JenkinsCI(CIBase):
    """CI backend for Jenkins pipelines."""

    name = "jenkins"

    @staticmethod
    def detect(env: Mapping[str, str]) -> bool:
        return bool(env.get("JENKINS_URL") or env.get("JENKINS_HOME"))

    def sha(self) -> str | None:
        return self.env.get("GIT_COMMIT") or None

    def branch(self) -> str | None:
        """Return ``BRANCH_NAME``, or ``GIT_BRANCH`` without its remote prefix."""
        name = self.env.get("BRANCH_NAME")
        if name:
            return name
        ref = self.env.get("GIT_BRANCH")
        if not ref:
            return None
        if ref.startswith("refs/heads/"):
            return ref[len("refs/heads/"):]
        if "/" in ref and ref.split("/", 1)[0] in ("origin", "upstream"):
            return ref.split("/", 1)[1]
        return ref

    def is_pr(self) -> bool:
        return bool(self.env.get("CHANGE_ID"))

    def build_url(self) -> str | None:
        return self.env.get("BUILD_URL") or None

    def get_commit_message(self) -> str:
        try:
            return git.last_message(self.workspace)
        except CommandError:
            return ""
