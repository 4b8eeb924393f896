"""Local (no-CI) backend.

Used as the fallback when shipline runs outside any CI runner, e.g. to
dry-run a release from a developer checkout.  Everything comes from git.
"""

from __future__ import annotations

from collections.abc import Mapping

from shipline import git
from shipline.ci import CIBase
from shipline.errors import CommandError


class LocalCI(CIBase):
    """Fallback backend for local runs."""

    name = "local"

    @staticmethod
    def detect(env: Mapping[str, str]) -> bool:
        # LocalCI is the fallback; it always "matches".
        return True

    def sha(self) -> str | None:
        try:
            return git.head_sha(self.workspace) or None
        except CommandError:
            return None

    def branch(self) -> str | None:
        try:
            return git.current_branch(self.workspace)
        except CommandError:
            return None

    def is_pr(self) -> bool:
        return False

    def build_url(self) -> str | None:
        return self.env.get("BUILD_URL") or None

    def get_commit_message(self) -> str:
        try:
            return git.last_message(self.workspace)
        except CommandError:
            return ""
