"""CI runner abstraction and auto-detection.

The ``detect()`` function inspects environment variables and returns the
appropriate runner backend.  All other code should interact with the CI
runner through the :class:`CIBase` interface -- never import a backend
directly.
"""

from __future__ import annotations

import os
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

# Pattern: [skip release], [skip push], ...
_SKIP_RE = re.compile(r"\[skip\s+([^\]]+)\]", re.IGNORECASE)


class CIBase(ABC):
    """Abstract base class for CI runner backends."""

    name: str = "ci"

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        workspace: Path | None = None,
    ) -> None:
        self.env = os.environ if env is None else env
        self.workspace = workspace or Path.cwd()

    @staticmethod
    @abstractmethod
    def detect(env: Mapping[str, str]) -> bool:
        """Return True if *env* belongs to this CI runner."""

    @abstractmethod
    def sha(self) -> str | None:
        """Return the commit SHA under build."""

    @abstractmethod
    def branch(self) -> str | None:
        """Return the short branch name under build."""

    @abstractmethod
    def is_pr(self) -> bool:
        """Return True if this is a pull-request build."""

    @abstractmethod
    def build_url(self) -> str | None:
        """Return the URL of this run in the runner's UI."""

    @abstractmethod
    def get_commit_message(self) -> str:
        """Return the message of the commit that triggered this run."""

    def should_skip(self, step: str) -> bool:
        """Check if *step* should be skipped based on the commit message.

        Parses ``[skip <step>]`` directives.  A directive for a parent
        step also covers its sub-steps: ``[skip push]`` skips
        ``push:latest`` too.

        Examples::

            [skip push]        → should_skip("push") == True
                                 should_skip("push:latest") == True
            [skip push:latest] → should_skip("push:latest") == True
                                 should_skip("push") == False
        """
        message = self.get_commit_message()
        if not message:
            return False

        directives = {
            match.group(1).strip().lower() for match in _SKIP_RE.finditer(message)
        }
        if step.lower() in directives:
            return True
        if ":" in step:
            parent = step.split(":")[0]
            if parent.lower() in directives:
                return True
        return False


def detect(
    env: Mapping[str, str] | None = None,
    workspace: Path | None = None,
) -> CIBase:
    """Auto-detect the current CI runner and return a backend instance.

    Falls back to :class:`~shipline.ci.local.LocalCI` when no runner is
    detected.
    """
    env = os.environ if env is None else env

    from shipline.ci.jenkins import JenkinsCI
    if JenkinsCI.detect(env):
        return JenkinsCI(env, workspace)

    from shipline.ci.github import GitHubCI
    if GitHubCI.detect(env):
        return GitHubCI(env, workspace)

    from shipline.ci.local import LocalCI
    return LocalCI(env, workspace)
