"""Conventional Commits validation of commit subjects.

Each subject must read ``type(scope): summary`` where *type* is one of
:data:`ALLOWED_TYPES`, the scope is optional, and the summary is at most
50 characters.  Merge commits are skipped.  Validation stops at the
first subject that does not conform.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from shipline import git, log
from shipline.errors import CommitValidationError

ALLOWED_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
)

MAX_SUMMARY = 50

COMMIT_RE = re.compile(
    r"^(?P<type>" + "|".join(ALLOWED_TYPES) + r")"
    r"(?:\((?P<scope>[^()\s][^()]*)\))?"
    r": (?P<summary>\S.{0," + str(MAX_SUMMARY - 1) + r"})$"
)

_MERGE_PREFIX = "Merge "


@dataclass
class ValidationResult:
    checked: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def is_valid(message: str) -> bool:
    """Return True if *message* is a conforming Conventional Commit subject."""
    return COMMIT_RE.match(message) is not None


def validate(messages: Iterable[str]) -> ValidationResult:
    """Validate *messages* line by line.

    Multi-line entries are split so that every line is checked.  Raises
    :class:`CommitValidationError` for the first non-conforming line.
    """
    result = ValidationResult()
    for entry in messages:
        for line in entry.splitlines():
            line = line.rstrip()
            if not line:
                continue
            if line.startswith(_MERGE_PREFIX):
                log.info(f"Skipping merge commit: {line}")
                result.skipped.append(line)
                continue
            if not is_valid(line):
                log.error(f"Invalid commit message: {line}")
                raise CommitValidationError(line)
            log.success(f"Valid commit message: {line}")
            result.checked.append(line)
    return result


def collect(workspace: Path, rev_range: str | None = None) -> list[str]:
    """Return the commit subjects to validate for *rev_range*."""
    return git.subjects(workspace, rev_range)
