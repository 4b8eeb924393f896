"""Thin wrapper around the git commands the pipeline needs.

Knows nothing about config or stages.  Every function takes the
workspace directory explicitly.
"""

from __future__ import annotations

from pathlib import Path

from shipline import process


def is_repo(workspace: Path) -> bool:
    """Return True if *workspace* is inside a git work tree."""
    if not workspace.is_dir():
        return False
    result = process.run(
        ["git", "rev-parse", "--is-inside-work-tree"],
        check=False,
        quiet=True,
        cwd=str(workspace),
    )
    return result.returncode == 0 and result.stdout.strip() == "true"


def clone(url: str, workspace: Path, ref: str | None = None) -> None:
    """Clone *url* into *workspace*, optionally checking out *ref*."""
    process.run(["git", "clone", url, str(workspace)], capture=False)
    if ref:
        checkout(workspace, ref)


def checkout(workspace: Path, ref: str) -> None:
    process.run(["git", "checkout", "--quiet", ref], cwd=str(workspace))


def fetch_tags(workspace: Path) -> None:
    """Fetch tags from origin so release tooling sees previous versions."""
    process.run(["git", "fetch", "--tags", "--force", "origin"], cwd=str(workspace))


def head_sha(workspace: Path) -> str:
    result = process.run(["git", "rev-parse", "HEAD"], quiet=True, cwd=str(workspace))
    return result.stdout.strip()


def current_branch(workspace: Path) -> str | None:
    """Return the checked-out branch name, or None on a detached HEAD."""
    result = process.run(
        ["git", "rev-parse", "--abbrev-ref", "HEAD"],
        check=False,
        quiet=True,
        cwd=str(workspace),
    )
    branch = result.stdout.strip()
    if result.returncode != 0 or not branch or branch == "HEAD":
        return None
    return branch


def subjects(workspace: Path, rev_range: str | None = None) -> list[str]:
    """Return commit subjects for *rev_range*, newest first.

    Without a range only the HEAD commit is returned.
    """
    cmd = ["git", "log", "--format=%s"]
    if rev_range:
        cmd.append(rev_range)
    else:
        cmd += ["-1", "HEAD"]
    result = process.run(cmd, cwd=str(workspace))
    return [line for line in result.stdout.splitlines() if line.strip()]


def last_message(workspace: Path) -> str:
    """Return the full message of the HEAD commit ("" if unavailable)."""
    result = process.run(
        ["git", "log", "-1", "--format=%B"],
        check=False,
        quiet=True,
        cwd=str(workspace),
    )
    if result.returncode != 0:
        return ""
    return result.stdout.strip()
