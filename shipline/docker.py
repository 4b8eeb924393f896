"""Thin wrapper around docker and docker buildx.

This module has ZERO business logic.  It does not know about config,
versions, CI, or credentials parsing.  It runs commands and returns output.
"""

from __future__ import annotations

from shipline import log, process
from shipline.errors import CommandError


def login(host: str, username: str, password: str) -> None:
    """Login to *host* via ``docker login --password-stdin``."""
    log.mask(password)
    process.run(
        ["docker", "login", host, "-u", username, "--password-stdin"],
        input=password,
    )


def logout(host: str) -> None:
    """Logout from *host* (ignores errors)."""
    process.run(["docker", "logout", host], check=False)


def buildx_create(name: str) -> None:
    """Create a buildx builder named *name* and make it the current one."""
    process.run(["docker", "buildx", "create", "--name", name, "--use"])


def buildx_rm(name: str) -> None:
    """Remove the buildx builder *name* (ignores errors)."""
    process.run(["docker", "buildx", "rm", name], check=False)


def buildx_build(
    tags: list[str],
    platforms: list[str],
    *,
    context_dir: str = ".",
    dockerfile: str | None = None,
    labels: dict[str, str] | None = None,
    build_args: dict[str, str] | None = None,
    push: bool = True,
) -> None:
    """Run ``docker buildx build`` for *platforms*.

    Build output is streamed to the terminal so the user can follow progress.
    """
    cmd = ["docker", "buildx", "build", "--platform", ",".join(platforms)]
    for tag in tags:
        cmd += ["-t", tag]
    if dockerfile:
        cmd += ["-f", dockerfile]
    for key, val in (labels or {}).items():
        cmd += ["--label", f"{key}={val}"]
    for key, val in (build_args or {}).items():
        cmd += ["--build-arg", f"{key}={val}"]
    if push:
        cmd.append("--push")
    cmd.append(context_dir)
    process.run(cmd, capture=False)


def available() -> bool:
    """Return True if the docker CLI with the buildx plugin can be run."""
    try:
        result = process.run(["docker", "buildx", "version"], check=False, quiet=True)
    except CommandError:
        return False
    return result.returncode == 0
