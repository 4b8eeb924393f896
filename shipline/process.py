"""Subprocess runner shared by the git, docker, node and release wrappers.

This module has ZERO business logic.  It runs a command, logs it with
secrets masked, and raises :class:`~shipline.errors.CommandError` on
failure unless told otherwise.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping

from shipline import log
from shipline.errors import CommandError


def run(
    cmd: list[str],
    *,
    capture: bool = True,
    check: bool = True,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
    cwd: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *cmd* and return the completed process.

    Pass ``capture=False`` to stream output to the terminal (long builds),
    ``quiet=True`` to skip the ``$ cmd`` log line.  A missing executable
    is reported as a :class:`CommandError` with return code 127, the same
    as a shell would.
    """
    if not quiet:
        log.info(f"$ {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture,
            text=True,
            env=dict(env) if env is not None else None,
            input=input,
            cwd=cwd,
        )
    except FileNotFoundError as exc:
        raise CommandError(cmd, 127, str(exc)) from exc
    if check and result.returncode != 0:
        stderr = result.stderr.strip() if result.stderr else ""
        raise CommandError(cmd, result.returncode, stderr)
    return result
