"""Semantic release invocation and next-version extraction.

The release tool decides the next version from commit history and prints
``The next release version is X.Y.Z``.  That line is the only thing this
module relies on; no line means no release.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from shipline import log, process
from shipline.config import Config

NEXT_VERSION_RE = re.compile(
    r"The next release version is "
    r"(?P<version>\d+\.\d+\.\d+(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)"
    r"(?!\w|\.\w)"
)


def extract_version(output: str) -> str | None:
    """Return the next version announced in *output*, or None."""
    m = NEXT_VERSION_RE.search(output)
    return m.group("version") if m else None


def release_command(cfg: Config, *, dry_run: bool | None = None) -> list[str]:
    """Return the release command line, with ``--dry-run`` when requested."""
    cmd = list(cfg.release.command)
    if dry_run is None:
        dry_run = cfg.release.dry_run
    if dry_run and "--dry-run" not in cmd:
        cmd.append("--dry-run")
    return cmd


def _release_env(cfg: Config, env: Mapping[str, str]) -> dict[str, str]:
    out = dict(env)
    if cfg.github_token:
        log.mask(cfg.github_token)
        out.setdefault("GITHUB_TOKEN", cfg.github_token)
        out.setdefault("GH_TOKEN", cfg.github_token)
    return out


def install_dependencies(cfg: Config, env: Mapping[str, str]) -> None:
    """Run ``npm ci`` when enabled and the workspace has a package.json."""
    if not cfg.release.install:
        return
    if not (Path(cfg.workspace) / "package.json").is_file():
        log.warn("release.install is set but no package.json found; skipping npm ci")
        return
    process.run(["npm", "ci"], capture=False, env=env, cwd=str(cfg.workspace))


def run(
    cfg: Config,
    env: Mapping[str, str],
    *,
    dry_run: bool | None = None,
) -> str | None:
    """Run the release tool and return the next version (None if no release).

    A non-zero exit raises :class:`~shipline.errors.CommandError`.
    """
    env = _release_env(cfg, env)
    install_dependencies(cfg, env)

    cmd = release_command(cfg, dry_run=dry_run)
    log.timer_start("release")
    result = process.run(cmd, env=env, cwd=str(cfg.workspace))
    log.timer_stop("release")
    log.output(result.stdout)

    version = extract_version(result.stdout)
    if version:
        log.success(f"Next release version: {version}")
    else:
        log.info("No release version announced; release stages will be skipped")
    return version
