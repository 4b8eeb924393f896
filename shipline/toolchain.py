"""Node.js toolchain provisioning for the release tool.

If a ``node`` with the requested major version is already on ``PATH``
nothing is installed.  Otherwise nvm installs it and the returned
environment has the new ``bin`` directory first on ``PATH``.
"""

from __future__ import annotations

import os
import re
import shlex
from collections.abc import Mapping
from pathlib import Path

from shipline import log, process
from shipline.errors import CommandError, ToolchainError

_VERSION_RE = re.compile(r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def _major(version: str) -> str | None:
    m = _VERSION_RE.match(version.strip())
    return m.group(1) if m else None


def node_version(env: Mapping[str, str]) -> str | None:
    """Return the version of the ``node`` on *env*'s PATH, without the ``v``."""
    try:
        result = process.run(["node", "--version"], check=False, quiet=True, env=env)
    except CommandError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip().lstrip("v") or None


def matches(installed: str | None, wanted: str) -> bool:
    """Return True if *installed* satisfies *wanted*.

    A bare major (``20``) matches any ``20.x.y``; a full version must
    match exactly.
    """
    if not installed:
        return False
    wanted = wanted.lstrip("v")
    if wanted.count(".") == 0:
        return _major(installed) == _major(wanted)
    return installed == wanted or installed.startswith(wanted + ".")


def _nvm_script(env: Mapping[str, str]) -> Path:
    nvm_dir = env.get("NVM_DIR") or str(Path(env.get("HOME", "~")).expanduser() / ".nvm")
    return Path(nvm_dir) / "nvm.sh"


def install_with_nvm(version: str, env: Mapping[str, str]) -> Path:
    """Install *version* through nvm and return its ``bin`` directory."""
    script = _nvm_script(env)
    if not script.is_file():
        raise ToolchainError(f"nvm not found at {script}; cannot install Node.js {version}")
    shell = (
        f". {shlex.quote(str(script))} >/dev/null"
        f" && nvm install {shlex.quote(version)} >/dev/null"
        f" && nvm which {shlex.quote(version)}"
    )
    try:
        result = process.run(["bash", "-c", shell], env=env)
    except CommandError as exc:
        raise ToolchainError(f"nvm install {version} failed: {exc.stderr}") from exc
    lines = result.stdout.strip().splitlines()
    if not lines:
        raise ToolchainError(f"nvm did not report a node binary for {version}")
    return Path(lines[-1]).parent


def ensure_node(version: str, env: Mapping[str, str] | None = None) -> dict[str, str]:
    """Make Node.js *version* available and return the environment to use."""
    env = dict(os.environ if env is None else env)
    installed = node_version(env)
    if matches(installed, version):
        log.info(f"Node.js {installed} already installed (wanted {version})")
        return env

    if installed:
        log.info(f"Node.js {installed} does not match {version}, installing")
    else:
        log.info(f"Node.js not found, installing {version}")
    bin_dir = install_with_nvm(version, env)
    env["PATH"] = f"{bin_dir}{os.pathsep}{env.get('PATH', '')}"
    log.success(f"Node.js {node_version(env) or version} ready ({bin_dir})")
    return env
