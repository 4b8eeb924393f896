""".shipline.yaml parsing and environment overrides.

This module has ZERO side effects.  It reads YAML and the environment and
returns dataclasses.  It does not run git, docker or node, know about CI,
or touch the network.

Precedence (highest first): CLI flags (applied by :mod:`shipline.cli`),
environment variables, the config file, built-in defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from shipline.errors import ShiplineError

_CONFIG_PATHS = [
    ".shipline.yaml",
    ".shipline/config.yaml",
]

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CONTEXT = "continuous-integration/shipline"
DEFAULT_PLATFORMS = ["linux/amd64", "linux/arm64"]

# ── Dataclasses ──────────────────────────────────────────────────────


@dataclass
class ReleaseConfig:
    """How the release tool is installed and invoked."""

    node_version: str = "20"
    command: list[str] = field(
        default_factory=lambda: ["npx", "--yes", "semantic-release"]
    )
    branches: list[str] = field(default_factory=lambda: ["main", "master"])
    dry_run: bool = False
    install: bool = False


@dataclass
class BuildConfig:
    """Container image build settings."""

    image: str | None = None
    platforms: list[str] = field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    context: str = "."
    dockerfile: str | None = None
    tag_latest: bool = True
    create_builder: bool = True
    build_args: dict[str, str] = field(default_factory=dict)


@dataclass
class StatusConfig:
    """GitHub commit status reporting."""

    repo: str | None = None
    api_url: str = DEFAULT_API_URL
    context: str = DEFAULT_CONTEXT
    report_pending: bool = True
    timeout: float = 10.0


@dataclass
class Config:
    """Top-level pipeline configuration."""

    workspace: Path = field(default_factory=Path.cwd)
    repo_url: str | None = None
    commit_range: str | None = None
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    status: StatusConfig = field(default_factory=StatusConfig)

    # Secrets are only ever read from the environment.
    github_token: str | None = None
    registry_credentials: str | None = None


# ── Parsing ──────────────────────────────────────────────────────────


def _as_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return [str(v) for v in value]
    raise ShiplineError(f"{key}: expected a list or string, got {type(value).__name__}")


def _parse_release(data: dict[str, Any]) -> ReleaseConfig:
    section = data.get("release", {}) or {}
    cfg = ReleaseConfig()
    if "node_version" in section:
        cfg.node_version = str(section["node_version"])
    if "command" in section:
        cfg.command = _as_list(section["command"], "release.command")
    if "branches" in section:
        cfg.branches = _as_list(section["branches"], "release.branches")
    cfg.dry_run = bool(section.get("dry_run", cfg.dry_run))
    cfg.install = bool(section.get("install", cfg.install))
    return cfg


def _parse_build(data: dict[str, Any]) -> BuildConfig:
    section = data.get("build", {}) or {}
    cfg = BuildConfig(
        image=section.get("image"),
        context=str(section.get("context", ".")),
        dockerfile=section.get("dockerfile"),
        tag_latest=bool(section.get("tag_latest", True)),
        create_builder=bool(section.get("create_builder", True)),
        build_args={str(k): str(v) for k, v in (section.get("args") or {}).items()},
    )
    if "platforms" in section:
        cfg.platforms = _as_list(section["platforms"], "build.platforms")
    return cfg


def _parse_status(data: dict[str, Any]) -> StatusConfig:
    section = data.get("status", {}) or {}
    return StatusConfig(
        repo=section.get("repo"),
        api_url=str(section.get("api_url", DEFAULT_API_URL)),
        context=str(section.get("context", DEFAULT_CONTEXT)),
        report_pending=bool(section.get("report_pending", True)),
        timeout=float(section.get("timeout", 10.0)),
    )


def _first(env: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def _apply_env(cfg: Config, env: Mapping[str, str]) -> None:
    """Overlay environment variables onto *cfg* in place."""
    repo = _first(env, "SHIPLINE_GITHUB_REPO", "GITHUB_REPOSITORY")
    if repo:
        cfg.status.repo = repo
    api = _first(env, "SHIPLINE_GITHUB_API", "GITHUB_API_URL")
    if api:
        cfg.status.api_url = api
    context = env.get("SHIPLINE_STATUS_CONTEXT")
    if context:
        cfg.status.context = context

    node = env.get("SHIPLINE_NODE_VERSION")
    if node:
        cfg.release.node_version = node.lstrip("v")

    image = env.get("SHIPLINE_IMAGE")
    if image:
        cfg.build.image = image

    repo_url = env.get("SHIPLINE_REPO_URL")
    if repo_url:
        cfg.repo_url = repo_url
    commit_range = env.get("SHIPLINE_COMMIT_RANGE")
    if commit_range:
        cfg.commit_range = commit_range

    cfg.github_token = _first(env, "GITHUB_TOKEN", "GH_TOKEN")
    cfg.registry_credentials = env.get("DOCKERHUB_CREDENTIALS")


def find_config_file(base: Path) -> Path | None:
    for name in _CONFIG_PATHS:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load(base: Path | None = None, env: Mapping[str, str] | None = None) -> Config:
    """Load configuration from *base* and the environment.

    Parameters
    ----------
    base:
        Workspace directory.  Defaults to the current working directory.
    env:
        Environment mapping.  Defaults to ``os.environ``.
    """
    base = Path(base) if base is not None else Path.cwd()
    env = os.environ if env is None else env

    data: dict[str, Any] = {}
    config_file = find_config_file(base)
    if config_file is not None:
        with open(config_file) as fh:
            try:
                data = yaml.safe_load(fh) or {}
            except yaml.YAMLError as exc:
                raise ShiplineError(f"invalid YAML in {config_file}: {exc}") from exc
        if not isinstance(data, dict):
            raise ShiplineError(f"{config_file}: top level must be a mapping")

    cfg = Config(
        workspace=base,
        repo_url=data.get("repo_url"),
        commit_range=data.get("commit_range"),
        release=_parse_release(data),
        build=_parse_build(data),
        status=_parse_status(data),
    )
    _apply_env(cfg, env)
    return cfg
