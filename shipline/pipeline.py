"""The release pipeline.

Runs the stages strictly in order on the current agent:

    checkout -> validate-commits -> node -> release
             -> docker-login -> build-push -> cleanup

``node`` and ``release`` run only when the release gate is open
(release branch, not a pull request, no ``[skip release]``).  The last
three run only when the release tool announced a version.  A failing
stage halts the rest.  The post hook reports the outcome to the GitHub
status API whatever happened.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field

from shipline import build, commits, docker, git, log, release, status, toolchain
from shipline import ci as ci_mod
from shipline import registry as registry_mod
from shipline.config import Config
from shipline.errors import CommandError, ShiplineError, StatusError


@dataclass
class PipelineState:
    """Values handed from one stage to the next."""

    sha: str | None = None
    version: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    registry: registry_mod.Registry | None = None
    builder: str | None = None
    stage: str | None = None
    tags: list[str] = field(default_factory=list)


def _enter(state: PipelineState, name: str) -> None:
    state.stage = name
    log.step(f"Stage: {name}")


# ── Gates ─────────────────────────────────────────────────────────────

def release_gate(
    cfg: Config,
    backend: ci_mod.CIBase,
    *,
    force: bool = False,
) -> tuple[bool, str]:
    """Decide whether the node/release stages run.  Returns (open, reason)."""
    if force:
        return True, "release forced"
    if backend.is_pr():
        return False, "pull-request build"
    branch = backend.branch()
    if branch not in cfg.release.branches:
        return False, f"branch {branch or '(unknown)'} is not a release branch"
    if backend.should_skip("release"):
        return False, "[skip release] in commit message"
    return True, f"release branch {branch}"


def publish_gate(
    cfg: Config,
    backend: ci_mod.CIBase,
    state: PipelineState,
) -> tuple[bool, str]:
    """Decide whether login/build-push/cleanup run.  Returns (open, reason)."""
    if not state.version:
        return False, "no release version"
    if cfg.release.dry_run:
        return False, "release dry-run"
    if backend.should_skip("push"):
        return False, "[skip push] in commit message"
    return True, f"version {state.version}"


# ── Stages ────────────────────────────────────────────────────────────

def checkout(cfg: Config, state: PipelineState) -> None:
    ws = cfg.workspace
    if git.is_repo(ws):
        try:
            git.fetch_tags(ws)
        except CommandError as exc:
            log.warn(f"Could not fetch tags: {exc.stderr or exc}")
    elif cfg.repo_url:
        git.clone(cfg.repo_url, ws, state.sha)
    else:
        raise ShiplineError(
            f"{ws} is not a git checkout and no repository URL is configured"
        )
    if not state.sha:
        state.sha = git.head_sha(ws)
    log.info(f"Commit: {state.sha}")


def validate_commits(cfg: Config) -> None:
    messages = commits.collect(cfg.workspace, cfg.commit_range)
    if not messages:
        log.warn(f"No commits found in {cfg.commit_range or 'HEAD'}")
        return
    result = commits.validate(messages)
    log.success(
        f"{len(result.checked)} commit message(s) valid, "
        f"{len(result.skipped)} merge commit(s) skipped"
    )


def docker_login(cfg: Config, state: PipelineState) -> None:
    if not cfg.build.image:
        raise ShiplineError("no image repository configured (set SHIPLINE_IMAGE or build.image)")
    creds = registry_mod.parse_credentials(cfg.registry_credentials)
    reg = registry_mod.for_image(cfg.build.image)
    reg.login(creds)
    state.registry = reg


def build_push(cfg: Config, state: PipelineState) -> None:
    state.builder = build.create_builder(cfg, state.sha)
    state.tags = build.build_and_push(cfg, state.version, state.sha)


def cleanup(state: PipelineState) -> None:
    if state.builder:
        docker.buildx_rm(state.builder)
        state.builder = None
    if state.registry is not None:
        state.registry.logout()
        state.registry = None


# ── Post hook ─────────────────────────────────────────────────────────

def _description(ok: bool, state: PipelineState) -> str:
    if not ok:
        return f"Pipeline failed at stage '{state.stage}'"
    if state.tags:
        return f"Released {state.version}"
    return "Pipeline succeeded"


def _report(cfg: Config, backend: ci_mod.CIBase, state: PipelineState, value: str, description: str) -> None:
    try:
        status.report(
            cfg,
            state.sha,
            value,
            description=description,
            target_url=backend.build_url(),
        )
    except StatusError as exc:
        log.warn(f"Could not report status: {exc}")


def post(cfg: Config, backend: ci_mod.CIBase, state: PipelineState, ok: bool) -> None:
    log.step("Post: report status")
    _report(cfg, backend, state, "success" if ok else "failure", _description(ok, state))


# ── Public API ────────────────────────────────────────────────────────

def run(cfg: Config, args: argparse.Namespace) -> int:
    """Run the full pipeline.

    Parameters
    ----------
    cfg:
        Loaded configuration.
    args:
        CLI arguments.  Recognised attributes:

        * ``force_release`` -- open the release gate on any branch.

    Returns ``0`` on success, ``1`` on failure.
    """
    backend = ci_mod.detect(workspace=cfg.workspace)
    log.info(f"CI runner: {backend.name}")
    state = PipelineState(sha=backend.sha(), env=dict(os.environ))

    if cfg.status.report_pending:
        _report(cfg, backend, state, "pending", "Pipeline running")

    ok = False
    log.timer_start("pipeline")
    try:
        _enter(state, "checkout")
        checkout(cfg, state)

        _enter(state, "validate-commits")
        validate_commits(cfg)

        is_open, reason = release_gate(
            cfg, backend, force=getattr(args, "force_release", False)
        )
        if is_open:
            log.info(f"Release gate open: {reason}")
            _enter(state, "node")
            state.env = toolchain.ensure_node(cfg.release.node_version, state.env)

            _enter(state, "release")
            state.version = release.run(cfg, state.env)
        else:
            log.info(f"Skipping node and release: {reason}")

        is_open, reason = publish_gate(cfg, backend, state)
        if is_open:
            _enter(state, "docker-login")
            docker_login(cfg, state)

            _enter(state, "build-push")
            build_push(cfg, state)

            _enter(state, "cleanup")
            cleanup(state)
        else:
            log.info(f"Skipping docker-login, build-push and cleanup: {reason}")

        ok = True
    except ShiplineError as exc:
        log.error(f"Stage '{state.stage}' failed: {exc}")
    finally:
        log.timer_stop("pipeline")
        post(cfg, backend, state, ok)

    if ok:
        log.success("Pipeline complete")
        return 0
    return 1
