"""Command-line interface for shipline.

This is the user-facing entry point.  It parses arguments, loads
configuration, and dispatches to the appropriate subcommand.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import shipline
from shipline import ci as ci_mod
from shipline import commits, log, pipeline, release, status, toolchain
from shipline.config import Config
from shipline.config import load as load_config

# ── Helpers ───────────────────────────────────────────────────────────

def _make_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with all subcommands."""

    parser = argparse.ArgumentParser(
        prog="shipline",
        description="Commit validation, semantic release and multi-arch image publishing",
        epilog="Run 'shipline <command> --help' for subcommand-specific options.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"shipline {shipline.VERSION}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="print tracebacks on failure",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="disable colored output",
    )
    parser.add_argument(
        "-C", "--workspace",
        metavar="DIR",
        default=None,
        help="workspace directory (default: current directory)",
    )
    parser.add_argument(
        "--image",
        metavar="REPO",
        default=None,
        help="override the target image repository (e.g. myorg/myapp)",
    )

    sub = parser.add_subparsers(dest="command", title="commands")

    # -- run --
    run_parser = sub.add_parser(
        "run",
        help="run the full pipeline (validate -> release -> build/push -> status)",
        description="Run every stage in order and report the result to GitHub.",
    )
    run_parser.add_argument(
        "--force-release",
        action="store_true",
        default=False,
        help="run the release stages on any branch",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="run the release tool with --dry-run and skip build/push",
    )
    run_parser.add_argument(
        "--range",
        metavar="REVS",
        default=None,
        dest="commit_range",
        help="git revision range whose commits are validated (default: HEAD)",
    )

    # -- validate-commits --
    validate_parser = sub.add_parser(
        "validate-commits",
        help="check commit messages against Conventional Commits",
        description="Validate the given messages, or the commits in --range.",
    )
    validate_parser.add_argument(
        "messages",
        nargs="*",
        metavar="MESSAGE",
        help="messages to validate instead of reading git history",
    )
    validate_parser.add_argument(
        "--range",
        metavar="REVS",
        default=None,
        dest="commit_range",
        help="git revision range to validate (default: HEAD)",
    )

    # -- next-version --
    sub.add_parser(
        "next-version",
        help="print the next release version (release tool in dry-run mode)",
        description="Run the release tool with --dry-run and print the version.",
    )

    # -- build-push --
    build_parser = sub.add_parser(
        "build-push",
        help="log in, build and push the multi-arch image for a version",
        description="Build and push the image for VERSION without running a release.",
    )
    build_parser.add_argument(
        "--release-version",
        metavar="VERSION",
        required=True,
        dest="release_version",
        help="version to tag the image with",
    )

    # -- status --
    status_parser = sub.add_parser(
        "status",
        help="post a commit status to GitHub",
        description="Report STATE for the current commit.",
    )
    status_parser.add_argument("state", choices=list(status.STATES))
    status_parser.add_argument(
        "--description",
        default=None,
        help="status description",
    )
    status_parser.add_argument(
        "--sha",
        default=None,
        help="commit SHA (default: detected from the CI runner)",
    )

    return parser


def _apply_overrides(cfg: Config, args: argparse.Namespace) -> Config:
    """Apply CLI overrides to the loaded config."""
    if getattr(args, "image", None):
        cfg.build.image = args.image
    if getattr(args, "commit_range", None):
        cfg.commit_range = args.commit_range
    if getattr(args, "dry_run", False):
        cfg.release.dry_run = True
    return cfg


def _dispatch_run(cfg: Config, args: argparse.Namespace) -> int:
    return pipeline.run(cfg, args)


def _dispatch_validate(cfg: Config, args: argparse.Namespace) -> int:
    if args.messages:
        messages = args.messages
    else:
        messages = commits.collect(cfg.workspace, cfg.commit_range)
    result = commits.validate(messages)
    log.success(
        f"{len(result.checked)} commit message(s) valid, "
        f"{len(result.skipped)} merge commit(s) skipped"
    )
    return 0


def _dispatch_next_version(cfg: Config, args: argparse.Namespace) -> int:
    env = toolchain.ensure_node(cfg.release.node_version)
    version = release.run(cfg, env, dry_run=True)
    if not version:
        return 1
    sys.stdout.write(f"{version}\n")
    return 0


def _dispatch_build_push(cfg: Config, args: argparse.Namespace) -> int:
    backend = ci_mod.detect(workspace=cfg.workspace)
    sha = backend.sha()
    state = pipeline.PipelineState(sha=sha, version=args.release_version)
    try:
        pipeline.docker_login(cfg, state)
        pipeline.build_push(cfg, state)
    finally:
        pipeline.cleanup(state)
    return 0


def _dispatch_status(cfg: Config, args: argparse.Namespace) -> int:
    backend = ci_mod.detect(workspace=cfg.workspace)
    posted = status.report(
        cfg,
        args.sha or backend.sha(),
        args.state,
        description=args.description,
        target_url=backend.build_url(),
    )
    return 0 if posted else 1


_DISPATCHERS: dict[str, Callable[[Config, argparse.Namespace], int]] = {
    "run": _dispatch_run,
    "validate-commits": _dispatch_validate,
    "next-version": _dispatch_next_version,
    "build-push": _dispatch_build_push,
    "status": _dispatch_status,
}


# ── Entry point ───────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    """Parse arguments, load config, dispatch to subcommand.

    Parameters
    ----------
    argv:
        Argument list for testing.  Defaults to ``sys.argv[1:]``.
    """
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        log.set_color(False)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(2)

    workspace = Path(args.workspace) if args.workspace else Path.cwd()
    try:
        cfg = load_config(workspace)
    except Exception as exc:
        log.error(f"failed to load configuration: {exc}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    cfg = _apply_overrides(cfg, args)
    log.mask(cfg.github_token)
    if cfg.registry_credentials:
        log.mask(cfg.registry_credentials)

    dispatcher = _DISPATCHERS.get(args.command)
    if dispatcher is None:
        log.error(f"unknown command: {args.command}")
        sys.exit(2)

    try:
        rc = dispatcher(cfg, args)
    except KeyboardInterrupt:
        log.warn("interrupted")
        sys.exit(130)
    except Exception as exc:
        log.error(f"{args.command} failed: {exc}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(rc)
