"""Shared fixtures for shipline tests."""

from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from shipline import log
from shipline.ci import CIBase
from shipline.config import BuildConfig, Config, ReleaseConfig, StatusConfig


@pytest.fixture(autouse=True)
def _plain_log():
    """Disable colors and forget registered secrets around every test."""
    original = log._use_color
    log.set_color(False)
    log.clear_masks()
    yield
    log._use_color = original
    log.clear_masks()


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a workspace with a .shipline.yaml config."""
    (tmp_path / ".shipline.yaml").write_text(
        "release:\n"
        "  node_version: '18'\n"
        "build:\n"
        "  image: myorg/myapp\n"
    )
    return tmp_path


def make_config(**kwargs) -> Config:
    """Factory for Config with sensible defaults."""
    defaults = {
        "workspace": Path("/tmp/workspace"),
        "release": ReleaseConfig(),
        "build": BuildConfig(image="myorg/myapp"),
        "status": StatusConfig(repo="myorg/myapp"),
        "github_token": "ghp_testtoken",
        "registry_credentials": "deployer:s3cret",
    }
    defaults.update(kwargs)
    return Config(**defaults)


def make_args(**kwargs) -> argparse.Namespace:
    """Factory for argparse.Namespace with common defaults."""
    defaults = {
        "verbose": False,
        "no_color": True,
        "workspace": None,
        "image": None,
        "command": "run",
        "force_release": False,
        "dry_run": False,
        "commit_range": None,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


class StubCI(CIBase):
    """Concrete CI backend with fixed answers."""

    name = "stub"

    def __init__(
        self,
        *,
        sha: str | None = "0123456789abcdef0123456789abcdef01234567",
        branch: str | None = "main",
        pr: bool = False,
        url: str | None = "https://ci.example.com/job/1/",
        message: str = "",
    ) -> None:
        super().__init__(env={}, workspace=Path("/tmp/workspace"))
        self._sha = sha
        self._branch = branch
        self._pr = pr
        self._url = url
        self._message = message

    @staticmethod
    def detect(env) -> bool:
        return True

    def sha(self):
        return self._sha

    def branch(self):
        return self._branch

    def is_pr(self):
        return self._pr

    def build_url(self):
        return self._url

    def get_commit_message(self):
        return self._message
