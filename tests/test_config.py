"""Unit tests for shipline.config."""

from __future__ import annotations

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from shipline.config import (
    DEFAULT_API_URL,
    DEFAULT_CONTEXT,
    Config,
    find_config_file,
    load,
)
from shipline.errors import ShiplineError


class _TmpDirCase(unittest.TestCase):
    def setUp(self):
        self._tmp = TemporaryDirectory()
        self.base = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, name: str, content: str) -> Path:
        path = self.base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path


class TestDefaults(_TmpDirCase):
    """Loading with no config file and an empty environment."""

    def test_defaults(self):
        cfg = load(self.base, env={})
        self.assertIsInstance(cfg, Config)
        self.assertEqual(cfg.workspace, self.base)
        self.assertEqual(cfg.release.node_version, "20")
        self.assertEqual(cfg.release.command, ["npx", "--yes", "semantic-release"])
        self.assertEqual(cfg.release.branches, ["main", "master"])
        self.assertFalse(cfg.release.dry_run)
        self.assertIsNone(cfg.build.image)
        self.assertEqual(cfg.build.platforms, ["linux/amd64", "linux/arm64"])
        self.assertTrue(cfg.build.tag_latest)
        self.assertEqual(cfg.status.api_url, DEFAULT_API_URL)
        self.assertEqual(cfg.status.context, DEFAULT_CONTEXT)
        self.assertIsNone(cfg.status.repo)
        self.assertIsNone(cfg.github_token)
        self.assertIsNone(cfg.registry_credentials)


class TestConfigFile(_TmpDirCase):
    """Tests for parsing .shipline.yaml."""

    def test_full_file(self):
        self.write(".shipline.yaml", (
            "repo_url: https://github.com/myorg/myapp.git\n"
            "commit_range: origin/main..HEAD\n"
            "release:\n"
            "  node_version: 18\n"
            "  command: npx semantic-release --no-ci\n"
            "  branches: [release]\n"
            "  dry_run: true\n"
            "  install: true\n"
            "build:\n"
            "  image: myorg/myapp\n"
            "  platforms: [linux/amd64]\n"
            "  context: docker\n"
            "  dockerfile: docker/Dockerfile\n"
            "  tag_latest: false\n"
            "  create_builder: false\n"
            "  args:\n"
            "    NODE_ENV: production\n"
            "    PORT: 8080\n"
            "status:\n"
            "  repo: myorg/myapp\n"
            "  context: jenkins/release\n"
            "  report_pending: false\n"
        ))
        cfg = load(self.base, env={})
        self.assertEqual(cfg.repo_url, "https://github.com/myorg/myapp.git")
        self.assertEqual(cfg.commit_range, "origin/main..HEAD")
        self.assertEqual(cfg.release.node_version, "18")
        self.assertEqual(cfg.release.command, ["npx", "semantic-release", "--no-ci"])
        self.assertEqual(cfg.release.branches, ["release"])
        self.assertTrue(cfg.release.dry_run)
        self.assertTrue(cfg.release.install)
        self.assertEqual(cfg.build.image, "myorg/myapp")
        self.assertEqual(cfg.build.platforms, ["linux/amd64"])
        self.assertEqual(cfg.build.context, "docker")
        self.assertEqual(cfg.build.dockerfile, "docker/Dockerfile")
        self.assertFalse(cfg.build.tag_latest)
        self.assertFalse(cfg.build.create_builder)
        self.assertEqual(cfg.build.build_args, {"NODE_ENV": "production", "PORT": "8080"})
        self.assertEqual(cfg.status.repo, "myorg/myapp")
        self.assertEqual(cfg.status.context, "jenkins/release")
        self.assertFalse(cfg.status.report_pending)

    def test_nested_path(self):
        self.write(".shipline/config.yaml", "build:\n  image: a/b\n")
        self.assertEqual(load(self.base, env={}).build.image, "a/b")

    def test_dotfile_wins(self):
        self.write(".shipline.yaml", "build:\n  image: first/one\n")
        self.write(".shipline/config.yaml", "build:\n  image: second/one\n")
        self.assertEqual(find_config_file(self.base).name, ".shipline.yaml")
        self.assertEqual(load(self.base, env={}).build.image, "first/one")

    def test_empty_file(self):
        self.write(".shipline.yaml", "")
        self.assertEqual(load(self.base, env={}).release.node_version, "20")

    def test_invalid_yaml(self):
        self.write(".shipline.yaml", "build: [unclosed\n")
        with self.assertRaises(ShiplineError):
            load(self.base, env={})

    def test_non_mapping(self):
        self.write(".shipline.yaml", "- a\n- b\n")
        with self.assertRaises(ShiplineError):
            load(self.base, env={})

    def test_bad_list_type(self):
        self.write(".shipline.yaml", "build:\n  platforms: 3\n")
        with self.assertRaises(ShiplineError):
            load(self.base, env={})


class TestEnvironment(_TmpDirCase):
    """Environment variables override the file."""

    def test_env_overrides_file(self):
        self.write(".shipline.yaml", (
            "release:\n  node_version: 18\n"
            "build:\n  image: file/image\n"
            "status:\n  repo: file/repo\n"
        ))
        cfg = load(self.base, env={
            "SHIPLINE_NODE_VERSION": "v20.11.1",
            "SHIPLINE_IMAGE": "env/image",
            "SHIPLINE_GITHUB_REPO": "env/repo",
            "SHIPLINE_GITHUB_API": "https://ghe.example.com/api/v3",
            "SHIPLINE_STATUS_CONTEXT": "ci/custom",
            "SHIPLINE_REPO_URL": "https://example.com/r.git",
            "SHIPLINE_COMMIT_RANGE": "HEAD~3..HEAD",
        })
        self.assertEqual(cfg.release.node_version, "20.11.1")
        self.assertEqual(cfg.build.image, "env/image")
        self.assertEqual(cfg.status.repo, "env/repo")
        self.assertEqual(cfg.status.api_url, "https://ghe.example.com/api/v3")
        self.assertEqual(cfg.status.context, "ci/custom")
        self.assertEqual(cfg.repo_url, "https://example.com/r.git")
        self.assertEqual(cfg.commit_range, "HEAD~3..HEAD")

    def test_github_actions_names(self):
        cfg = load(self.base, env={
            "GITHUB_REPOSITORY": "gh/repo",
            "GITHUB_API_URL": "https://api.github.com",
        })
        self.assertEqual(cfg.status.repo, "gh/repo")

    def test_shipline_repo_beats_github_repository(self):
        cfg = load(self.base, env={
            "SHIPLINE_GITHUB_REPO": "mine/repo",
            "GITHUB_REPOSITORY": "gh/repo",
        })
        self.assertEqual(cfg.status.repo, "mine/repo")

    def test_secrets_from_env(self):
        cfg = load(self.base, env={
            "GH_TOKEN": "gho_abc",
            "DOCKERHUB_CREDENTIALS": "deployer:s3cret",
        })
        self.assertEqual(cfg.github_token, "gho_abc")
        self.assertEqual(cfg.registry_credentials, "deployer:s3cret")

    def test_github_token_preferred(self):
        cfg = load(self.base, env={"GITHUB_TOKEN": "ghp_1", "GH_TOKEN": "gho_2"})
        self.assertEqual(cfg.github_token, "ghp_1")


if __name__ == "__main__":
    unittest.main()
