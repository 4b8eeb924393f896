"""Multi-platform image build and push.

For a released version this module:

1. Computes the tags (``<image>:<version>`` and optionally ``:latest``).
2. Creates a dedicated buildx builder when configured.
3. Runs ``docker buildx build --push`` for every configured platform,
   with OCI version/revision labels.

Registry login and cleanup are handled by the pipeline, not here.
"""

from __future__ import annotations

from shipline import docker, log
from shipline.config import Config
from shipline.errors import ShiplineError

_VERSION_LABEL = "org.opencontainers.image.version"
_REVISION_LABEL = "org.opencontainers.image.revision"


def image_tags(image: str, version: str, *, latest: bool = True) -> list[str]:
    """Return the tags to push for *version*."""
    tags = [f"{image}:{version.lstrip('v')}"]
    if latest:
        tags.append(f"{image}:latest")
    return tags


def builder_name(sha: str | None) -> str:
    return f"shipline-{sha[:8]}" if sha else "shipline"


def oci_labels(version: str, sha: str | None) -> dict[str, str]:
    labels = {_VERSION_LABEL: version.lstrip("v")}
    if sha:
        labels[_REVISION_LABEL] = sha
    return labels


def create_builder(cfg: Config, sha: str | None) -> str | None:
    """Create the buildx builder for this run, if enabled.  Returns its name."""
    if not cfg.build.create_builder:
        return None
    name = builder_name(sha)
    docker.buildx_create(name)
    return name


def build_and_push(cfg: Config, version: str, sha: str | None = None) -> list[str]:
    """Build for all platforms and push.  Returns the pushed tags."""
    image = cfg.build.image
    if not image:
        raise ShiplineError("no image repository configured (set SHIPLINE_IMAGE or build.image)")
    if not cfg.build.platforms:
        raise ShiplineError("build.platforms is empty")
    if not docker.available():
        raise ShiplineError("docker buildx is not available on this agent")

    tags = image_tags(image, version, latest=cfg.build.tag_latest)
    log.info(f"Platforms: {', '.join(cfg.build.platforms)}")
    log.info(f"Tags: {', '.join(tags)}")

    log.timer_start("build-push")
    docker.buildx_build(
        tags,
        cfg.build.platforms,
        context_dir=cfg.build.context,
        dockerfile=cfg.build.dockerfile,
        labels=oci_labels(version, sha),
        build_args=cfg.build.build_args,
        push=True,
    )
    log.timer_stop("build-push")

    for tag in tags:
        log.success(f"Pushed {tag}")
    return tags
