"""Registry credentials and login.

Use :func:`for_image` to obtain a registry for an image repository.
Credentials arrive as a single ``user:password`` string, the form a CI
credential store hands out for username/password bindings.
"""

from __future__ import annotations

from dataclasses import dataclass

from shipline import docker, log
from shipline.errors import CredentialsError

DOCKER_HUB = "docker.io"


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='****')"


def parse_credentials(raw: str | None) -> Credentials:
    """Split *raw* on the first colon into username and password.

    Raises :class:`CredentialsError` when the string is missing, has no
    colon, or either part is empty.  The password never appears in the
    error message.
    """
    if not raw:
        raise CredentialsError("registry credentials are not set (expected 'user:password')")
    if ":" not in raw:
        raise CredentialsError("malformed registry credentials: expected 'user:password'")
    username, password = raw.split(":", 1)
    if not username:
        raise CredentialsError("malformed registry credentials: empty username")
    if not password:
        raise CredentialsError(f"malformed registry credentials: empty password for {username}")
    log.mask(password)
    return Credentials(username, password)


def registry_host(image: str) -> str:
    """Return the registry hostname an image repository lives on.

    ``org/app`` and ``app`` live on Docker Hub; ``ghcr.io/org/app`` on
    ``ghcr.io``.  A first component counts as a host when it contains a
    dot or a port, or is ``localhost``.
    """
    for prefix in ("https://", "http://"):
        if image.startswith(prefix):
            image = image[len(prefix):]
            break
    first, sep, _ = image.partition("/")
    if sep and ("." in first or ":" in first or first == "localhost"):
        return first
    return DOCKER_HUB


class Registry:
    """A container registry reachable through the docker CLI."""

    def __init__(self, host: str) -> None:
        self.host = host

    def login(self, creds: Credentials) -> None:
        log.info(f"Logging in to {self.host} as {creds.username}")
        docker.login(self.host, creds.username, creds.password)
        log.success(f"Logged in to {self.host}")

    def logout(self) -> None:
        log.info(f"Logging out of {self.host}")
        docker.logout(self.host)


class DockerHub(Registry):
    """Docker Hub (docker.io)."""

    def __init__(self) -> None:
        super().__init__(DOCKER_HUB)


def for_image(image: str) -> Registry:
    host = registry_host(image)
    if host in (DOCKER_HUB, "registry-1.docker.io", "index.docker.io"):
        return DockerHub()
    return Registry(host)
