"""GitHub commit status reporting.

Posts ``{state, target_url, description, context}`` to
``{api}/repos/{owner}/{repo}/statuses/{sha}``.
"""

from __future__ import annotations

from typing import Any

import httpx

from shipline import log
from shipline.config import Config
from shipline.errors import StatusError

STATES = ("pending", "success", "failure", "error")

# GitHub rejects longer descriptions.
_MAX_DESCRIPTION = 140


def status_url(api_url: str, repo: str, sha: str) -> str:
    return f"{api_url.rstrip('/')}/repos/{repo}/statuses/{sha}"


def payload(
    state: str,
    *,
    context: str,
    description: str | None = None,
    target_url: str | None = None,
) -> dict[str, Any]:
    """Build the JSON body for a status report."""
    if state not in STATES:
        raise ValueError(f"invalid status state: {state!r} (expected one of {', '.join(STATES)})")
    body: dict[str, Any] = {"state": state, "context": context}
    if target_url:
        body["target_url"] = target_url
    if description:
        body["description"] = description[:_MAX_DESCRIPTION]
    return body


def build_client(cfg: Config, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create an ``httpx.Client`` with the GitHub API headers."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "shipline",
    }
    if cfg.github_token:
        log.mask(cfg.github_token)
        headers["Authorization"] = f"Bearer {cfg.github_token}"
    return httpx.Client(
        timeout=httpx.Timeout(cfg.status.timeout),
        headers=headers,
        transport=transport,
    )


def report(
    cfg: Config,
    sha: str | None,
    state: str,
    *,
    description: str | None = None,
    target_url: str | None = None,
    client: httpx.Client | None = None,
) -> bool:
    """Report *state* for *sha*.  Returns True if a status was posted.

    Missing token, repository or SHA skips the report with a warning.
    An HTTP failure raises :class:`StatusError`.
    """
    body = payload(
        state,
        context=cfg.status.context,
        description=description,
        target_url=target_url,
    )
    missing = [
        name for name, value in (
            ("GITHUB_TOKEN", cfg.github_token),
            ("repository", cfg.status.repo),
            ("commit SHA", sha),
        ) if not value
    ]
    if missing:
        log.warn(f"Not reporting status '{state}': missing {', '.join(missing)}")
        return False

    url = status_url(cfg.status.api_url, cfg.status.repo, sha)
    log.info(f"Reporting status '{state}' ({cfg.status.context}) for {sha[:12]}")

    own_client = client is None
    if own_client:
        client = build_client(cfg)
    try:
        response = client.post(url, json=body)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise StatusError(
            f"status API returned {exc.response.status_code} for {url}: {exc.response.text[:200]}"
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise StatusError(f"status API request to {url} failed: {exc}") from exc
    finally:
        if own_client:
            client.close()

    log.success(f"Reported status '{state}'")
    return True
