"""Release registry client: most recent tagged releases of a GitHub repository."""

import logging
import os
import re

import httpx

from envcompose.errors import ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

_LEADING_NON_NUMERIC = re.compile(r"^[^0-9]+")


def strip_version_prefix(tag):
    """'v1.2.3' -> '1.2.3'; tags without a prefix are returned unchanged."""
    return _LEADING_NON_NUMERIC.sub("", tag)


class ReleaseRegistry:
    """Lists releases through the GitHub REST API.

    Uses GITHUB_TOKEN when set to avoid the anonymous rate limit. With
    ``dry_run`` set, requests are logged and placeholder versions returned.
    """

    def __init__(self, api_url=DEFAULT_API_URL, token=None, timeout=30, dry_run=False):
        self.api_url = api_url.rstrip("/")
        self.dry_run = dry_run
        self.token = token if token is not None else os.environ.get("GITHUB_TOKEN", "")
        self.timeout = timeout

    def _headers(self):
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def list_releases(self, owner, repo) -> list[str]:
        """Return release tag names, most recent first.

        GET /repos/{owner}/{repo}/releases
        """
        url = f"{self.api_url}/repos/{owner}/{repo}/releases"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(url, headers=self._headers())
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError("github", f"listing {owner}/{repo} releases returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError("github", f"listing {owner}/{repo} releases failed: {e}") from e
        return [release["tag_name"] for release in resp.json() if release.get("tag_name")]

    def latest_versions(self, owner, repo, count) -> list[str]:
        """The ``count`` most recent release versions with their tag prefix stripped."""
        if self.dry_run:
            logger.info(f"[dry-run] GET {self.api_url}/repos/{owner}/{repo}/releases")
            return [f"0.0.{count - i}" for i in range(count)]
        tags = self.list_releases(owner, repo)
        if len(tags) < count:
            logger.warning(f"Only {len(tags)} releases available for {owner}/{repo}, wanted {count}")
        return [strip_version_prefix(tag) for tag in tags[:count]]
