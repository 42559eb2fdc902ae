"""GitHub REST API v3 source."""

import logging
import subprocess

import httpx

from issuedash.errors import DashboardError, TransportError
from issuedash.providers.base import JsonSource
from issuedash.settings import DashSettings

BASE_URL = "https://api.github.com"
PER_PAGE = 100

logger = logging.getLogger(__name__)


class GitHubClient(JsonSource):
    def __init__(self, settings: DashSettings) -> None:
        self._token = self._resolve_token(settings)
        self._client = httpx.Client(
            base_url=BASE_URL,
            headers={
                "Authorization": f"Bearer {self._token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=30,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _resolve_token(self, settings: DashSettings) -> str:
        if settings.github_auth == "gh-cli":
            result = subprocess.run(
                ["gh", "auth", "token"],
                capture_output=True,
                text=True,
            )
            if result.returncode != 0:
                raise DashboardError("gh auth token failed. Run: gh auth login")
            return result.stdout.strip()
        if settings.github_token:
            return settings.github_token.get_secret_value()
        raise DashboardError("No GitHub credentials. Set GITHUB_TOKEN or ISSUEDASH_GITHUB_TOKEN.")

    def _get(self, path: str, url: str, params: dict | None = None) -> httpx.Response:
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(path, f"request failed: {exc}") from exc

        if response.status_code == 401:
            raise TransportError(path, "GitHub API returned 401. Check the configured token.", 401)
        if response.status_code in (403, 429) and response.headers.get("x-ratelimit-remaining") == "0":
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            raise TransportError(path, f"GitHub API rate limit exceeded (resets at {reset})", response.status_code)
        if response.is_error:
            message = _error_message(response)
            raise TransportError(path, f"GitHub API returned {response.status_code}: {message}", response.status_code)
        return response

    def get_paginated(self, path: str) -> list[dict]:
        items: list[dict] = []
        response = self._get(path, path, params={"per_page": PER_PAGE})
        page = 1
        while True:
            try:
                body = response.json()
            except ValueError as exc:
                raise TransportError(path, f"page {page} is not valid JSON") from exc
            if not isinstance(body, list):
                raise TransportError(path, f"expected a JSON array on page {page}, got {type(body).__name__}")
            items.extend(body)
            logger.debug("%s page %d: %d items", path, page, len(body))

            next_url = response.links.get("next", {}).get("url")
            if not next_url:
                return items
            # The next link already carries per_page and page.
            response = self._get(path, next_url)
            page += 1


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.reason_phrase
