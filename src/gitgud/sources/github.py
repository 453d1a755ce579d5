"""
GitHub REST client that condenses a public profile into roast signals.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx

from gitgud.core.errors import SignalSourceError
from gitgud.core.logging import get_logger
from gitgud.core.schemas import ProfileSignals, RepoSignals, Signals

logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
README_SNIPPET_CHARS = 500


class GitHubClient:
    """Fetches profile and top-repository signals for a GitHub user."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "gitgud-backend",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def get_signals(
        self, username: str, max_repos: int, include_readme: bool
    ) -> Signals:
        """Profile plus the ``max_repos`` most-starred owned, non-fork repos."""
        start = time.perf_counter()
        try:
            async with self._client() as client:
                profile = await self._get_json(client, f"/users/{username}")
                repos = await self._get_json(
                    client,
                    f"/users/{username}/repos",
                    params={"sort": "updated", "per_page": 100, "type": "owner"},
                )
                top = self._select_top_repos(repos, max_repos)
                snippets: List[Optional[str]] = [None] * len(top)
                if include_readme and top:
                    snippets = await asyncio.gather(
                        *(self._get_readme_snippet(client, repo) for repo in top)
                    )
        except httpx.TimeoutException as e:
            logger.error("GitHub request timed out", extra={"username": username})
            raise SignalSourceError("GitHub request timed out") from e
        except httpx.RequestError as e:
            logger.error(
                "GitHub request failed", extra={"username": username, "error": str(e)}
            )
            raise SignalSourceError(f"GitHub request failed: {e}") from e

        logger.debug(
            "GitHub signals fetched",
            extra={
                "username": username,
                "repos": len(top),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return Signals(
            profile=ProfileSignals(
                public_repos=profile.get("public_repos", 0),
                followers=profile.get("followers", 0),
                created_at=profile.get("created_at", ""),
                bio=profile.get("bio"),
                location=profile.get("location"),
                company=profile.get("company"),
            ),
            top_repos=[
                RepoSignals(
                    name=repo["name"],
                    language=repo.get("language"),
                    stars=repo.get("stargazers_count", 0),
                    forks=repo.get("forks_count", 0),
                    updated_at=repo.get("updated_at", ""),
                    description=repo.get("description"),
                    readme_snippet=snippet,
                )
                for repo, snippet in zip(top, snippets)
            ],
        )

    @staticmethod
    def _select_top_repos(
        repos: List[Dict[str, Any]], max_repos: int
    ) -> List[Dict[str, Any]]:
        owned = [r for r in repos if not r.get("fork")]
        owned.sort(
            key=lambda r: (r.get("stargazers_count", 0), r.get("updated_at") or ""),
            reverse=True,
        )
        return owned[:max_repos]

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        response = await client.get(path, params=params)
        if response.status_code == 404:
            raise SignalSourceError("GitHub user not found")
        if response.status_code == 401:
            raise SignalSourceError("GitHub token invalid")
        if response.status_code in (403, 429):
            raise SignalSourceError("GitHub rate limit exceeded")
        if response.status_code != 200:
            raise SignalSourceError(
                f"GitHub API error: {response.status_code} {response.text}"
            )
        return response.json()

    async def _get_readme_snippet(
        self, client: httpx.AsyncClient, repo: Dict[str, Any]
    ) -> Optional[str]:
        full_name = repo.get("full_name") or repo["name"]
        try:
            response = await client.get(
                f"/repos/{full_name}/readme",
                headers={"Accept": "application/vnd.github.raw+json"},
            )
        except httpx.RequestError as e:
            logger.warning(
                "README fetch failed", extra={"repo": full_name, "error": str(e)}
            )
            return None
        if response.status_code != 200:
            return None
        return response.text[:README_SNIPPET_CHARS]
