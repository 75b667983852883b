"""GitHub API client used by the credentialed providers."""

import base64
import json
import logging
from datetime import datetime, timezone

import httpx

logger = logging.getLogger(__name__)


class GitHubRateLimitError(Exception):
    """Raised when GitHub reports the rate limit as exhausted."""

    def __init__(self, reset_time: datetime | None, remaining: int = 0) -> None:
        self.reset_time = reset_time
        self.remaining = remaining
        super().__init__(f"GitHub rate limit exhausted, resets at {reset_time}")


class GitHubQueryError(Exception):
    """Raised when a GraphQL query returns errors instead of data."""


class GitHubFetcher:
    """Fetches repository data from the GitHub REST and GraphQL APIs.

    A token is required for the GraphQL endpoint and strongly recommended for
    REST (60 vs 5000 requests/hour).
    """

    BASE_URL = "https://api.github.com"
    GRAPHQL_URL = "https://api.github.com/graphql"

    def __init__(
        self,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the fetcher.

        Args:
            token: GitHub personal access token.
            client: Optional shared httpx client. If not provided, a client is
                created per request.
            timeout: Timeout for per-request clients.
        """
        self._token = token
        self._client = client
        self._timeout = timeout

        # Rate limit tracking
        self.rate_limit_remaining: int = 5000
        self.rate_limit_total: int = 5000
        self.rate_limit_reset: datetime | None = None

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    def _headers(self) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=self._timeout)

    def _update_rate_limits(self, response: httpx.Response) -> None:
        """Extract and store rate limit info from response headers."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        limit = response.headers.get("X-RateLimit-Limit")
        reset = response.headers.get("X-RateLimit-Reset")

        if remaining is not None:
            self.rate_limit_remaining = int(remaining)
        if limit is not None:
            self.rate_limit_total = int(limit)
        if reset is not None:
            self.rate_limit_reset = datetime.fromtimestamp(int(reset), tz=timezone.utc)

    def _check_response(self, response: httpx.Response) -> None:
        """Raise for rate limiting and HTTP errors."""
        self._update_rate_limits(response)
        if response.status_code in (403, 429) and self.rate_limit_remaining == 0:
            logger.warning(f"GitHub rate limit exhausted, resets at {self.rate_limit_reset}")
            raise GitHubRateLimitError(self.rate_limit_reset, self.rate_limit_remaining)
        response.raise_for_status()

    async def _fetch(self, path: str, params: dict | None = None) -> dict | list | None:
        """Fetch from GitHub API.

        Returns None if 404, raises on other errors.
        """
        client = await self._get_client()
        url = f"{self.BASE_URL}{path}"

        try:
            response = await client.get(url, params=params, headers=self._headers())
            if response.status_code == 404:
                self._update_rate_limits(response)
                logger.debug(f"GitHub: Not found: {path}")
                return None
            self._check_response(response)
            return response.json()
        finally:
            if self._client is None:
                await client.aclose()

    async def _fetch_all_pages(
        self,
        path: str,
        params: dict | None = None,
        max_pages: int = 10,
    ) -> list:
        """Fetch all pages from a paginated endpoint."""
        client = await self._get_client()
        url = f"{self.BASE_URL}{path}"
        params = dict(params or {})
        params.setdefault("per_page", 100)

        results = []
        page = 1

        try:
            while page <= max_pages:
                params["page"] = page
                response = await client.get(url, params=params, headers=self._headers())
                if response.status_code == 404:
                    break
                self._check_response(response)

                data = response.json()
                if not data:
                    break

                results.extend(data)

                # Check if there are more pages
                if len(data) < params["per_page"]:
                    break
                page += 1

            return results
        finally:
            if self._client is None:
                await client.aclose()

    async def graphql(self, query: str, variables: dict | None = None) -> dict:
        """Run a GraphQL query and return its ``data`` object.

        Raises:
            GitHubQueryError: If the response carries errors or no data.
        """
        client = await self._get_client()
        try:
            response = await client.post(
                self.GRAPHQL_URL,
                json={"query": query, "variables": variables or {}},
                headers=self._headers(),
            )
            self._check_response(response)
            payload = response.json()
        finally:
            if self._client is None:
                await client.aclose()

        if payload.get("errors"):
            messages = "; ".join(e.get("message", "unknown error") for e in payload["errors"])
            raise GitHubQueryError(messages)
        data = payload.get("data")
        if not data:
            raise GitHubQueryError("GraphQL response contained no data")
        return data

    async def fetch_repo_info(self, owner: str, repo: str) -> dict | None:
        """Fetch basic repository information, or None if not found."""
        data = await self._fetch(f"/repos/{owner}/{repo}")
        return data if isinstance(data, dict) else None

    async def fetch_readme_size(self, owner: str, repo: str) -> int | None:
        """Return the README size in bytes, or None if the repo has no README."""
        data = await self._fetch(f"/repos/{owner}/{repo}/readme")
        if not isinstance(data, dict):
            return None
        return int(data.get("size", 0))

    async def list_root_entries(self, owner: str, repo: str) -> list[str]:
        """List the lower-cased names of files and directories in the repo root."""
        data = await self._fetch(f"/repos/{owner}/{repo}/contents")
        if not isinstance(data, list):
            return []
        return [entry.get("name", "").lower() for entry in data if entry.get("name")]

    async def fetch_file_content(self, owner: str, repo: str, path: str) -> str | None:
        """Fetch and decode a file through the contents API."""
        data = await self._fetch(f"/repos/{owner}/{repo}/contents/{path}")
        if not isinstance(data, dict) or "content" not in data:
            return None
        if data.get("encoding", "base64") != "base64":
            return data["content"]
        return base64.b64decode(data["content"]).decode("utf-8", errors="replace")

    async def fetch_json_file(self, owner: str, repo: str, path: str) -> dict | None:
        """Fetch a JSON file from the repository and parse it."""
        content = await self.fetch_file_content(owner, repo, path)
        if content is None:
            return None
        return json.loads(content)

    async def fetch_contributors(self, owner: str, repo: str) -> list[dict]:
        """Fetch contributors, sorted by contributions (GitHub's default)."""
        return await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/contributors",
            max_pages=5,
        )

    async def count_issues(self, owner: str, repo: str, state: str) -> int:
        """Count issues (not pull requests) in the given state via the search API."""
        data = await self._fetch(
            "/search/issues",
            params={"q": f"repo:{owner}/{repo} type:issue state:{state}", "per_page": 1},
        )
        if not isinstance(data, dict):
            return 0
        return int(data.get("total_count", 0))

    async def fetch_closed_issues(
        self,
        owner: str,
        repo: str,
        since: datetime,
        limit: int = 30,
    ) -> list[dict]:
        """Fetch recently closed issues, pull requests filtered out."""
        issues = await self._fetch_all_pages(
            f"/repos/{owner}/{repo}/issues",
            params={"state": "closed", "since": since.isoformat(), "per_page": 100},
            max_pages=3,
        )
        return [i for i in issues if "pull_request" not in i][:limit]

    async def fetch_pull_request_counts(self, owner: str, repo: str) -> tuple[int, int]:
        """Return ``(total, merged)`` pull request counts."""
        query = """
            query($owner: String!, $name: String!) {
              repository(owner: $owner, name: $name) {
                pullRequests { totalCount }
                mergedPullRequests: pullRequests(states: MERGED) { totalCount }
              }
            }
        """
        data = await self.graphql(query, {"owner": owner, "name": repo})
        repository = data.get("repository")
        if repository is None:
            raise GitHubQueryError(f"Repository {owner}/{repo} not found")
        total = repository["pullRequests"]["totalCount"]
        merged = repository["mergedPullRequests"]["totalCount"]
        return total, merged
