"""NPM registry adapter used for npm → GitHub indirection."""

import logging

import httpx

from pkgtrust.adapters.base import ResolutionError, parse_github_url

logger = logging.getLogger(__name__)


class NpmAdapter:
    """Looks up the source repository of an npm package.

    Data source: https://registry.npmjs.org/{package}
    """

    REGISTRY_URL = "https://registry.npmjs.org"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0) -> None:
        """Initialize the adapter.

        Args:
            client: Optional httpx client for making requests.
            timeout: Timeout for a per-request client when none is shared.
        """
        self._client = client
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create an HTTP client."""
        if self._client is not None:
            return self._client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _fetch_json(self, url: str) -> dict | list | None:
        """Fetch JSON from a URL."""
        client = await self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()
        finally:
            if self._client is None:
                await client.aclose()

    async def get_repository_url(self, name: str) -> str | None:
        """Fetch the raw repository URL declared by an npm package.

        Args:
            name: Package name (supports scoped packages like @org/pkg).

        Returns:
            Cleaned repository URL, or None if the package declares none.

        Raises:
            ResolutionError: If the package does not exist or the registry
                cannot be reached.
        """
        # URL-encode scoped package names
        encoded_name = name.replace("/", "%2F")
        url = f"{self.REGISTRY_URL}/{encoded_name}"

        try:
            data = await self._fetch_json(url)
        except httpx.HTTPStatusError as e:
            raise ResolutionError(name, f"npm registry returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ResolutionError(name, f"npm registry request failed: {e}") from e
        except ValueError as e:
            raise ResolutionError(name, "npm registry returned invalid JSON") from e

        if not isinstance(data, dict):
            raise ResolutionError(name, "npm registry returned unexpected payload")

        dist_tags = data.get("dist-tags")
        latest = dist_tags.get("latest", "") if isinstance(dist_tags, dict) else ""
        versions = data.get("versions")
        version_data = versions.get(latest) if isinstance(versions, dict) else None
        if not isinstance(version_data, dict):
            version_data = {}
        repository = data.get("repository") or version_data.get("repository")
        return self._extract_repo_url(repository)

    def _extract_repo_url(self, repository: dict | str | None) -> str | None:
        """Extract repository URL from npm repository field.

        Handles various formats:
        - {"type": "git", "url": "git+https://github.com/owner/repo.git"}
        - {"type": "git", "url": "git+ssh://git@github.com/owner/repo.git"}
        - "github:owner/repo"
        - "owner/repo"
        - "https://github.com/owner/repo"
        """
        if not repository:
            return None

        if isinstance(repository, str):
            url = repository
        elif isinstance(repository, dict):
            url = repository.get("url", "")
        else:
            return None

        if not url:
            return None

        url = url.strip()
        if url.startswith("git+ssh://git@"):
            url = "https://" + url[len("git+ssh://git@"):]
        url = url.replace("git+", "").replace("git://", "https://")
        if url.endswith(".git"):
            url = url[: -len(".git")]

        # GitHub shorthand
        if url.startswith("github:"):
            url = f"https://github.com/{url[7:]}"
        elif ":" not in url and url.count("/") == 1:
            url = f"https://github.com/{url}"

        return url or None

    async def get_github_repo(self, name: str) -> tuple[str, str]:
        """Resolve an npm package to its GitHub ``(owner, repo)``.

        Raises:
            ResolutionError: If the package has no GitHub repository.
        """
        repo_url = await self.get_repository_url(name)
        if not repo_url:
            raise ResolutionError(name, "package declares no repository")

        parsed = parse_github_url(repo_url)
        if parsed is None:
            raise ResolutionError(name, f"repository is not on GitHub: {repo_url}")

        logger.debug(f"npm package {name} resolved to {parsed[0]}/{parsed[1]}")
        return parsed
