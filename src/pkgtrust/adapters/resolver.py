"""Maps package URLs to GitHub repository identities."""

import logging

import httpx

from pkgtrust.adapters.base import (
    ResolutionError,
    github_identity,
    parse_npm_url,
)
from pkgtrust.adapters.npm import NpmAdapter
from pkgtrust.models.schemas import PackageIdentity

logger = logging.getLogger(__name__)


class UrlResolver:
    """Resolves GitHub and npm package URLs to a PackageIdentity.

    GitHub URLs are parsed directly. npm URLs go through the registry to
    find the package's GitHub repository.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0) -> None:
        self.npm = NpmAdapter(client=client, timeout=timeout)

    async def resolve_or_raise(self, url: str) -> PackageIdentity:
        """Resolve a URL, raising on failure.

        Raises:
            ResolutionError: If the URL is unsupported or the npm lookup fails.
        """
        url = url.strip()

        identity = github_identity(url)
        if identity is not None:
            return identity

        package_name = parse_npm_url(url)
        if package_name is None:
            raise ResolutionError(url, "not a github.com or npmjs.com package URL")

        owner, repo = await self.npm.get_github_repo(package_name)
        return PackageIdentity(owner=owner, repo=repo, source_url=url)

    async def resolve(self, url: str) -> PackageIdentity | None:
        """Resolve a URL, returning None if it cannot be resolved."""
        try:
            return await self.resolve_or_raise(url)
        except ResolutionError as e:
            logger.debug(f"URL skipped: {e}")
            return None
