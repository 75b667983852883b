"""Code review fraction: share of pull requests that made it through review."""

import logging

from pkgtrust.adapters.base import ResolutionError
from pkgtrust.adapters.resolver import UrlResolver
from pkgtrust.analyzers.github import GitHubFetcher
from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ProviderError, ScoreProvider, clamp

logger = logging.getLogger(__name__)


class CodeReviewProvider(ScoreProvider):
    """Merged pull requests over all pull requests, via GraphQL.

    Works from the original source URL and resolves it independently,
    including the npm → GitHub lookup, rather than reusing the caller's
    identity.
    """

    metric = Metric.CODE_REVIEW_FRACTION

    def __init__(self, github: GitHubFetcher, resolver: UrlResolver | None = None) -> None:
        super().__init__(github)
        self.resolver = resolver or UrlResolver()

    async def _score(self, identity: PackageIdentity) -> float:
        try:
            target = await self.resolver.resolve_or_raise(identity.source_url)
        except ResolutionError as e:
            raise ProviderError(str(e)) from e

        logger.debug(f"Counting reviewed pull requests for {target.slug}")
        total, merged = await self.github.fetch_pull_request_counts(target.owner, target.repo)
        if total <= 0:
            return 0.0
        return clamp(merged / total)
