"""Base class for score providers."""

import logging
from abc import ABC, abstractmethod

import httpx

from pkgtrust.analyzers.github import GitHubFetcher, GitHubQueryError, GitHubRateLimitError
from pkgtrust.models.schemas import Metric, PackageIdentity, ScoreResult

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised inside a provider when a score cannot be computed."""


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class ScoreProvider(ABC):
    """Computes one quality signal for a package.

    Subclasses implement ``_score``. ``evaluate`` wraps it so that every
    internal error becomes a failed ScoreResult instead of an exception.
    """

    metric: Metric
    requires_token: bool = True

    def __init__(self, github: GitHubFetcher) -> None:
        self.github = github

    @property
    def name(self) -> str:
        return self.metric.value

    async def evaluate(self, identity: PackageIdentity) -> ScoreResult:
        """Score a package; never raises."""
        if self.requires_token and not self.github.has_token:
            return ScoreResult.failure("missing GitHub token")

        try:
            score = await self._score(identity)
        except ProviderError as e:
            reason = str(e)
        except GitHubRateLimitError as e:
            reason = f"rate limited: {e}"
        except GitHubQueryError as e:
            reason = f"GraphQL error: {e}"
        except httpx.HTTPStatusError as e:
            reason = f"HTTP {e.response.status_code} from {e.request.url}"
        except httpx.RequestError as e:
            reason = f"request error: {e}"
        except (KeyError, TypeError, ValueError) as e:
            reason = f"malformed data: {e!r}"
        else:
            return ScoreResult.success(score)

        logger.debug(f"{self.name} failed for {identity.slug}: {reason}")
        return ScoreResult.failure(reason)

    async def _require_repository(self, identity: PackageIdentity) -> dict:
        """Fetch repository info, failing the score if the repository is gone."""
        info = await self.github.fetch_repo_info(identity.owner, identity.repo)
        if info is None:
            raise ProviderError(f"repository {identity.slug} not found")
        return info

    @abstractmethod
    async def _score(self, identity: PackageIdentity) -> float:
        """Compute the score in [0, 1].

        Raises:
            ProviderError: If the score cannot be computed.
        """
        ...
