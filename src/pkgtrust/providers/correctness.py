"""Correctness: share of reported issues that have been resolved."""

from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ScoreProvider, clamp

# Score for repositories with no issues at all
NO_ISSUES_SCORE = 0.5


class CorrectnessProvider(ScoreProvider):
    metric = Metric.CORRECTNESS

    async def _score(self, identity: PackageIdentity) -> float:
        await self._require_repository(identity)

        open_count = await self.github.count_issues(identity.owner, identity.repo, "open")
        closed_count = await self.github.count_issues(identity.owner, identity.repo, "closed")

        total = open_count + closed_count
        if total == 0:
            return NO_ISSUES_SCORE
        return clamp(closed_count / total)
