"""Bus factor: how many people the project depends on."""

from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ScoreProvider, clamp

# Number of key contributors that earns a full score
TARGET_KEY_CONTRIBUTORS = 5


def key_contributor_count(contributions: list[int], share: float = 0.5) -> int:
    """Smallest number of top contributors covering ``share`` of all commits."""
    total = sum(contributions)
    if total <= 0:
        return 0

    covered = 0
    for count, value in enumerate(sorted(contributions, reverse=True), start=1):
        covered += value
        if covered >= total * share:
            return count
    return len(contributions)


class BusFactorProvider(ScoreProvider):
    metric = Metric.BUS_FACTOR

    async def _score(self, identity: PackageIdentity) -> float:
        await self._require_repository(identity)
        contributors = await self.github.fetch_contributors(identity.owner, identity.repo)
        contributions = [int(c.get("contributions", 0)) for c in contributors]
        key_count = key_contributor_count(contributions)
        return clamp(key_count / TARGET_KEY_CONTRIBUTORS)
