"""Responsive maintainer: how fast issues get closed."""

from datetime import datetime, timedelta, timezone
from statistics import median

from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ProviderError, ScoreProvider, clamp

LOOKBACK_DAYS = 180
# Median close time at which the score reaches 0
CLOSE_TIME_CEILING_DAYS = 30.0
# Days since last push at which the fallback score reaches 0
PUSH_CEILING_DAYS = 365.0


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def close_times_in_days(issues: list[dict]) -> list[float]:
    """Days between creation and closing for every closed issue."""
    durations = []
    for issue in issues:
        created = issue.get("created_at")
        closed = issue.get("closed_at")
        if not created or not closed:
            continue
        delta = _parse_timestamp(closed) - _parse_timestamp(created)
        durations.append(max(0.0, delta.total_seconds() / 86400))
    return durations


class ResponsiveMaintainerProvider(ScoreProvider):
    """Scores the median close time of recent issues.

    Falls back to push recency when no issue was closed in the lookback
    window.
    """

    metric = Metric.RESPONSIVE_MAINTAINER

    async def _score(self, identity: PackageIdentity) -> float:
        now = datetime.now(timezone.utc)
        issues = await self.github.fetch_closed_issues(
            identity.owner,
            identity.repo,
            since=now - timedelta(days=LOOKBACK_DAYS),
        )

        durations = close_times_in_days(issues)
        if durations:
            return clamp(1.0 - median(durations) / CLOSE_TIME_CEILING_DAYS)

        info = await self.github.fetch_repo_info(identity.owner, identity.repo)
        if info is None:
            raise ProviderError(f"repository {identity.slug} not found")
        pushed_at = info.get("pushed_at")
        if not pushed_at:
            return 0.0

        days_since_push = (now - _parse_timestamp(pushed_at)).total_seconds() / 86400
        return clamp(1.0 - days_since_push / PUSH_CEILING_DAYS)
