"""Ramp-up: how quickly a new contributor can get going."""

from pkgtrust.models.schemas import Metric, PackageIdentity
from pkgtrust.providers.base import ProviderError, ScoreProvider, clamp

# README size that earns full documentation credit
README_TARGET_BYTES = 5000

DOC_ENTRIES = {"docs", "doc", "documentation", "examples", "example", "samples"}
CONTRIBUTING_ENTRIES = {"contributing.md", "contributing", "contributing.rst", ".github"}


class RampUpProvider(ScoreProvider):
    """Scores README depth plus docs/examples and contributor guides."""

    metric = Metric.RAMP_UP

    async def _score(self, identity: PackageIdentity) -> float:
        entries = await self.github.list_root_entries(identity.owner, identity.repo)
        if not entries:
            raise ProviderError(f"repository {identity.slug} has no readable contents")

        readme_size = await self.github.fetch_readme_size(identity.owner, identity.repo) or 0

        readme_score = min(1.0, readme_size / README_TARGET_BYTES)
        docs_score = 1.0 if DOC_ENTRIES.intersection(entries) else 0.0
        contributing_score = 1.0 if CONTRIBUTING_ENTRIES.intersection(entries) else 0.0

        return clamp(0.5 * readme_score + 0.25 * docs_score + 0.25 * contributing_score)
