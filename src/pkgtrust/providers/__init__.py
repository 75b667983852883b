"""Score providers, one per quality signal."""

import httpx

from pkgtrust.adapters.resolver import UrlResolver
from pkgtrust.analyzers.github import GitHubFetcher
from pkgtrust.providers.base import ProviderError, ScoreProvider
from pkgtrust.providers.bus_factor import BusFactorProvider
from pkgtrust.providers.code_review import CodeReviewProvider
from pkgtrust.providers.correctness import CorrectnessProvider
from pkgtrust.providers.dependency_pinning import DependencyPinningProvider
from pkgtrust.providers.license import LicenseProvider
from pkgtrust.providers.ramp_up import RampUpProvider
from pkgtrust.providers.responsive_maintainer import ResponsiveMaintainerProvider


def default_providers(
    github: GitHubFetcher,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> list[ScoreProvider]:
    """Build the full provider set in collection order."""
    return [
        RampUpProvider(github),
        CorrectnessProvider(github),
        BusFactorProvider(github),
        ResponsiveMaintainerProvider(github),
        LicenseProvider(github, client=client, timeout=timeout),
        DependencyPinningProvider(github),
        CodeReviewProvider(github, resolver=UrlResolver(client=client, timeout=timeout)),
    ]


__all__ = [
    "BusFactorProvider",
    "CodeReviewProvider",
    "CorrectnessProvider",
    "DependencyPinningProvider",
    "LicenseProvider",
    "ProviderError",
    "RampUpProvider",
    "ResponsiveMaintainerProvider",
    "ScoreProvider",
    "default_providers",
]
