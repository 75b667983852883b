"""Runs every score provider for one package."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence

from pkgtrust.config import Settings
from pkgtrust.models.schemas import (
    CollectionResult,
    Metric,
    PackageIdentity,
    ScoreResult,
    build_score_vector,
    is_finite_number,
)
from pkgtrust.providers.base import ScoreProvider

logger = logging.getLogger(__name__)


class MetricCollector:
    """Invokes the provider set for a package and gathers a score vector.

    Every provider call is timed on its own and isolated from the others:
    a failure, a timeout, or even an exception escaping a provider only
    marks that one metric as failed.

    Usage:
        collector = MetricCollector(providers, settings)
        result = await collector.collect(identity)
    """

    def __init__(
        self,
        providers: Sequence[ScoreProvider],
        settings: Settings | None = None,
        concurrent: bool = True,
    ) -> None:
        """Initialize the collector.

        Args:
            providers: One provider per metric.
            settings: Run settings; only ``provider_timeout`` is used here.
            concurrent: Run providers as concurrent tasks instead of one
                after another.

        Raises:
            ValueError: If two providers report the same metric.
        """
        metrics = [p.metric for p in providers]
        if len(set(metrics)) != len(metrics):
            raise ValueError("Each metric must have exactly one provider")

        self.providers = list(providers)
        self.settings = settings or Settings()
        self.concurrent = concurrent

    async def _run_provider(
        self,
        provider: ScoreProvider,
        identity: PackageIdentity,
    ) -> tuple[ScoreResult, float]:
        """Evaluate one provider and measure its own wall-clock span."""
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                provider.evaluate(identity),
                timeout=self.settings.provider_timeout,
            )
        except asyncio.TimeoutError:
            result = ScoreResult.failure(
                f"timed out after {self.settings.provider_timeout:.0f}s"
            )
        except Exception as e:
            # Provider broke its contract; isolate it like any other failure
            result = ScoreResult.failure(f"unexpected {type(e).__name__}: {e}")
        latency = time.perf_counter() - start

        if not isinstance(result, ScoreResult):
            result = ScoreResult.failure(f"provider returned {type(result).__name__}, not a score")
        elif result.ok and not is_finite_number(result.value):
            result = ScoreResult.failure(f"non-numeric score {result.value!r}")

        if not result.ok:
            logger.debug(
                f"Error getting {provider.name} metric score for {identity.slug}: {result.reason}"
            )
        return result, latency

    async def collect(self, identity: PackageIdentity) -> CollectionResult:
        """Run every provider for ``identity``.

        Returns:
            CollectionResult with one score and one latency per provider.
        """
        logger.debug(f"Collecting metrics for {identity.slug}")
        start = time.perf_counter()

        if self.concurrent:
            outcomes = await asyncio.gather(
                *(self._run_provider(p, identity) for p in self.providers)
            )
        else:
            outcomes = [await self._run_provider(p, identity) for p in self.providers]

        elapsed = time.perf_counter() - start

        scores: dict[Metric, ScoreResult] = {}
        latencies: dict[Metric, float] = {}
        for provider, (result, latency) in zip(self.providers, outcomes):
            scores[provider.metric] = result
            latencies[provider.metric] = latency

        return CollectionResult(
            identity=identity,
            scores=build_score_vector(scores),
            latencies=latencies,
            elapsed=elapsed,
        )
