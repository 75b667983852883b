"""End-to-end scoring pipeline for one package URL."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from pkgtrust.adapters.resolver import UrlResolver
from pkgtrust.analyzers.collector import MetricCollector
from pkgtrust.analyzers.github import GitHubFetcher
from pkgtrust.analyzers.report import ReportAssembler
from pkgtrust.analyzers.scorer import Scorer
from pkgtrust.config import Settings
from pkgtrust.models.schemas import (
    CollectionResult,
    MetricsReport,
    NetScoreRecord,
    PackageIdentity,
    ScoreResult,
)
from pkgtrust.providers import default_providers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineRun:
    """Everything computed for one package before it is reported."""

    url: str
    identity: PackageIdentity
    collection: CollectionResult
    net_score: ScoreResult
    net_score_latency: float


class ScoringPipeline:
    """Orchestrates scoring for a package URL.

    Pipeline stages:
    1. Resolve the URL to a GitHub identity
    2. Collect every provider's score
    3. Synthesize the net score
    4. Assemble the output record

    Usage:
        async with ScoringPipeline(settings) as pipeline:
            report = await pipeline.score_url("https://github.com/lodash/lodash")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        resolver: UrlResolver | None = None,
        collector: MetricCollector | None = None,
        scorer: Scorer | None = None,
        assembler: ReportAssembler | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Run settings. Defaults to ``Settings()`` (no token).
            client: Shared HTTP client. If omitted, one is created on
                ``__aenter__``, or per request outside a context manager.
            resolver: URL resolver; built from settings if omitted.
            collector: Metric collector; built with the default providers if
                omitted.
            scorer: Net score calculator.
            assembler: Output record builder.
        """
        self.settings = settings or Settings()
        self._client = client
        self._owns_client = False
        self._given_resolver = resolver
        self._given_collector = collector
        self._resolver = resolver
        self._collector = collector
        self._github: GitHubFetcher | None = None
        self.scorer = scorer or Scorer()
        self.assembler = assembler or ReportAssembler()

    async def __aenter__(self) -> ScoringPipeline:
        """Set up shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.http_timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, *args) -> None:
        """Clean up HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False
            # Components built lazily hold the closed client
            self._github = None
            self._resolver = self._given_resolver
            self._collector = self._given_collector

    @property
    def github(self) -> GitHubFetcher:
        if self._github is None:
            self._github = GitHubFetcher(
                token=self.settings.github_token,
                client=self._client,
                timeout=self.settings.http_timeout,
            )
        return self._github

    @property
    def resolver(self) -> UrlResolver:
        if self._resolver is None:
            self._resolver = UrlResolver(client=self._client, timeout=self.settings.http_timeout)
        return self._resolver

    @property
    def collector(self) -> MetricCollector:
        if self._collector is None:
            providers = default_providers(
                self.github,
                client=self._client,
                timeout=self.settings.http_timeout,
            )
            self._collector = MetricCollector(providers, self.settings)
        return self._collector

    async def resolve(self, url: str) -> PackageIdentity | None:
        """Resolve a URL; None means it should be skipped."""
        return await self.resolver.resolve(url)

    async def run(self, url: str, identity: PackageIdentity) -> PipelineRun:
        """Collect and synthesize scores for a resolved package."""
        logger.debug(f"Calculating Net Score for {identity.slug}")
        start = time.perf_counter()

        collection = await self.collector.collect(identity)
        net_score = self.scorer.synthesize(collection.scores)
        net_score_latency = time.perf_counter() - start

        if net_score.ok:
            logger.info(f"Net Score for {identity.slug}: {net_score.value:.3f}")
        else:
            logger.info(f"Net Score for {identity.slug} unavailable: {net_score.reason}")
        logger.info(f"Net Score Latency: {net_score_latency:.3f} seconds")

        return PipelineRun(
            url=url,
            identity=identity,
            collection=collection,
            net_score=net_score,
            net_score_latency=net_score_latency,
        )

    async def score_identity(self, url: str, identity: PackageIdentity) -> NetScoreRecord:
        """Run the pipeline and build the flat output record."""
        result = await self.run(url, identity)
        return self.assembler.assemble(
            url,
            result.collection,
            result.net_score,
            result.net_score_latency,
        )

    async def score_url(self, url: str) -> MetricsReport | None:
        """Score a single URL and return the nested metrics report.

        Entry point for callers embedding the pipeline; nothing is written
        to stdout.

        Returns:
            MetricsReport, or None if the URL cannot be resolved or the run
            fails.
        """
        url = url.strip()
        try:
            identity = await self.resolve(url)
            if identity is None:
                logger.debug(f"Error: URL not compatible: {url}")
                return None

            result = await self.run(url, identity)
            return self.assembler.assemble_metrics(
                url,
                result.collection,
                result.net_score,
                result.net_score_latency,
            )
        except Exception:
            logger.exception(f"Error calculating all metrics for {url}")
            return None


async def get_all_metrics(url: str, settings: Settings | None = None) -> MetricsReport | None:
    """Score one URL with a short-lived pipeline."""
    async with ScoringPipeline(settings) as pipeline:
        return await pipeline.score_url(url)
