"""
Pytest configuration and fixtures for pkgtrust tests.

This module provides fixtures for:
- Package identities and collection results
- Fake score providers with scripted scores, errors and delays
- httpx clients backed by MockTransport handlers
"""

import asyncio

import httpx
import pytest

from pkgtrust.analyzers.github import GitHubFetcher
from pkgtrust.models.schemas import (
    CollectionResult,
    Metric,
    PackageIdentity,
    ScoreResult,
    build_score_vector,
)
from pkgtrust.providers.base import ScoreProvider


class FakeProvider(ScoreProvider):
    """Provider returning a scripted score, error or delay."""

    requires_token = False

    def __init__(self, metric, value=0.5, error=None, delay=0.0):
        super().__init__(GitHubFetcher())
        self.metric = metric
        self.value = value
        self.error = error
        self.delay = delay
        self.calls = 0

    async def _score(self, identity):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.value


# ============================================================================
# Identity and Result Fixtures
# ============================================================================


@pytest.fixture
def identity():
    """Identity for a plain GitHub URL."""
    return PackageIdentity(
        owner="lodash",
        repo="lodash",
        source_url="https://github.com/lodash/lodash",
    )


@pytest.fixture
def make_collection(identity):
    """Build a CollectionResult from {metric: value}; None marks a failure."""

    def _make(values, latency=0.25):
        scores = {
            metric: ScoreResult.failure("provider failed") if value is None else ScoreResult.success(value)
            for metric, value in values.items()
        }
        return CollectionResult(
            identity=identity,
            scores=build_score_vector(scores),
            latencies={metric: latency for metric in Metric},
            elapsed=latency,
        )

    return _make


@pytest.fixture
def uniform_scores():
    """All metrics at 0.8 with a passing license."""
    values = {metric: 0.8 for metric in Metric}
    values[Metric.LICENSE] = 1.0
    return values


# ============================================================================
# Provider Fixtures
# ============================================================================


@pytest.fixture
def fake_provider():
    """Factory for a single FakeProvider."""
    return FakeProvider


@pytest.fixture
def make_providers():
    """Factory for a full provider set; ``overrides`` maps metric to kwargs."""

    def _make(default=0.5, overrides=None):
        overrides = overrides or {}
        return [
            FakeProvider(metric, **overrides.get(metric, {"value": default}))
            for metric in Metric
        ]

    return _make


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def mock_client():
    """Factory for an AsyncClient whose requests go to ``handler``."""

    def _make(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
