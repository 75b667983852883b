"""Data models for the scoring pipeline."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

# Marker written in place of a score when a provider failed.
FAILURE_SENTINEL = -1.0

NET_SCORE_KEY = "NetScore"


class Metric(str, Enum):
    """Quality signals computed for every package, in collection order."""

    RAMP_UP = "RampUp"
    CORRECTNESS = "Correctness"
    BUS_FACTOR = "BusFactor"
    RESPONSIVE_MAINTAINER = "ResponsiveMaintainer"
    LICENSE = "License"
    DEPENDENCY_PINNING = "DependencyPinning"
    CODE_REVIEW_FRACTION = "CodeReviewFraction"

    @property
    def output_key(self) -> str:
        """Key used for this metric in the flat NDJSON record."""
        return _FLAT_KEYS.get(self, self.value)

    @property
    def metrics_key(self) -> str:
        """Key used for this metric in the nested metrics record."""
        return _NESTED_KEYS.get(self, self.value)

    @property
    def metrics_latency_key(self) -> str:
        """Latency key for this metric in the nested metrics record."""
        base = self.value if self is Metric.LICENSE else self.metrics_key
        return f"{base}Latency"


_FLAT_KEYS = {
    Metric.DEPENDENCY_PINNING: "goodPinningPractice",
    Metric.CODE_REVIEW_FRACTION: "pullRequest",
}

_NESTED_KEYS = {
    Metric.LICENSE: "LicenseScore",
    Metric.DEPENDENCY_PINNING: "GoodPinningPractice",
    Metric.CODE_REVIEW_FRACTION: "PullRequest",
}

# Metrics that participate in the net score formula.
NET_SCORE_METRICS: tuple[Metric, ...] = (
    Metric.RAMP_UP,
    Metric.CORRECTNESS,
    Metric.BUS_FACTOR,
    Metric.RESPONSIVE_MAINTAINER,
    Metric.LICENSE,
)


class PackageIdentity(BaseModel):
    """Canonical repository identity resolved from a package URL."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    source_url: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of one provider evaluation: a score or a failure reason."""

    value: float | None = None
    reason: str | None = None

    @classmethod
    def success(cls, value: float) -> ScoreResult:
        return cls(value=float(value))

    @classmethod
    def failure(cls, reason: str) -> ScoreResult:
        return cls(value=None, reason=reason)

    @property
    def ok(self) -> bool:
        return self.value is not None

    def legacy_value(self) -> float:
        """Return the score, or the -1 sentinel if the provider failed."""
        return self.value if self.value is not None else FAILURE_SENTINEL


ScoreVector = Mapping[Metric, ScoreResult]

# Unrounded seconds per provider; the net score latency is kept alongside it
LatencyVector = Mapping[Metric, float]


def build_score_vector(results: Mapping[Metric, ScoreResult]) -> ScoreVector:
    """Freeze provider results into a read-only vector over every metric.

    Metrics missing from ``results`` are recorded as failures so the vector
    always covers the full metric set, in enum order.
    """
    ordered = {
        metric: results.get(metric, ScoreResult.failure("not evaluated"))
        for metric in Metric
    }
    return MappingProxyType(ordered)


@dataclass(frozen=True)
class CollectionResult:
    """Scores and per-provider latencies gathered for one package."""

    identity: PackageIdentity
    scores: ScoreVector
    latencies: LatencyVector
    elapsed: float

    @property
    def failed_metrics(self) -> list[Metric]:
        return [metric for metric, result in self.scores.items() if not result.ok]


@dataclass
class BatchOutcome:
    """Processed/total counts for one chunk of URLs."""

    processed_count: int
    total_count: int

    @property
    def fraction(self) -> float:
        if self.total_count == 0:
            return 0.0
        return self.processed_count / self.total_count


# --- Output records ---


class NetScoreRecord(BaseModel):
    """Flat per-URL record, written as one NDJSON line."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(alias="URL")
    net_score: float = Field(alias="NetScore")
    net_score_latency: float = Field(alias="NetScore_Latency")
    ramp_up: float = Field(alias="RampUp")
    ramp_up_latency: float = Field(alias="RampUp_Latency")
    correctness: float = Field(alias="Correctness")
    correctness_latency: float = Field(alias="Correctness_Latency")
    bus_factor: float = Field(alias="BusFactor")
    bus_factor_latency: float = Field(alias="BusFactor_Latency")
    responsive_maintainer: float = Field(alias="ResponsiveMaintainer")
    responsive_maintainer_latency: float = Field(alias="ResponsiveMaintainer_Latency")
    license: float = Field(alias="License")
    license_latency: float = Field(alias="License_Latency")
    good_pinning_practice: float = Field(alias="goodPinningPractice")
    good_pinning_practice_latency: float = Field(alias="goodPinningPractice_Latency")
    pull_request: float = Field(alias="pullRequest")
    pull_request_latency: float = Field(alias="pullRequest_Latency")

    def to_json(self) -> str:
        """Serialize with the external key names, in declaration order."""
        return self.model_dump_json(by_alias=True)


class MetricsRecord(BaseModel):
    """Nested metrics record with explicit latency companion fields."""

    model_config = ConfigDict(populate_by_name=True)

    bus_factor: float = Field(alias="BusFactor")
    bus_factor_latency: float = Field(alias="BusFactorLatency")
    correctness: float = Field(alias="Correctness")
    correctness_latency: float = Field(alias="CorrectnessLatency")
    ramp_up: float = Field(alias="RampUp")
    ramp_up_latency: float = Field(alias="RampUpLatency")
    responsive_maintainer: float = Field(alias="ResponsiveMaintainer")
    responsive_maintainer_latency: float = Field(alias="ResponsiveMaintainerLatency")
    license_score: float = Field(alias="LicenseScore")
    license_latency: float = Field(alias="LicenseLatency")
    good_pinning_practice: float = Field(alias="GoodPinningPractice")
    good_pinning_practice_latency: float = Field(alias="GoodPinningPracticeLatency")
    pull_request: float = Field(alias="PullRequest")
    pull_request_latency: float = Field(alias="PullRequestLatency")
    net_score: float = Field(alias="NetScore")
    net_score_latency: float = Field(alias="NetScoreLatency")


class MetricsReport(BaseModel):
    """Metrics record for one URL, as returned to programmatic callers."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(alias="URL")
    metrics: MetricsRecord

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


def is_finite_number(value: object) -> bool:
    """True for real ints/floats that are not NaN or infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
