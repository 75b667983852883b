"""Data models and schemas."""

from pkgtrust.models.schemas import (
    FAILURE_SENTINEL,
    NET_SCORE_METRICS,
    BatchOutcome,
    CollectionResult,
    Metric,
    MetricsRecord,
    MetricsReport,
    NetScoreRecord,
    PackageIdentity,
    ScoreResult,
)

__all__ = [
    "FAILURE_SENTINEL",
    "NET_SCORE_METRICS",
    "BatchOutcome",
    "CollectionResult",
    "Metric",
    "MetricsRecord",
    "MetricsReport",
    "NetScoreRecord",
    "PackageIdentity",
    "ScoreResult",
]
