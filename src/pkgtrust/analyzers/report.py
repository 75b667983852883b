"""Builds the output records for a scored package."""

from __future__ import annotations

import logging
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import TextIO

from pkgtrust.models.schemas import (
    NET_SCORE_KEY,
    CollectionResult,
    Metric,
    MetricsRecord,
    MetricsReport,
    NetScoreRecord,
    ScoreResult,
)

logger = logging.getLogger(__name__)

SCORE_PLACES = 1
LATENCY_PLACES = 3


def round_half_up(value: float, places: int) -> float:
    """Round to ``places`` decimals, halves away from zero.

    Works on the shortest decimal repr of the float, so 0.25 rounds to 0.3
    and re-rounding an already rounded value is a no-op.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def round_score(value: float) -> float:
    return round_half_up(value, SCORE_PLACES)


def round_latency(seconds: float) -> float:
    return round_half_up(seconds, LATENCY_PLACES)


class ReportAssembler:
    """Turns collected scores, latencies and the net score into records.

    Rounding happens here and nowhere upstream.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the assembler.

        Args:
            stream: Where ``emit`` writes NDJSON lines. Defaults to stdout,
                looked up at write time.
        """
        self._stream = stream

    def assemble(
        self,
        url: str,
        collection: CollectionResult,
        net_score: ScoreResult,
        net_score_latency: float,
    ) -> NetScoreRecord:
        """Build the flat record; failures are written as -1."""
        fields: dict[str, object] = {
            "URL": url,
            NET_SCORE_KEY: round_score(net_score.legacy_value()),
            f"{NET_SCORE_KEY}_Latency": round_latency(net_score_latency),
        }
        for metric in Metric:
            key = metric.output_key
            fields[key] = round_score(collection.scores[metric].legacy_value())
            fields[f"{key}_Latency"] = round_latency(collection.latencies.get(metric, 0.0))
        return NetScoreRecord.model_validate(fields)

    def assemble_metrics(
        self,
        url: str,
        collection: CollectionResult,
        net_score: ScoreResult,
        net_score_latency: float,
    ) -> MetricsReport:
        """Build the nested metrics record; failures are written as 0."""
        fields: dict[str, float] = {}
        for metric in Metric:
            result = collection.scores[metric]
            fields[metric.metrics_key] = round_score(result.value if result.ok else 0.0)
            fields[metric.metrics_latency_key] = round_latency(collection.latencies.get(metric, 0.0))
        fields[NET_SCORE_KEY] = round_score(net_score.value if net_score.ok else 0.0)
        fields[f"{NET_SCORE_KEY}Latency"] = round_latency(net_score_latency)

        return MetricsReport(url=url, metrics=MetricsRecord.model_validate(fields))

    def emit(self, record: NetScoreRecord) -> None:
        """Write one record as a self-contained NDJSON line."""
        stream = self._stream or sys.stdout
        stream.write(record.to_json() + "\n")
        stream.flush()
