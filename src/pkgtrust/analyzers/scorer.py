"""Net score calculation."""

import logging
from collections.abc import Mapping

from pkgtrust.models.schemas import NET_SCORE_METRICS, Metric, ScoreResult

logger = logging.getLogger(__name__)


class ScoreValidationError(ValueError):
    """Raised when a normalized score falls outside [0, 1]."""

    def __init__(self, invalid: dict[Metric, float]) -> None:
        self.invalid = invalid
        details = ", ".join(f"{m.value}={v}" for m, v in invalid.items())
        super().__init__(f"Scores must be between 0 and 1: {details}")


class Scorer:
    """Reduces a score vector to the license-gated net score.

    NetScore = (0.20·RampUp + 0.30·Correctness + 0.20·BusFactor
                + 0.30·ResponsiveMaintainer) · License

    A failed metric counts as 0, not as missing. DependencyPinning and
    CodeReviewFraction are reported alongside but carry no weight.
    """

    WEIGHTS = {
        Metric.RAMP_UP: 0.20,
        Metric.CORRECTNESS: 0.30,
        Metric.BUS_FACTOR: 0.20,
        Metric.RESPONSIVE_MAINTAINER: 0.30,
    }

    # Multiplies the weighted sum; 0 disqualifies the package outright
    GATE = Metric.LICENSE

    def normalize(self, scores: Mapping[Metric, ScoreResult]) -> dict[Metric, float]:
        """Map each net-score metric to its value, failures to 0.0."""
        normalized = {}
        for metric in NET_SCORE_METRICS:
            result = scores.get(metric)
            normalized[metric] = result.value if result is not None and result.ok else 0.0
        return normalized

    def validate(self, normalized: Mapping[Metric, float]) -> None:
        """Raise ScoreValidationError if any value is outside [0, 1]."""
        invalid = {m: v for m, v in normalized.items() if not 0.0 <= v <= 1.0}
        if invalid:
            raise ScoreValidationError(invalid)

    def calculate_net_score(self, scores: Mapping[Metric, ScoreResult]) -> float:
        """Compute the net score.

        Raises:
            ScoreValidationError: If a normalized score is outside [0, 1].
        """
        normalized = self.normalize(scores)
        self.validate(normalized)

        weighted = sum(weight * normalized[metric] for metric, weight in self.WEIGHTS.items())
        return weighted * normalized[self.GATE]

    def synthesize(self, scores: Mapping[Metric, ScoreResult]) -> ScoreResult:
        """Compute the net score as a tagged result instead of raising."""
        try:
            return ScoreResult.success(self.calculate_net_score(scores))
        except ScoreValidationError as e:
            logger.debug(f"Error computing Net Score: {e}")
            return ScoreResult.failure(str(e))
