"""
Unit tests for pkgtrust.analyzers.scorer.

This module tests:
- The weighted, license gated net score formula
- Failure normalization to zero
- Range validation
"""

import itertools

import pytest

from pkgtrust.analyzers.scorer import Scorer, ScoreValidationError
from pkgtrust.models.schemas import Metric, ScoreResult, build_score_vector


def _vector(values):
    return build_score_vector(
        {
            metric: ScoreResult.failure("failed") if value is None else ScoreResult.success(value)
            for metric, value in values.items()
        }
    )


# ============================================================================
# Formula Tests
# ============================================================================


class TestNetScoreFormula:
    """Test the net score formula on the reference scenarios."""

    def test_uniform_scores_with_license(self, uniform_scores):
        """All metrics 0.8 with a passing license give 0.8."""
        net = Scorer().calculate_net_score(_vector(uniform_scores))
        assert net == pytest.approx(0.8)

    def test_license_zero_gates_everything(self, uniform_scores):
        """A failing license zeroes the net score."""
        uniform_scores[Metric.LICENSE] = 0.0
        net = Scorer().calculate_net_score(_vector(uniform_scores))
        assert net == 0.0

    def test_failed_metric_counts_as_zero(self):
        """A failed RampUp only removes its own term."""
        values = {metric: 0.5 for metric in Metric}
        values[Metric.LICENSE] = 1.0
        values[Metric.RAMP_UP] = None
        net = Scorer().calculate_net_score(_vector(values))
        assert net == pytest.approx(0.40)

    def test_failed_license_zeroes_score(self, uniform_scores):
        """A failed license is normalized to 0 and gates the result."""
        uniform_scores[Metric.LICENSE] = None
        assert Scorer().calculate_net_score(_vector(uniform_scores)) == 0.0

    def test_unweighted_metrics_are_ignored(self, uniform_scores):
        """DependencyPinning and CodeReviewFraction do not change the result."""
        scorer = Scorer()
        baseline = scorer.calculate_net_score(_vector(uniform_scores))

        uniform_scores[Metric.DEPENDENCY_PINNING] = 0.0
        uniform_scores[Metric.CODE_REVIEW_FRACTION] = None
        assert scorer.calculate_net_score(_vector(uniform_scores)) == baseline

    def test_deterministic(self, uniform_scores):
        """Same inputs always give the same output."""
        scorer = Scorer()
        vector = _vector(uniform_scores)
        assert scorer.calculate_net_score(vector) == scorer.calculate_net_score(vector)

    def test_weights_sum_to_one(self):
        """Weighted terms add up to 1 so the result stays in [0, 1]."""
        assert sum(Scorer.WEIGHTS.values()) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "ramp_up,correctness,bus_factor,responsive,license_value",
        list(itertools.product([0.0, 0.3, 1.0, None], [0.0, 1.0, None], [0.5], [0.0, 1.0], [0.0, 1.0, None])),
    )
    def test_result_in_unit_interval(self, ramp_up, correctness, bus_factor, responsive, license_value):
        """Any valid combination gives a score in [0, 1]."""
        values = {
            Metric.RAMP_UP: ramp_up,
            Metric.CORRECTNESS: correctness,
            Metric.BUS_FACTOR: bus_factor,
            Metric.RESPONSIVE_MAINTAINER: responsive,
            Metric.LICENSE: license_value,
        }
        net = Scorer().calculate_net_score(_vector(values))
        assert 0.0 <= net <= 1.0


# ============================================================================
# Validation Tests
# ============================================================================


class TestValidation:
    """Test range validation of normalized scores."""

    def test_out_of_range_raises(self, uniform_scores):
        """A score above 1 raises ScoreValidationError naming the metric."""
        uniform_scores[Metric.CORRECTNESS] = 1.5
        with pytest.raises(ScoreValidationError) as exc_info:
            Scorer().calculate_net_score(_vector(uniform_scores))
        assert Metric.CORRECTNESS in exc_info.value.invalid
        assert "Correctness" in str(exc_info.value)

    def test_negative_score_raises(self, uniform_scores):
        """A negative success value is not treated as the failure sentinel."""
        uniform_scores[Metric.BUS_FACTOR] = -0.2
        with pytest.raises(ScoreValidationError):
            Scorer().calculate_net_score(_vector(uniform_scores))

    def test_unweighted_metric_out_of_range_is_ignored(self, uniform_scores):
        """Only net score metrics are validated."""
        uniform_scores[Metric.DEPENDENCY_PINNING] = 3.0
        assert Scorer().calculate_net_score(_vector(uniform_scores)) == pytest.approx(0.8)

    def test_synthesize_returns_failure(self, uniform_scores):
        """synthesize turns a validation error into a failed result."""
        uniform_scores[Metric.RAMP_UP] = 2.0
        result = Scorer().synthesize(_vector(uniform_scores))
        assert not result.ok
        assert result.legacy_value() == -1.0

    def test_synthesize_success(self, uniform_scores):
        result = Scorer().synthesize(_vector(uniform_scores))
        assert result.ok
        assert result.value == pytest.approx(0.8)

    def test_normalize_missing_metric(self):
        """Metrics absent from the mapping normalize to 0."""
        normalized = Scorer().normalize({Metric.LICENSE: ScoreResult.success(1.0)})
        assert normalized[Metric.RAMP_UP] == 0.0
        assert normalized[Metric.LICENSE] == 1.0
