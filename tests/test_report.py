"""
Unit tests for pkgtrust.analyzers.report.

This module tests:
- Half-up rounding of scores and latencies
- Flat NDJSON record keys, order and failure sentinel
- Nested metrics record keys and failure handling
- Line emission
"""

import io
import json

import pytest

from pkgtrust.analyzers.report import ReportAssembler, round_half_up, round_latency, round_score
from pkgtrust.models.schemas import Metric, ScoreResult

URL = "https://github.com/lodash/lodash"

FLAT_KEYS = [
    "URL",
    "NetScore",
    "NetScore_Latency",
    "RampUp",
    "RampUp_Latency",
    "Correctness",
    "Correctness_Latency",
    "BusFactor",
    "BusFactor_Latency",
    "ResponsiveMaintainer",
    "ResponsiveMaintainer_Latency",
    "License",
    "License_Latency",
    "goodPinningPractice",
    "goodPinningPractice_Latency",
    "pullRequest",
    "pullRequest_Latency",
]

NESTED_KEYS = [
    "BusFactor",
    "BusFactorLatency",
    "Correctness",
    "CorrectnessLatency",
    "RampUp",
    "RampUpLatency",
    "ResponsiveMaintainer",
    "ResponsiveMaintainerLatency",
    "LicenseScore",
    "LicenseLatency",
    "GoodPinningPractice",
    "GoodPinningPracticeLatency",
    "PullRequest",
    "PullRequestLatency",
    "NetScore",
    "NetScoreLatency",
]


# ============================================================================
# Rounding Tests
# ============================================================================


class TestRounding:
    """Test half-up decimal rounding."""

    @pytest.mark.parametrize(
        "value,places,expected",
        [
            (0.25, 1, 0.3),
            (0.35, 1, 0.4),
            (0.05, 1, 0.1),
            (0.44, 1, 0.4),
            (1.0, 1, 1.0),
            (0.1235, 3, 0.124),
            (0.0004, 3, 0.0),
            (2.0005, 3, 2.001),
        ],
    )
    def test_half_up(self, value, places, expected):
        assert round_half_up(value, places) == expected

    def test_sentinel_unchanged(self):
        assert round_score(-1.0) == -1.0

    @pytest.mark.parametrize("value", [0.0, 0.15, 0.249999, 0.55, 0.8000000000000002, 0.96])
    def test_score_rounding_idempotent(self, value):
        """Rounding an already rounded score is a no-op."""
        once = round_score(value)
        assert round_score(once) == once

    @pytest.mark.parametrize("value", [0.0, 0.0015, 1.23456, 12.3455])
    def test_latency_rounding_idempotent(self, value):
        once = round_latency(value)
        assert round_latency(once) == once


# ============================================================================
# Flat Record Tests
# ============================================================================


class TestAssemble:
    """Test the flat NetScore record."""

    def test_keys_in_order(self, make_collection, uniform_scores):
        """The JSON line carries every key in the fixed order."""
        record = ReportAssembler().assemble(
            URL,
            make_collection(uniform_scores),
            ScoreResult.success(0.8),
            1.0,
        )
        assert list(json.loads(record.to_json()).keys()) == FLAT_KEYS

    def test_values_rounded(self, make_collection, uniform_scores):
        """Scores round to 1 decimal, latencies to 3."""
        record = ReportAssembler().assemble(
            URL,
            make_collection(uniform_scores, latency=0.12345),
            ScoreResult.success(0.8000000000000002),
            1.23456,
        )
        data = json.loads(record.to_json())
        assert data["URL"] == URL
        assert data["NetScore"] == 0.8
        assert data["NetScore_Latency"] == 1.235
        assert data["RampUp"] == 0.8
        assert data["RampUp_Latency"] == 0.123
        assert data["License"] == 1.0

    def test_failed_metric_written_as_sentinel(self, make_collection, uniform_scores):
        """A failed provider is written as -1."""
        uniform_scores[Metric.CODE_REVIEW_FRACTION] = None
        record = ReportAssembler().assemble(
            URL,
            make_collection(uniform_scores),
            ScoreResult.success(0.8),
            1.0,
        )
        data = json.loads(record.to_json())
        assert data["pullRequest"] == -1
        assert data["goodPinningPractice"] == 0.8

    def test_failed_net_score_written_as_sentinel(self, make_collection, uniform_scores):
        record = ReportAssembler().assemble(
            URL,
            make_collection(uniform_scores),
            ScoreResult.failure("Scores must be between 0 and 1"),
            1.0,
        )
        assert json.loads(record.to_json())["NetScore"] == -1


# ============================================================================
# Nested Record Tests
# ============================================================================


class TestAssembleMetrics:
    """Test the nested metrics report."""

    def test_keys_in_order(self, make_collection, uniform_scores):
        report = ReportAssembler().assemble_metrics(
            URL,
            make_collection(uniform_scores),
            ScoreResult.success(0.8),
            1.0,
        )
        data = report.to_dict()
        assert data["URL"] == URL
        assert list(data["metrics"].keys()) == NESTED_KEYS

    def test_failures_written_as_zero(self, make_collection, uniform_scores):
        """Failed providers and a failed net score become 0 in this shape."""
        uniform_scores[Metric.LICENSE] = None
        report = ReportAssembler().assemble_metrics(
            URL,
            make_collection(uniform_scores),
            ScoreResult.failure("boom"),
            0.5,
        )
        metrics = report.to_dict()["metrics"]
        assert metrics["LicenseScore"] == 0.0
        assert metrics["NetScore"] == 0.0
        assert metrics["NetScoreLatency"] == 0.5
        assert metrics["BusFactor"] == 0.8


# ============================================================================
# Emission Tests
# ============================================================================


class TestEmit:
    """Test NDJSON emission."""

    def test_one_line_per_record(self, make_collection, uniform_scores):
        stream = io.StringIO()
        assembler = ReportAssembler(stream=stream)
        record = assembler.assemble(URL, make_collection(uniform_scores), ScoreResult.success(0.8), 1.0)

        assembler.emit(record)
        assembler.emit(record)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert all(json.loads(line)["URL"] == URL for line in lines)
        assert stream.getvalue().endswith("\n")

    def test_defaults_to_stdout(self, make_collection, uniform_scores, capsys):
        assembler = ReportAssembler()
        record = assembler.assemble(URL, make_collection(uniform_scores), ScoreResult.success(0.8), 1.0)
        assembler.emit(record)
        assert json.loads(capsys.readouterr().out)["NetScore"] == 0.8
