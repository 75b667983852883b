"""
Unit tests for pkgtrust.cli.

This module tests:
- score: NDJSON on stdout, exit codes
- metrics, resolve and version commands
- Configuration errors
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from pkgtrust import cli
from pkgtrust.adapters.resolver import UrlResolver
from pkgtrust.analyzers.collector import MetricCollector
from pkgtrust.analyzers.pipeline import ScoringPipeline
from pkgtrust.models.schemas import Metric

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Run every command silently and without credentials."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "0")
    yield
    logger = logging.getLogger("pkgtrust")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_pipeline(monkeypatch, make_providers):
    """Replace the CLI's pipeline with one over fake providers."""
    providers = make_providers(default=0.8, overrides={Metric.LICENSE: {"value": 1.0}})

    def factory(settings):
        return ScoringPipeline(
            settings,
            resolver=UrlResolver(),
            collector=MetricCollector(providers, settings),
        )

    monkeypatch.setattr(cli, "ScoringPipeline", factory)


@pytest.fixture
def url_file(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text(
        "https://github.com/lodash/lodash\n"
        "https://example.com/not-a-package\n"
        "https://github.com/expressjs/express\n"
    )
    return path


class TestScoreCommand:
    """Test the score command."""

    def test_writes_ndjson(self, fake_pipeline, url_file):
        result = runner.invoke(cli.app, ["score", str(url_file), "--no-summary"])

        assert result.exit_code == 0
        records = [json.loads(line) for line in result.output.splitlines() if line.strip()]
        assert [r["URL"] for r in records] == [
            "https://github.com/lodash/lodash",
            "https://github.com/expressjs/express",
        ]
        assert all(r["NetScore"] == 0.8 for r in records)

    def test_concurrent_flag(self, fake_pipeline, url_file):
        result = runner.invoke(cli.app, ["score", str(url_file), "--concurrent", "--no-summary"])

        assert result.exit_code == 0
        assert len(result.output.strip().splitlines()) == 2

    def test_summary(self, fake_pipeline, url_file):
        result = runner.invoke(cli.app, ["score", str(url_file)])

        assert result.exit_code == 0
        assert "Completed" in result.output
        assert "skipped" in result.output

    def test_success_rate_in_summary(self, fake_pipeline, url_file):
        result = runner.invoke(cli.app, ["score", str(url_file)])
        assert "2/3 URLs (67%)" in result.output

    def test_missing_token_logged(self, fake_pipeline, url_file, tmp_path, monkeypatch):
        log_file = tmp_path / "run.log"
        monkeypatch.setenv("LOG_LEVEL", "1")
        monkeypatch.setenv("LOG_FILE", str(log_file))

        result = runner.invoke(cli.app, ["score", str(url_file), "--no-summary"])

        assert result.exit_code == 0
        assert "GITHUB_TOKEN is not set" in log_file.read_text()

    def test_token_present_not_warned(self, fake_pipeline, url_file, tmp_path, monkeypatch):
        log_file = tmp_path / "run.log"
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
        monkeypatch.setenv("LOG_LEVEL", "1")
        monkeypatch.setenv("LOG_FILE", str(log_file))

        runner.invoke(cli.app, ["score", str(url_file), "--no-summary"])

        assert "GITHUB_TOKEN" not in log_file.read_text()

    def test_snapshot(self, fake_pipeline, url_file, tmp_path):
        snapshot = tmp_path / "stats.json"
        result = runner.invoke(
            cli.app, ["score", str(url_file), "--no-summary", "--snapshot", str(snapshot)]
        )

        assert result.exit_code == 0
        assert json.loads(snapshot.read_text())["skipped_count"] == 1

    def test_missing_file(self, fake_pipeline, tmp_path):
        result = runner.invoke(cli.app, ["score", str(tmp_path / "missing.txt")])

        assert result.exit_code == 1
        assert "Cannot read URL file" in result.output

    def test_invalid_configuration(self, fake_pipeline, url_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "7")
        result = runner.invoke(cli.app, ["score", str(url_file)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestOtherCommands:
    """Test metrics, resolve and version."""

    def test_metrics(self, fake_pipeline):
        result = runner.invoke(cli.app, ["metrics", "https://github.com/lodash/lodash"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["URL"] == "https://github.com/lodash/lodash"
        assert data["metrics"]["NetScore"] == 0.8

    def test_metrics_unresolvable(self, fake_pipeline):
        result = runner.invoke(cli.app, ["metrics", "https://example.com/x"])
        assert result.exit_code == 1

    def test_resolve(self):
        result = runner.invoke(cli.app, ["resolve", "https://github.com/lodash/lodash.git"])

        assert result.exit_code == 0
        assert result.output.strip() == "lodash/lodash"

    def test_resolve_unsupported(self):
        result = runner.invoke(cli.app, ["resolve", "https://pypi.org/project/requests"])
        assert result.exit_code == 1

    def test_version(self):
        result = runner.invoke(cli.app, ["version"])

        assert result.exit_code == 0
        assert "pkgtrust v0.1.0" in result.output
