"""Analyzers for fetching, scoring and reporting package data.

The collector and pipeline modules depend on the providers package, which in
turn depends on ``analyzers.github``; import them from their modules.
"""

from pkgtrust.analyzers.github import GitHubFetcher, GitHubQueryError, GitHubRateLimitError
from pkgtrust.analyzers.report import ReportAssembler, round_half_up
from pkgtrust.analyzers.scorer import Scorer, ScoreValidationError

__all__ = [
    "GitHubFetcher",
    "GitHubQueryError",
    "GitHubRateLimitError",
    "ReportAssembler",
    "ScoreValidationError",
    "Scorer",
    "round_half_up",
]
