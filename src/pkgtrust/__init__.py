"""pkgtrust - trustworthiness scoring for GitHub and npm packages."""

__version__ = "0.1.0"

from pkgtrust.analyzers.pipeline import ScoringPipeline, get_all_metrics
from pkgtrust.config import Settings

__all__ = ["ScoringPipeline", "Settings", "get_all_metrics", "__version__"]
