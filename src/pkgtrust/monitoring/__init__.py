"""Run monitoring and throughput statistics."""

from .throughput import RunStats, StageTimer, ThroughputTracker

__all__ = ["RunStats", "StageTimer", "ThroughputTracker"]
