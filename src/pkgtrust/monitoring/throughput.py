"""Thread-safe run statistics for batch scoring."""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from pkgtrust.models.schemas import CollectionResult

logger = logging.getLogger(__name__)


@dataclass
class ErrorEntry:
    """A URL that failed or was skipped during the run."""

    timestamp: datetime
    url: str
    error_type: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "url": self.url,
            "error_type": self.error_type,
            "message": self.message,
        }


@dataclass
class RunStats:
    """Counters for the current batch run."""

    # Progress
    total_urls: int = 0
    total_chunks: int = 0
    completed_chunks: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None

    # Results
    processed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0

    # Per-metric provider failures and running average latencies
    provider_failures: dict[str, int] = field(default_factory=dict)
    stage_timings: dict[str, float] = field(default_factory=dict)
    stage_counts: dict[str, int] = field(default_factory=dict)

    # GitHub API
    github_rate_limit_remaining: int | None = None

    recent_errors: deque[ErrorEntry] = field(default_factory=lambda: deque(maxlen=10))

    is_running: bool = False

    @property
    def attempted_count(self) -> int:
        return self.processed_count + self.skipped_count + self.failed_count

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None:
            return 0.0
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    @property
    def throughput(self) -> float:
        """Processed URLs per second."""
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return 0.0
        return self.processed_count / elapsed

    @property
    def success_fraction(self) -> float:
        """Share of input URLs that produced a record."""
        if self.total_urls == 0:
            return 0.0
        return self.processed_count / self.total_urls

    def to_dict(self) -> dict[str, Any]:
        """Serialize stats to a dictionary for JSON storage."""
        return {
            "total_urls": self.total_urls,
            "total_chunks": self.total_chunks,
            "completed_chunks": self.completed_chunks,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "failed_count": self.failed_count,
            "attempted_count": self.attempted_count,
            "success_fraction": round(self.success_fraction, 3),
            "throughput": round(self.throughput, 3),
            "provider_failures": self.provider_failures,
            "stage_timings": self.stage_timings,
            "stage_counts": self.stage_counts,
            "github_rate_limit_remaining": self.github_rate_limit_remaining,
            "recent_errors": [e.to_dict() for e in self.recent_errors],
            "is_running": self.is_running,
        }


class ThroughputTracker:
    """Aggregates counters across the URLs of one batch run.

    Safe to share between concurrently running URL tasks. When a snapshot
    file is given, the current stats are written there as JSON after every
    chunk and at the end of the run.
    """

    def __init__(self, snapshot_file: Path | None = None):
        self._lock = threading.Lock()
        self._snapshot_file = snapshot_file
        self._stats = RunStats()

    def start_run(self, total_urls: int, total_chunks: int) -> None:
        """Reset the counters for a new run."""
        with self._lock:
            self._stats = RunStats(
                total_urls=total_urls,
                total_chunks=total_chunks,
                start_time=datetime.now(),
                is_running=True,
            )
            self._save()

    def record_processed(self, url: str, collection: CollectionResult) -> None:
        """Record a URL whose record was emitted."""
        with self._lock:
            self._stats.processed_count += 1
            for metric in collection.failed_metrics:
                failures = self._stats.provider_failures
                failures[metric.value] = failures.get(metric.value, 0) + 1
            for metric, latency in collection.latencies.items():
                self._record_timing(metric.value, latency)

    def record_skipped(self, url: str, reason: str) -> None:
        """Record a URL that could not be resolved."""
        with self._lock:
            self._stats.skipped_count += 1
            self._add_error(url, "unresolved", reason)

    def record_failure(self, url: str, error: BaseException) -> None:
        """Record a URL whose run raised."""
        with self._lock:
            self._stats.failed_count += 1
            self._add_error(url, type(error).__name__, str(error))

    def record_stage_timing(self, stage: str, duration: float) -> None:
        """Record the duration of a stage (updates running average)."""
        with self._lock:
            self._record_timing(stage, duration)

    def update_github_rate_limit(self, remaining: int | None) -> None:
        with self._lock:
            self._stats.github_rate_limit_remaining = remaining

    def complete_chunk(self) -> None:
        with self._lock:
            self._stats.completed_chunks += 1
            self._save()

    def finish_run(self) -> None:
        """Mark the run as complete."""
        with self._lock:
            self._stats.is_running = False
            self._stats.end_time = datetime.now()
            self._save()

    def get_stats(self) -> RunStats:
        """Get a copy of the current stats."""
        with self._lock:
            return copy.deepcopy(self._stats)

    def _record_timing(self, stage: str, duration: float) -> None:
        """Update the running average for ``stage`` (lock held)."""
        count = self._stats.stage_counts.get(stage, 0)
        average = self._stats.stage_timings.get(stage, 0.0)
        new_count = count + 1
        self._stats.stage_counts[stage] = new_count
        self._stats.stage_timings[stage] = (average * count + duration) / new_count

    def _add_error(self, url: str, error_type: str, message: str) -> None:
        self._stats.recent_errors.append(
            ErrorEntry(
                timestamp=datetime.now(),
                url=url,
                error_type=error_type,
                message=message,
            )
        )

    def _save(self) -> None:
        """Write the snapshot file, if configured (lock held)."""
        if self._snapshot_file is None:
            return
        try:
            self._snapshot_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._snapshot_file, "w") as f:
                json.dump(self._stats.to_dict(), f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write run snapshot to {self._snapshot_file}: {e}")


class StageTimer:
    """Context manager for timing run stages."""

    def __init__(self, tracker: ThroughputTracker, stage: str):
        self.tracker = tracker
        self.stage = stage
        self.start_time: float | None = None

    def __enter__(self) -> StageTimer:
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.start_time is not None:
            duration = time.perf_counter() - self.start_time
            self.tracker.record_stage_timing(self.stage, duration)
