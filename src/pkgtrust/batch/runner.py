"""Batch scoring of a URL file in chunks of five."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from pkgtrust.analyzers.pipeline import ScoringPipeline
from pkgtrust.models.schemas import BatchOutcome, NetScoreRecord
from pkgtrust.monitoring import StageTimer, ThroughputTracker

logger = logging.getLogger(__name__)

CHUNK_SIZE = 5


class RunnerState(str, Enum):
    """Lifecycle of a batch run."""

    IDLE = "idle"
    READING_INPUT = "reading_input"
    COLLECTING = "collecting"
    DISPATCHING = "dispatching"
    DRAINED = "drained"


class InputSourceError(Exception):
    """Raised when the URL file cannot be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read URL file {path}: {reason}")


def read_urls(path: Path) -> list[str]:
    """Read every non-blank line of ``path`` as a URL.

    Raises:
        InputSourceError: If the file is missing or unreadable.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputSourceError(Path(path), str(e)) from e
    return [line.strip() for line in text.splitlines() if line.strip()]


def chunked(urls: Sequence[str], size: int = CHUNK_SIZE) -> list[list[str]]:
    """Split ``urls`` into consecutive chunks; the last one may be short."""
    if size < 1:
        raise ValueError("Chunk size must be positive")
    return [list(urls[i : i + size]) for i in range(0, len(urls), size)]


class BatchRunner:
    """Streams URLs through the scoring pipeline, one chunk at a time.

    Each URL is resolved, scored and written as one NDJSON line. URLs that
    cannot be resolved, or whose run raises, are logged and left out of
    the chunk's processed count; the run always moves on to the next URL.

    Usage:
        async with ScoringPipeline(settings) as pipeline:
            runner = BatchRunner(pipeline)
            outcomes = await runner.run(Path("urls.txt"))
    """

    def __init__(
        self,
        pipeline: ScoringPipeline,
        tracker: ThroughputTracker | None = None,
        concurrent_urls: bool = False,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        """Initialize the runner.

        Args:
            pipeline: Pipeline used to resolve, score and emit each URL.
            tracker: Run statistics; a private one is created if omitted.
            concurrent_urls: Score the URLs of a chunk concurrently. Records
                are still written in input order.
            chunk_size: URLs per chunk.
        """
        self.pipeline = pipeline
        self.tracker = tracker or ThroughputTracker()
        self.concurrent_urls = concurrent_urls
        self.chunk_size = chunk_size
        self.state = RunnerState.IDLE

    async def _score_one(self, url: str) -> NetScoreRecord | None:
        """Score one URL; None means it was skipped or its run failed."""
        try:
            with StageTimer(self.tracker, "resolve"):
                identity = await self.pipeline.resolve(url)
            if identity is None:
                logger.info(f"Error: URL not compatible, skipping: {url}")
                self.tracker.record_skipped(url, "not a GitHub or npm package URL")
                return None

            result = await self.pipeline.run(url, identity)
            record = self.pipeline.assembler.assemble(
                url,
                result.collection,
                result.net_score,
                result.net_score_latency,
            )
        except Exception as e:
            logger.error(f"Error performing Net Score analysis for {url}: {e}")
            self.tracker.record_failure(url, e)
            return None

        self.tracker.record_processed(url, result.collection)
        self.tracker.record_stage_timing("net_score", result.net_score_latency)
        return record

    async def process_chunk(self, urls: Sequence[str]) -> BatchOutcome:
        """Score and emit one chunk of URLs.

        Returns:
            BatchOutcome with the processed count over the chunk size.
        """
        processed = 0

        if self.concurrent_urls:
            self.state = RunnerState.COLLECTING
            records = await asyncio.gather(*(self._score_one(url) for url in urls))
            self.state = RunnerState.DISPATCHING
            for record in records:
                if record is not None:
                    self.pipeline.assembler.emit(record)
                    processed += 1
        else:
            for url in urls:
                self.state = RunnerState.COLLECTING
                record = await self._score_one(url)
                if record is not None:
                    self.state = RunnerState.DISPATCHING
                    self.pipeline.assembler.emit(record)
                    processed += 1

        outcome = BatchOutcome(processed_count=processed, total_count=len(urls))
        logger.info(f"Processed {processed}/{len(urls)} URLs")
        self.tracker.complete_chunk()
        return outcome

    async def run_urls(self, urls: Sequence[str]) -> list[BatchOutcome]:
        """Process already-read URLs chunk by chunk."""
        chunks = chunked(urls, self.chunk_size)
        self.tracker.start_run(total_urls=len(urls), total_chunks=len(chunks))
        logger.info(f"Scoring {len(urls)} URLs in {len(chunks)} chunks")

        outcomes = []
        try:
            for chunk in chunks:
                outcomes.append(await self.process_chunk(chunk))
        finally:
            self.state = RunnerState.DRAINED
            self.tracker.update_github_rate_limit(self.pipeline.github.rate_limit_remaining)
            self.tracker.finish_run()
        return outcomes

    async def run(self, path: Path) -> list[BatchOutcome]:
        """Read ``path`` and score every URL in it.

        Raises:
            InputSourceError: If the file cannot be read. Nothing is scored.
        """
        self.state = RunnerState.READING_INPUT
        urls = read_urls(path)
        return await self.run_urls(urls)
