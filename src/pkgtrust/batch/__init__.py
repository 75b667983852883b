"""Batch scoring of URL files."""

from .runner import CHUNK_SIZE, BatchRunner, InputSourceError, RunnerState, chunked, read_urls

__all__ = [
    "CHUNK_SIZE",
    "BatchRunner",
    "InputSourceError",
    "RunnerState",
    "chunked",
    "read_urls",
]
