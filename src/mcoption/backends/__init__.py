"""
Execution backends for the pricing engine.

This subpackage provides pluggable execution strategies:

CPU Backends
    :class:`SequentialBackend` — Single-threaded execution
    :class:`ThreadBackend` — Thread-based parallelism
    :class:`ProcessBackend` — Process-based parallelism

Utilities
    :func:`resolve_n_workers` — Worker-count resolution
    :func:`make_ranges` — Trial partitioning for parallel work distribution
    :func:`worker_run_range` — Top-level worker for thread and process pools
    :func:`is_windows_platform` — Platform detection helper

Protocol
    :class:`ExecutionBackend` — Interface for custom backends
"""

from .base import ExecutionBackend, is_windows_platform, make_ranges, resolve_n_workers, worker_run_range
from .parallel import ProcessBackend, ThreadBackend
from .sequential import SequentialBackend

__all__ = [
    # Protocol
    "ExecutionBackend",
    # CPU Backends
    "SequentialBackend",
    "ThreadBackend",
    "ProcessBackend",
    # Utility Functions
    "resolve_n_workers",
    "make_ranges",
    "worker_run_range",
    "is_windows_platform",
]
