"""
Profiling utilities for the Insert Throughput benchmark.

This module provides a context manager to measure:
- Wall-clock time (perf_counter)
- CPU usage (psutil)
- Peak RSS via a background sampling thread (psutil)

Usage example:
    from insert_throughput.utils.profiler import profile_block

    with profile_block("bulk_copy") as stats:
        strategy.load(handle, records)

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: int = 50) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Measures:
    - Wall-clock duration (perf_counter)
    - Peak RSS via background sampling thread (psutil)
    - CPU percent (psutil, best-effort snapshot)

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling. Lower = more accurate but higher overhead.

    Notes
    -----
    Timings are recorded even when the block raises; callers decide whether a
    failed block is reported.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    # CPU percent needs a priming call
    process.cpu_percent(interval=None)

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        stop_sampling.set()
        sampler.join(timeout=1.0)

        stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "profile_block"]
