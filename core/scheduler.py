"""
core/scheduler.py
Fans a list of targets out over a bounded pool of asyncio workers.

Two output modes:
  run()     ordered — output[i] belongs to targets[i], whatever finished first
  stream()  completion order — each CheckResult is yielded as soon as it is ready

Workers pull target indices from a shared queue. Pool size:
  min(max(1, cpu_count × 4), 64, len(targets))
"""

from __future__ import annotations

import asyncio
import os
import time
from typing import AsyncIterator, List, Optional, Sequence

from core.probe_engine import CheckResult, ProtocolProbeEngine
from utils.constants import MAX_WORKERS, WORKERS_PER_CPU
from utils.logger import get_logger

log = get_logger("httpver.scheduler")

_DONE = object()


def worker_count_for_targets(n: int, cpu_count: Optional[int] = None) -> int:
    """Enough parallelism to hide per-target latency without unbounded fan-out."""
    if n <= 0:
        return 0
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return min(max(1, cpus * WORKERS_PER_CPU), MAX_WORKERS, n)


class BatchScheduler:
    """Bounded worker pool over ProtocolProbeEngine.check()."""

    def __init__(self, engine: Optional[ProtocolProbeEngine] = None):
        self._engine = engine or ProtocolProbeEngine()

    async def run(
        self, targets: Sequence[str], override_port: Optional[int] = None
    ) -> List[CheckResult]:
        """Check every target; results come back in input order."""
        n = len(targets)
        if n == 0:
            return []
        results: List[Optional[CheckResult]] = [None] * n
        jobs = self._job_queue(n)
        t0 = time.monotonic()

        async def worker() -> None:
            while True:
                try:
                    idx = jobs.get_nowait()
                except asyncio.QueueEmpty:
                    return
                results[idx] = await self._engine.check(targets[idx], override_port)

        await asyncio.gather(*(worker() for _ in range(worker_count_for_targets(n))))
        log.debug(f"[*] batch of {n} done in {time.monotonic() - t0:.2f}s")
        return results  # type: ignore[return-value]

    async def stream(
        self, targets: Sequence[str], override_port: Optional[int] = None
    ) -> AsyncIterator[CheckResult]:
        """Yield results as they complete (unordered)."""
        n = len(targets)
        if n == 0:
            return
        jobs = self._job_queue(n)
        done: asyncio.Queue = asyncio.Queue()

        async def worker() -> None:
            while True:
                try:
                    idx = jobs.get_nowait()
                except asyncio.QueueEmpty:
                    return
                await done.put(await self._engine.check(targets[idx], override_port))

        workers = [
            asyncio.ensure_future(worker())
            for _ in range(worker_count_for_targets(n))
        ]

        async def close_when_finished() -> None:
            try:
                await asyncio.gather(*workers)
            finally:
                done.put_nowait(_DONE)

        closer = asyncio.ensure_future(close_when_finished())
        try:
            while True:
                item = await done.get()
                if item is _DONE:
                    break
                yield item
        finally:
            # Consumer stopped early (or finished): tear everything down
            for task in (*workers, closer):
                task.cancel()
            await asyncio.gather(*workers, closer, return_exceptions=True)

    @staticmethod
    def _job_queue(n: int) -> asyncio.Queue:
        jobs: asyncio.Queue = asyncio.Queue()
        for idx in range(n):
            jobs.put_nowait(idx)
        return jobs


__all__ = ["BatchScheduler", "worker_count_for_targets"]
