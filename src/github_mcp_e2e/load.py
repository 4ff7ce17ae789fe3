"""Load and concurrency driver.

Workers are asyncio tasks sharing one session; the only suspension points are the tool
round trips and explicit sleeps. Nothing here retries or adapts to rate limits: pacing
is a fixed delay the caller puts inside its operation.
"""

from __future__ import annotations

import asyncio
import logging
import statistics
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from .errors import latency_error, timeout_error

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[], Awaitable[object]]


@dataclass(frozen=True, slots=True)
class LoadReport:
    """Outcome of a load run."""

    operations: int
    duration_s: float
    latencies_s: tuple[float, ...]

    @property
    def throughput(self) -> float:
        """Completed operations per second of wall-clock time."""
        if self.duration_s <= 0:
            return float(self.operations)
        return self.operations / self.duration_s

    @property
    def p50_latency_s(self) -> float:
        return statistics.median(self.latencies_s) if self.latencies_s else 0.0

    @property
    def max_latency_s(self) -> float:
        return max(self.latencies_s, default=0.0)


@dataclass(frozen=True, slots=True)
class BatchReport:
    size: int
    duration_s: float
    allowance_s: float


async def rate_limit_pause(delay_s: float) -> None:
    """Fixed pause between calls. No adaptive backoff."""
    if delay_s > 0:
        await asyncio.sleep(delay_s)


async def _timed(operation: Operation, latencies: list[float]) -> None:
    start = time.perf_counter()
    await operation()
    latencies.append(time.perf_counter() - start)


async def run_concurrent(worker_count: int, ops_per_worker: int, operation: Operation) -> LoadReport:
    """Run `operation` ops_per_worker times in each of worker_count concurrent workers.

    Blocks until every worker has finished. Within a worker calls run in program order;
    across workers there is no ordering. If any operation raised, the first error (in
    worker order) is re-raised once all workers are done.
    """
    if worker_count < 1 or ops_per_worker < 0:
        raise ValueError("worker_count must be >= 1 and ops_per_worker >= 0")

    async def worker(worker_id: int) -> list[float]:
        latencies: list[float] = []
        for _ in range(ops_per_worker):
            await _timed(operation, latencies)
        logger.debug("Worker %s finished %s operations", worker_id, len(latencies))
        return latencies

    start = time.perf_counter()
    outcomes = await asyncio.gather(*(worker(i) for i in range(worker_count)), return_exceptions=True)
    duration = time.perf_counter() - start

    errors = [o for o in outcomes if isinstance(o, BaseException)]
    if errors:
        logger.error("%s of %s workers failed", len(errors), worker_count)
        raise errors[0]

    latencies = tuple(lat for o in outcomes for lat in o)
    report = LoadReport(operations=len(latencies), duration_s=duration, latencies_s=latencies)
    logger.info(
        "Concurrent operations completed in %.2fs (%s ops, %.2f ops/sec)",
        report.duration_s,
        report.operations,
        report.throughput,
    )
    return report


async def run_sequential(count: int, operation: Operation) -> LoadReport:
    """Run `operation` count times back to back and measure throughput."""
    latencies: list[float] = []
    start = time.perf_counter()
    for _ in range(count):
        await _timed(operation, latencies)
    duration = time.perf_counter() - start
    report = LoadReport(operations=count, duration_s=duration, latencies_s=tuple(latencies))
    logger.info("Completed %s operations in %.2fs (%.2f ops/sec)", count, duration, report.throughput)
    return report


async def run_with_deadline(operation: Callable[[], Awaitable[T]], deadline_s: float, *, name: str) -> T:
    """Await `operation` under a deadline.

    The operation is cancelled when the deadline expires, and a Timeout error naming the
    operation and the deadline is raised. Errors from the operation propagate as-is.
    """
    try:
        result = await asyncio.wait_for(operation(), timeout=deadline_s)
    except asyncio.TimeoutError as exc:
        raise timeout_error(name, deadline_s) from exc
    logger.info("%s completed within %.2fs", name, deadline_s)
    return result


async def run_escalating_batches(
    batch_sizes: Sequence[int],
    operation: Operation,
    *,
    per_op_allowance_s: float = 5.0,
) -> list[BatchReport]:
    """Run sequential batches of growing size; fail a batch slower than its allowance.

    A batch of n operations must finish in under n * per_op_allowance_s. This is a
    crude detector of severe latency regressions, not a benchmark.
    """
    if any(size < 1 for size in batch_sizes):
        raise ValueError("batch sizes must be >= 1")
    reports: list[BatchReport] = []
    for index, size in enumerate(batch_sizes, start=1):
        logger.info("Batch %s: Performing %s operations", index, size)
        allowance = size * per_op_allowance_s
        start = time.perf_counter()
        for _ in range(size):
            await operation()
        duration = time.perf_counter() - start
        logger.info("Batch %s completed in %.2fs", index, duration)
        if duration >= allowance:
            raise latency_error(
                f"expected batch {index} ({size} operations) to complete within {allowance:g}s, took {duration:.2f}s"
            )
        reports.append(BatchReport(size=size, duration_s=duration, allowance_s=allowance))
    return reports
