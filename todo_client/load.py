"""
Threaded load runner for quick performance baselines.

A fixed pool of simulated users each sends a fixed number of requests;
latency is recorded only for responses that carry the expected status.
For sustained, ramped load use the Locust scenarios under
``tests/performance`` instead.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable

import requests

from todo_client.race import HarnessTimeoutError

logger = logging.getLogger(__name__)

RequestFn = Callable[[int, int], requests.Response]


@dataclass(frozen=True)
class LoadResult:
    """Aggregate statistics for one load run."""

    operation: str
    total_requests: int
    success_count: int
    total_response_ms: float
    max_response_ms: float
    duration_ms: float

    @property
    def failed_count(self) -> int:
        return self.total_requests - self.success_count

    @property
    def success_rate(self) -> float:
        """Percentage of requests that returned the expected status."""
        if self.total_requests == 0:
            return 0.0
        return self.success_count / self.total_requests * 100

    @property
    def average_response_ms(self) -> float:
        if self.success_count == 0:
            return 0.0
        return self.total_response_ms / self.success_count

    @property
    def throughput(self) -> float:
        """Successful requests per second over the whole run."""
        if self.duration_ms <= 0:
            return 0.0
        return self.success_count / (self.duration_ms / 1000.0)

    def log_summary(self, log: logging.Logger = logger) -> None:
        log.info("----------------------------------------")
        log.info("%s Performance Test Results:", self.operation)
        log.info("----------------------------------------")
        log.info("Total Requests: %d", self.total_requests)
        log.info("Successful Requests: %d (%.2f%%)", self.success_count, self.success_rate)
        log.info("Failed Requests: %d", self.failed_count)
        log.info("Average Response Time: %.2f ms", self.average_response_ms)
        log.info("Maximum Response Time: %.2f ms", self.max_response_ms)
        log.info("Total Test Duration: %.2f ms", self.duration_ms)
        log.info("Throughput: %.2f requests/second", self.throughput)
        log.info("----------------------------------------")


class _Stats:
    """Counters shared by the worker threads."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.success_count = 0
        self.total_response_ms = 0.0
        self.max_response_ms = 0.0

    def record(self, elapsed_ms: float) -> None:
        with self.lock:
            self.success_count += 1
            self.total_response_ms += elapsed_ms
            self.max_response_ms = max(self.max_response_ms, elapsed_ms)


def run_load(
    operation: str,
    request: RequestFn,
    *,
    expected_status: int,
    users: int = 5,
    requests_per_user: int = 10,
    timeout: float = 30.0,
) -> LoadResult:
    """
    Run ``request(user, index)`` from ``users`` parallel workers.

    Args:
        operation: Label used in the summary, e.g. ``"CREATE"``.
        request: Sends one request for the given user and iteration.
        expected_status: Status code counted as a success.
        users: Number of parallel workers.
        requests_per_user: Requests each worker sends.
        timeout: Seconds allowed for the whole run.

    Returns:
        The aggregated LoadResult.  Its summary is logged.

    Raises:
        HarnessTimeoutError: If the workers do not finish in time.
    """
    stats = _Stats()

    def _user(user: int) -> None:
        try:
            for index in range(requests_per_user):
                started = time.perf_counter()
                response = request(user, index)
                elapsed_ms = (time.perf_counter() - started) * 1000
                if response.status_code == expected_status:
                    stats.record(elapsed_ms)
        except Exception as exc:
            # Ends this worker only.
            logger.error("Error in load worker %d: %s", user, exc)

    logger.info("Starting %s load: %d users x %d requests", operation, users, requests_per_user)
    started = time.perf_counter()
    executor = ThreadPoolExecutor(max_workers=users, thread_name_prefix="load-user")
    try:
        futures = [executor.submit(_user, user) for user in range(users)]
        _, not_done = wait(futures, timeout=timeout)
        if not_done:
            raise HarnessTimeoutError(f"{operation} load did not complete within {timeout}s")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    duration_ms = (time.perf_counter() - started) * 1000

    result = LoadResult(
        operation=operation,
        total_requests=users * requests_per_user,
        success_count=stats.success_count,
        total_response_ms=stats.total_response_ms,
        max_response_ms=stats.max_response_ms,
        duration_ms=duration_ms,
    )
    result.log_summary()
    return result
