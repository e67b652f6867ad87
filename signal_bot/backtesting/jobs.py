"""
Run a backtest off the calling thread. The job owns a snapshot of the bars
taken at submission, so later updates to the caller's data do not leak in.
"""

from __future__ import annotations
import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Optional, Sequence

from signal_bot.analytics.metrics import BacktestReport
from signal_bot.backtesting.engine import BacktestEngine
from signal_bot.core.errors import BacktestCancelled
from signal_bot.core.types import EnrichedBar

logger = logging.getLogger("signal_bot.backtest.jobs")


class BacktestJob:
    """Handle to an in-flight backtest. Cancelling discards the run; no partial report."""

    def __init__(self, engine: BacktestEngine, bars: Sequence[EnrichedBar], executor: ThreadPoolExecutor):
        self.bars = tuple(bars)
        self._cancel = threading.Event()
        self._future: Future = executor.submit(engine.run, self.bars, self._cancel)

    def cancel(self) -> None:
        self._cancel.set()
        self._future.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> BacktestReport:
        """Block for the report. Re-raises ConfigurationError / BacktestCancelled from the run."""
        try:
            return self._future.result(timeout)
        except CancelledError:
            raise BacktestCancelled("cancelled before start") from None

    def add_done_callback(self, fn) -> None:
        self._future.add_done_callback(lambda _f: fn(self))


_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _default_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="backtest")
        return _executor


def run_backtest_async(
    engine: BacktestEngine,
    bars: Sequence[EnrichedBar],
    executor: Optional[ThreadPoolExecutor] = None,
) -> BacktestJob:
    """Submit `engine.run` on a snapshot of `bars`; returns immediately."""
    job = BacktestJob(engine, bars, executor or _default_executor())
    logger.debug("Submitted backtest over %d bars", len(job.bars))
    return job
