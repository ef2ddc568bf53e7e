"""Background worker that logs session summaries on a timer."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .logging_utils import get_logger
from .models import SessionSummary
from .repository import PulseRepository


def format_summary_line(summary: SessionSummary) -> str:
    return (
        f"Pulse snapshot {summary.code}: {summary.average_rating:.1f} avg, "
        f"{summary.total_responses} responses, "
        f"{summary.positive_share:.0%} positive"
    )


class PulseMetricsWorker:
    def __init__(
        self,
        repository: PulseRepository,
        interval_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0.")
        self._repository = repository
        self._interval = interval_seconds
        self._logger = logger or get_logger("metrics")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        summaries = self._repository.list_summaries()
        for summary in summaries:
            self._logger.info(format_summary_line(summary))
        return len(summaries)

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._worker, name="pulse-metrics", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._stop_event.wait(timeout)

    def _worker(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self.run_once()
            except Exception:
                self._logger.exception("Metrics tick failed")
