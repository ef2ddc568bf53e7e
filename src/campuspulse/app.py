"""Wiring of the repository, update stream and metrics worker."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from .broadcaster import PulseSubscription, PulseUpdateStream
from .config import PulseConfig
from .errors import SessionNotFoundError
from .logging_utils import setup_logging
from .metrics import PulseMetricsWorker
from .models import Feedback, PulseUpdate
from .repository import PulseRepository, normalize_code
from .storage import ensure_dir


class PulseApp:
    """Owns the shared state handed to request handlers.

    One instance per process. Handlers call ``submit_feedback`` so the new
    record and the refreshed summary reach live subscribers together.
    """

    def __init__(
        self,
        config: PulseConfig,
        repository: Optional[PulseRepository] = None,
        updates: Optional[PulseUpdateStream] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger("campuspulse")
        self.repository = repository or PulseRepository.from_config(config)
        self.updates = updates or PulseUpdateStream()
        self.metrics = PulseMetricsWorker(
            self.repository,
            interval_seconds=config.metrics.interval_seconds,
        )
        # session code -> lock ordering add, summarize and publish
        self._submit_locks: Dict[str, threading.Lock] = {}
        self._submit_locks_guard = threading.Lock()

    @classmethod
    def create(cls, config: PulseConfig) -> "PulseApp":
        ensure_dir(config.data_dir)
        logger, _log_path = setup_logging(
            log_dir=config.log_dir, level=config.log_level
        )
        return cls(config, logger=logger)

    def submit_feedback(
        self,
        session_code: str,
        rating: int,
        comment: Optional[str] = None,
        submitted_by: Optional[str] = None,
    ) -> Feedback:
        # Sessions are never deleted, so unknown codes never get a lock entry.
        if self.repository.get_session(session_code) is None:
            raise SessionNotFoundError(normalize_code(session_code))
        with self._submit_lock(session_code):
            feedback = self.repository.add_feedback(
                session_code, rating, comment, submitted_by
            )
            summary = self.repository.get_summary(feedback.session_code)
            if summary is not None:
                self.updates.publish(PulseUpdate(feedback=feedback, summary=summary))
        return feedback

    def _submit_lock(self, session_code: str) -> threading.Lock:
        key = normalize_code(session_code)
        with self._submit_locks_guard:
            return self._submit_locks.setdefault(key, threading.Lock())

    def subscribe(self, session_code: str) -> PulseSubscription:
        return self.updates.subscribe(session_code)

    def start(self) -> None:
        if self.config.metrics.enabled:
            self.metrics.start()
            self.logger.info(
                "Metrics worker started (every %ss)",
                self.config.metrics.interval_seconds,
            )

    def stop(self) -> None:
        self.metrics.stop(timeout=5)
