"""In-memory session and feedback store backed by a JSON snapshot."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .config import PulseConfig
from .errors import (
    PersistenceError,
    SessionNotFoundError,
    SnapshotError,
    ValidationError,
)
from .locks import ReadWriteLock
from .logging_utils import get_logger
from .models import Feedback, PulseData, Session, SessionSummary
from .sentiment import score_comment
from .storage import load_snapshot, save_snapshot, to_utc, utc_now

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
DEFAULT_SPEAKER = "Guest Speaker"
DEFAULT_START_OFFSET = timedelta(hours=1)


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = value.strip()
    return text or None


class PulseRepository:
    """Single source of truth for sessions and feedback.

    Reads take the shared side of a reader/writer lock and mutations take
    the exclusive side for the whole change, including the snapshot rewrite.
    If the rewrite fails the in-memory change stays applied and
    ``PersistenceError`` reaches the caller; the next successful write
    brings the file back in line.
    """

    def __init__(
        self,
        data_path: str,
        max_feedback_per_session: int = 200,
        scorer: Callable[[Optional[str]], int] = score_comment,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._data_path = data_path
        self._max_feedback = max_feedback_per_session
        self._scorer = scorer
        self._logger = logger or get_logger("repository")
        self._clock = clock
        self._random = rng or random.Random()
        self._lock = ReadWriteLock()

        self._data = self._load_data() or self._seed_data()
        self._save_data()

        self._logger.info("CampusPulse data file: %s", self._data_path)

    @classmethod
    def from_config(
        cls, config: PulseConfig, logger: Optional[logging.Logger] = None
    ) -> "PulseRepository":
        return cls(
            config.data_path,
            max_feedback_per_session=config.storage.max_feedback_per_session,
            logger=logger,
        )

    @property
    def data_path(self) -> str:
        return self._data_path

    @property
    def max_feedback_per_session(self) -> int:
        return self._max_feedback

    def list_sessions(self) -> List[Session]:
        with self._lock.read():
            return sorted(self._data.sessions, key=lambda s: s.start_time)

    def get_session(self, code: str) -> Optional[Session]:
        normalized = normalize_code(code)
        with self._lock.read():
            return self._find_session_locked(normalized)

    def create_session(
        self,
        title: str,
        speaker: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> Session:
        clean_title = (title or "").strip()
        if not clean_title:
            raise ValidationError("Title is required.")
        clean_speaker = _clean_text(speaker) or DEFAULT_SPEAKER

        with self._lock.write():
            now = self._clock()
            session = Session(
                code=self._generate_code_locked(),
                title=clean_title,
                speaker=clean_speaker,
                start_time=(
                    to_utc(start_time) if start_time else now + DEFAULT_START_OFFSET
                ),
                created_time=now,
            )
            self._data.sessions.append(session)
            self._save_data()

        self._logger.info("Created session %s (%s)", session.code, session.title)
        return session

    def add_feedback(
        self,
        session_code: str,
        rating: int,
        comment: Optional[str] = None,
        submitted_by: Optional[str] = None,
    ) -> Feedback:
        normalized = normalize_code(session_code)
        clean_comment = _clean_text(comment)

        with self._lock.write():
            session = self._find_session_locked(normalized)
            if session is None:
                raise SessionNotFoundError(normalized)

            feedback = Feedback(
                id=uuid.uuid4().hex,
                session_code=session.code,
                rating=rating,
                comment=clean_comment,
                sentiment_score=self._scorer(clean_comment),
                created_time=self._clock(),
                submitted_by=_clean_text(submitted_by),
            )
            self._data.feedback_entries.append(feedback)
            self._trim_feedback_locked(session.code)
            self._save_data()

        self._logger.debug(
            "Feedback %s for %s (rating=%s, sentiment=%s)",
            feedback.id,
            feedback.session_code,
            feedback.rating,
            feedback.sentiment_score,
        )
        return feedback

    def list_feedback(self, session_code: str, limit: int) -> List[Feedback]:
        normalized = normalize_code(session_code)
        if limit <= 0:
            return []
        with self._lock.read():
            entries = self._newest_first_locked(normalized)
        return entries[:limit]

    def get_summary(self, session_code: str) -> Optional[SessionSummary]:
        normalized = normalize_code(session_code)
        with self._lock.read():
            session = self._find_session_locked(normalized)
            if session is None:
                return None
            return self._build_summary_locked(session)

    def list_summaries(self) -> List[SessionSummary]:
        with self._lock.read():
            summaries = [self._build_summary_locked(s) for s in self._data.sessions]
        return sorted(summaries, key=lambda summary: summary.start_time)

    def _find_session_locked(self, normalized: str) -> Optional[Session]:
        for session in self._data.sessions:
            if session.code.upper() == normalized:
                return session
        return None

    def _feedback_for_locked(self, normalized: str) -> List[Feedback]:
        return [
            f for f in self._data.feedback_entries
            if f.session_code.upper() == normalized
        ]

    def _newest_first_locked(self, normalized: str) -> List[Feedback]:
        # Ties on created_time keep insertion order, later entries first.
        indexed = list(enumerate(self._feedback_for_locked(normalized)))
        indexed.sort(key=lambda pair: (pair[1].created_time, pair[0]), reverse=True)
        return [entry for _, entry in indexed]

    def _build_summary_locked(self, session: Session) -> SessionSummary:
        feedback = self._feedback_for_locked(session.code.upper())
        total = len(feedback)
        summary = SessionSummary(
            code=session.code,
            title=session.title,
            speaker=session.speaker,
            start_time=session.start_time,
            total_responses=total,
        )
        if total:
            summary.average_rating = sum(f.rating for f in feedback) / total
            summary.sentiment_average = sum(f.sentiment_score for f in feedback) / total
            summary.positive_share = (
                sum(1 for f in feedback if f.sentiment_score > 0) / total
            )
            summary.last_updated = max(f.created_time for f in feedback)
        return summary

    def _trim_feedback_locked(self, session_code: str) -> None:
        if self._max_feedback <= 0:
            return

        overflow = self._newest_first_locked(session_code.upper())[self._max_feedback:]
        if not overflow:
            return
        evicted = {id(entry) for entry in overflow}
        self._data.feedback_entries = [
            f for f in self._data.feedback_entries if id(f) not in evicted
        ]
        self._logger.debug(
            "Trimmed %s feedback entries from %s", len(overflow), session_code
        )

    def _generate_code_locked(self) -> str:
        in_use = {s.code.upper() for s in self._data.sessions}
        while True:
            code = "".join(
                self._random.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH)
            )
            if code not in in_use:
                return code

    def _load_data(self) -> Optional[PulseData]:
        try:
            return load_snapshot(self._data_path)
        except SnapshotError as exc:
            self._logger.warning("Ignoring unreadable snapshot: %s", exc)
            return None

    def _save_data(self) -> None:
        try:
            save_snapshot(self._data_path, self._data)
        except OSError as exc:
            self._logger.error("Snapshot write failed for %s: %s", self._data_path, exc)
            raise PersistenceError(
                f"Could not write snapshot {self._data_path}: {exc}"
            ) from exc

    def _seed_data(self) -> PulseData:
        now = self._clock()
        session_one = Session(
            code="MSA101",
            title="Build Your First .NET API",
            speaker="MSA Ambassador",
            start_time=now + timedelta(hours=1),
            created_time=now,
        )
        session_two = Session(
            code="AZURE1",
            title="Azure in 15 Minutes",
            speaker="Student Lead",
            start_time=now + timedelta(hours=2),
            created_time=now,
        )
        samples = [
            (session_one.code, 5, "Great pace and clear demos", 28),
            (session_one.code, 4, "Useful examples, slightly fast", 12),
            (session_two.code, 5, "Awesome intro to Azure services", 18),
        ]
        feedback = [
            Feedback(
                id=uuid.uuid4().hex,
                session_code=code,
                rating=rating,
                comment=comment,
                sentiment_score=self._scorer(comment),
                created_time=now - timedelta(minutes=minutes_ago),
            )
            for code, rating, comment, minutes_ago in samples
        ]
        self._logger.info("Seeding snapshot with example sessions")
        return PulseData(sessions=[session_one, session_two], feedback_entries=feedback)
