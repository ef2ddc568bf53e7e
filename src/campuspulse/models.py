"""Data models for CampusPulse."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Session:
    code: str
    title: str
    speaker: str
    start_time: datetime
    created_time: datetime


@dataclass
class Feedback:
    id: str
    session_code: str
    rating: int
    comment: Optional[str]
    sentiment_score: int
    created_time: datetime
    submitted_by: Optional[str] = None


@dataclass
class SessionSummary:
    code: str
    title: str
    speaker: str
    start_time: datetime
    total_responses: int = 0
    average_rating: float = 0.0
    positive_share: float = 0.0
    sentiment_average: float = 0.0
    last_updated: Optional[datetime] = None


@dataclass
class PulseUpdate:
    feedback: Feedback
    summary: SessionSummary


@dataclass
class PulseData:
    sessions: List[Session] = field(default_factory=list)
    feedback_entries: List[Feedback] = field(default_factory=list)
