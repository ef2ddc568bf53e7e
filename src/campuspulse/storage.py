"""Snapshot persistence for sessions and feedback."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .errors import SnapshotError
from .models import Feedback, PulseData, Session


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def to_utc(value: datetime) -> datetime:
    """Naive values are taken as UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))


def session_to_dict(session: Session) -> Dict[str, Any]:
    return {
        "code": session.code,
        "title": session.title,
        "speaker": session.speaker,
        "startUtc": format_timestamp(session.start_time),
        "createdUtc": format_timestamp(session.created_time),
    }


def session_from_dict(data: Dict[str, Any]) -> Session:
    return Session(
        code=str(data["code"]),
        title=str(data["title"]),
        speaker=str(data.get("speaker") or ""),
        start_time=parse_timestamp(data["startUtc"]),
        created_time=parse_timestamp(data["createdUtc"]),
    )


def feedback_to_dict(feedback: Feedback) -> Dict[str, Any]:
    return {
        "id": feedback.id,
        "sessionCode": feedback.session_code,
        "rating": feedback.rating,
        "comment": feedback.comment,
        "sentimentScore": feedback.sentiment_score,
        "createdUtc": format_timestamp(feedback.created_time),
        "submittedBy": feedback.submitted_by,
    }


def feedback_from_dict(data: Dict[str, Any]) -> Feedback:
    return Feedback(
        id=str(data["id"]),
        session_code=str(data["sessionCode"]),
        rating=int(data["rating"]),
        comment=data.get("comment"),
        sentiment_score=int(data.get("sentimentScore", 0)),
        created_time=parse_timestamp(data["createdUtc"]),
        submitted_by=data.get("submittedBy"),
    )


def snapshot_to_dict(data: PulseData) -> Dict[str, Any]:
    return {
        "sessions": [session_to_dict(s) for s in data.sessions],
        "feedbackEntries": [feedback_to_dict(f) for f in data.feedback_entries],
    }


def snapshot_from_dict(payload: Any) -> PulseData:
    if not isinstance(payload, dict):
        raise SnapshotError("Snapshot root must be an object.")
    try:
        sessions = [session_from_dict(s) for s in payload.get("sessions") or []]
        feedback = [
            feedback_from_dict(f) for f in payload.get("feedbackEntries") or []
        ]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SnapshotError(f"Malformed snapshot record: {exc}") from exc
    return PulseData(sessions=sessions, feedback_entries=feedback)


def load_snapshot(path: str) -> Optional[PulseData]:
    """Read the snapshot at ``path``.

    Returns ``None`` when the file does not exist. Unreadable or malformed
    content raises ``SnapshotError``.
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        raise SnapshotError(f"Could not read snapshot {path}: {exc}") from exc
    return snapshot_from_dict(payload)


def save_snapshot(path: str, data: PulseData) -> None:
    """Rewrite the whole snapshot, replacing the old file in one step."""
    directory = os.path.dirname(os.path.abspath(path))
    ensure_dir(directory)
    fd, tmp_path = tempfile.mkstemp(
        prefix=".pulse-", suffix=".tmp", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(snapshot_to_dict(data), handle, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
