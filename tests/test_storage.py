import json
from datetime import datetime, timezone

import pytest

from campuspulse.errors import SnapshotError
from campuspulse.models import Feedback, PulseData, Session
from campuspulse.storage import load_snapshot, parse_timestamp, save_snapshot


def _sample_data():
    start = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    session = Session(
        code="ABC234",
        title="Intro to APIs",
        speaker="Guest Speaker",
        start_time=start,
        created_time=start,
    )
    feedback = Feedback(
        id="f" * 32,
        session_code="ABC234",
        rating=4,
        comment="clear demos",
        sentiment_score=1,
        created_time=datetime(2026, 3, 1, 10, 0, 5, 123456, tzinfo=timezone.utc),
        submitted_by="sam",
    )
    return PulseData(sessions=[session], feedback_entries=[feedback])


def test_snapshot_roundtrip(tmp_path):
    path = tmp_path / "nested" / "pulse.json"
    data = _sample_data()
    save_snapshot(str(path), data)

    loaded = load_snapshot(str(path))

    assert loaded == data


def test_snapshot_uses_document_layout(tmp_path):
    path = tmp_path / "pulse.json"
    save_snapshot(str(path), _sample_data())

    payload = json.loads(path.read_text(encoding="utf-8"))

    assert list(payload) == ["sessions", "feedbackEntries"]
    assert payload["sessions"][0]["startUtc"] == "2026-03-01T09:30:00+00:00"
    assert payload["feedbackEntries"][0]["sessionCode"] == "ABC234"
    assert not [p for p in tmp_path.iterdir() if p.name.endswith(".tmp")]


def test_load_snapshot_missing_file_returns_none(tmp_path):
    assert load_snapshot(str(tmp_path / "missing.json")) is None


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2]", '{"sessions": [{"code": "X"}]}'],
)
def test_load_snapshot_rejects_malformed_content(tmp_path, content):
    path = tmp_path / "pulse.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SnapshotError):
        load_snapshot(str(path))


def test_parse_timestamp_accepts_zulu_suffix():
    parsed = parse_timestamp("2026-03-01T09:30:00Z")
    assert parsed == datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
