import threading

import pytest

from campuspulse.app import PulseApp
from campuspulse.config import PulseConfig
from campuspulse.errors import SessionNotFoundError


def make_app(tmp_path):
    config = PulseConfig(data_dir=str(tmp_path), log_dir=str(tmp_path / "logs"))
    config.metrics.interval_seconds = 0.05
    return PulseApp(config)


def test_submit_feedback_publishes_feedback_and_summary(tmp_path):
    app = make_app(tmp_path)
    session = app.repository.create_session("Intro to APIs")

    with app.subscribe(session.code.lower()) as subscription:
        feedback = app.submit_feedback(session.code, 5, "great session")
        update = subscription.reader.get(timeout=1)

    assert update.feedback == feedback
    assert update.summary.total_responses == 1
    assert update.summary.average_rating == 5.0
    assert update.summary.positive_share == 1.0


def test_submit_feedback_unknown_session_publishes_nothing(tmp_path):
    app = make_app(tmp_path)
    subscription = app.subscribe("NOPE22")

    with pytest.raises(SessionNotFoundError):
        app.submit_feedback("NOPE22", 4, "good")

    subscription.close()
    assert subscription.reader.get(timeout=1) is None


def test_start_and_stop_metrics(tmp_path):
    app = make_app(tmp_path)
    app.start()
    assert app.metrics.running
    app.stop()
    assert not app.metrics.running


def test_concurrent_submissions_publish_in_insertion_order(tmp_path, monkeypatch):
    app = make_app(tmp_path)
    code = app.repository.create_session("Ordering").code
    original_get_summary = app.repository.get_summary
    held = threading.Event()
    release = threading.Event()

    def _slow_first_summary(session_code):
        if not held.is_set():
            held.set()
            release.wait(timeout=5)
        return original_get_summary(session_code)

    monkeypatch.setattr(app.repository, "get_summary", _slow_first_summary)

    with app.subscribe(code) as subscription:
        first = threading.Thread(target=app.submit_feedback, args=(code, 5, "first"))
        first.start()
        assert held.wait(timeout=5)
        second = threading.Thread(target=app.submit_feedback, args=(code, 4, "second"))
        second.start()
        second.join(timeout=0.2)
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        updates = [subscription.reader.get(timeout=1) for _ in range(2)]

    assert [u.feedback.comment for u in updates] == ["first", "second"]
    assert updates[0].summary.total_responses == 1
    assert updates[1].summary.total_responses == 2
