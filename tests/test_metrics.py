import logging
import time

from campuspulse.metrics import PulseMetricsWorker, format_summary_line
from campuspulse.repository import PulseRepository


def test_format_summary_line(tmp_path):
    repo = PulseRepository(str(tmp_path / "pulse.json"))

    line = format_summary_line(repo.get_summary("MSA101"))

    assert line == "Pulse snapshot MSA101: 4.5 avg, 2 responses, 100% positive"


def test_run_once_logs_one_line_per_session(tmp_path, caplog):
    repo = PulseRepository(str(tmp_path / "pulse.json"))
    repo.create_session("Quiet talk")
    worker = PulseMetricsWorker(repo, interval_seconds=30)

    with caplog.at_level(logging.INFO, logger="campuspulse.metrics"):
        count = worker.run_once()

    lines = [r.getMessage() for r in caplog.records if r.name == "campuspulse.metrics"]
    assert count == 3
    assert len(lines) == 3
    assert all(line.startswith("Pulse snapshot ") for line in lines)


def test_worker_ticks_and_stops(tmp_path, caplog):
    repo = PulseRepository(str(tmp_path / "pulse.json"))
    worker = PulseMetricsWorker(repo, interval_seconds=0.05)

    with caplog.at_level(logging.INFO, logger="campuspulse.metrics"):
        worker.start()
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if any(r.name == "campuspulse.metrics" for r in caplog.records):
                break
            time.sleep(0.02)
        worker.stop(timeout=5)

    assert not worker.running
    assert any("MSA101" in r.getMessage() for r in caplog.records)
