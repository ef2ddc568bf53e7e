import os
import tempfile

from campuspulse.config import PulseConfig, load_config, save_config


def test_save_and_load_config_roundtrip():
    cfg = PulseConfig(data_dir="C:/Pulse")
    cfg.storage.max_feedback_per_session = 25
    cfg.metrics.interval_seconds = 5

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "campuspulse_config.yml")
        save_config(path, cfg)
        loaded = load_config(path)

    assert loaded.data_dir == "C:/Pulse"
    assert loaded.storage.max_feedback_per_session == 25
    assert loaded.metrics.interval_seconds == 5.0
    assert loaded.storage.data_file == "pulse.json"


def test_load_config_fills_defaults_for_missing_sections():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "campuspulse_config.yml")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("log_level: debug\n")
        loaded = load_config(path)

    assert loaded.log_level == "DEBUG"
    assert loaded.storage.max_feedback_per_session == 200
    assert loaded.metrics.enabled is True


def test_data_path_resolves_relative_to_data_dir():
    cfg = PulseConfig(data_dir="data")
    assert cfg.data_path == os.path.join("data", "pulse.json")

    absolute = os.path.abspath("snapshot.json")
    cfg.storage.data_file = absolute
    assert cfg.data_path == absolute
