"""Configuration handling."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import yaml


@dataclass
class StorageConfig:
    data_file: str = "pulse.json"
    max_feedback_per_session: int = 200


@dataclass
class MetricsConfig:
    enabled: bool = True
    interval_seconds: float = 30.0


@dataclass
class PulseConfig:
    data_dir: str = "App_Data"
    log_dir: str = "logs"
    log_level: str = "INFO"
    storage: StorageConfig = field(default_factory=StorageConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    @property
    def data_path(self) -> str:
        if os.path.isabs(self.storage.data_file):
            return self.storage.data_file
        return os.path.join(self.data_dir or os.getcwd(), self.storage.data_file)


def load_config(path: str) -> PulseConfig:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    storage = StorageConfig(**data.get("storage", {}))
    storage.max_feedback_per_session = int(storage.max_feedback_per_session or 0)
    metrics = MetricsConfig(**data.get("metrics", {}))
    metrics.interval_seconds = float(metrics.interval_seconds)

    return PulseConfig(
        data_dir=data.get("data_dir", "App_Data"),
        log_dir=data.get("log_dir", "logs"),
        log_level=str(data.get("log_level", "INFO")).upper(),
        storage=storage,
        metrics=metrics,
    )


def save_config(path: str, config: PulseConfig) -> None:
    data = {
        "data_dir": config.data_dir,
        "log_dir": config.log_dir,
        "log_level": config.log_level,
        "storage": {
            "data_file": config.storage.data_file,
            "max_feedback_per_session": config.storage.max_feedback_per_session,
        },
        "metrics": {
            "enabled": config.metrics.enabled,
            "interval_seconds": config.metrics.interval_seconds,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)
