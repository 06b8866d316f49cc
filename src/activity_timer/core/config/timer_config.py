"""Core configuration for the activity timer."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict

from ..interfaces.activity_feed import DEFAULT_CHANNEL

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("data", "config")
CONFIG_FILE = "timer.json"
DEFAULT_TIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"


@dataclass
class TimerConfig:
    """Runtime settings for timing and idle detection."""

    idle_threshold: timedelta = timedelta(minutes=5)
    idle_check_interval: timedelta = timedelta(seconds=10)
    time_format: str = DEFAULT_TIME_FORMAT
    feed_channel: str = DEFAULT_CHANNEL
    data_dir: str = "data"
    storage_file: str = os.path.join("activities", "activities.json")
    key_file: str = os.path.join("activities", "key.key")

    @property
    def storage_path(self) -> str:
        return os.path.join(self.data_dir, self.storage_file)

    @property
    def key_path(self) -> str:
        return os.path.join(self.data_dir, self.key_file)

    @classmethod
    def load(cls, base_dir: str = DEFAULT_CONFIG_DIR) -> "TimerConfig":
        """Load config from ``timer.json`` under base_dir.

        Durations are stored in seconds:
        { "idle_threshold": 300, "idle_check_interval": 10, "time_format": ... }

        Missing or invalid values keep their defaults.
        """
        config = cls()
        path = os.path.join(base_dir, CONFIG_FILE)
        if not os.path.exists(path):
            return config

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f) or {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read timer config {path}: {e}")
            return config

        if not isinstance(payload, dict):
            logger.warning(f"Ignoring timer config {path}: expected an object")
            return config

        for key in ("idle_threshold", "idle_check_interval"):
            if key not in payload:
                continue
            try:
                seconds = float(payload[key])
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid {key}: {payload[key]!r}")
                continue
            if seconds <= 0:
                logger.warning(f"Ignoring non-positive {key}: {seconds}")
                continue
            setattr(config, key, timedelta(seconds=seconds))

        for key in ("time_format", "feed_channel", "data_dir", "storage_file", "key_file"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                setattr(config, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "idle_threshold": self.idle_threshold.total_seconds(),
            "idle_check_interval": self.idle_check_interval.total_seconds(),
            "time_format": self.time_format,
            "feed_channel": self.feed_channel,
            "data_dir": self.data_dir,
            "storage_file": self.storage_file,
            "key_file": self.key_file,
        }

    def save(self, base_dir: str = DEFAULT_CONFIG_DIR) -> None:
        os.makedirs(base_dir, exist_ok=True)
        with open(os.path.join(base_dir, CONFIG_FILE), "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
