"""Configuration keys, defaults and the canonical roll range.

Only the keys listed in ``DEFAULT_CONFIG`` are recognized. ``ConfigStore.set``
refuses anything else so unknown keys never appear in persisted state.
"""
from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Callable, Dict

from .outcome import Outcome

logger = logging.getLogger(__name__)

# Only standard full-range rolls count.
ROLL_MIN = 1
ROLL_MAX = 100

SCHEMA_VERSION = 1

ANNOUNCE_CHANNELS = ("RAID", "PARTY", "RAID_WARNING")

DEFAULT_CONFIG: Dict[str, Any] = {
    "announceWinner": True,
    "announceChannel": "RAID",
    "autoReroll": True,
    # How much attendance affects priority (0-1)
    "priorityWeight": 0.1,
    # Minimum events attended to qualify for priority
    "minAttendanceForPriority": 0,
}


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_channel(value: Any) -> bool:
    return isinstance(value, str) and value in ANNOUNCE_CHANNELS


def _is_weight(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0.0 <= float(value) <= 1.0


def _is_min_events(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


CONFIG_VALIDATORS: Dict[str, Callable[[Any], bool]] = {
    "announceWinner": _is_bool,
    "announceChannel": _is_channel,
    "autoReroll": _is_bool,
    "priorityWeight": _is_weight,
    "minAttendanceForPriority": _is_min_events,
}


def default_config() -> Dict[str, Any]:
    return deepcopy(DEFAULT_CONFIG)


class ConfigStore:
    """Get/set access to the ``config`` mapping of a store."""

    def __init__(self, store) -> None:
        self._store = store

    def get(self, key: str) -> Any:
        return self._store.config.get(key)

    def all(self) -> Dict[str, Any]:
        return dict(self._store.config)

    def set(self, key: str, value: Any) -> Outcome[Any]:
        validator = CONFIG_VALIDATORS.get(key)
        if validator is None:
            return Outcome.failure("invalid_config_key", key)
        if not validator(value):
            return Outcome.failure("invalid_config_value", key)
        if key == "priorityWeight":
            value = float(value)
        self._store.config[key] = value
        logger.debug(f"Config {key} set to {value!r}")
        return Outcome.success(value)
