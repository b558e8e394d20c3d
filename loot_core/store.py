"""Root store owning every ledger plus the active session/event slots.

The store is an explicitly constructed object passed to each component; there
is no process-wide instance. ``LootStore.to_dict`` produces the persisted
structure and ``load_store`` reads it back, filling missing keys from defaults
(additive migration only: values already present are never overwritten).
"""
from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from pydantic import ValidationError

from .config import SCHEMA_VERSION, default_config
from .models import (
    AttendanceEvent,
    AttendanceRecord,
    ParticipantAttendance,
    ParticipantStats,
    RollRecord,
    RollSession,
)
from .outcome import Outcome
from .types import StoreDict
from .validation import StoreModel, format_validation_error

logger = logging.getLogger(__name__)


def default_store_data() -> StoreDict:
    """Create the default persisted root structure."""
    return {
        "history": [],
        "stats": {},
        "attendance": {
            "events": [],
            "participants": {},
        },
        "activeSession": None,
        "activeEvent": None,
        "config": default_config(),
        "schemaVersion": SCHEMA_VERSION,
    }


def merge_defaults(target: Dict[str, Any], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill keys missing from ``target`` with copies of ``defaults`` (in place).

    Nested mappings are merged recursively. A key whose default is a mapping
    but whose stored value is not gets replaced by an empty mapping first, so
    the nested defaults can land.
    """
    for key, default in defaults.items():
        if isinstance(default, Mapping):
            if not isinstance(target.get(key), dict):
                target[key] = {}
            merge_defaults(target[key], default)
        elif key not in target:
            target[key] = deepcopy(default)
    return target


@dataclass
class AttendanceBook:
    events: list[AttendanceRecord] = field(default_factory=list)
    participants: dict[str, ParticipantAttendance] = field(default_factory=dict)


@dataclass
class LootStore:
    history: list[RollRecord] = field(default_factory=list)
    stats: dict[str, ParticipantStats] = field(default_factory=dict)
    attendance: AttendanceBook = field(default_factory=AttendanceBook)
    active_session: RollSession | None = None
    active_event: AttendanceEvent | None = None
    config: dict[str, Any] = field(default_factory=default_config)
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> StoreDict:
        return {
            "history": [record.to_dict() for record in self.history],
            "stats": {name: stats.to_dict() for name, stats in self.stats.items()},
            "attendance": {
                "events": [record.to_dict() for record in self.attendance.events],
                "participants": {
                    name: att.to_dict()
                    for name, att in self.attendance.participants.items()
                },
            },
            "activeSession": (
                self.active_session.to_dict() if self.active_session else None
            ),
            "activeEvent": self.active_event.to_dict() if self.active_event else None,
            "config": deepcopy(self.config),
            "schemaVersion": self.schema_version,
        }

    def wipe(self) -> None:
        """Reset every ledger and slot to defaults."""
        fresh = LootStore()
        self.__dict__.update(fresh.__dict__)


def _build_store(model: StoreModel) -> LootStore:
    data = model.model_dump()
    attendance = data["attendance"]
    return LootStore(
        history=[RollRecord.from_dict(r) for r in data["history"]],
        stats={
            name: ParticipantStats.from_dict(s) for name, s in data["stats"].items()
        },
        attendance=AttendanceBook(
            events=[AttendanceRecord.from_dict(r) for r in attendance["events"]],
            participants={
                name: ParticipantAttendance.from_dict(p)
                for name, p in attendance["participants"].items()
            },
        ),
        active_session=(
            RollSession.from_dict(data["activeSession"])
            if data["activeSession"] is not None
            else None
        ),
        active_event=(
            AttendanceEvent.from_dict(data["activeEvent"])
            if data["activeEvent"] is not None
            else None
        ),
        config=data["config"],
        schema_version=data["schemaVersion"],
    )


def load_store(data: Mapping[str, Any] | None) -> Outcome[LootStore]:
    """Load a persisted root structure.

    ``None`` (nothing saved yet) yields a fresh default store. The input is
    not mutated. Structurally invalid data fails with ``invalid_payload``.
    """
    if data is None:
        logger.info("No saved state; initializing default store")
        return Outcome.success(LootStore())
    if not isinstance(data, Mapping):
        return Outcome.failure("invalid_payload", "root")

    merged = merge_defaults(deepcopy(dict(data)), default_store_data())
    try:
        model = StoreModel.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Saved state failed validation: {e}")
        return Outcome.failure("invalid_payload", format_validation_error(e))
    return Outcome.success(_build_store(model))
