"""Merging finalized records received from peers.

Transport framing, fragmentation and leader election belong to the transport
collaborator. This module only sees already-decoded payloads and treats them
as untrusted: each one is parsed against a strict schema and rejected with
``invalid_payload`` before anything reaches the ledgers.

History has no natural unique key. Received records are deduplicated on
``(end_time, item)`` for rolls and ``(start_time, name)`` for attendance, so two
distinct sessions for the same item ending in the same second collide.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Protocol

from pydantic import ValidationError

from .attendance import AttendanceLedger
from .models import AttendanceRecord, RollRecord
from .outcome import Outcome
from .types import SyncDataDict
from .validation import (
    AttendanceRecordModel,
    RollRecordModel,
    SyncDataModel,
    SyncRequestModel,
    format_validation_error,
)

logger = logging.getLogger(__name__)


class MessageKind(str, Enum):
    ROLL_RECORD = "ROLL"
    ATTENDANCE = "ATT"
    SYNC_REQUEST = "SYNC_REQ"
    SYNC_DATA = "SYNC_DATA"


class RecordSink(Protocol):
    """Outbound broadcast of finalized records to peers."""

    def publish_roll_record(self, record: RollRecord) -> None:
        ...

    def publish_attendance_record(self, record: AttendanceRecord) -> None:
        ...


@dataclass(frozen=True)
class MergeCounts:
    rolls: int
    attendance: int


def has_roll_record(store, end_time: int, item: str) -> bool:
    return any(r.end_time == end_time and r.item == item for r in store.history)


def has_attendance_record(store, start_time: int, name: str) -> bool:
    return any(
        r.start_time == start_time and r.name == name
        for r in store.attendance.events
    )


def _add_roll(store, model: RollRecordModel) -> bool:
    if has_roll_record(store, model.endTime, model.item):
        return False
    store.history.append(RollRecord.from_dict(model.model_dump()))
    return True


def _add_attendance(store, model: AttendanceRecordModel) -> bool:
    if has_attendance_record(store, model.startTime, model.name):
        return False
    AttendanceLedger(store).append_record(AttendanceRecord.from_dict(model.model_dump()))
    return True


def merge_roll_record(store, payload: Any) -> Outcome[RollRecord]:
    """Append a peer's roll record to history.

    Stats are untouched: they reflect sessions finalized locally.
    """
    try:
        model = RollRecordModel.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected roll record: {e}")
        return Outcome.failure("invalid_payload", format_validation_error(e))
    if not _add_roll(store, model):
        return Outcome.failure("duplicate_record", f"{model.endTime}:{model.item}")
    logger.info(f"Merged roll record: {model.winner} won {model.item}")
    return Outcome.success(store.history[-1])


def merge_attendance_record(store, payload: Any) -> Outcome[AttendanceRecord]:
    try:
        model = AttendanceRecordModel.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected attendance record: {e}")
        return Outcome.failure("invalid_payload", format_validation_error(e))
    if not _add_attendance(store, model):
        return Outcome.failure("duplicate_record", f"{model.startTime}:{model.name}")
    logger.info(f"Merged attendance record: {model.name}")
    return Outcome.success(store.attendance.events[-1])


def merge_sync_data(store, payload: Any) -> Outcome[MergeCounts]:
    """Merge a full-sync payload; records already present are skipped.

    The whole payload is validated before any record is merged.
    """
    try:
        model = SyncDataModel.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected sync data: {e}")
        return Outcome.failure("invalid_payload", format_validation_error(e))
    rolls = sum(1 for record in model.rolls if _add_roll(store, record))
    attendance = sum(1 for record in model.attendance if _add_attendance(store, record))
    logger.info(f"Sync merged {rolls} roll record(s), {attendance} attendance record(s)")
    return Outcome.success(MergeCounts(rolls=rolls, attendance=attendance))


def build_sync_data(store, timestamp: int) -> SyncDataDict:
    return {
        "rolls": [record.to_dict() for record in store.history],
        "attendance": [record.to_dict() for record in store.attendance.events],
        "timestamp": timestamp,
    }


def answer_sync_request(store, payload: Any, now: int) -> Outcome[SyncDataDict]:
    try:
        SyncRequestModel.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Rejected sync request: {e}")
        return Outcome.failure("invalid_payload", format_validation_error(e))
    return Outcome.success(build_sync_data(store, now))


_HANDLERS: Dict[MessageKind, Callable[[Any, Any, int], Outcome[Any]]] = {
    MessageKind.ROLL_RECORD: lambda store, payload, now: merge_roll_record(store, payload),
    MessageKind.ATTENDANCE: lambda store, payload, now: merge_attendance_record(store, payload),
    MessageKind.SYNC_REQUEST: answer_sync_request,
    MessageKind.SYNC_DATA: lambda store, payload, now: merge_sync_data(store, payload),
}


def receive(
    store,
    kind: MessageKind | str,
    payload: Any,
    *,
    clock: Callable[[], float] = time.time,
) -> Outcome[Any]:
    """Route one decoded peer message to its handler."""
    try:
        message_kind = MessageKind(kind)
    except ValueError:
        logger.warning(f"Unknown message kind: {kind!r}")
        return Outcome.failure("invalid_payload", "kind")
    return _HANDLERS[message_kind](store, payload, int(clock()))
