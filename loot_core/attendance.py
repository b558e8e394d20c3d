"""Attendance rosters for recurring group events.

One event may be active at a time. Ending it freezes the roster into an
``AttendanceRecord`` and bumps each attendee's lifetime counters, which are
the numerators of attendance rates.
"""
from __future__ import annotations

import logging
import time
from copy import deepcopy
from datetime import datetime, timezone
from typing import Callable, Iterable

from .models import AttendanceEvent, AttendanceRecord, ParticipantAttendance
from .outcome import Outcome
from .validation import is_valid_initiator, is_valid_participant, is_valid_title

logger = logging.getLogger(__name__)


def event_date(timestamp: int) -> str:
    """UTC calendar date (YYYY-MM-DD) of an epoch timestamp."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


class AttendanceLedger:
    def __init__(self, store, clock: Callable[[], float] = time.time) -> None:
        self._store = store
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    # ------------------------------------------------------------------
    # Active event
    # ------------------------------------------------------------------

    def start_event(self, name: str, initiator: str) -> Outcome[AttendanceEvent]:
        if self._store.active_event is not None:
            return Outcome.failure("already_active", "event")
        if not is_valid_title(name):
            return Outcome.failure("invalid_payload", "name")
        if not is_valid_initiator(initiator):
            return Outcome.failure("invalid_payload", "initiator")
        now = self._now()
        event = AttendanceEvent(
            name=name,
            started_by=initiator,
            start_time=now,
            date=event_date(now),
        )
        self._store.active_event = event
        logger.debug(f"Attendance event started: {name} by {initiator}")
        return Outcome.success(deepcopy(event))

    def add_attendee(self, participant: str) -> Outcome[int]:
        event = self._store.active_event
        if event is None:
            return Outcome.failure("no_active_event")
        if not is_valid_participant(participant):
            return Outcome.failure("invalid_payload", "participant")
        if participant in event.attendees:
            return Outcome.failure("duplicate_attendee", participant)
        event.attendees.append(participant)
        return Outcome.success(len(event.attendees))

    def remove_attendee(self, participant: str) -> Outcome[int]:
        event = self._store.active_event
        if event is None:
            return Outcome.failure("no_active_event")
        if participant not in event.attendees:
            return Outcome.failure("not_found", participant)
        event.attendees.remove(participant)
        return Outcome.success(len(event.attendees))

    def sync_roster(self, participants: Iterable[str]) -> Outcome[int]:
        """Replace the roster with ``participants`` (first occurrence wins).

        Empty names are skipped. Any other invalid name rejects the whole
        roster and leaves the current one in place.
        """
        event = self._store.active_event
        if event is None:
            return Outcome.failure("no_active_event")
        roster: list[str] = []
        for name in participants:
            if name == "":
                continue
            if not is_valid_participant(name):
                return Outcome.failure("invalid_payload", "participants")
            if name not in roster:
                roster.append(name)
        event.attendees = roster
        logger.debug(f"Roster synced for {event.name}: {len(roster)} attendees")
        return Outcome.success(len(roster))

    def end_event(self) -> Outcome[AttendanceRecord]:
        event = self._store.active_event
        if event is None:
            return Outcome.failure("no_active_event")
        record = AttendanceRecord(
            name=event.name,
            started_by=event.started_by,
            start_time=event.start_time,
            end_time=max(self._now(), event.start_time),
            date=event.date,
            attendees=tuple(event.attendees),
        )
        self.append_record(record)
        self._store.active_event = None
        logger.info(f"Attendance event ended: {record.name} ({len(record.attendees)} attendees)")
        return Outcome.success(record)

    def cancel(self) -> Outcome[None]:
        if self._store.active_event is None:
            return Outcome.failure("no_active_event")
        self._store.active_event = None
        logger.debug("Attendance event cancelled")
        return Outcome.success()

    def get_active_event(self) -> AttendanceEvent | None:
        event = self._store.active_event
        return deepcopy(event) if event is not None else None

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def append_record(self, record: AttendanceRecord) -> None:
        """Append a finalized record and credit every attendee.

        No duplicate detection happens here; callers merging records from
        elsewhere check ``(start_time, name)`` first.
        """
        book = self._store.attendance
        book.events.append(record)
        for name in record.attendees:
            att = book.participants.get(name)
            if att is None:
                att = ParticipantAttendance()
                book.participants[name] = att
            att.total_events += 1
            att.dates.append(record.date)

    def get_attendance_history(self) -> list[AttendanceRecord]:
        """Finalized events, most recently started first."""
        return sorted(
            self._store.attendance.events, key=lambda r: r.start_time, reverse=True
        )

    def get_participant_attendance(self, participant: str) -> ParticipantAttendance | None:
        att = self._store.attendance.participants.get(participant)
        return deepcopy(att) if att is not None else None

    def get_attendance_rate(self, participant: str) -> float:
        total = len(self._store.attendance.events)
        if total == 0:
            return 0.0
        att = self._store.attendance.participants.get(participant)
        if att is None:
            return 0.0
        return att.total_events / total * 100

    def get_priority(self, participant: str) -> float:
        """Attendance rate scaled by ``priorityWeight``.

        Participants below ``minAttendanceForPriority`` events get 0.
        """
        config = self._store.config
        att = self._store.attendance.participants.get(participant)
        if att is None or att.total_events < config.get("minAttendanceForPriority", 0):
            return 0.0
        return self.get_attendance_rate(participant) * config.get("priorityWeight", 0.0)
