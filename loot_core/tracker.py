"""Facade wiring every ledger to one explicitly owned store.

The presentation/command layer talks to ``LootTracker`` only. After a session
finalizes with a winner, or an event ends, the finalized record is handed to
the optional ``RecordSink`` for broadcast. Persisting the store (``snapshot``)
is the caller's job after each mutating call.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

from .attendance import AttendanceLedger
from .config import ConfigStore
from .models import (
    AttendanceEvent,
    AttendanceRecord,
    ParticipantAttendance,
    RollRecord,
    RollSession,
    StatsView,
    Submission,
)
from .outcome import Outcome
from .queries import HistoryFilters, get_history
from .session import FinalizeResult, HighestSubmitters, RollSessionMachine, RoundEvaluation
from .stats import StatisticsLedger
from .store import LootStore
from .sync import MessageKind, RecordSink, receive
from .types import StoreDict

logger = logging.getLogger(__name__)


class LootTracker:
    def __init__(
        self,
        store: LootStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
        sink: RecordSink | None = None,
    ) -> None:
        self.store = store if store is not None else LootStore()
        self._clock = clock
        self._sink = sink
        self.stats = StatisticsLedger(self.store)
        self.attendance = AttendanceLedger(self.store, clock)
        self.sessions = RollSessionMachine(self.store, self.stats, clock)
        self.config = ConfigStore(self.store)

    # ------------------------------------------------------------------
    # Roll sessions
    # ------------------------------------------------------------------

    def start_session(self, item: str, initiator: str) -> Outcome[RollSession]:
        return self.sessions.start(item, initiator)

    def record_submission(
        self, participant: str, value: int, min_value: int, max_value: int
    ) -> Outcome[Submission]:
        return self.sessions.record_submission(participant, value, min_value, max_value)

    def get_highest_submitters(self, round_no: int | None = None) -> Outcome[HighestSubmitters]:
        return self.sessions.get_highest_submitters(round_no)

    def start_reroll(self, tied: Iterable[str | Submission]) -> Outcome[int]:
        return self.sessions.start_reroll(tied)

    def reroll_tie(self) -> Outcome[int]:
        """Start a reroll for whoever shares the current round's top value."""
        highest = self.sessions.get_highest_submitters()
        if not highest.ok:
            return Outcome.failure(highest.error_kind)
        if not highest.value.is_tie:
            return Outcome.failure("no_tie")
        return self.sessions.start_reroll(highest.value.submissions)

    def evaluate_round(self) -> Outcome[RoundEvaluation]:
        return self.sessions.evaluate_round()

    def finalize(self) -> Outcome[FinalizeResult]:
        outcome = self.sessions.finalize()
        if outcome.ok and outcome.value.record is not None and self._sink is not None:
            self._sink.publish_roll_record(outcome.value.record)
        return outcome

    def cancel_session(self) -> Outcome[None]:
        return self.sessions.cancel()

    def get_active_session(self) -> RollSession | None:
        return self.sessions.get_active_session()

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    def start_event(self, name: str, initiator: str) -> Outcome[AttendanceEvent]:
        return self.attendance.start_event(name, initiator)

    def add_attendee(self, participant: str) -> Outcome[int]:
        return self.attendance.add_attendee(participant)

    def remove_attendee(self, participant: str) -> Outcome[int]:
        return self.attendance.remove_attendee(participant)

    def sync_roster(self, participants: Iterable[str]) -> Outcome[int]:
        return self.attendance.sync_roster(participants)

    def end_event(self) -> Outcome[AttendanceRecord]:
        outcome = self.attendance.end_event()
        if outcome.ok and self._sink is not None:
            self._sink.publish_attendance_record(outcome.value)
        return outcome

    def cancel_event(self) -> Outcome[None]:
        return self.attendance.cancel()

    def get_active_event(self) -> AttendanceEvent | None:
        return self.attendance.get_active_event()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_history(self, filters: HistoryFilters | None = None) -> list[RollRecord]:
        return get_history(self.store.history, filters)

    def get_attendance_history(self) -> list[AttendanceRecord]:
        return self.attendance.get_attendance_history()

    def get_stats(self, participant: str) -> StatsView | None:
        return self.stats.get_stats(participant)

    def get_all_stats(self) -> list[StatsView]:
        return self.stats.get_all_stats()

    def get_attendance_rate(self, participant: str) -> float:
        return self.attendance.get_attendance_rate(participant)

    def get_participant_attendance(self, participant: str) -> ParticipantAttendance | None:
        return self.attendance.get_participant_attendance(participant)

    def get_priority(self, participant: str) -> float:
        return self.attendance.get_priority(participant)

    # ------------------------------------------------------------------
    # Config, sync, lifecycle
    # ------------------------------------------------------------------

    def get_config(self, key: str) -> Any:
        return self.config.get(key)

    def set_config(self, key: str, value: Any) -> Outcome[Any]:
        return self.config.set(key, value)

    def receive(self, kind: MessageKind | str, payload: Any) -> Outcome[Any]:
        return receive(self.store, kind, payload, clock=self._clock)

    def snapshot(self) -> StoreDict:
        return self.store.to_dict()

    def shutdown(self) -> None:
        """Host is unloading: drop the open roll session, close the event."""
        if self.store.active_session is not None:
            logger.info("Active roll session cancelled on shutdown")
            self.sessions.cancel()
        if self.store.active_event is not None:
            logger.info("Active attendance event ended on shutdown")
            self.end_event()
