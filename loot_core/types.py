"""Type definitions for the persisted store layout and command payloads."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict


class SubmissionDict(TypedDict):
    """One participant's value for one round."""
    participant: str
    value: int
    round: int
    timestamp: int


class RollSessionDict(TypedDict):
    item: str
    startedBy: str
    startTime: int
    state: str  # 'open' | 'rerolling'
    rerollRound: int
    # Empty list = everyone may submit
    eligibleParticipants: List[str]
    submissions: List[SubmissionDict]


class RollRecordDict(TypedDict):
    item: str
    winner: str
    winningValue: int
    startedBy: str
    startTime: int
    endTime: int
    submissions: List[SubmissionDict]
    rerollRounds: int


class ParticipantStatsDict(TypedDict):
    wins: int
    losses: int
    totalSubmissions: int
    submissionValueSum: int
    highestValue: int
    lowestValue: int


class AttendanceEventDict(TypedDict):
    name: str
    startedBy: str
    startTime: int
    date: str  # YYYY-MM-DD
    attendees: List[str]


class AttendanceRecordDict(AttendanceEventDict):
    endTime: int


class ParticipantAttendanceDict(TypedDict):
    totalEvents: int
    dates: List[str]


class AttendanceBookDict(TypedDict):
    events: List[AttendanceRecordDict]
    participants: Dict[str, ParticipantAttendanceDict]


class StoreDict(TypedDict, total=False):
    """
    TypedDict representing the persisted root structure.

    All fields are optional (total=False) because older snapshots may lack
    keys; missing keys are filled from defaults on load.
    """
    history: List[RollRecordDict]
    stats: Dict[str, ParticipantStatsDict]
    attendance: AttendanceBookDict
    activeSession: Optional[RollSessionDict]
    activeEvent: Optional[AttendanceEventDict]
    config: Dict[str, Any]
    schemaVersion: int


class SyncDataDict(TypedDict):
    """Full-sync payload answering a SYNC_REQUEST."""
    rolls: List[RollRecordDict]
    attendance: List[AttendanceRecordDict]
    timestamp: int


class CommandPayload(TypedDict, total=False):
    """
    TypedDict for command payloads sent to apply_command().

    Fields vary by command type.
    """
    # Common
    type: str
    initiator: Optional[str]
    privileged: Optional[bool]

    # START_SESSION
    item: Optional[str]

    # SUBMIT
    participant: Optional[str]
    value: Optional[int]
    min: Optional[int]
    max: Optional[int]

    # REROLL
    participants: Optional[List[str]]

    # START_EVENT
    name: Optional[str]

    # SET_CONFIG
    key: Optional[str]
    configValue: Any
