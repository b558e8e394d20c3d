"""
Input validation schemas using Pydantic v2
Validates persisted snapshots, peer-supplied records and commands
"""

import logging
import re
from typing import Any, Dict, List, Literal, Optional, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from .config import CONFIG_VALIDATORS, ROLL_MAX, ROLL_MIN

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PARTICIPANT_MAX_LENGTH = 64
ITEM_MAX_LENGTH = 255


def is_valid_name(value: Any, max_length: int, *, allow_empty: bool = False) -> bool:
    """Length rules of the record schemas, for checks at the core entry points.

    Anything the core stores must load back through ``StoreModel``.
    """
    if not isinstance(value, str):
        return False
    if not value and not allow_empty:
        return False
    return len(value) <= max_length


def is_valid_participant(value: Any) -> bool:
    return is_valid_name(value, PARTICIPANT_MAX_LENGTH)


def is_valid_initiator(value: Any) -> bool:
    return is_valid_name(value, PARTICIPANT_MAX_LENGTH, allow_empty=True)


def is_valid_title(value: Any) -> bool:
    """Item or event name."""
    return is_valid_name(value, ITEM_MAX_LENGTH)


# ==================== RECORD SCHEMAS ====================


class _RecordModel(BaseModel):
    """Base for structural schemas: unknown keys are rejected outright."""

    model_config = ConfigDict(extra="forbid")


class SubmissionModel(_RecordModel):
    participant: StrictStr = Field(..., min_length=1, max_length=PARTICIPANT_MAX_LENGTH)
    value: StrictInt = Field(..., ge=ROLL_MIN, le=ROLL_MAX)
    round: StrictInt = Field(..., ge=0)
    timestamp: StrictInt = Field(..., ge=0)


class RollRecordModel(_RecordModel):
    item: StrictStr = Field(..., min_length=1, max_length=ITEM_MAX_LENGTH)
    winner: StrictStr = Field(..., min_length=1, max_length=PARTICIPANT_MAX_LENGTH)
    winningValue: StrictInt = Field(..., ge=ROLL_MIN, le=ROLL_MAX)
    startedBy: StrictStr = Field(..., max_length=PARTICIPANT_MAX_LENGTH)
    startTime: StrictInt = Field(..., ge=0)
    endTime: StrictInt = Field(..., ge=0)
    submissions: List[SubmissionModel]
    rerollRounds: StrictInt = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_consistency(self) -> Self:
        """A record must be internally consistent with its own submissions"""
        if self.endTime < self.startTime:
            raise ValueError("endTime must not precede startTime")
        if not any(
            s.participant == self.winner
            and s.value == self.winningValue
            and s.round == self.rerollRounds
            for s in self.submissions
        ):
            raise ValueError("winner must hold the winning submission of the last round")
        if any(s.round > self.rerollRounds for s in self.submissions):
            raise ValueError("submission round exceeds rerollRounds")
        return self


class RollSessionModel(_RecordModel):
    item: StrictStr = Field(..., min_length=1, max_length=ITEM_MAX_LENGTH)
    startedBy: StrictStr = Field(..., max_length=PARTICIPANT_MAX_LENGTH)
    startTime: StrictInt = Field(..., ge=0)
    state: Literal["open", "rerolling"]
    rerollRound: StrictInt = Field(..., ge=0)
    eligibleParticipants: List[StrictStr]
    submissions: List[SubmissionModel]


class ParticipantStatsModel(_RecordModel):
    wins: StrictInt = Field(..., ge=0)
    losses: StrictInt = Field(..., ge=0)
    totalSubmissions: StrictInt = Field(..., ge=0)
    submissionValueSum: StrictInt = Field(..., ge=0)
    highestValue: StrictInt = Field(..., ge=0, le=ROLL_MAX)
    lowestValue: StrictInt = Field(..., ge=ROLL_MIN, le=ROLL_MAX)


class AttendanceEventModel(_RecordModel):
    name: StrictStr = Field(..., min_length=1, max_length=ITEM_MAX_LENGTH)
    startedBy: StrictStr = Field(..., max_length=PARTICIPANT_MAX_LENGTH)
    startTime: StrictInt = Field(..., ge=0)
    date: StrictStr
    attendees: List[StrictStr]

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Validate date is YYYY-MM-DD"""
        if not DATE_PATTERN.match(v):
            raise ValueError("date must be YYYY-MM-DD")
        return v

    @field_validator("attendees")
    @classmethod
    def validate_attendees(cls, v: List[str]) -> List[str]:
        """Attendees are unique, non-empty identifiers"""
        if len(set(v)) != len(v):
            raise ValueError("attendees must not contain duplicates")
        for name in v:
            if not is_valid_participant(name):
                raise ValueError(f"invalid attendee name: {name!r}")
        return v


class AttendanceRecordModel(AttendanceEventModel):
    endTime: StrictInt = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_times(self) -> Self:
        if self.endTime < self.startTime:
            raise ValueError("endTime must not precede startTime")
        return self


class ParticipantAttendanceModel(_RecordModel):
    totalEvents: StrictInt = Field(..., ge=0)
    dates: List[StrictStr]


class AttendanceBookModel(_RecordModel):
    events: List[AttendanceRecordModel]
    participants: Dict[str, ParticipantAttendanceModel]


class StoreModel(_RecordModel):
    """Persisted root structure, after defaults have been merged in."""

    history: List[RollRecordModel]
    stats: Dict[str, ParticipantStatsModel]
    attendance: AttendanceBookModel
    activeSession: Optional[RollSessionModel]
    activeEvent: Optional[AttendanceEventModel]
    config: Dict[str, Any]
    schemaVersion: StrictInt = Field(..., ge=1)

    @field_validator("config")
    @classmethod
    def validate_config(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Same per-key rules as ConfigStore.set"""
        for key, value in v.items():
            validator = CONFIG_VALIDATORS.get(key)
            if validator is None:
                raise ValueError(f"unknown config key: {key}")
            if not validator(value):
                raise ValueError(f"invalid value for config key {key}: {value!r}")
        return v


class SyncDataModel(_RecordModel):
    rolls: List[RollRecordModel]
    attendance: List[AttendanceRecordModel]
    timestamp: StrictInt = Field(..., ge=0)


class SyncRequestModel(_RecordModel):
    requestor: StrictStr = Field(..., min_length=1, max_length=PARTICIPANT_MAX_LENGTH)


# ==================== COMMAND SCHEMA ====================

COMMAND_TYPES = {
    "START_SESSION",
    "SUBMIT",
    "REROLL",
    "FINALIZE",
    "CANCEL_SESSION",
    "START_EVENT",
    "ADD_ATTENDEE",
    "REMOVE_ATTENDEE",
    "SYNC_ROSTER",
    "END_EVENT",
    "CANCEL_EVENT",
    "SET_CONFIG",
}


class ValidatedCommand(BaseModel):
    """Command dict after validation"""

    type: str = Field(..., min_length=1, max_length=50, description="Command type")
    initiator: Optional[str] = Field(
        None, max_length=PARTICIPANT_MAX_LENGTH, description="Issuing participant"
    )
    privileged: StrictBool = Field(
        False, description="Caller-supplied permission check result"
    )

    item: Optional[str] = Field(None, min_length=1, max_length=ITEM_MAX_LENGTH)
    participant: Optional[str] = Field(
        None, min_length=1, max_length=PARTICIPANT_MAX_LENGTH
    )
    value: Optional[StrictInt] = None
    min: Optional[StrictInt] = None
    max: Optional[StrictInt] = None
    participants: Optional[List[str]] = None
    name: Optional[str] = Field(None, min_length=1, max_length=ITEM_MAX_LENGTH)
    key: Optional[str] = Field(None, min_length=1, max_length=50)
    configValue: Any = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate command type is one of allowed types"""
        if v not in COMMAND_TYPES:
            raise ValueError(f"type must be one of {sorted(COMMAND_TYPES)}, got {v}")
        return v

    @field_validator("participant", "item", "name")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) == 0:
            raise ValueError("value cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_command_fields(self) -> Self:
        """Validate required fields based on command type"""
        cmd_type = self.type

        if cmd_type == "START_SESSION":
            if self.item is None:
                raise ValueError("START_SESSION requires item")

        elif cmd_type == "SUBMIT":
            if self.participant is None or self.value is None:
                raise ValueError("SUBMIT requires participant and value")
            if self.min is None or self.max is None:
                raise ValueError("SUBMIT requires min and max")

        elif cmd_type == "START_EVENT":
            if self.name is None:
                raise ValueError("START_EVENT requires name")

        elif cmd_type in ("ADD_ATTENDEE", "REMOVE_ATTENDEE"):
            if self.participant is None:
                raise ValueError(f"{cmd_type} requires participant")

        elif cmd_type == "SYNC_ROSTER":
            if self.participants is None:
                raise ValueError("SYNC_ROSTER requires participants")

        elif cmd_type == "SET_CONFIG":
            if self.key is None:
                raise ValueError("SET_CONFIG requires key")

        return self

    model_config = ConfigDict(extra="forbid")


def format_validation_error(exc: ValidationError) -> str:
    """Collapse a pydantic error into a short machine-readable location token."""
    errors = exc.errors()
    if not errors:
        return "invalid"
    loc = errors[0].get("loc") or ()
    return ".".join(str(part) for part in loc) or "invalid"


__all__ = [
    "AttendanceEventModel",
    "AttendanceRecordModel",
    "RollRecordModel",
    "RollSessionModel",
    "StoreModel",
    "SubmissionModel",
    "SyncDataModel",
    "SyncRequestModel",
    "ValidatedCommand",
    "format_validation_error",
    "is_valid_initiator",
    "is_valid_name",
    "is_valid_participant",
    "is_valid_title",
]
