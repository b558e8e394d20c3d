"""Entity dataclasses and their persisted (camelCase dict) form.

Finalized records (``RollRecord``, ``AttendanceRecord``) are frozen: once
appended to history they are never mutated. The active ``RollSession`` and
``AttendanceEvent`` are the only mutable slots.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal

from .config import ROLL_MAX

SessionState = Literal["open", "rerolling"]


@dataclass(frozen=True)
class Submission:
    participant: str
    value: int
    round: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "participant": self.participant,
            "value": self.value,
            "round": self.round,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Submission":
        return cls(
            participant=data["participant"],
            value=data["value"],
            round=data["round"],
            timestamp=data["timestamp"],
        )


@dataclass
class RollSession:
    """The single active contest for one item.

    ``eligible_participants`` empty means every participant may submit.
    ``submissions`` is append-only for the lifetime of the session.
    """

    item: str
    started_by: str
    start_time: int
    state: SessionState = "open"
    reroll_round: int = 0
    eligible_participants: list[str] = field(default_factory=list)
    submissions: list[Submission] = field(default_factory=list)

    def is_eligible(self, participant: str) -> bool:
        if not self.eligible_participants:
            return True
        return participant in self.eligible_participants

    def submissions_for_round(self, round_no: int) -> list[Submission]:
        return [s for s in self.submissions if s.round == round_no]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "startedBy": self.started_by,
            "startTime": self.start_time,
            "state": self.state,
            "rerollRound": self.reroll_round,
            "eligibleParticipants": list(self.eligible_participants),
            "submissions": [s.to_dict() for s in self.submissions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RollSession":
        return cls(
            item=data["item"],
            started_by=data["startedBy"],
            start_time=data["startTime"],
            state=data["state"],
            reroll_round=data["rerollRound"],
            eligible_participants=list(data["eligibleParticipants"]),
            submissions=[Submission.from_dict(s) for s in data["submissions"]],
        )


@dataclass(frozen=True)
class RollRecord:
    item: str
    winner: str
    winning_value: int
    started_by: str
    start_time: int
    end_time: int
    submissions: tuple[Submission, ...]
    reroll_rounds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item": self.item,
            "winner": self.winner,
            "winningValue": self.winning_value,
            "startedBy": self.started_by,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "submissions": [s.to_dict() for s in self.submissions],
            "rerollRounds": self.reroll_rounds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RollRecord":
        return cls(
            item=data["item"],
            winner=data["winner"],
            winning_value=data["winningValue"],
            started_by=data["startedBy"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            submissions=tuple(Submission.from_dict(s) for s in data["submissions"]),
            reroll_rounds=data["rerollRounds"],
        )


@dataclass
class ParticipantStats:
    wins: int = 0
    losses: int = 0
    total_submissions: int = 0
    submission_value_sum: int = 0
    highest_value: int = 0
    # Starts at the top of the range so the first real value lowers it.
    lowest_value: int = ROLL_MAX

    @property
    def average_value(self) -> float:
        if self.total_submissions <= 0:
            return 0.0
        return self.submission_value_sum / self.total_submissions

    @property
    def win_rate(self) -> float:
        decided = self.wins + self.losses
        if decided <= 0:
            return 0.0
        return self.wins / decided * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "totalSubmissions": self.total_submissions,
            "submissionValueSum": self.submission_value_sum,
            "highestValue": self.highest_value,
            "lowestValue": self.lowest_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParticipantStats":
        return cls(
            wins=data["wins"],
            losses=data["losses"],
            total_submissions=data["totalSubmissions"],
            submission_value_sum=data["submissionValueSum"],
            highest_value=data["highestValue"],
            lowest_value=data["lowestValue"],
        )


@dataclass(frozen=True)
class StatsView:
    """Read-only snapshot of one participant's stats with derived ratios."""

    participant: str
    wins: int
    losses: int
    total_submissions: int
    submission_value_sum: int
    highest_value: int
    lowest_value: int
    average_value: float
    win_rate: float


@dataclass
class AttendanceEvent:
    name: str
    started_by: str
    start_time: int
    date: str
    attendees: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "startedBy": self.started_by,
            "startTime": self.start_time,
            "date": self.date,
            "attendees": list(self.attendees),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceEvent":
        return cls(
            name=data["name"],
            started_by=data["startedBy"],
            start_time=data["startTime"],
            date=data["date"],
            attendees=list(data["attendees"]),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    name: str
    started_by: str
    start_time: int
    end_time: int
    date: str
    attendees: tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "startedBy": self.started_by,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "date": self.date,
            "attendees": list(self.attendees),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceRecord":
        return cls(
            name=data["name"],
            started_by=data["startedBy"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            date=data["date"],
            attendees=tuple(data["attendees"]),
        )


@dataclass
class ParticipantAttendance:
    total_events: int = 0
    dates: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"totalEvents": self.total_events, "dates": list(self.dates)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParticipantAttendance":
        return cls(total_events=data["totalEvents"], dates=list(data["dates"]))
