from .attendance import AttendanceLedger
from .commands import CommandKind, CommandOutcome, apply_command
from .config import DEFAULT_CONFIG, ROLL_MAX, ROLL_MIN, SCHEMA_VERSION, ConfigStore
from .models import (
    AttendanceEvent,
    AttendanceRecord,
    ParticipantAttendance,
    ParticipantStats,
    RollRecord,
    RollSession,
    StatsView,
    Submission,
)
from .outcome import CoreError, ErrorKind, Outcome
from .queries import HistoryFilters, get_history
from .session import (
    FinalizeResult,
    HighestSubmitters,
    RollSessionMachine,
    RoundEvaluation,
)
from .stats import StatisticsLedger
from .store import LootStore, default_store_data, load_store, merge_defaults
from .sync import MergeCounts, MessageKind, RecordSink
from .tracker import LootTracker
from .types import CommandPayload, StoreDict

__all__ = [
    "AttendanceEvent",
    "AttendanceLedger",
    "AttendanceRecord",
    "CommandKind",
    "CommandOutcome",
    "CommandPayload",
    "ConfigStore",
    "CoreError",
    "DEFAULT_CONFIG",
    "ErrorKind",
    "FinalizeResult",
    "HighestSubmitters",
    "HistoryFilters",
    "LootStore",
    "LootTracker",
    "MergeCounts",
    "MessageKind",
    "Outcome",
    "ParticipantAttendance",
    "ParticipantStats",
    "ROLL_MAX",
    "ROLL_MIN",
    "RecordSink",
    "RollRecord",
    "RollSession",
    "RollSessionMachine",
    "RoundEvaluation",
    "SCHEMA_VERSION",
    "StatisticsLedger",
    "StatsView",
    "StoreDict",
    "Submission",
    "apply_command",
    "default_store_data",
    "get_history",
    "load_store",
    "merge_defaults",
]
