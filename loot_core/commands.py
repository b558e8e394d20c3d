"""Command dispatch for the presentation/command layer (pure, no transport).

Commands are plain dicts with a 'type' field. ``apply_command`` validates the
dict with ``ValidatedCommand``, looks the kind up in a dispatch table and
returns a ``CommandOutcome`` carrying the core ``Outcome`` plus the normalized
payload the caller may broadcast or log.

Command types:
- START_SESSION: requires the caller-supplied ``privileged`` flag
- SUBMIT: participant/value/min/max from an already-parsed roll notice
- REROLL: explicit ``participants``, or the current tie when omitted
- FINALIZE / CANCEL_SESSION
- START_EVENT / ADD_ATTENDEE / REMOVE_ATTENDEE / SYNC_ROSTER / END_EVENT / CANCEL_EVENT
- SET_CONFIG: ``key`` + ``configValue``
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict

from pydantic import ValidationError

from .outcome import Outcome
from .tracker import LootTracker
from .validation import ValidatedCommand, format_validation_error

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    START_SESSION = "START_SESSION"
    SUBMIT = "SUBMIT"
    REROLL = "REROLL"
    FINALIZE = "FINALIZE"
    CANCEL_SESSION = "CANCEL_SESSION"
    START_EVENT = "START_EVENT"
    ADD_ATTENDEE = "ADD_ATTENDEE"
    REMOVE_ATTENDEE = "REMOVE_ATTENDEE"
    SYNC_ROSTER = "SYNC_ROSTER"
    END_EVENT = "END_EVENT"
    CANCEL_EVENT = "CANCEL_EVENT"
    SET_CONFIG = "SET_CONFIG"


@dataclass
class CommandOutcome:
    """Result of applying a core command."""

    kind: CommandKind | None
    outcome: Outcome[Any]
    cmd_payload: Dict[str, Any]
    snapshot_required: bool


def _start_session(tracker: LootTracker, cmd: ValidatedCommand) -> Outcome[Any]:
    if not cmd.privileged:
        return Outcome.failure("not_privileged", cmd.initiator)
    return tracker.start_session(cmd.item, cmd.initiator or "")


def _submit(tracker: LootTracker, cmd: ValidatedCommand) -> Outcome[Any]:
    return tracker.record_submission(cmd.participant, cmd.value, cmd.min, cmd.max)


def _reroll(tracker: LootTracker, cmd: ValidatedCommand) -> Outcome[Any]:
    if cmd.participants is None:
        return tracker.reroll_tie()
    return tracker.start_reroll(cmd.participants)


_HANDLERS: Dict[CommandKind, Callable[[LootTracker, ValidatedCommand], Outcome[Any]]] = {
    CommandKind.START_SESSION: _start_session,
    CommandKind.SUBMIT: _submit,
    CommandKind.REROLL: _reroll,
    CommandKind.FINALIZE: lambda tracker, cmd: tracker.finalize(),
    CommandKind.CANCEL_SESSION: lambda tracker, cmd: tracker.cancel_session(),
    CommandKind.START_EVENT: lambda tracker, cmd: tracker.start_event(cmd.name, cmd.initiator or ""),
    CommandKind.ADD_ATTENDEE: lambda tracker, cmd: tracker.add_attendee(cmd.participant),
    CommandKind.REMOVE_ATTENDEE: lambda tracker, cmd: tracker.remove_attendee(cmd.participant),
    CommandKind.SYNC_ROSTER: lambda tracker, cmd: tracker.sync_roster(cmd.participants),
    CommandKind.END_EVENT: lambda tracker, cmd: tracker.end_event(),
    CommandKind.CANCEL_EVENT: lambda tracker, cmd: tracker.cancel_event(),
    CommandKind.SET_CONFIG: lambda tracker, cmd: tracker.set_config(cmd.key, cmd.configValue),
}


def apply_command(tracker: LootTracker, cmd: Dict[str, Any]) -> CommandOutcome:
    """Apply one command dict to the tracker.

    Args:
        tracker: Tracker owning the store the command mutates
        cmd: Command dict with 'type' field and command-specific params

    Returns:
        CommandOutcome with:
        - outcome: the core Outcome (never raises)
        - cmd_payload: the validated command, without unset fields
        - snapshot_required: True when state changed and should be persisted
    """
    try:
        validated = ValidatedCommand.model_validate(cmd)
    except ValidationError as e:
        logger.warning(f"Command validation failed: {e}")
        raw_type = cmd.get("type") if isinstance(cmd, dict) else None
        known = isinstance(raw_type, str) and raw_type in CommandKind.__members__
        kind = "invalid_payload" if known else "unknown_command"
        return CommandOutcome(
            kind=None,
            outcome=Outcome.failure(kind, format_validation_error(e)),
            cmd_payload=dict(cmd) if isinstance(cmd, dict) else {},
            snapshot_required=False,
        )

    command_kind = CommandKind(validated.type)
    outcome = _HANDLERS[command_kind](tracker, validated)

    snapshot_required = outcome.ok
    if command_kind is CommandKind.FINALIZE and outcome.ok:
        # An unresolved tie leaves state untouched.
        snapshot_required = outcome.value.status != "tie_unresolved"

    return CommandOutcome(
        kind=command_kind,
        outcome=outcome,
        cmd_payload=validated.model_dump(exclude_none=True),
        snapshot_required=snapshot_required,
    )
