from loot_core import CommandKind, apply_command


def _start(tracker, item="Sword"):
    return apply_command(
        tracker,
        {"type": "START_SESSION", "item": item, "initiator": "A", "privileged": True},
    )


def _submit(tracker, participant, value):
    return apply_command(
        tracker,
        {"type": "SUBMIT", "participant": participant, "value": value, "min": 1, "max": 100},
    )


def test_start_session_requires_privilege(tracker):
    result = apply_command(tracker, {"type": "START_SESSION", "item": "Sword", "initiator": "B"})
    assert result.kind is CommandKind.START_SESSION
    assert result.outcome.error_kind == "not_privileged"
    assert result.snapshot_required is False
    assert tracker.get_active_session() is None


def test_start_session_with_privilege(tracker):
    result = _start(tracker)
    assert result.outcome.ok
    assert result.snapshot_required is True
    assert result.cmd_payload == {
        "type": "START_SESSION",
        "item": "Sword",
        "initiator": "A",
        "privileged": True,
    }
    assert tracker.get_active_session().started_by == "A"


def test_submit_and_finalize(tracker):
    _start(tracker)
    assert _submit(tracker, " P1 ", 85).outcome.value.participant == "P1"
    assert _submit(tracker, "P2", 50).outcome.ok

    result = apply_command(tracker, {"type": "FINALIZE"})
    assert result.kind is CommandKind.FINALIZE
    assert result.outcome.value.winner.participant == "P1"
    assert result.snapshot_required is True


def test_submit_rejections_do_not_require_snapshot(tracker):
    _start(tracker)
    result = apply_command(
        tracker, {"type": "SUBMIT", "participant": "P1", "value": 5, "min": 1, "max": 6}
    )
    assert result.outcome.error_kind == "invalid_range"
    assert result.snapshot_required is False


def test_unresolved_tie_does_not_require_snapshot(tracker):
    _start(tracker)
    _submit(tracker, "P1", 85)
    _submit(tracker, "P2", 85)
    result = apply_command(tracker, {"type": "FINALIZE"})
    assert result.outcome.ok
    assert result.outcome.value.status == "tie_unresolved"
    assert result.snapshot_required is False


def test_reroll_without_participants_uses_current_tie(tracker):
    _start(tracker)
    _submit(tracker, "P1", 85)
    _submit(tracker, "P2", 85)
    _submit(tracker, "P3", 20)
    result = apply_command(tracker, {"type": "REROLL"})
    assert result.outcome.value == 1
    assert tracker.get_active_session().eligible_participants == ["P1", "P2"]


def test_reroll_with_explicit_participants(tracker):
    _start(tracker)
    result = apply_command(tracker, {"type": "REROLL", "participants": ["P3", "P4"]})
    assert result.outcome.ok
    assert tracker.get_active_session().eligible_participants == ["P3", "P4"]


def test_unknown_command_type(tracker):
    result = apply_command(tracker, {"type": "EXPLODE"})
    assert result.kind is None
    assert result.outcome.error_kind == "unknown_command"

    assert apply_command(tracker, {"type": ["SUBMIT"]}).outcome.error_kind == "unknown_command"
    assert apply_command(tracker, {}).outcome.error_kind == "unknown_command"


def test_missing_fields_are_invalid_payload(tracker):
    _start(tracker)
    result = apply_command(tracker, {"type": "SUBMIT", "participant": "P1", "min": 1, "max": 100})
    assert result.outcome.error_kind == "invalid_payload"
    assert result.cmd_payload == {"type": "SUBMIT", "participant": "P1", "min": 1, "max": 100}

    stringly = {"type": "SUBMIT", "participant": "P1", "value": "85", "min": 1, "max": 100}
    assert apply_command(tracker, stringly).outcome.error_kind == "invalid_payload"

    extra = {"type": "FINALIZE", "force": True}
    assert apply_command(tracker, extra).outcome.error_kind == "invalid_payload"
    assert tracker.get_active_session().submissions == []


def test_attendance_commands(tracker):
    assert apply_command(tracker, {"type": "START_EVENT", "name": "Raid1", "initiator": "A"}).outcome.ok
    assert apply_command(tracker, {"type": "ADD_ATTENDEE", "participant": "P1"}).outcome.value == 1
    roster = apply_command(tracker, {"type": "SYNC_ROSTER", "participants": ["P1", "P2", "P3"]})
    assert roster.outcome.value == 3
    assert apply_command(tracker, {"type": "REMOVE_ATTENDEE", "participant": "P3"}).outcome.value == 2

    ended = apply_command(tracker, {"type": "END_EVENT"})
    assert ended.outcome.value.attendees == ("P1", "P2")
    assert ended.snapshot_required is True

    cancelled = apply_command(tracker, {"type": "CANCEL_EVENT"})
    assert cancelled.outcome.error_kind == "no_active_event"


def test_cancel_session_command(tracker):
    _start(tracker)
    assert apply_command(tracker, {"type": "CANCEL_SESSION"}).outcome.ok
    assert tracker.get_active_session() is None


def test_set_config_command(tracker):
    result = apply_command(
        tracker, {"type": "SET_CONFIG", "key": "announceChannel", "configValue": "RAID_WARNING"}
    )
    assert result.outcome.ok
    assert tracker.get_config("announceChannel") == "RAID_WARNING"

    unknown = apply_command(tracker, {"type": "SET_CONFIG", "key": "volume", "configValue": 11})
    assert unknown.outcome.error_kind == "invalid_config_key"
    assert unknown.snapshot_required is False


def test_reroll_and_roster_names_are_checked_by_the_core(tracker):
    _start(tracker)
    long_name = "P" * 65
    result = apply_command(tracker, {"type": "REROLL", "participants": ["P1", long_name]})
    assert result.outcome.error_kind == "invalid_payload"
    assert result.snapshot_required is False

    apply_command(tracker, {"type": "START_EVENT", "name": "Raid1"})
    roster = apply_command(tracker, {"type": "SYNC_ROSTER", "participants": [long_name]})
    assert roster.outcome.error_kind == "invalid_payload"
