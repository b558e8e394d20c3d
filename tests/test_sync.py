from dataclasses import dataclass, field

from loot_core import LootTracker, MessageKind


@dataclass
class _ListSink:
    rolls: list = field(default_factory=list)
    attendance: list = field(default_factory=list)

    def publish_roll_record(self, record):
        self.rolls.append(record)

    def publish_attendance_record(self, record):
        self.attendance.append(record)


def _finalized_roll(tracker, item="Sword"):
    tracker.start_session(item, "A")
    tracker.record_submission("P1", 85, 1, 100)
    tracker.record_submission("P2", 50, 1, 100)
    return tracker.finalize().value.record


def _ended_event(tracker, name="Raid1", attendees=("P1", "P2")):
    tracker.start_event(name, "A")
    for participant in attendees:
        tracker.add_attendee(participant)
    return tracker.end_event().value


def test_sink_receives_finalized_records(make_tracker):
    sink = _ListSink()
    tracker = make_tracker(sink=sink)
    record = _finalized_roll(tracker)
    event = _ended_event(tracker)
    assert sink.rolls == [record]
    assert sink.attendance == [event]


def test_sink_not_called_on_tie_or_cancel(make_tracker):
    sink = _ListSink()
    tracker = make_tracker(sink=sink)
    tracker.start_session("Sword", "A")
    tracker.record_submission("P1", 85, 1, 100)
    tracker.record_submission("P2", 85, 1, 100)
    tracker.finalize()
    tracker.cancel_session()
    assert sink.rolls == []


def test_merge_roll_record_from_peer(make_tracker):
    source = make_tracker()
    record = _finalized_roll(source)

    target = make_tracker(1_800_000_000)
    outcome = target.receive(MessageKind.ROLL_RECORD, record.to_dict())
    assert outcome.ok
    assert target.get_history() == [record]
    # Peer records do not touch local stats.
    assert target.get_stats("P1") is None


def test_duplicate_roll_record_is_ignored(make_tracker):
    source = make_tracker()
    payload = _finalized_roll(source).to_dict()
    target = make_tracker()
    assert target.receive("ROLL", payload).ok
    outcome = target.receive("ROLL", payload)
    assert outcome.error_kind == "duplicate_record"
    assert len(target.get_history()) == 1


def test_malformed_roll_payloads_are_rejected(make_tracker):
    source = make_tracker()
    good = _finalized_roll(source).to_dict()
    target = make_tracker()

    extra_key = dict(good, handler="os.system('rm -rf /')")
    string_value = dict(good, winningValue="85")
    wrong_winner = dict(good, winner="P2")
    bad_submission = dict(good, submissions=[{"participant": "P1", "value": 500, "round": 0, "timestamp": 1}])

    for payload in [
        extra_key,
        string_value,
        wrong_winner,
        bad_submission,
        "return os.exit()",
        None,
        {},
    ]:
        outcome = target.receive(MessageKind.ROLL_RECORD, payload)
        assert outcome.error_kind == "invalid_payload", payload
    assert target.get_history() == []


def test_merge_attendance_record_credits_attendees(make_tracker):
    source = make_tracker()
    payload = _ended_event(source).to_dict()

    target = make_tracker()
    assert target.receive(MessageKind.ATTENDANCE, payload).ok
    assert target.get_participant_attendance("P1").total_events == 1
    assert target.get_attendance_rate("P2") == 100

    assert target.receive(MessageKind.ATTENDANCE, payload).error_kind == "duplicate_record"
    assert target.get_participant_attendance("P1").total_events == 1


def test_attendance_with_duplicate_attendees_is_rejected(make_tracker):
    source = make_tracker()
    payload = _ended_event(source).to_dict()
    payload["attendees"] = ["P1", "P1"]
    target = make_tracker()
    assert target.receive("ATT", payload).error_kind == "invalid_payload"


def test_sync_request_returns_full_history(make_clock):
    clock = make_clock(step=1)
    source = LootTracker(clock=clock)
    _finalized_roll(source, "Sword")
    _finalized_roll(source, "Helm")
    _ended_event(source)

    outcome = source.receive(MessageKind.SYNC_REQUEST, {"requestor": "Bob"})
    assert outcome.ok
    data = outcome.value
    assert [r["item"] for r in data["rolls"]] == ["Sword", "Helm"]
    assert len(data["attendance"]) == 1
    assert data["timestamp"] == clock.now

    assert source.receive(MessageKind.SYNC_REQUEST, {}).error_kind == "invalid_payload"


def test_sync_data_merges_only_missing_records(make_tracker):
    source = make_tracker()
    first = _finalized_roll(source, "Sword")
    _finalized_roll(source, "Helm")
    _ended_event(source)
    data = source.receive(MessageKind.SYNC_REQUEST, {"requestor": "Bob"}).value

    target = make_tracker()
    target.receive(MessageKind.ROLL_RECORD, first.to_dict())
    counts = target.receive(MessageKind.SYNC_DATA, data).value
    assert (counts.rolls, counts.attendance) == (1, 1)
    assert {r.item for r in target.get_history()} == {"Sword", "Helm"}

    again = target.receive(MessageKind.SYNC_DATA, data).value
    assert (again.rolls, again.attendance) == (0, 0)


def test_sync_data_rejected_as_a_whole(make_tracker):
    source = make_tracker()
    _finalized_roll(source)
    data = source.receive(MessageKind.SYNC_REQUEST, {"requestor": "Bob"}).value
    data["rolls"].append({"item": "Broken"})

    target = make_tracker()
    assert target.receive(MessageKind.SYNC_DATA, data).error_kind == "invalid_payload"
    assert target.get_history() == []


def test_unknown_message_kind(make_tracker):
    tracker = make_tracker()
    assert tracker.receive("LEAD", {"leader": "Bob"}).error_kind == "invalid_payload"
