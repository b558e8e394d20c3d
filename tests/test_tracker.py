def test_shutdown_cancels_session_and_ends_event(tracker):
    tracker.start_session("Sword", "A")
    tracker.record_submission("P1", 85, 1, 100)
    tracker.start_event("Raid1", "A")
    tracker.add_attendee("P1")

    tracker.shutdown()

    assert tracker.get_active_session() is None
    assert tracker.get_history() == []
    assert tracker.get_stats("P1") is None
    assert tracker.get_active_event() is None
    assert [r.name for r in tracker.get_attendance_history()] == ["Raid1"]


def test_shutdown_when_idle_is_a_no_op(tracker):
    before = tracker.snapshot()
    tracker.shutdown()
    assert tracker.snapshot() == before


def test_session_and_event_are_independent(tracker):
    tracker.start_event("Raid1", "A")
    tracker.start_session("Sword", "A")
    tracker.record_submission("P1", 85, 1, 100)
    tracker.finalize()
    assert tracker.get_active_event() is not None
    assert tracker.end_event().ok
    assert len(tracker.get_history()) == 1
