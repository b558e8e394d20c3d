from loot_core import HistoryFilters, RollRecord, Submission, get_history


def _record(item, winner, start, end, value=80):
    return RollRecord(
        item=item,
        winner=winner,
        winning_value=value,
        started_by="A",
        start_time=start,
        end_time=end,
        submissions=(Submission(winner, value, 0, start),),
        reroll_rounds=0,
    )


HISTORY = [
    _record("Sword of Dawn", "P1", 100, 150),
    _record("Helm", "P2", 200, 260),
    _record("Dawn Cloak", "P1", 300, 320),
    _record("Boots", "P3", 400, 480),
]


def test_history_most_recent_first():
    assert [r.end_time for r in get_history(HISTORY)] == [480, 320, 260, 150]


def test_history_filtered_by_winner():
    assert [r.item for r in get_history(HISTORY, HistoryFilters(winner="P1"))] == [
        "Dawn Cloak",
        "Sword of Dawn",
    ]
    assert get_history(HISTORY, HistoryFilters(winner="p1")) == []


def test_history_filtered_by_item_substring():
    found = get_history(HISTORY, HistoryFilters(item="dawn"))
    assert {r.item for r in found} == {"Sword of Dawn", "Dawn Cloak"}


def test_history_filtered_by_dates_inclusive():
    window = HistoryFilters(start_date=200, end_date=320)
    assert [r.item for r in get_history(HISTORY, window)] == ["Dawn Cloak", "Helm"]

    # Start is compared against start time, end against end time.
    assert get_history(HISTORY, HistoryFilters(start_date=201, end_date=319)) == []


def test_filters_combine():
    filters = HistoryFilters(winner="P1", item="cloak", start_date=0)
    assert [r.item for r in get_history(HISTORY, filters)] == ["Dawn Cloak"]


def test_history_input_untouched():
    before = list(HISTORY)
    get_history(HISTORY)
    assert HISTORY == before
