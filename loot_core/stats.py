"""Per-participant win/loss/submission counters."""
from __future__ import annotations

import logging

from .models import ParticipantStats, StatsView

logger = logging.getLogger(__name__)


def _view(participant: str, stats: ParticipantStats) -> StatsView:
    # Derived ratios are recomputed on every read, never stored.
    return StatsView(
        participant=participant,
        wins=stats.wins,
        losses=stats.losses,
        total_submissions=stats.total_submissions,
        submission_value_sum=stats.submission_value_sum,
        highest_value=stats.highest_value,
        lowest_value=stats.lowest_value,
        average_value=stats.average_value,
        win_rate=stats.win_rate,
    )


class StatisticsLedger:
    """Accumulates one outcome per participant per finalized session.

    ``record_outcome`` is not an upsert: every call counts. The session state
    machine is the only caller and calls it exactly once per
    (participant, session).
    """

    def __init__(self, store) -> None:
        self._store = store

    def record_outcome(self, participant: str, won: bool, value: int) -> None:
        stats = self._store.stats.get(participant)
        if stats is None:
            stats = ParticipantStats()
            self._store.stats[participant] = stats

        stats.total_submissions += 1
        stats.submission_value_sum += value
        if won:
            stats.wins += 1
        else:
            stats.losses += 1
        if value > stats.highest_value:
            stats.highest_value = value
        if value < stats.lowest_value:
            stats.lowest_value = value
        logger.debug(
            f"Stats for {participant}: won={won} value={value} "
            f"(wins={stats.wins}, losses={stats.losses})"
        )

    def get_stats(self, participant: str) -> StatsView | None:
        stats = self._store.stats.get(participant)
        if stats is None:
            return None
        return _view(participant, stats)

    def get_all_stats(self) -> list[StatsView]:
        """All participants, most wins first; equal wins ordered by identifier."""
        views = [_view(name, stats) for name, stats in self._store.stats.items()]
        views.sort(key=lambda v: (-v.wins, v.participant))
        return views
