"""Read-only views over roll history."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import RollRecord


@dataclass(frozen=True)
class HistoryFilters:
    """Optional history filters; unset fields do not filter.

    ``start_date`` bounds ``record.start_time`` from below and ``end_date``
    bounds ``record.end_time`` from above, both inclusive, in epoch seconds.
    ``item`` is a case-insensitive substring.
    """

    winner: str | None = None
    start_date: int | None = None
    end_date: int | None = None
    item: str | None = None


def _matches(record: RollRecord, filters: HistoryFilters) -> bool:
    if filters.winner is not None and record.winner != filters.winner:
        return False
    if filters.start_date is not None and record.start_time < filters.start_date:
        return False
    if filters.end_date is not None and record.end_time > filters.end_date:
        return False
    if filters.item is not None and filters.item.lower() not in record.item.lower():
        return False
    return True


def get_history(
    history: Iterable[RollRecord], filters: HistoryFilters | None = None
) -> list[RollRecord]:
    """Filtered history, most recently completed first."""
    filters = filters or HistoryFilters()
    results = [record for record in history if _matches(record, filters)]
    results.sort(key=lambda r: r.end_time, reverse=True)
    return results
