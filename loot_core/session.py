"""Roll session state machine (pure, no transport/UI).

Lifecycle:
- start(): NoSession -> open, round 0, everyone eligible
- record_submission(): open/rerolling, appends one value per participant per round
- start_reroll(): -> rerolling, round + 1, eligibility replaced by the tied set
- finalize(): winner (record + stats, session cleared) | tie_unresolved
  (session kept) | no_winner (session discarded)
- cancel(): discards the session, no record and no stats

Key concepts:
- Duplicate detection is per round, so a tied participant may submit again
  after a reroll.
- Eligibility is replaced (not merged) on each reroll; an empty eligibility
  list means unrestricted.
- Ties are never broken arbitrarily: two or more submissions sharing the top
  value of the current round always require an explicit reroll.
"""
from __future__ import annotations

import logging
import time
from copy import deepcopy
from dataclasses import dataclass
from typing import Callable, Iterable, Literal

from .config import ROLL_MAX, ROLL_MIN
from .models import RollRecord, RollSession, Submission
from .outcome import Outcome
from .stats import StatisticsLedger
from .validation import is_valid_initiator, is_valid_participant, is_valid_title

logger = logging.getLogger(__name__)

FinalizeStatus = Literal["winner", "no_winner", "tie_unresolved"]
RoundStatus = Literal["pending", "winner", "tie_unresolved"]


@dataclass(frozen=True)
class HighestSubmitters:
    """Every submission sharing the top value of one round."""

    submissions: tuple[Submission, ...]
    value: int

    @property
    def participants(self) -> tuple[str, ...]:
        return tuple(s.participant for s in self.submissions)

    @property
    def is_tie(self) -> bool:
        return len(self.submissions) > 1


@dataclass(frozen=True)
class FinalizeResult:
    status: FinalizeStatus
    winner: Submission | None = None
    record: RollRecord | None = None
    tied: tuple[Submission, ...] = ()


@dataclass(frozen=True)
class RoundEvaluation:
    status: RoundStatus
    round: int
    highest: HighestSubmitters


def highest_submitters(submissions: Iterable[Submission], round_no: int) -> HighestSubmitters:
    in_round = [s for s in submissions if s.round == round_no]
    if not in_round:
        return HighestSubmitters(submissions=(), value=0)
    top = max(s.value for s in in_round)
    return HighestSubmitters(
        submissions=tuple(s for s in in_round if s.value == top), value=top
    )


class RollSessionMachine:
    def __init__(
        self,
        store,
        stats: StatisticsLedger,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._stats = stats
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    def start(self, item: str, initiator: str) -> Outcome[RollSession]:
        if self._store.active_session is not None:
            return Outcome.failure("already_active", "session")
        if not is_valid_title(item):
            return Outcome.failure("invalid_payload", "item")
        if not is_valid_initiator(initiator):
            return Outcome.failure("invalid_payload", "initiator")
        session = RollSession(item=item, started_by=initiator, start_time=self._now())
        self._store.active_session = session
        logger.debug(f"Roll session started for {item} by {initiator}")
        return Outcome.success(deepcopy(session))

    def record_submission(
        self, participant: str, value: int, min_value: int, max_value: int
    ) -> Outcome[Submission]:
        session = self._store.active_session
        if session is None:
            return Outcome.failure("no_active_session")
        if not is_valid_participant(participant):
            return Outcome.failure("invalid_payload", "participant")
        if isinstance(value, bool) or not isinstance(value, int):
            return Outcome.failure("invalid_payload", "value")

        if min_value != ROLL_MIN or max_value != ROLL_MAX:
            return Outcome.failure("invalid_range", f"{min_value}-{max_value}")
        if not ROLL_MIN <= value <= ROLL_MAX:
            return Outcome.failure("invalid_range", str(value))

        if not session.is_eligible(participant):
            return Outcome.failure("not_eligible", participant)

        current_round = session.reroll_round
        for existing in session.submissions:
            if existing.participant == participant and existing.round == current_round:
                return Outcome.failure("duplicate_submission", participant)

        submission = Submission(
            participant=participant,
            value=value,
            round=current_round,
            timestamp=self._now(),
        )
        session.submissions.append(submission)
        logger.debug(f"Submission {participant}={value} (round {current_round})")
        return Outcome.success(submission)

    def get_highest_submitters(self, round_no: int | None = None) -> Outcome[HighestSubmitters]:
        session = self._store.active_session
        if session is None:
            return Outcome.failure("no_active_session")
        if round_no is None:
            round_no = session.reroll_round
        return Outcome.success(highest_submitters(session.submissions, round_no))

    def start_reroll(self, tied: Iterable[str | Submission]) -> Outcome[int]:
        session = self._store.active_session
        if session is None:
            return Outcome.failure("no_active_session")

        eligible: list[str] = []
        for entry in tied:
            name = entry.participant if isinstance(entry, Submission) else entry
            if not is_valid_participant(name):
                return Outcome.failure("invalid_payload", "participants")
            if name not in eligible:
                eligible.append(name)
        if not eligible:
            # An empty list would silently mean "everyone" again.
            return Outcome.failure("no_tie")

        session.reroll_round += 1
        session.state = "rerolling"
        session.eligible_participants = eligible
        logger.debug(f"Reroll round {session.reroll_round}: {', '.join(eligible)}")
        return Outcome.success(session.reroll_round)

    def evaluate_round(self) -> Outcome[RoundEvaluation]:
        """Check whether the current reroll round has everyone's submission.

        Only reroll rounds have a known participant list; an open round stays
        ``pending`` until the caller finalizes. Never mutates the session.
        """
        session = self._store.active_session
        if session is None:
            return Outcome.failure("no_active_session")
        current_round = session.reroll_round
        highest = highest_submitters(session.submissions, current_round)
        status: RoundStatus = "pending"
        if session.state == "rerolling":
            submitted = {s.participant for s in session.submissions_for_round(current_round)}
            if submitted >= set(session.eligible_participants):
                status = "tie_unresolved" if highest.is_tie else "winner"
        return Outcome.success(
            RoundEvaluation(status=status, round=current_round, highest=highest)
        )

    def finalize(self) -> Outcome[FinalizeResult]:
        session = self._store.active_session
        if session is None:
            return Outcome.failure("no_active_session")

        highest = highest_submitters(session.submissions, session.reroll_round)

        if not highest.submissions:
            self._store.active_session = None
            logger.debug(f"Roll session for {session.item} ended with no submissions")
            return Outcome.success(FinalizeResult(status="no_winner"))

        if highest.is_tie:
            return Outcome.success(
                FinalizeResult(status="tie_unresolved", tied=highest.submissions)
            )

        winner = highest.submissions[0]
        record = RollRecord(
            item=session.item,
            winner=winner.participant,
            winning_value=winner.value,
            started_by=session.started_by,
            start_time=session.start_time,
            end_time=max(self._now(), session.start_time),
            submissions=tuple(session.submissions),
            reroll_rounds=session.reroll_round,
        )
        self._store.history.append(record)

        # One outcome per participant per session; losers are credited with
        # their latest submission.
        self._stats.record_outcome(winner.participant, True, winner.value)
        latest_by_loser: dict[str, int] = {}
        for submission in session.submissions:
            if submission.participant != winner.participant:
                latest_by_loser[submission.participant] = submission.value
        for participant, value in latest_by_loser.items():
            self._stats.record_outcome(participant, False, value)

        self._store.active_session = None
        logger.info(
            f"{winner.participant} wins {record.item} with {winner.value} "
            f"after {record.reroll_rounds} reroll(s)"
        )
        return Outcome.success(FinalizeResult(status="winner", winner=winner, record=record))

    def cancel(self) -> Outcome[None]:
        if self._store.active_session is None:
            return Outcome.failure("no_active_session")
        self._store.active_session = None
        logger.debug("Roll session cancelled")
        return Outcome.success()

    def get_active_session(self) -> RollSession | None:
        session = self._store.active_session
        return deepcopy(session) if session is not None else None
