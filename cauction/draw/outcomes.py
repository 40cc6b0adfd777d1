"""Outcome descriptors returned alongside every state transition."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .state import AuctionState, Conflict


class OutcomeKind(str, Enum):
    WINNERS_DRAWN = "winners_drawn"
    TIER_DRAWN = "tier_drawn"
    WINNER_DRAWN = "winner_drawn"
    WINNER_REDRAWN = "winner_redrawn"
    CONFLICT_DETECTED = "conflict_detected"
    CONFLICT_RESOLVED = "conflict_resolved"
    TICKETS_ALLOCATED = "tickets_allocated"
    AUCTION_RESET = "auction_reset"
    # Failure kinds: state is returned untouched.
    NO_ENTRIES = "no_entries"
    NO_ELIGIBLE_PARTICIPANT = "no_eligible_participant"
    PRIZE_ALREADY_COMPLETE = "prize_already_complete"
    ACCESS_DENIED = "access_denied"
    CONFLICT_PENDING = "conflict_pending"
    NO_PENDING_CONFLICT = "no_pending_conflict"
    AUCTION_CLOSED = "auction_closed"
    AUCTION_STILL_OPEN = "auction_still_open"
    NOT_FOUND = "not_found"
    INSUFFICIENT_TICKETS = "insufficient_tickets"
    INVALID_ALLOCATION = "invalid_allocation"


ERROR_KINDS = frozenset(
    {
        OutcomeKind.NO_ENTRIES,
        OutcomeKind.NO_ELIGIBLE_PARTICIPANT,
        OutcomeKind.PRIZE_ALREADY_COMPLETE,
        OutcomeKind.ACCESS_DENIED,
        OutcomeKind.CONFLICT_PENDING,
        OutcomeKind.NO_PENDING_CONFLICT,
        OutcomeKind.AUCTION_CLOSED,
        OutcomeKind.AUCTION_STILL_OPEN,
        OutcomeKind.NOT_FOUND,
        OutcomeKind.INSUFFICIENT_TICKETS,
        OutcomeKind.INVALID_ALLOCATION,
    }
)


@dataclass(frozen=True)
class Outcome:
    """What happened during a transition, with enough context to render it.

    Attributes
    ----------
    kind : OutcomeKind
        Discriminating tag.
    message : str
        Human readable summary; callers may ignore it and render their own.
    prize_id, prize_name : Optional[str]
        Prize the outcome refers to, if any.
    participant_id, participant_name : Optional[str]
        Participant the outcome refers to, if any.
    conflict : Optional[Conflict]
        Newly raised conflict for ``CONFLICT_DETECTED``.
    winner_count : Optional[int]
        Number of winners drawn (or held after a redraw).
    """

    kind: OutcomeKind
    message: str
    prize_id: Optional[str] = None
    prize_name: Optional[str] = None
    participant_id: Optional[str] = None
    participant_name: Optional[str] = None
    conflict: Optional[Conflict] = None
    winner_count: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.kind in ERROR_KINDS


@dataclass(frozen=True)
class Transition:
    """The next state plus the outcome that produced it."""

    state: AuctionState
    outcome: Outcome

    @property
    def kind(self) -> OutcomeKind:
        return self.outcome.kind


__all__ = ["ERROR_KINDS", "Outcome", "OutcomeKind", "Transition"]
