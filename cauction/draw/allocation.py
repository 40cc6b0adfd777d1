"""Ticket allocation against the participants' budgets."""

from __future__ import annotations

import logging
from dataclasses import replace

from .outcomes import Outcome, OutcomeKind, Transition
from .state import AuctionState, Prize, PrizeEntry

logger = logging.getLogger(__name__)


def allocated_tickets(state: AuctionState, participant_id: str) -> int:
    """Return how many tickets ``participant_id`` has committed across all prizes."""
    return sum(prize.tickets_for(participant_id) for prize in state.prizes)


def remaining_tickets(state: AuctionState, participant_id: str) -> int:
    """Return the unallocated part of the participant's budget (0 if unknown)."""
    participant = state.participants.get(participant_id)
    if participant is None:
        return 0
    return participant.initial_tickets - allocated_tickets(state, participant_id)


def _with_allocation(prize: Prize, participant_id: str, count: int) -> Prize:
    # Re-allocating moves the entry to the end of the list.
    entries = [e for e in prize.entries if e.participant_id != participant_id]
    if count > 0:
        entries.append(PrizeEntry(participant_id=participant_id, ticket_count=count))
    return replace(prize, entries=tuple(entries))


def allocate_tickets(
    state: AuctionState, participant_id: str, prize_id: str, count: int
) -> Transition:
    """Set the allocation of ``participant_id`` to ``prize_id`` to exactly ``count``.

    ``count == 0`` removes the participant's entry. The participant's total
    across all prizes must stay within their initial budget.
    """

    prize = state.prize(prize_id)
    participant = state.participants.get(participant_id)
    if prize is None or participant is None:
        missing = "Prize" if prize is None else "Participant"
        return Transition(
            state,
            Outcome(
                OutcomeKind.NOT_FOUND,
                f"{missing} not found.",
                prize_id=prize_id,
                participant_id=participant_id,
            ),
        )
    if count < 0:
        return Transition(
            state,
            Outcome(
                OutcomeKind.INVALID_ALLOCATION,
                "Ticket count must not be negative.",
                prize_id=prize_id,
                prize_name=prize.name,
                participant_id=participant_id,
                participant_name=participant.name,
            ),
        )
    if not state.is_auction_open:
        return Transition(
            state,
            Outcome(
                OutcomeKind.AUCTION_CLOSED,
                "The auction is closed; allocations can no longer change.",
                prize_id=prize_id,
                prize_name=prize.name,
            ),
        )

    elsewhere = allocated_tickets(state, participant_id) - prize.tickets_for(participant_id)
    if elsewhere + count > participant.initial_tickets:
        return Transition(
            state,
            Outcome(
                OutcomeKind.INSUFFICIENT_TICKETS,
                "You don't have enough tickets to make this allocation.",
                prize_id=prize_id,
                prize_name=prize.name,
                participant_id=participant_id,
                participant_name=participant.name,
            ),
        )

    next_state = state.with_prize(_with_allocation(prize, participant_id, count))
    left = participant.initial_tickets - elsewhere - count
    logger.debug(f"Allocated {count} tickets of {participant_id} to {prize_id}")
    return Transition(
        next_state,
        Outcome(
            OutcomeKind.TICKETS_ALLOCATED,
            f"{participant.name} now has {count} tickets on {prize.name} "
            f"({left} remaining).",
            prize_id=prize_id,
            prize_name=prize.name,
            participant_id=participant_id,
            participant_name=participant.name,
        ),
    )


def reset_auction(state: AuctionState) -> Transition:
    """Clear all entries, winners and any pending conflict, then reopen."""
    next_state = replace(
        state,
        prizes=tuple(replace(prize, entries=()) for prize in state.prizes),
        winners={},
        pending_conflict=None,
        is_auction_open=True,
    )
    logger.info("Auction reset")
    return Transition(
        next_state,
        Outcome(
            OutcomeKind.AUCTION_RESET,
            "The auction has been reset to its initial state.",
        ),
    )


__all__ = [
    "allocate_tickets",
    "allocated_tickets",
    "remaining_tickets",
    "reset_auction",
]
