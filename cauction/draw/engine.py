"""State machine that draws winners and manages conflicts."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Mapping, Optional

from .allocation import allocate_tickets, reset_auction
from .identifiers import generate_conflict_id
from .operations import (
    ADMIN_OPERATIONS,
    AllocateTickets,
    DrawAll,
    DrawSingle,
    DrawTier,
    Operation,
    RedrawPrize,
    ResetAuction,
    ResolveConflict,
)
from .outcomes import Outcome, OutcomeKind, Transition
from .random_source import RandomSource, SystemRandomSource, shuffle_in_place
from .selector import select_winner
from .state import AuctionState, Conflict, Prize

logger = logging.getLogger(__name__)


class AuctionDrawEngine:
    """Apply drawing operations to an :class:`AuctionState`.

    The engine is stateless apart from its random source and conflict id
    factory: callers own the ``AuctionState`` and thread the returned state
    into the next call. Every transition is total. Domain failures come back
    as an :class:`Outcome` together with the untouched input state.
    """

    def __init__(
        self,
        source: Optional[RandomSource] = None,
        *,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        """Create an engine.

        Parameters
        ----------
        source : Optional[RandomSource], default: None
            Random source shared by shuffling and selection. Defaults to
            :class:`SystemRandomSource`.
        id_factory : Optional[Callable[[], str]], default: None
            Produces ids for new conflicts. Defaults to
            :func:`generate_conflict_id`.
        """

        self._source = source or SystemRandomSource()
        self._id_factory = id_factory or generate_conflict_id

    @property
    def source(self) -> RandomSource:
        return self._source

    def apply(
        self, state: AuctionState, operation: Operation, *, is_admin: bool
    ) -> Transition:
        """Run one operation against ``state``.

        Parameters
        ----------
        state : AuctionState
            Current state. Never mutated.
        operation : Operation
            One of the operation variants from :mod:`cauction.draw.operations`.
        is_admin : bool
            Whether the caller is an administrator. Every operation except
            :class:`AllocateTickets` requires it.

        Returns
        -------
        Transition
            The next state and the outcome describing the change.

        Raises
        ------
        TypeError
            If ``operation`` is not an operation variant.
        """

        if isinstance(operation, ADMIN_OPERATIONS) and not is_admin:
            logger.info(f"Rejected {type(operation).__name__} from non-admin caller")
            return Transition(
                state,
                Outcome(
                    OutcomeKind.ACCESS_DENIED,
                    "Admin login required for this action.",
                ),
            )

        if isinstance(operation, DrawAll):
            return self.draw_all(state)
        if isinstance(operation, DrawTier):
            return self.draw_tier(state, operation.tier_id)
        if isinstance(operation, DrawSingle):
            return self.draw_single(state, operation.prize_id)
        if isinstance(operation, RedrawPrize):
            return self.redraw_prize(state, operation.prize_id)
        if isinstance(operation, ResolveConflict):
            return self.resolve_conflict(
                state,
                conflict_id=operation.conflict_id,
                keep_prize_id=operation.keep_prize_id,
                drop_prize_id=operation.drop_prize_id,
                participant_id=operation.participant_id,
            )
        if isinstance(operation, AllocateTickets):
            return allocate_tickets(
                state, operation.participant_id, operation.prize_id, operation.count
            )
        if isinstance(operation, ResetAuction):
            return reset_auction(state)
        raise TypeError(f"Unsupported operation: {operation!r}")

    # ------------------------------------------------------------------ draws

    def draw_all(self, state: AuctionState) -> Transition:
        """Fill every prize up to its quota; close the auction when no conflict arises."""

        refused = self._refuse_while_paused(state)
        if refused is not None:
            return refused
        if not state.is_auction_open:
            return Transition(
                state,
                Outcome(
                    OutcomeKind.AUCTION_CLOSED,
                    "Winners have already been drawn; use a redraw instead.",
                ),
            )

        winners, conflict, drawn = self._fill_prizes(state, state.prizes)
        if conflict is not None:
            return self._pause_on_conflict(state, winners, conflict)

        logger.info(f"Drew {drawn} winners across {len(state.prizes)} prizes")
        next_state = replace(state.with_winners(winners), is_auction_open=False)
        return Transition(
            next_state,
            Outcome(
                OutcomeKind.WINNERS_DRAWN,
                "The auction has ended and winners have been selected.",
                winner_count=drawn,
            ),
        )

    def draw_tier(self, state: AuctionState, tier_id: str) -> Transition:
        """Like :meth:`draw_all` restricted to one tier; never closes the auction."""

        refused = self._refuse_while_paused(state)
        if refused is not None:
            return refused

        tier = state.tier(tier_id)
        tier_prizes = [prize for prize in state.prizes if prize.tier_id == tier_id]
        if tier is None and not tier_prizes:
            return Transition(
                state,
                Outcome(OutcomeKind.NOT_FOUND, "Prize tier not found."),
            )
        tier_name = tier.name if tier is not None else tier_id
        if not any(prize.has_positive_entries for prize in tier_prizes):
            return Transition(
                state,
                Outcome(
                    OutcomeKind.NO_ENTRIES,
                    f"No tickets entered for any prize in {tier_name}.",
                ),
            )

        winners, conflict, drawn = self._fill_prizes(state, tier_prizes)
        if conflict is not None:
            return self._pause_on_conflict(state, winners, conflict)

        logger.info(f"Drew {drawn} winners in tier {tier_id}")
        return Transition(
            state.with_winners(winners),
            Outcome(
                OutcomeKind.TIER_DRAWN,
                f"Drew {drawn} winners for {tier_name}.",
                winner_count=drawn,
            ),
        )

    def draw_single(self, state: AuctionState, prize_id: str) -> Transition:
        """Draw one additional winner for a prize below its quota.

        Only the prize's own winners are excluded from the pool. This departs
        from the whole-catalog draws, which exclude every recorded winner: a
        candidate holding another prize is not skipped here. Instead the draw
        pauses with a conflict so an administrator can choose which prize
        they keep. Excluding every winner would leave that conflict path
        unreachable.
        """

        refused = self._refuse_while_paused(state)
        if refused is not None:
            return refused

        prize = state.prize(prize_id)
        if prize is None:
            return Transition(
                state, Outcome(OutcomeKind.NOT_FOUND, "Prize not found.", prize_id=prize_id)
            )
        if not prize.has_positive_entries:
            return self._no_entries(state, prize)

        current = state.winners_of(prize.id)
        if len(current) >= prize.number_of_winners:
            return Transition(
                state,
                Outcome(
                    OutcomeKind.PRIZE_ALREADY_COMPLETE,
                    "This prize already has all of its winners. Use redraw if needed.",
                    prize_id=prize.id,
                    prize_name=prize.name,
                    winner_count=len(current),
                ),
            )

        selection = select_winner(prize, state.winners, set(current), self._source)
        if selection.winner_id is None:
            return Transition(
                state,
                Outcome(
                    OutcomeKind.NO_ELIGIBLE_PARTICIPANT,
                    f"No eligible participants for {prize.name}.",
                    prize_id=prize.id,
                    prize_name=prize.name,
                ),
            )
        if selection.conflict_prize_id is not None:
            conflict = self._new_conflict(
                selection.winner_id, selection.conflict_prize_id, prize.id
            )
            return self._pause_on_conflict(state, state.winners, conflict)

        winners = dict(state.winners)
        winners[prize.id] = current + (selection.winner_id,)
        name = state.participant_name(selection.winner_id)
        logger.debug(f"Drew {selection.winner_id} for {prize.id}")
        return Transition(
            state.with_winners(winners),
            Outcome(
                OutcomeKind.WINNER_DRAWN,
                f"{name} won {prize.name}!",
                prize_id=prize.id,
                prize_name=prize.name,
                participant_id=selection.winner_id,
                participant_name=name,
                winner_count=len(current) + 1,
            ),
        )

    def redraw_prize(self, state: AuctionState, prize_id: str) -> Transition:
        """Replace every winner of a prize after the auction closed.

        The prize's list is rebuilt from zero up to ``number_of_winners``.
        Winners of other prizes are excluded, as is anybody already re-picked
        in this pass. Fewer winners than the quota (even none) is a valid
        result when the pool runs dry.
        """

        refused = self._refuse_while_paused(state)
        if refused is not None:
            return refused
        if state.is_auction_open:
            return Transition(
                state,
                Outcome(
                    OutcomeKind.AUCTION_STILL_OPEN,
                    "The auction must be closed before redrawing a prize.",
                    prize_id=prize_id,
                ),
            )

        prize = state.prize(prize_id)
        if prize is None:
            return Transition(
                state, Outcome(OutcomeKind.NOT_FOUND, "Prize not found.", prize_id=prize_id)
            )
        if not prize.has_positive_entries:
            return self._no_entries(state, prize)

        winners = {pid: list(ids) for pid, ids in state.winners.items() if pid != prize.id}
        picked: list[str] = []
        winners[prize.id] = picked
        excluded = state.all_winner_ids(exclude_prize_id=prize.id)

        while len(picked) < prize.number_of_winners:
            selection = select_winner(prize, winners, excluded | set(picked), self._source)
            if selection.winner_id is None:
                break
            if selection.conflict_prize_id is not None:
                conflict = self._new_conflict(
                    selection.winner_id, selection.conflict_prize_id, prize.id
                )
                return self._pause_on_conflict(state, winners, conflict)
            picked.append(selection.winner_id)

        logger.info(f"Redrew {prize.id}: {len(picked)} of {prize.number_of_winners} slots")
        names = ", ".join(state.participant_name(pid) for pid in picked)
        message = f"{prize.name} now has {len(picked)} winners"
        message += f": {names}." if picked else "; no eligible participant remains."
        return Transition(
            state.with_winners(winners),
            Outcome(
                OutcomeKind.WINNER_REDRAWN,
                message,
                prize_id=prize.id,
                prize_name=prize.name,
                participant_id=picked[0] if len(picked) == 1 else None,
                participant_name=names if len(picked) == 1 else None,
                winner_count=len(picked),
            ),
        )

    # ------------------------------------------------------------- conflicts

    def resolve_conflict(
        self,
        state: AuctionState,
        *,
        conflict_id: str,
        keep_prize_id: str,
        drop_prize_id: str,
        participant_id: str,
    ) -> Transition:
        """Settle the pending conflict.

        ``participant_id`` keeps ``keep_prize_id`` and is removed from
        ``drop_prize_id``. The vacated prize is immediately redrawn without
        the participant; that replacement may raise a new, chained conflict.
        The auction open flag is never touched.

        The two prize ids must be the pair named by the pending conflict and
        ``participant_id`` its participant. An unknown prize gives
        ``NOT_FOUND`` and any other mismatch ``NO_PENDING_CONFLICT``; both
        leave the state untouched.
        """

        pending = state.pending_conflict
        if pending is None or pending.id != conflict_id:
            return Transition(
                state,
                Outcome(
                    OutcomeKind.NO_PENDING_CONFLICT,
                    "There is no matching conflict to resolve.",
                ),
            )
        for prize_id in (keep_prize_id, drop_prize_id):
            if state.prize(prize_id) is None:
                return Transition(
                    state,
                    Outcome(OutcomeKind.NOT_FOUND, "Prize not found.", prize_id=prize_id),
                )
        involved = {pending.existing_prize_id, pending.new_prize_id}
        if (
            participant_id != pending.participant_id
            or {keep_prize_id, drop_prize_id} != involved
        ):
            return Transition(
                state,
                Outcome(
                    OutcomeKind.NO_PENDING_CONFLICT,
                    "The resolution does not match the pending conflict.",
                    conflict=pending,
                ),
            )

        winners = {pid: list(ids) for pid, ids in state.winners.items()}
        kept = winners.setdefault(keep_prize_id, [])
        if participant_id not in kept:
            kept.append(participant_id)
        dropped = [pid for pid in winners.get(drop_prize_id, []) if pid != participant_id]
        winners[drop_prize_id] = dropped

        participant_name = state.participant_name(participant_id)
        logger.info(
            f"Resolved {conflict_id}: {participant_id} keeps {keep_prize_id}, "
            f"vacates {drop_prize_id}"
        )

        drop_prize = state.prize(drop_prize_id)
        replacement: Optional[str] = None
        if (
            drop_prize is not None
            and drop_prize.has_positive_entries
            and len(dropped) < drop_prize.number_of_winners
        ):
            excluded = {participant_id, *dropped}
            selection = select_winner(drop_prize, winners, excluded, self._source)
            if selection.winner_id is not None and selection.conflict_prize_id is not None:
                chained = self._new_conflict(
                    selection.winner_id, selection.conflict_prize_id, drop_prize_id
                )
                resolved = replace(state, pending_conflict=None)
                return self._pause_on_conflict(resolved, winners, chained)
            if selection.winner_id is not None:
                replacement = selection.winner_id
                dropped.append(replacement)

        message = (
            f"{participant_name} keeps {state.prize_name(keep_prize_id)}; "
        )
        if replacement is not None:
            message += (
                f"{state.participant_name(replacement)} now wins "
                f"{state.prize_name(drop_prize_id)}."
            )
        else:
            message += f"{state.prize_name(drop_prize_id)} has no replacement winner."

        next_state = replace(state.with_winners(winners), pending_conflict=None)
        return Transition(
            next_state,
            Outcome(
                OutcomeKind.CONFLICT_RESOLVED,
                message,
                prize_id=drop_prize_id,
                prize_name=state.prize_name(drop_prize_id),
                participant_id=replacement,
                participant_name=(
                    state.participant_name(replacement) if replacement is not None else None
                ),
            ),
        )

    # --------------------------------------------------------------- helpers

    def _fill_prizes(
        self, state: AuctionState, prizes: Iterable[Prize]
    ) -> tuple[dict[str, list[str]], Optional[Conflict], int]:
        """Fill remaining slots of ``prizes`` in random order.

        Stops at the first conflict and returns the winners drawn up to that
        point, the conflict, and the number of newly drawn winners.
        """

        winners = {pid: list(ids) for pid, ids in state.winners.items()}
        assigned = state.all_winner_ids()
        order = list(prizes)
        shuffle_in_place(order, self._source)

        drawn = 0
        for prize in order:
            if not prize.has_positive_entries:
                continue
            slots = winners.setdefault(prize.id, [])
            while len(slots) < prize.number_of_winners:
                selection = select_winner(prize, winners, assigned, self._source)
                if selection.winner_id is None:
                    break
                if selection.conflict_prize_id is not None:
                    conflict = self._new_conflict(
                        selection.winner_id, selection.conflict_prize_id, prize.id
                    )
                    return winners, conflict, drawn
                slots.append(selection.winner_id)
                assigned.add(selection.winner_id)
                drawn += 1
        return winners, None, drawn

    def _new_conflict(
        self, participant_id: str, existing_prize_id: str, new_prize_id: str
    ) -> Conflict:
        return Conflict(
            id=self._id_factory(),
            participant_id=participant_id,
            existing_prize_id=existing_prize_id,
            new_prize_id=new_prize_id,
        )

    def _pause_on_conflict(
        self,
        state: AuctionState,
        winners: Mapping[str, Iterable[str]],
        conflict: Conflict,
    ) -> Transition:
        logger.info(
            f"Conflict {conflict.id}: {conflict.participant_id} drew "
            f"{conflict.new_prize_id} while holding {conflict.existing_prize_id}"
        )
        next_state = replace(state.with_winners(winners), pending_conflict=conflict)
        name = state.participant_name(conflict.participant_id)
        return Transition(
            next_state,
            Outcome(
                OutcomeKind.CONFLICT_DETECTED,
                f"{name} won {state.prize_name(conflict.new_prize_id)} but already "
                f"holds {state.prize_name(conflict.existing_prize_id)}.",
                prize_id=conflict.new_prize_id,
                prize_name=state.prize_name(conflict.new_prize_id),
                participant_id=conflict.participant_id,
                participant_name=name,
                conflict=conflict,
            ),
        )

    @staticmethod
    def _refuse_while_paused(state: AuctionState) -> Optional[Transition]:
        if state.pending_conflict is None:
            return None
        return Transition(
            state,
            Outcome(
                OutcomeKind.CONFLICT_PENDING,
                "Resolve the pending winner conflict before drawing again.",
                conflict=state.pending_conflict,
            ),
        )

    @staticmethod
    def _no_entries(state: AuctionState, prize: Prize) -> Transition:
        return Transition(
            state,
            Outcome(
                OutcomeKind.NO_ENTRIES,
                f"No tickets entered for {prize.name} to draw from.",
                prize_id=prize.id,
                prize_name=prize.name,
            ),
        )


def apply_operation(
    state: AuctionState,
    operation: Operation,
    *,
    is_admin: bool,
    source: Optional[RandomSource] = None,
) -> Transition:
    """Apply ``operation`` with a throwaway :class:`AuctionDrawEngine`."""
    return AuctionDrawEngine(source).apply(state, operation, is_admin=is_admin)


__all__ = ["AuctionDrawEngine", "apply_operation"]
