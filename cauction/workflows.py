import logging
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import event, select
from sqlalchemy.orm import Session

from .db.utils import dt_iso
from .draw.engine import AuctionDrawEngine
from .draw.operations import (
    AllocateTickets,
    DrawAll,
    DrawSingle,
    DrawTier,
    Operation,
    RedrawPrize,
    ResetAuction,
    ResolveConflict,
)
from .draw.outcomes import Transition
from .draw.random_source import random_source_from_env
from .models import Prize, PrizeWinner
from .persistence import WinnerStore, load_auction_state, save_auction_state

logger = logging.getLogger(__name__)


def run_operation(
    session: Session,
    operation: Operation,
    *,
    is_admin: bool,
    engine: Optional[AuctionDrawEngine] = None,
    store: Optional[WinnerStore] = None,
) -> Transition:
    """Load the auction, apply ``operation`` and persist the outcome.

    The workflow performs three steps:

    1. Build the :class:`~cauction.draw.state.AuctionState` from ``session``.
    2. Apply the operation with the drawing engine.
    3. When the outcome is not an error, write the new state back through
       ``session``. The winner map goes to ``store`` (if given) once the
       caller commits that session; a rollback skips it.

    Publishing to ``store`` is fire-and-forget: a failing store is logged and
    the transition is still returned as authoritative.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session. The caller owns the transaction.
    operation : Operation
        Operation to apply.
    is_admin : bool
        Whether the caller is an administrator.
    engine : Optional[AuctionDrawEngine], default: None
        Engine to use. When omitted, one is built around
        :func:`~cauction.draw.random_source.random_source_from_env`.
    store : Optional[WinnerStore], default: None
        Downstream winner store notified after the caller commits.

    Returns
    -------
    Transition
        The next state and the outcome descriptor.
    """

    if engine is None:
        engine = AuctionDrawEngine(random_source_from_env())

    state = load_auction_state(session)
    transition = engine.apply(state, operation, is_admin=is_admin)
    if transition.outcome.is_error:
        logger.debug(
            f"{type(operation).__name__} refused: {transition.outcome.kind.value}"
        )
        return transition

    save_auction_state(session, transition.state)
    if store is not None:
        _publish_after_commit(session, store, transition.state.winners)
    return transition


def _publish_after_commit(
    session: Session, store: WinnerStore, winners: Mapping[str, Sequence[str]]
) -> None:
    """Hand ``winners`` to ``store`` once the caller's transaction commits.

    The store writes through its own connection, so it must not run while
    ``session`` still holds uncommitted writes to the same tables. A rollback
    of the caller's transaction cancels the publish.
    """

    cancelled = False

    def _on_rollback(_session: Session) -> None:
        nonlocal cancelled
        cancelled = True

    def _on_commit(_session: Session) -> None:
        if cancelled:
            logger.debug("Transaction rolled back; winners not published")
            return
        _publish_winners(store, winners)

    event.listen(session, "after_rollback", _on_rollback, once=True)
    event.listen(session, "after_commit", _on_commit, once=True)


def _publish_winners(store: WinnerStore, winners: Mapping[str, Sequence[str]]) -> None:
    try:
        saved = store.save(winners)
    except Exception:
        # The store is a downstream mirror; its failure must not undo the draw.
        logger.exception("Winner store raised while publishing winners")
        return
    if not saved:
        logger.warning("Winner store did not accept the latest winners")


def draw_all_winners(session: Session, *, is_admin: bool, **kwargs: Any) -> Transition:
    """Draw every prize and close the auction."""
    return run_operation(session, DrawAll(), is_admin=is_admin, **kwargs)


def draw_tier_winners(
    session: Session, tier_id: str, *, is_admin: bool, **kwargs: Any
) -> Transition:
    """Draw the prizes of one tier without closing the auction."""
    return run_operation(session, DrawTier(tier_id), is_admin=is_admin, **kwargs)


def draw_single_winner(
    session: Session, prize_id: str, *, is_admin: bool, **kwargs: Any
) -> Transition:
    """Draw one more winner for ``prize_id``."""
    return run_operation(session, DrawSingle(prize_id), is_admin=is_admin, **kwargs)


def redraw_prize(
    session: Session, prize_id: str, *, is_admin: bool, **kwargs: Any
) -> Transition:
    """Replace all winners of ``prize_id`` on a closed auction."""
    return run_operation(session, RedrawPrize(prize_id), is_admin=is_admin, **kwargs)


def resolve_conflict(
    session: Session,
    *,
    keep_existing: bool,
    is_admin: bool,
    **kwargs: Any,
) -> Transition:
    """Resolve the stored conflict.

    ``keep_existing=True`` lets the participant keep the prize they already
    held and redraws the newly won one; ``False`` does the opposite. When no
    conflict is stored the engine reports ``NO_PENDING_CONFLICT``.
    """

    conflict = load_auction_state(session).pending_conflict
    if conflict is None:
        operation = ResolveConflict("", "", "", "")
    elif keep_existing:
        operation = ResolveConflict(
            conflict_id=conflict.id,
            keep_prize_id=conflict.existing_prize_id,
            drop_prize_id=conflict.new_prize_id,
            participant_id=conflict.participant_id,
        )
    else:
        operation = ResolveConflict(
            conflict_id=conflict.id,
            keep_prize_id=conflict.new_prize_id,
            drop_prize_id=conflict.existing_prize_id,
            participant_id=conflict.participant_id,
        )
    return run_operation(session, operation, is_admin=is_admin, **kwargs)


def allocate_tickets(
    session: Session,
    participant_id: str,
    prize_id: str,
    count: int,
    **kwargs: Any,
) -> Transition:
    """Set a participant's tickets on a prize; no admin rights needed."""
    return run_operation(
        session,
        AllocateTickets(participant_id=participant_id, prize_id=prize_id, count=count),
        is_admin=False,
        **kwargs,
    )


def reset_auction(session: Session, *, is_admin: bool, **kwargs: Any) -> Transition:
    """Clear entries and winners and reopen the auction."""
    return run_operation(session, ResetAuction(), is_admin=is_admin, **kwargs)


def winners_report(session: Session) -> list[dict[str, Any]]:
    """Return recorded winners as JSON-ready rows, ordered by prize then slot."""

    stmt = (
        select(PrizeWinner)
        .join(Prize, Prize.id == PrizeWinner.prize_id)
        .order_by(Prize.name.asc(), PrizeWinner.prize_id.asc(), PrizeWinner.position.asc())
    )
    rows: list[dict[str, Any]] = []
    for winner in session.scalars(stmt):
        rows.append(
            {
                "prize_id": winner.prize_id,
                "prize_name": winner.prize.name,
                "participant_id": winner.participant_id,
                "participant_name": winner.participant.name,
                "position": winner.position,
                "drawn_at": dt_iso(winner.drawn_at),
            }
        )
    return rows
