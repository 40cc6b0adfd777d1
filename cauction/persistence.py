"""Bridge between the ORM tables and the engine's :class:`AuctionState`."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .draw.state import (
    AuctionState,
    Conflict,
    Participant,
    Prize,
    PrizeEntry,
    PrizeTier,
    normalize_winners,
)
from .models import AuctionSettings
from .models import Participant as ParticipantRow
from .models import Prize as PrizeRow
from .models import PrizeEntry as PrizeEntryRow
from .models import PrizeTier as PrizeTierRow
from .models import PrizeWinner as PrizeWinnerRow

logger = logging.getLogger(__name__)


class WinnerStore(Protocol):
    """Persistence port the workflows publish winner maps to."""

    def save(self, winners: Mapping[str, Sequence[str]]) -> bool: ...


def load_auction_state(session: Session) -> AuctionState:
    """Build an :class:`AuctionState` from the database.

    Prizes are returned in creation order, entries in insertion order and
    winners in draw order.
    """

    participants = {
        row.id: Participant(
            id=row.id,
            name=row.name,
            facility=row.facility_name,
            initial_tickets=row.initial_tickets,
            status=row.status,
        )
        for row in session.scalars(select(ParticipantRow).order_by(ParticipantRow.id))
    }
    tiers = tuple(
        PrizeTier(
            id=row.id,
            name=row.name,
            order=row.display_order,
            color=row.color,
            description=row.description,
        )
        for row in PrizeTierRow.ordered(session)
    )

    prize_rows = session.scalars(
        select(PrizeRow).order_by(PrizeRow.created_at.asc(), PrizeRow.id.asc())
    ).all()
    prizes = tuple(
        Prize(
            id=row.id,
            name=row.name,
            description=row.description,
            image_url=row.image_url,
            tier_id=row.tier_id,
            entries=tuple(
                PrizeEntry(participant_id=e.participant_id, ticket_count=e.ticket_count)
                for e in row.entries
            ),
            number_of_winners=row.number_of_winners,
        )
        for row in prize_rows
    )
    winners = normalize_winners(
        {row.id: [w.participant_id for w in row.winners] for row in prize_rows}
    )

    settings = AuctionSettings.get_or_create(session)
    conflict = None
    if settings.conflict_id is not None:
        conflict = Conflict(
            id=settings.conflict_id,
            participant_id=settings.conflict_participant_id or "",
            existing_prize_id=settings.conflict_existing_prize_id or "",
            new_prize_id=settings.conflict_new_prize_id or "",
        )

    return AuctionState(
        prizes=prizes,
        tiers=tiers,
        participants=participants,
        winners=winners,
        pending_conflict=conflict,
        is_auction_open=settings.is_auction_open,
    )


def save_auction_state(session: Session, state: AuctionState) -> None:
    """Write entries, winners, flags and the pending conflict of ``state``.

    Only prizes already present in the database are written; catalog and
    roster management happen elsewhere.
    """

    for prize in state.prizes:
        row = PrizeRow.get_by_id(session, prize.id)
        if row is None:
            logger.warning(f"Skipping unknown prize {prize.id} while saving state")
            continue
        _sync_entries(session, row, prize)
        _sync_winners(session, row, state.winners_of(prize.id))

    settings = AuctionSettings.get_or_create(session)
    settings.is_auction_open = state.is_auction_open
    conflict = state.pending_conflict
    if conflict is None:
        settings.clear_conflict()
    else:
        settings.conflict_id = conflict.id
        settings.conflict_participant_id = conflict.participant_id
        settings.conflict_existing_prize_id = conflict.existing_prize_id
        settings.conflict_new_prize_id = conflict.new_prize_id
    session.flush()


def _sync_entries(session: Session, row: PrizeRow, prize: Prize) -> None:
    current = [(e.participant_id, e.ticket_count) for e in row.entries]
    wanted = [(e.participant_id, e.ticket_count) for e in prize.entries if e.ticket_count > 0]
    if current == wanted:
        return
    # Rewrite so that surrogate ids follow the new insertion order.
    row.entries.clear()
    session.flush()
    for participant_id, ticket_count in wanted:
        row.entries.append(
            PrizeEntryRow(participant_id=participant_id, ticket_count=ticket_count)
        )


def _sync_winners(session: Session, row: PrizeRow, winner_ids: Sequence[str]) -> None:
    current = [w.participant_id for w in row.winners]
    if current == list(winner_ids):
        return
    drawn_at = {w.participant_id: w.drawn_at for w in row.winners}
    row.winners.clear()
    session.flush()
    for position, participant_id in enumerate(winner_ids):
        previous = drawn_at.get(participant_id)
        winner = PrizeWinnerRow(participant_id=participant_id, position=position)
        if previous is not None:
            winner.drawn_at = previous
        row.winners.append(winner)


class SqlAlchemyWinnerStore:
    """Winner store that replaces the ``prize_winners`` table in its own transaction.

    Failures are logged and reported through the return value; they are never
    raised to the caller, since the engine's state stays authoritative.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def save(self, winners: Mapping[str, Sequence[str]]) -> bool:
        session = self._session_factory()
        try:
            session.execute(delete(PrizeWinnerRow))
            for prize_id, winner_ids in winners.items():
                for position, participant_id in enumerate(winner_ids):
                    session.add(
                        PrizeWinnerRow(
                            prize_id=prize_id,
                            participant_id=participant_id,
                            position=position,
                        )
                    )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Error saving winners")
            return False
        finally:
            session.close()
        logger.debug(f"Saved winners for {len(winners)} prizes")
        return True


__all__ = [
    "SqlAlchemyWinnerStore",
    "WinnerStore",
    "load_auction_state",
    "save_auction_state",
]
