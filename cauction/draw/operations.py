"""Operations accepted by :class:`~cauction.draw.engine.AuctionDrawEngine`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class DrawAll:
    """Fill every prize's remaining winner slots; closes the auction on success."""


@dataclass(frozen=True)
class DrawTier:
    """Fill remaining winner slots of the prizes in one tier."""

    tier_id: str


@dataclass(frozen=True)
class DrawSingle:
    """Draw one more winner for a prize that is below its quota."""

    prize_id: str


@dataclass(frozen=True)
class RedrawPrize:
    """Discard a prize's winners and draw them again (closed auction only)."""

    prize_id: str


@dataclass(frozen=True)
class ResolveConflict:
    """Settle the pending conflict by keeping one prize and vacating the other."""

    conflict_id: str
    keep_prize_id: str
    drop_prize_id: str
    participant_id: str


@dataclass(frozen=True)
class AllocateTickets:
    """Set a participant's ticket allocation for one prize to ``count``."""

    participant_id: str
    prize_id: str
    count: int


@dataclass(frozen=True)
class ResetAuction:
    """Clear entries, winners and any conflict, and reopen the auction."""


Operation = Union[
    DrawAll,
    DrawTier,
    DrawSingle,
    RedrawPrize,
    ResolveConflict,
    AllocateTickets,
    ResetAuction,
]

# Operations that only an administrator may run.
ADMIN_OPERATIONS = (DrawAll, DrawTier, DrawSingle, RedrawPrize, ResolveConflict, ResetAuction)


__all__ = [
    "ADMIN_OPERATIONS",
    "AllocateTickets",
    "DrawAll",
    "DrawSingle",
    "DrawTier",
    "Operation",
    "RedrawPrize",
    "ResetAuction",
    "ResolveConflict",
]
