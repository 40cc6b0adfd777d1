"""Single-winner selection with conflict detection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Optional

from .pool import build_drawing_pool
from .random_source import RandomSource, pick_index
from .state import Prize, WinnerMap


@dataclass(frozen=True)
class Selection:
    """Result of one selector call.

    Attributes
    ----------
    winner_id : Optional[str]
        Drawn participant, or ``None`` when nobody was eligible.
    conflict_prize_id : Optional[str]
        Another prize the drawn participant already holds, if any.
    """

    winner_id: Optional[str]
    conflict_prize_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.winner_id is None

    @property
    def is_conflict(self) -> bool:
        return self.conflict_prize_id is not None


NO_SELECTION = Selection(winner_id=None, conflict_prize_id=None)


def find_held_prize(
    winners: WinnerMap, participant_id: str, *, ignore_prize_id: str
) -> Optional[str]:
    """Return the first prize other than ``ignore_prize_id`` won by ``participant_id``."""
    for prize_id, winner_ids in winners.items():
        if prize_id == ignore_prize_id:
            continue
        if participant_id in winner_ids:
            return prize_id
    return None


def select_winner(
    prize: Prize,
    current_winners: WinnerMap,
    excluded_ids: AbstractSet[str],
    source: RandomSource,
) -> Selection:
    """Draw one candidate for ``prize`` and report whether it conflicts.

    The selector never mutates anything and never retries: a candidate who
    already holds another prize is returned together with that prize id so
    the caller can decide what to do.

    Parameters
    ----------
    prize : Prize
        Prize being drawn.
    current_winners : WinnerMap
        Winner map used for conflict detection.
    excluded_ids : AbstractSet[str]
        Participants removed from the pool before drawing.
    source : RandomSource
        Source of the uniform draw.

    Returns
    -------
    Selection
        :data:`NO_SELECTION` when the pool is empty.
    """

    pool = build_drawing_pool(prize, excluded_ids)
    if not pool:
        return NO_SELECTION

    candidate = pool[pick_index(source, len(pool))]
    held = find_held_prize(current_winners, candidate, ignore_prize_id=prize.id)
    return Selection(winner_id=candidate, conflict_prize_id=held)


__all__ = ["NO_SELECTION", "Selection", "find_held_prize", "select_winner"]
