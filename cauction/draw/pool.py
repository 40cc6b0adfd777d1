"""Drawing-pool construction from prize entries."""

from __future__ import annotations

from typing import AbstractSet, Optional

from .state import Prize


def build_drawing_pool(
    prize: Prize, excluded_ids: Optional[AbstractSet[str]] = None
) -> list[str]:
    """Expand ``prize`` entries into a flat list of participant ids.

    Each participant appears once per ticket, in entry insertion order.
    Entries with a non-positive ticket count and participants listed in
    ``excluded_ids`` contribute nothing.

    Parameters
    ----------
    prize : Prize
        Prize whose entries form the pool.
    excluded_ids : Optional[AbstractSet[str]], default: None
        Participants who must not appear in the pool.

    Returns
    -------
    list[str]
        The weighted pool. Empty when no eligible ticket remains.
    """

    excluded = excluded_ids or frozenset()
    pool: list[str] = []
    for entry in prize.entries:
        if entry.ticket_count <= 0 or entry.participant_id in excluded:
            continue
        pool.extend([entry.participant_id] * entry.ticket_count)
    return pool


__all__ = ["build_drawing_pool"]
