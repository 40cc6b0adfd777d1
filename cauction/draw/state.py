"""Value objects describing the auction state threaded through the engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional, Sequence

PARTICIPANT_STATUSES = ("working", "inactive", "at_party")


@dataclass(frozen=True)
class Participant:
    """A person holding a ticket budget.

    Attributes
    ----------
    id : str
        Opaque, unique identifier (the employee id in the roster import).
    name : str
        Display name used in outcome messages.
    facility : Optional[str]
        Facility the participant belongs to.
    initial_tickets : int
        Ticket budget the participant may spread across prizes.
    status : str
        One of ``"working"``, ``"inactive"`` or ``"at_party"``.
    """

    id: str
    name: str
    facility: Optional[str] = None
    initial_tickets: int = 0
    status: str = "working"

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("participant id must not be empty")
        if self.initial_tickets < 0:
            raise ValueError("initial_tickets must be non-negative")
        if self.status not in PARTICIPANT_STATUSES:
            raise ValueError(f"Unknown participant status '{self.status}'")


@dataclass(frozen=True)
class PrizeEntry:
    """A participant's ticket commitment to one prize."""

    participant_id: str
    ticket_count: int

    def __post_init__(self) -> None:
        if self.ticket_count < 0:
            raise ValueError("ticket_count must be non-negative")


@dataclass(frozen=True)
class PrizeTier:
    """Grouping metadata for prizes; only used as a draw filter."""

    id: str
    name: str
    order: int = 0
    color: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class Prize:
    """A prize in the catalog together with its ordered entries.

    ``entries`` keeps insertion order, which only matters when the draw is
    replayed with a seeded random source.
    """

    id: str
    name: str
    description: str = ""
    image_url: str = ""
    tier_id: Optional[str] = None
    entries: tuple[PrizeEntry, ...] = ()
    number_of_winners: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("prize id must not be empty")
        if self.number_of_winners < 1:
            raise ValueError("number_of_winners must be at least 1")
        seen: set[str] = set()
        for entry in self.entries:
            if entry.participant_id in seen:
                raise ValueError(
                    f"Duplicate entry for participant '{entry.participant_id}' "
                    f"in prize '{self.id}'"
                )
            seen.add(entry.participant_id)

    @property
    def total_tickets(self) -> int:
        """Sum of the ticket counts over all entries."""
        return sum(entry.ticket_count for entry in self.entries)

    @property
    def has_positive_entries(self) -> bool:
        return any(entry.ticket_count > 0 for entry in self.entries)

    def tickets_for(self, participant_id: str) -> int:
        for entry in self.entries:
            if entry.participant_id == participant_id:
                return entry.ticket_count
        return 0


@dataclass(frozen=True)
class Conflict:
    """A participant drew ``new_prize_id`` while already holding ``existing_prize_id``."""

    id: str
    participant_id: str
    existing_prize_id: str
    new_prize_id: str


WinnerMap = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class AuctionState:
    """Complete input and output of every engine transition.

    The engine never mutates an ``AuctionState``; transitions return a new
    instance (or the very same instance when nothing changed).

    Attributes
    ----------
    prizes : tuple[Prize, ...]
        Prize catalog in display order.
    tiers : tuple[PrizeTier, ...]
        Known prize tiers.
    participants : Mapping[str, Participant]
        Participant directory keyed by id.
    winners : Mapping[str, tuple[str, ...]]
        Prize id to ordered winning participant ids. Prizes without winners
        are omitted.
    pending_conflict : Optional[Conflict]
        Conflict awaiting an administrator decision, if any.
    is_auction_open : bool
        ``False`` once a whole-catalog draw completed.
    """

    prizes: tuple[Prize, ...] = ()
    tiers: tuple[PrizeTier, ...] = ()
    participants: Mapping[str, Participant] = field(default_factory=dict)
    winners: WinnerMap = field(default_factory=dict)
    pending_conflict: Optional[Conflict] = None
    is_auction_open: bool = True

    @property
    def draws_paused(self) -> bool:
        """``True`` exactly while a conflict is pending."""
        return self.pending_conflict is not None

    def prize(self, prize_id: str) -> Optional[Prize]:
        for prize in self.prizes:
            if prize.id == prize_id:
                return prize
        return None

    def tier(self, tier_id: str) -> Optional[PrizeTier]:
        for tier in self.tiers:
            if tier.id == tier_id:
                return tier
        return None

    def winners_of(self, prize_id: str) -> tuple[str, ...]:
        return tuple(self.winners.get(prize_id, ()))

    def all_winner_ids(self, *, exclude_prize_id: Optional[str] = None) -> set[str]:
        """Return every participant recorded as a winner, optionally skipping a prize."""
        ids: set[str] = set()
        for prize_id, winner_ids in self.winners.items():
            if prize_id == exclude_prize_id:
                continue
            ids.update(winner_ids)
        return ids

    def participant_name(self, participant_id: Optional[str]) -> str:
        if participant_id is None:
            return "Unknown participant"
        participant = self.participants.get(participant_id)
        if participant is None:
            return "Unknown participant"
        return participant.name

    def prize_name(self, prize_id: Optional[str]) -> str:
        prize = self.prize(prize_id) if prize_id is not None else None
        return prize.name if prize is not None else "Unknown prize"

    def with_winners(self, winners: Mapping[str, Iterable[str]]) -> "AuctionState":
        """Return a copy holding ``winners`` with empty lists dropped."""
        return replace(self, winners=normalize_winners(winners))

    def with_prize(self, prize: Prize) -> "AuctionState":
        """Return a copy in which the prize with the same id is replaced."""
        return replace(
            self,
            prizes=tuple(prize if p.id == prize.id else p for p in self.prizes),
        )


def normalize_winners(winners: Mapping[str, Iterable[str]]) -> dict[str, tuple[str, ...]]:
    """Freeze winner lists into tuples and drop prizes without winners."""
    normalized: dict[str, tuple[str, ...]] = {}
    for prize_id, winner_ids in winners.items():
        frozen = tuple(winner_ids)
        if frozen:
            normalized[prize_id] = frozen
    return normalized


__all__ = [
    "AuctionState",
    "Conflict",
    "PARTICIPANT_STATUSES",
    "Participant",
    "Prize",
    "PrizeEntry",
    "PrizeTier",
    "WinnerMap",
    "normalize_winners",
]
