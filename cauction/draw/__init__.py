"""Winner selection and conflict resolution for the ticket auction."""

from .allocation import allocate_tickets, allocated_tickets, remaining_tickets, reset_auction
from .engine import AuctionDrawEngine, apply_operation
from .operations import (
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
from .pool import build_drawing_pool
from .random_source import (
    FixedRandomSource,
    RandomSource,
    SeededRandomSource,
    SystemRandomSource,
    random_source_from_env,
)
from .selector import Selection, select_winner
from .state import AuctionState, Conflict, Participant, Prize, PrizeEntry, PrizeTier

__all__ = [
    "AllocateTickets",
    "AuctionDrawEngine",
    "AuctionState",
    "Conflict",
    "DrawAll",
    "DrawSingle",
    "DrawTier",
    "FixedRandomSource",
    "Operation",
    "Outcome",
    "OutcomeKind",
    "Participant",
    "Prize",
    "PrizeEntry",
    "PrizeTier",
    "RandomSource",
    "RedrawPrize",
    "ResetAuction",
    "ResolveConflict",
    "SeededRandomSource",
    "Selection",
    "SystemRandomSource",
    "Transition",
    "allocate_tickets",
    "allocated_tickets",
    "apply_operation",
    "build_drawing_pool",
    "random_source_from_env",
    "remaining_tickets",
    "reset_auction",
    "select_winner",
]
