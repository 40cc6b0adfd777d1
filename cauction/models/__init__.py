from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .participant import Participant  # noqa: F401
from .prize import Prize, PrizeEntry, PrizeTier, PrizeWinner  # noqa: F401
from .auction import AuctionSettings  # noqa: F401

__all__ = [
    "Base",
    "AuctionSettings",
    "Participant",
    "Prize",
    "PrizeEntry",
    "PrizeTier",
    "PrizeWinner",
]
