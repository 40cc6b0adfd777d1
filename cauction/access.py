"""Administrator lookup for callers that gate engine operations."""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

DEFAULT_ADMIN_IDS = ("ADMIN001", "DEV007")


def admin_participant_ids() -> frozenset[str]:
    """Return the configured administrator ids.

    Read from the comma separated ``AUCTION_ADMIN_IDS`` variable; the
    built-in defaults apply when it is unset.
    """
    load_dotenv()
    raw = os.getenv("AUCTION_ADMIN_IDS")
    if raw is None:
        return frozenset(DEFAULT_ADMIN_IDS)
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def is_admin(participant_id: Optional[str]) -> bool:
    if not participant_id:
        return False
    return participant_id in admin_participant_ids()


__all__ = ["DEFAULT_ADMIN_IDS", "admin_participant_ids", "is_admin"]
