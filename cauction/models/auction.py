from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base

SETTINGS_ROW_ID = 1


class AuctionSettings(Base):
    """Single-row table holding the auction flags and the pending conflict.

    Conflict columns are plain strings rather than foreign keys so that the
    row can be written before or after the referenced prizes change.
    """

    __tablename__ = "auction_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    is_auction_open: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    conflict_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    conflict_participant_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    conflict_existing_prize_id: Mapped[Optional[str]] = mapped_column(
        String(64), nullable=True
    )
    conflict_new_prize_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def draws_paused(self) -> bool:
        return self.conflict_id is not None

    @classmethod
    def get_or_create(cls, session: Session) -> "AuctionSettings":
        """Return the settings row, creating it with defaults when missing."""
        settings = session.get(cls, SETTINGS_ROW_ID)
        if settings is None:
            settings = cls(id=SETTINGS_ROW_ID, is_auction_open=True)
            session.add(settings)
            session.flush()
        return settings

    def clear_conflict(self) -> None:
        self.conflict_id = None
        self.conflict_participant_id = None
        self.conflict_existing_prize_id = None
        self.conflict_new_prize_id = None
