"""Database models for the prize catalog, entries and winners."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .participant import Participant


class PrizeTier(Base):
    """Display grouping for prizes (e.g. "Grand prizes")."""

    __tablename__ = "prize_tiers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Label shown to participants."""

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    """Optional free-form notes."""

    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Sort key; lower tiers are listed first."""

    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    """CSS color used when rendering the tier badge."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the tier was created."""

    prizes: Mapped[list["Prize"]] = relationship(back_populates="tier")
    """Prizes grouped under this tier."""

    @classmethod
    def ordered(cls, session: Session) -> list["PrizeTier"]:
        """Return every tier sorted by ``display_order``."""
        stmt = select(cls).order_by(cls.display_order.asc(), cls.id.asc())
        return list(session.scalars(stmt).all())


class Prize(Base):
    """A prize participants can put tickets on."""

    __tablename__ = "prizes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    tier_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("prize_tiers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    """Optional tier; deleting the tier leaves the prize untiered."""

    number_of_winners: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """How many distinct winners the prize is drawn for."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    tier: Mapped[Optional["PrizeTier"]] = relationship(back_populates="prizes")
    entries: Mapped[list["PrizeEntry"]] = relationship(
        back_populates="prize",
        cascade="all, delete-orphan",
        order_by="PrizeEntry.id",
    )
    """Ticket allocations in insertion order."""

    winners: Mapped[list["PrizeWinner"]] = relationship(
        back_populates="prize",
        cascade="all, delete-orphan",
        order_by="PrizeWinner.position",
    )
    """Recorded winners in draw order."""

    __table_args__ = (
        CheckConstraint("number_of_winners >= 1", name="number_of_winners_positive"),
    )

    @property
    def total_tickets(self) -> int:
        return sum(entry.ticket_count for entry in self.entries)

    @classmethod
    def get_by_id(cls, session: Session, prize_id: str) -> Optional["Prize"]:
        return session.scalar(select(cls).where(cls.id == prize_id))

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Prize(id={id}, name={name}, tier_id={tier}, number_of_winners={n})>".format(
            id=self.id,
            name=self.name,
            tier=self.tier_id,
            n=self.number_of_winners,
        )


class PrizeEntry(Base):
    """Tickets a participant placed on a prize. Zero-ticket entries are not stored."""

    __tablename__ = "prize_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    """Surrogate key; also the insertion order used to build drawing pools."""

    prize_id: Mapped[str] = mapped_column(
        ForeignKey("prizes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ticket_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    prize: Mapped["Prize"] = relationship(back_populates="entries")
    participant: Mapped["Participant"] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("prize_id", "participant_id", name="uq_prize_entry_participant"),
        CheckConstraint("ticket_count > 0", name="ticket_count_positive"),
    )


class PrizeWinner(Base):
    """One winning slot of a prize."""

    __tablename__ = "prize_winners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prize_id: Mapped[str] = mapped_column(
        ForeignKey("prizes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Zero-based draw order within the prize."""

    drawn_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    prize: Mapped["Prize"] = relationship(back_populates="winners")
    participant: Mapped["Participant"] = relationship(back_populates="wins")

    __table_args__ = (
        UniqueConstraint("prize_id", "participant_id", name="uq_prize_winner_participant"),
        Index("ix_prize_winners_participant", "participant_id"),
    )


__all__ = ["Prize", "PrizeEntry", "PrizeTier", "PrizeWinner"]
