from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from .base import Base

if TYPE_CHECKING:
    from .prize import PrizeEntry, PrizeWinner


class Participant(Base):
    """Roster member who can spread a ticket budget across prizes."""

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Employee id from the roster import; opaque to the drawing engine."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    facility_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    initial_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Ticket budget; allocations across all prizes may not exceed it."""

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="working")
    """One of ``working``, ``inactive`` or ``at_party``."""

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

    entries: Mapped[list["PrizeEntry"]] = relationship(
        back_populates="participant", cascade="all, delete-orphan"
    )
    wins: Mapped[list["PrizeWinner"]] = relationship(
        back_populates="participant", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('working','inactive','at_party')", name="status_enum"
        ),
        CheckConstraint("initial_tickets >= 0", name="initial_tickets_non_negative"),
    )

    @validates("name")
    def _strip_name(self, _key: str, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("participant name must not be empty")
        return normalized

    @classmethod
    def get_by_id(cls, session: Session, participant_id: str) -> Optional["Participant"]:
        return session.scalar(select(cls).where(cls.id == participant_id))

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Participant(id={self.id}, name={self.name}, status={self.status})>"
