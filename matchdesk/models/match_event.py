import enum
from datetime import datetime
from sqlalchemy import Integer, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from matchdesk.database import Base
from matchdesk.utils.timestamps import utcnow


class CardType(str, enum.Enum):
    """Card colour."""
    yellow = "yellow"
    red = "red"


class Goal(Base):
    """Goal scored in a match. Corrections are delete + recreate."""
    __tablename__ = "goals"
    __table_args__ = (
        Index("ix_goals_match_minute", "match_id", "minute"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    minute: Mapped[int] = mapped_column(Integer, nullable=False)

    # Scorer is optional: the form allows recording a goal before naming the player
    player_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("players.id"))
    assistant_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("players.id"))
    is_own_goal: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    match: Mapped["Match"] = relationship("Match", back_populates="goals")


class Card(Base):
    """Yellow or red card shown to a player."""
    __tablename__ = "cards"
    __table_args__ = (
        Index("ix_cards_match_minute", "match_id", "minute"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    minute: Mapped[int] = mapped_column(Integer, nullable=False)
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    type: Mapped[CardType] = mapped_column(Enum(CardType), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    match: Mapped["Match"] = relationship("Match", back_populates="cards")


class Substitution(Base):
    """Player swap: player_in comes on for player_out."""
    __tablename__ = "substitutions"
    __table_args__ = (
        Index("ix_substitutions_match_minute", "match_id", "minute"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    minute: Mapped[int] = mapped_column(Integer, nullable=False)
    player_in_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)
    player_out_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    match: Mapped["Match"] = relationship("Match", back_populates="substitutions")
