import enum
from datetime import datetime
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Index, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from matchdesk.database import Base
from matchdesk.utils.timestamps import utcnow


class MatchStatus(str, enum.Enum):
    """Match lifecycle status."""
    scheduled = "scheduled"
    live = "live"
    finished = "finished"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        Index("ix_matches_tournament_stage", "tournament_id", "stage"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("tournaments.id"), index=True)
    team_a_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    team_b_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    score_a: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    score_b: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    penalty_score_a: Mapped[int | None] = mapped_column(Integer)
    penalty_score_b: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus), nullable=False, default=MatchStatus.scheduled
    )
    is_halftime: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    first_half_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    second_half_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Regulation and stoppage minutes
    total_time: Mapped[int] = mapped_column(Integer, default=90, nullable=False)
    additional_time_first_half: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    additional_time_second_half: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    match_day: Mapped[int | None] = mapped_column(Integer)
    stage: Mapped[str | None] = mapped_column(String(100))  # knockout round, e.g. "Quarter-final"
    formation_a: Mapped[str | None] = mapped_column(String(20))  # e.g. "4-2-3-1"
    formation_b: Mapped[str | None] = mapped_column(String(20))

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="matches")
    team_a: Mapped["Team"] = relationship("Team", foreign_keys=[team_a_id])
    team_b: Mapped["Team"] = relationship("Team", foreign_keys=[team_b_id])
    lineups: Mapped[list["MatchLineup"]] = relationship(
        "MatchLineup", back_populates="match", cascade="all, delete-orphan"
    )
    goals: Mapped[list["Goal"]] = relationship(
        "Goal", back_populates="match", cascade="all, delete-orphan"
    )
    cards: Mapped[list["Card"]] = relationship(
        "Card", back_populates="match", cascade="all, delete-orphan"
    )
    substitutions: Mapped[list["Substitution"]] = relationship(
        "Substitution", back_populates="match", cascade="all, delete-orphan"
    )
