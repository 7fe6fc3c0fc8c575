from sqlalchemy import Integer, Boolean, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from matchdesk.database import Base


class MatchLineup(Base):
    """
    Player lineup entry for a match.
    Starting entries carry the formation slot they occupy; bench entries do not.
    """
    __tablename__ = "match_lineups"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_lineup_player"),
        UniqueConstraint("match_id", "team_id", "slot_index", name="uq_match_lineup_slot"),
        Index("ix_match_lineup_match_team", "match_id", "team_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(Integer, ForeignKey("matches.id"), nullable=False, index=True)
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(Integer, ForeignKey("players.id"), nullable=False, index=True)

    is_starting: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    slot_index: Mapped[int | None] = mapped_column(Integer)  # 0..10, starters only

    match: Mapped["Match"] = relationship("Match", back_populates="lineups")
