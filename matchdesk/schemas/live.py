"""
Pydantic schemas for derived live match views.
"""
from pydantic import BaseModel

from matchdesk.models.match import MatchStatus


class ClockResponse(BaseModel):
    match_id: int
    status: MatchStatus
    phase: str
    clock: str | None = None
    label: str
    is_locked: bool


class AggregateScore(BaseModel):
    """Two-leg aggregate, oriented like the match it was computed for."""
    match_id: int
    other_leg_id: int
    team_a_id: int
    team_b_id: int
    team_a_total: int
    team_b_total: int

    @property
    def leader_id(self) -> int | None:
        if self.team_a_total > self.team_b_total:
            return self.team_a_id
        if self.team_b_total > self.team_a_total:
            return self.team_b_id
        return None

    @property
    def is_level(self) -> bool:
        return self.team_a_total == self.team_b_total
