from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from matchdesk.config import get_settings
from matchdesk.models.match import MatchStatus
from matchdesk.schemas.lineup import LineupEntry
from matchdesk.utils.timestamps import ensure_aware


class TournamentBrief(BaseModel):
    id: int
    name: str | None = None
    knockout_legs: int = 1

    class Config:
        from_attributes = True


class TeamInMatch(BaseModel):
    id: int
    name: str
    logo_url: str | None = None

    class Config:
        from_attributes = True


class MatchResponse(BaseModel):
    id: int
    tournament_id: int | None = None
    team_a_id: int
    team_b_id: int
    score_a: int = 0
    score_b: int = 0
    penalty_score_a: int | None = None
    penalty_score_b: int | None = None
    status: MatchStatus = MatchStatus.scheduled
    is_halftime: bool = False
    first_half_start: datetime | None = None
    second_half_start: datetime | None = None
    finished_at: datetime | None = None
    total_time: int = Field(default_factory=lambda: get_settings().default_total_time)
    additional_time_first_half: int = 0
    additional_time_second_half: int = 0
    match_day: int | None = None
    stage: str | None = None
    formation_a: str | None = None
    formation_b: str | None = None
    tournament: TournamentBrief | None = None
    team_a: TeamInMatch | None = None
    team_b: TeamInMatch | None = None
    lineups: list[LineupEntry] = []

    class Config:
        from_attributes = True

    @field_validator("first_half_start", "second_half_start", "finished_at")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)

    @field_validator("total_time", "additional_time_first_half", "additional_time_second_half", mode="before")
    @classmethod
    def _none_as_default(cls, value, info):
        # Backend sends null for untouched regulation fields
        if value is None:
            return get_settings().default_total_time if info.field_name == "total_time" else 0
        return value

    def score_for(self, team_id: int) -> int:
        if team_id == self.team_a_id:
            return self.score_a or 0
        if team_id == self.team_b_id:
            return self.score_b or 0
        return 0

    def has_team(self, team_id: int) -> bool:
        return team_id in (self.team_a_id, self.team_b_id)


class MatchUpdate(BaseModel):
    """Editable match fields (the regulations / score edit form)."""
    score_a: int | None = None
    score_b: int | None = None
    penalty_score_a: int | None = None
    penalty_score_b: int | None = None
    total_time: int | None = None
    additional_time_first_half: int | None = None
    additional_time_second_half: int | None = None
    is_halftime: bool | None = None


class MatchFilter(BaseModel):
    tournament_id: int | None = None
    stage: str | None = None
    status: MatchStatus | None = None
    offset: int = 0
    limit: int = 100
