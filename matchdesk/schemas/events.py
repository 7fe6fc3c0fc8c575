from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel

from matchdesk.models.match_event import CardType


class GoalCreate(BaseModel):
    match_id: int | None = None  # filled in by the ledger
    team_id: int
    minute: int
    player_id: int | None = None
    assistant_id: int | None = None
    is_own_goal: bool = False


class GoalResponse(BaseModel):
    id: int
    match_id: int
    team_id: int
    minute: int
    player_id: int | None = None
    assistant_id: int | None = None
    is_own_goal: bool = False
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CardCreate(BaseModel):
    match_id: int | None = None
    team_id: int
    minute: int
    player_id: int
    type: CardType = CardType.yellow


class CardResponse(BaseModel):
    id: int
    match_id: int
    team_id: int
    minute: int
    player_id: int
    type: CardType
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class SubstitutionCreate(BaseModel):
    match_id: int | None = None
    team_id: int
    minute: int
    player_in_id: int
    player_out_id: int


class SubstitutionResponse(BaseModel):
    id: int
    match_id: int
    team_id: int
    minute: int
    player_in_id: int
    player_out_id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True


MatchEvent = Union[GoalResponse, CardResponse, SubstitutionResponse]


class TimelineEntry(BaseModel):
    """Merged timeline item."""
    event_type: Literal["goal", "card", "substitution"]
    minute: int
    team_id: int
    event: MatchEvent
