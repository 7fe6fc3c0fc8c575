from pydantic import BaseModel


class LineupEntry(BaseModel):
    """Single persisted lineup row. Bench entries have no slot_index."""
    match_id: int
    team_id: int
    player_id: int
    is_starting: bool
    slot_index: int | None = None

    class Config:
        from_attributes = True


class LineupFormations(BaseModel):
    formation_a: str | None = None
    formation_b: str | None = None


class TeamLineupRequest(BaseModel):
    """One side of the tactical board as submitted by the dashboard."""
    formation: str
    starting: dict[int, int] = {}  # slot_index -> player_id
    bench: list[int] = []


class LineupSetRequest(BaseModel):
    team_a: TeamLineupRequest
    team_b: TeamLineupRequest


class SlotView(BaseModel):
    slot_index: int
    category: str
    player_id: int | None = None
