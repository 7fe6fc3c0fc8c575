from pydantic import BaseModel


class PlayerBrief(BaseModel):
    id: int
    name: str
    jersey_number: int | None = None
    position: str | None = None

    class Config:
        from_attributes = True


class TeamRoster(BaseModel):
    """Team players partitioned by broad position category."""
    goalkeepers: list[PlayerBrief] = []
    defenders: list[PlayerBrief] = []
    midfielders: list[PlayerBrief] = []
    forwards: list[PlayerBrief] = []

    def all_players(self) -> list[PlayerBrief]:
        return [*self.goalkeepers, *self.defenders, *self.midfielders, *self.forwards]


class TeamDetail(BaseModel):
    id: int
    name: str
    logo_url: str | None = None
    roster: TeamRoster = TeamRoster()

    class Config:
        from_attributes = True
