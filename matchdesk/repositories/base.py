"""
Interfaces of the persistence collaborators consumed by the officiating core.

Implementations: ``matchdesk.repositories.rest`` (dashboard REST backend) and
``matchdesk.repositories.sql`` (direct SQLAlchemy session). Implementations
raise ``NotFound`` for missing records and ``TransportError`` for any other
backend failure.
"""

from typing import Any, Protocol, TypeVar

from matchdesk.schemas import (
    CardCreate,
    CardResponse,
    GoalCreate,
    GoalResponse,
    LineupEntry,
    LineupFormations,
    MatchFilter,
    MatchResponse,
    SubstitutionCreate,
    SubstitutionResponse,
    TeamDetail,
)

EventT = TypeVar("EventT", covariant=True)
CreateT = TypeVar("CreateT", contravariant=True)


class MatchRepository(Protocol):
    async def get(self, match_id: int) -> MatchResponse: ...

    async def update(self, match_id: int, fields: dict[str, Any]) -> MatchResponse: ...

    async def delete(self, match_id: int) -> None: ...

    async def list(self, filters: MatchFilter | None = None) -> list[MatchResponse]: ...


class EventRepository(Protocol[CreateT, EventT]):
    async def list_by_match(self, match_id: int) -> list[EventT]: ...

    async def create(self, payload: CreateT) -> EventT: ...

    async def delete(self, event_id: int) -> None: ...


GoalRepository = EventRepository[GoalCreate, GoalResponse]
CardRepository = EventRepository[CardCreate, CardResponse]
SubstitutionRepository = EventRepository[SubstitutionCreate, SubstitutionResponse]


class LineupRepository(Protocol):
    async def set_lineups(
        self,
        match_id: int,
        entries: list[LineupEntry],
        formations: LineupFormations,
    ) -> list[LineupEntry]: ...


class TeamReadService(Protocol):
    async def get_team(self, team_id: int) -> TeamDetail: ...
