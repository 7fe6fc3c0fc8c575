import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from matchdesk.config import Settings
from matchdesk.database import Base, get_db
from matchdesk.exceptions import NotFound
from matchdesk.main import app
from matchdesk.models import Match, MatchLineup, MatchStatus, Player, Team, Tournament
from matchdesk.schemas import (
    CardResponse,
    GoalResponse,
    LineupEntry,
    LineupFormations,
    MatchFilter,
    MatchResponse,
    PlayerBrief,
    SubstitutionResponse,
    TeamDetail,
    TeamRoster,
)
from matchdesk.services.officiating import MatchOfficiatingService


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

KICKOFF = datetime(2025, 5, 10, 18, 0, tzinfo=timezone.utc)


# Note: Using pytest-asyncio's built-in event_loop fixture (asyncio_mode = auto)


@pytest.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture(scope="function")
async def client(test_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database dependency."""

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Data Fixtures ---

# (position, count) per squad: 2 GK, 5 DEF, 5 MID, 4 FWD
SQUAD_LAYOUT = [("GK", 2), ("CB", 5), ("CM", 5), ("ST", 4)]


@pytest.fixture
async def sample_tournament(test_session) -> Tournament:
    """Create a sample two-legged cup tournament."""
    tournament = Tournament(id=1, name="Kazakhstan Cup", knockout_legs=2)
    test_session.add(tournament)
    await test_session.commit()
    return tournament


@pytest.fixture
async def sample_teams(test_session) -> list[Team]:
    """Create two teams with 16 players each."""
    teams = [
        Team(id=10, name="Kairat"),
        Team(id=20, name="Astana"),
    ]
    test_session.add_all(teams)
    await test_session.flush()

    for team in teams:
        jersey = 1
        for position, count in SQUAD_LAYOUT:
            for _ in range(count):
                test_session.add(
                    Player(
                        id=team.id * 100 + jersey,
                        team_id=team.id,
                        name=f"{team.name} #{jersey}",
                        jersey_number=jersey,
                        position=position,
                    )
                )
                jersey += 1
    await test_session.commit()
    return teams


@pytest.fixture
async def sample_match(test_session, sample_tournament, sample_teams) -> Match:
    """Create a scheduled quarter-final first leg."""
    match = Match(
        id=1,
        tournament_id=sample_tournament.id,
        team_a_id=sample_teams[0].id,
        team_b_id=sample_teams[1].id,
        status=MatchStatus.scheduled,
        stage="Quarter-final",
        match_day=1,
    )
    test_session.add(match)
    await test_session.commit()
    return match


@pytest.fixture
async def full_lineups(test_session, sample_match) -> list[MatchLineup]:
    """Eleven starters (slots 0..10) and two substitutes per team."""
    rows = []
    for team_id in (sample_match.team_a_id, sample_match.team_b_id):
        for slot_index in range(11):
            rows.append(
                MatchLineup(
                    match_id=sample_match.id,
                    team_id=team_id,
                    player_id=team_id * 100 + slot_index + 1,
                    is_starting=True,
                    slot_index=slot_index,
                )
            )
        for jersey in (12, 13):
            rows.append(
                MatchLineup(
                    match_id=sample_match.id,
                    team_id=team_id,
                    player_id=team_id * 100 + jersey,
                    is_starting=False,
                )
            )
    test_session.add_all(rows)
    await test_session.commit()
    return rows


# --- In-memory collaborators ---


class FrozenClock:
    """Injectable ``now`` that only moves when told to."""

    def __init__(self, start: datetime = KICKOFF):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.current += timedelta(minutes=minutes, seconds=seconds)


class InMemoryBackend:
    """Dict-backed persistence collaborator. Records every write in ``calls``."""

    def __init__(self):
        self.matches: dict[int, MatchResponse] = {}
        self.events: dict[str, dict[int, Any]] = {"goals": {}, "cards": {}, "substitutions": {}}
        self.teams: dict[int, TeamDetail] = {}
        self.calls: list[tuple] = []
        self._ids = itertools.count(1)

    def add_match(self, **fields) -> MatchResponse:
        defaults = {"id": 1, "team_a_id": 10, "team_b_id": 20}
        match = MatchResponse(**{**defaults, **fields})
        self.matches[match.id] = match
        return match

    def add_team(self, team_id: int, name: str | None = None) -> TeamDetail:
        """Team with 16 players laid out like SQUAD_LAYOUT."""
        groups: dict[str, list[PlayerBrief]] = {
            "goalkeepers": [], "defenders": [], "midfielders": [], "forwards": [],
        }
        group_names = ["goalkeepers", "defenders", "midfielders", "forwards"]
        jersey = 1
        for group, (position, count) in zip(group_names, SQUAD_LAYOUT):
            for _ in range(count):
                groups[group].append(
                    PlayerBrief(
                        id=team_id * 100 + jersey,
                        name=f"Player {jersey}",
                        jersey_number=jersey,
                        position=position,
                    )
                )
                jersey += 1
        team = TeamDetail(id=team_id, name=name or f"Team {team_id}", roster=TeamRoster(**groups))
        self.teams[team_id] = team
        return team

    def starters(self, match_id: int, team_id: int, count: int = 11) -> list[LineupEntry]:
        return [
            LineupEntry(
                match_id=match_id,
                team_id=team_id,
                player_id=team_id * 100 + slot + 1,
                is_starting=True,
                slot_index=slot,
            )
            for slot in range(count)
        ]

    def next_id(self) -> int:
        return next(self._ids)


class FakeMatchRepository:
    def __init__(self, backend: InMemoryBackend):
        self.backend = backend

    async def get(self, match_id: int) -> MatchResponse:
        self.backend.calls.append(("get", match_id))
        try:
            return self.backend.matches[match_id]
        except KeyError:
            raise NotFound(code="match_not_found") from None

    async def update(self, match_id: int, fields: dict[str, Any]) -> MatchResponse:
        self.backend.calls.append(("update", match_id, fields))
        match = self.backend.matches[match_id].model_copy(update=fields)
        self.backend.matches[match_id] = match
        return match

    async def delete(self, match_id: int) -> None:
        self.backend.calls.append(("delete", match_id))
        del self.backend.matches[match_id]

    async def list(self, filters: MatchFilter | None = None) -> list[MatchResponse]:
        filters = filters or MatchFilter()
        self.backend.calls.append(("list", filters))
        return [
            m
            for m in self.backend.matches.values()
            if (filters.tournament_id is None or m.tournament_id == filters.tournament_id)
            and (filters.stage is None or m.stage == filters.stage)
        ]


class FakeEventRepository:
    def __init__(self, backend: InMemoryBackend, kind: str, response_model: type):
        self.backend = backend
        self.kind = kind
        self.response_model = response_model

    async def list_by_match(self, match_id: int) -> list:
        return [e for e in self.backend.events[self.kind].values() if e.match_id == match_id]

    async def create(self, payload):
        self.backend.calls.append((f"create_{self.kind}", payload))
        event = self.response_model(id=self.backend.next_id(), **payload.model_dump())
        self.backend.events[self.kind][event.id] = event
        return event

    async def delete(self, event_id: int) -> None:
        self.backend.calls.append((f"delete_{self.kind}", event_id))
        if self.backend.events[self.kind].pop(event_id, None) is None:
            raise NotFound(code="event_not_found")


class FakeLineupRepository:
    def __init__(self, backend: InMemoryBackend):
        self.backend = backend

    async def set_lineups(
        self,
        match_id: int,
        entries: list[LineupEntry],
        formations: LineupFormations,
    ) -> list[LineupEntry]:
        self.backend.calls.append(("set_lineups", match_id, entries, formations))
        fields: dict[str, Any] = {"lineups": list(entries)}
        fields.update(formations.model_dump(exclude_none=True))
        self.backend.matches[match_id] = self.backend.matches[match_id].model_copy(update=fields)
        return list(entries)


class FakeTeamService:
    def __init__(self, backend: InMemoryBackend):
        self.backend = backend

    async def get_team(self, team_id: int) -> TeamDetail:
        try:
            return self.backend.teams[team_id]
        except KeyError:
            raise NotFound(code="team_not_found") from None


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def match_repository(backend) -> FakeMatchRepository:
    return FakeMatchRepository(backend)


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(require_full_lineup_for_kickoff=True, enforce_lineup_positions=False)


@pytest.fixture
def make_officiating(backend, frozen_clock, settings):
    """Builds officiating services over the same in-memory backend."""

    def factory(**kwargs) -> MatchOfficiatingService:
        return MatchOfficiatingService(
            matches=FakeMatchRepository(backend),
            goals=FakeEventRepository(backend, "goals", GoalResponse),
            cards=FakeEventRepository(backend, "cards", CardResponse),
            substitutions=FakeEventRepository(backend, "substitutions", SubstitutionResponse),
            lineups=FakeLineupRepository(backend),
            teams=FakeTeamService(backend),
            settings=settings,
            now=frozen_clock,
            **kwargs,
        )

    return factory


@pytest.fixture
def officiating(make_officiating) -> MatchOfficiatingService:
    """Officiating service wired to the in-memory backend and a frozen clock."""
    return make_officiating()
