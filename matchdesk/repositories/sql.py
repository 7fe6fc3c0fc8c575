"""
Persistence adapter over the SQLAlchemy models, for deployments where the
officiating service owns the database.
"""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from matchdesk.exceptions import NotFound, ValidationError
from matchdesk.models import Card, Goal, Match, MatchLineup, Substitution, Team
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
from matchdesk.utils.formations import ROSTER_GROUP_CATEGORY, infer_position_category

logger = logging.getLogger(__name__)

_GROUP_BY_CATEGORY = {category: group for group, category in ROSTER_GROUP_CATEGORY.items()}


def _match_query():
    return select(Match).options(
        selectinload(Match.tournament),
        selectinload(Match.team_a),
        selectinload(Match.team_b),
        selectinload(Match.lineups),
    )


class SqlMatchRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, match_id: int) -> Match:
        result = await self.db.execute(
            _match_query()
            .where(Match.id == match_id)
            .execution_options(populate_existing=True)
        )
        match = result.scalar_one_or_none()
        if match is None:
            raise NotFound(code="match_not_found")
        return match

    async def get(self, match_id: int) -> MatchResponse:
        return MatchResponse.model_validate(await self._load(match_id))

    async def update(self, match_id: int, fields: dict[str, Any]) -> MatchResponse:
        match = await self._load(match_id)
        for name, value in fields.items():
            setattr(match, name, value)
        await self.db.commit()
        return await self.get(match_id)

    async def delete(self, match_id: int) -> None:
        await self._load(match_id)
        # Bulk deletes: cascading through unloaded collections would lazy-load
        for model in (Goal, Card, Substitution, MatchLineup):
            await self.db.execute(delete(model).where(model.match_id == match_id))
        await self.db.execute(delete(Match).where(Match.id == match_id))
        await self.db.commit()

    async def list(self, filters: MatchFilter | None = None) -> list[MatchResponse]:
        filters = filters or MatchFilter()
        query = _match_query()
        if filters.tournament_id is not None:
            query = query.where(Match.tournament_id == filters.tournament_id)
        if filters.stage is not None:
            query = query.where(Match.stage == filters.stage)
        if filters.status is not None:
            query = query.where(Match.status == filters.status)
        query = query.order_by(Match.id).offset(filters.offset).limit(filters.limit)

        result = await self.db.execute(query)
        return [MatchResponse.model_validate(m) for m in result.scalars().all()]


class SqlEventRepository:
    def __init__(self, db: AsyncSession, model: type, response_model: type):
        self.db = db
        self.model = model
        self.response_model = response_model

    async def list_by_match(self, match_id: int) -> list:
        result = await self.db.execute(
            select(self.model)
            .where(self.model.match_id == match_id)
            .order_by(self.model.id)
        )
        return [self.response_model.model_validate(e) for e in result.scalars().all()]

    async def create(self, payload):
        event = self.model(**payload.model_dump())
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)
        return self.response_model.model_validate(event)

    async def delete(self, event_id: int) -> None:
        event = await self.db.get(self.model, event_id)
        if event is None:
            raise NotFound(code="event_not_found")
        await self.db.delete(event)
        await self.db.commit()


def goal_repository(db: AsyncSession) -> SqlEventRepository:
    return SqlEventRepository(db, Goal, GoalResponse)


def card_repository(db: AsyncSession) -> SqlEventRepository:
    return SqlEventRepository(db, Card, CardResponse)


def substitution_repository(db: AsyncSession) -> SqlEventRepository:
    return SqlEventRepository(db, Substitution, SubstitutionResponse)


class SqlLineupRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def set_lineups(
        self,
        match_id: int,
        entries: list[LineupEntry],
        formations: LineupFormations,
    ) -> list[LineupEntry]:
        """Replace every lineup entry of the match and its formations."""
        match = await self.db.get(Match, match_id)
        if match is None:
            raise NotFound(code="match_not_found")

        await self.db.execute(delete(MatchLineup).where(MatchLineup.match_id == match_id))
        for entry in entries:
            self.db.add(
                MatchLineup(
                    match_id=match_id,
                    team_id=entry.team_id,
                    player_id=entry.player_id,
                    is_starting=entry.is_starting,
                    slot_index=entry.slot_index if entry.is_starting else None,
                )
            )
        if formations.formation_a is not None:
            match.formation_a = formations.formation_a
        if formations.formation_b is not None:
            match.formation_b = formations.formation_b

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Rejected lineups for match %s: %s", match_id, e.orig)
            raise ValidationError("Duplicate player or slot in lineup") from e

        result = await self.db.execute(
            select(MatchLineup)
            .where(MatchLineup.match_id == match_id)
            .order_by(MatchLineup.team_id, MatchLineup.is_starting.desc(), MatchLineup.slot_index, MatchLineup.id)
        )
        return [LineupEntry.model_validate(row) for row in result.scalars().all()]


class SqlTeamService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_team(self, team_id: int) -> TeamDetail:
        result = await self.db.execute(
            select(Team).options(selectinload(Team.players)).where(Team.id == team_id)
        )
        team = result.scalar_one_or_none()
        if team is None:
            raise NotFound(code="team_not_found")

        groups: dict[str, list[PlayerBrief]] = {group: [] for group in ROSTER_GROUP_CATEGORY}
        for player in team.players:
            category = infer_position_category(player.position)
            # Unknown positions are listed with midfielders
            group = _GROUP_BY_CATEGORY.get(category, "midfielders")
            groups[group].append(PlayerBrief.model_validate(player))

        return TeamDetail(
            id=team.id,
            name=team.name,
            logo_url=team.logo_url,
            roster=TeamRoster(**groups),
        )
