"""
Goals, cards and substitutions recorded against a match.

Three independent collections share one contract: ``list``, ``add`` and
``delete``, with add/delete refused on a locked match. Events are never
edited in place; a correction is a delete followed by a new add.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Generic, TypeVar

from pydantic import BaseModel

from matchdesk.exceptions import NotFound, ValidationError
from matchdesk.repositories.base import EventRepository
from matchdesk.schemas import (
    CardCreate,
    CardResponse,
    GoalCreate,
    GoalResponse,
    MatchResponse,
    SubstitutionCreate,
    SubstitutionResponse,
    TimelineEntry,
)
from matchdesk.services.mutation_coordinator import MutationCoordinator
from matchdesk.services.query_cache import (
    cards_key,
    goals_key,
    match_key,
    substitutions_key,
)

logger = logging.getLogger(__name__)

CreateT = TypeVar("CreateT", bound=BaseModel)
EventT = TypeVar("EventT", bound=BaseModel)


def validate_minute(minute) -> None:
    """Minute must be a positive integer. Later-than-clock minutes are fine."""
    if isinstance(minute, bool) or not isinstance(minute, int) or minute < 1:
        raise ValidationError(code="invalid_minute")


class EventLedger(Generic[CreateT, EventT]):
    """One event collection of a match."""

    kind = "event"

    def __init__(
        self,
        repository: EventRepository[CreateT, EventT],
        coordinator: MutationCoordinator,
    ):
        self.repository = repository
        self.coordinator = coordinator

    def cache_key(self, match_id: int) -> str:
        raise NotImplementedError

    def validate_payload(self, payload: CreateT) -> None:
        """Type-specific checks that need no match data."""

    def validate_for_match(self, match: MatchResponse, payload: CreateT) -> None:
        if not match.has_team(payload.team_id):
            raise ValidationError(code="team_not_in_match")

    async def list(self, match_id: int) -> list[EventT]:
        return await self.coordinator.cache.get_or_fetch(
            self.cache_key(match_id),
            lambda: self.repository.list_by_match(match_id),
        )

    async def refresh(self, match_id: int) -> list[EventT]:
        return await self.coordinator.cache.fetch(
            self.cache_key(match_id),
            lambda: self.repository.list_by_match(match_id),
        )

    async def add(self, match_id: int, payload: CreateT) -> EventT:
        self.coordinator.check_cached_lock(match_id)
        validate_minute(payload.minute)
        self.validate_payload(payload)
        payload = payload.model_copy(update={"match_id": match_id})

        async def operation(match: MatchResponse) -> EventT:
            self.validate_for_match(match, payload)
            created = await self.repository.create(payload)
            logger.info(
                "Recorded %s %s for match %s at minute %s",
                self.kind, created.id, match_id, payload.minute,
            )
            return created

        return await self.coordinator.run(
            match_id,
            (f"{self.kind}:add", payload.model_dump_json()),
            operation,
            invalidate=(self.cache_key(match_id), match_key(match_id)),
        )

    async def delete(self, match_id: int, event_id: int) -> None:
        async def operation(match: MatchResponse) -> None:
            # Only events recorded for this match
            recorded = await self.repository.list_by_match(match_id)
            if not any(event.id == event_id for event in recorded):
                logger.warning(
                    "Rejected %s delete: %s is not recorded for match %s",
                    self.kind, event_id, match_id,
                )
                raise NotFound(code="event_not_found")
            await self.repository.delete(event_id)
            logger.info("Deleted %s %s from match %s", self.kind, event_id, match_id)

        await self.coordinator.run(
            match_id,
            (f"{self.kind}:delete", event_id),
            operation,
            invalidate=(self.cache_key(match_id), match_key(match_id)),
        )


class GoalLedger(EventLedger[GoalCreate, GoalResponse]):
    kind = "goal"

    def cache_key(self, match_id: int) -> str:
        return goals_key(match_id)

    def validate_payload(self, payload: GoalCreate) -> None:
        if payload.assistant_id is None:
            return
        if payload.is_own_goal:
            raise ValidationError(code="own_goal_assist")
        if payload.player_id is not None and payload.assistant_id == payload.player_id:
            raise ValidationError(code="assistant_is_scorer")


class CardLedger(EventLedger[CardCreate, CardResponse]):
    kind = "card"

    def cache_key(self, match_id: int) -> str:
        return cards_key(match_id)


class SubstitutionLedger(EventLedger[SubstitutionCreate, SubstitutionResponse]):
    kind = "substitution"

    def cache_key(self, match_id: int) -> str:
        return substitutions_key(match_id)

    def validate_payload(self, payload: SubstitutionCreate) -> None:
        if payload.player_in_id == payload.player_out_id:
            raise ValidationError(code="same_player_substitution")


def build_timeline(
    goals: list[GoalResponse],
    cards: list[CardResponse],
    substitutions: list[SubstitutionResponse],
) -> list[TimelineEntry]:
    """
    Merge the three collections ordered by minute.

    The sort is stable over goals, cards, substitutions (each in stored
    order), so events sharing a minute keep a deterministic order.
    """
    entries = [
        *(TimelineEntry(event_type="goal", minute=g.minute, team_id=g.team_id, event=g) for g in goals),
        *(TimelineEntry(event_type="card", minute=c.minute, team_id=c.team_id, event=c) for c in cards),
        *(
            TimelineEntry(event_type="substitution", minute=s.minute, team_id=s.team_id, event=s)
            for s in substitutions
        ),
    ]
    return sorted(entries, key=lambda entry: entry.minute)


class MatchEventLedger:
    """The three ledgers of a match plus their merged timeline."""

    def __init__(
        self,
        goals: GoalLedger,
        cards: CardLedger,
        substitutions: SubstitutionLedger,
    ):
        self.goals = goals
        self.cards = cards
        self.substitutions = substitutions

    async def timeline(self, match_id: int) -> list[TimelineEntry]:
        # Recomputed from the source collections on every read
        goals, cards, substitutions = await asyncio.gather(
            self.goals.list(match_id),
            self.cards.list(match_id),
            self.substitutions.list(match_id),
        )
        return build_timeline(goals, cards, substitutions)
