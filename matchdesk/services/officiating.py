"""
Match officiating service.

Single entry point used by the API layer and the live ticker: loads match
views through the query cache, applies lifecycle transitions, edits the
match, and exposes the event ledgers, lineup editor and derived views
(clock, timeline, aggregate). Every state change goes through the
``MutationCoordinator``.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from matchdesk.config import Settings, get_settings
from matchdesk.exceptions import ValidationError
from matchdesk.models.match import MatchStatus
from matchdesk.repositories.base import (
    CardRepository,
    GoalRepository,
    LineupRepository,
    MatchRepository,
    SubstitutionRepository,
    TeamReadService,
)
from matchdesk.schemas import (
    AggregateScore,
    ClockResponse,
    LineupEntry,
    LineupSetRequest,
    MatchFilter,
    MatchResponse,
    MatchUpdate,
    TeamDetail,
    TimelineEntry,
)
from matchdesk.services import clock as match_clock
from matchdesk.services import match_state
from matchdesk.services.aggregate import AggregateResolver, compute_aggregate, is_two_legged
from matchdesk.services.event_ledger import (
    CardLedger,
    GoalLedger,
    MatchEventLedger,
    SubstitutionLedger,
)
from matchdesk.services.lineup_editor import LineupEditor
from matchdesk.services.live_ticker import LiveTicker
from matchdesk.services.mutation_coordinator import InFlight, MutationCoordinator
from matchdesk.services.query_cache import (
    MATCHES_KEY,
    QueryCache,
    cards_key,
    goals_key,
    match_key,
    other_leg_key,
    substitutions_key,
    team_key,
)
from matchdesk.utils.timestamps import utcnow

logger = logging.getLogger(__name__)

# Views that embed match scores or status
_MATCH_VIEWS = ("other_leg:*", f"{MATCHES_KEY}*")


class MatchOfficiatingService:
    def __init__(
        self,
        *,
        matches: MatchRepository,
        goals: GoalRepository,
        cards: CardRepository,
        substitutions: SubstitutionRepository,
        lineups: LineupRepository,
        teams: TeamReadService | None = None,
        cache: QueryCache | None = None,
        settings: Settings | None = None,
        now: Callable[[], datetime] = utcnow,
        in_flight: InFlight | None = None,
    ):
        self.settings = settings or get_settings()
        self.now = now
        self.cache = cache or QueryCache()
        self.matches = matches
        self.lineups = lineups
        self.teams = teams
        self.coordinator = MutationCoordinator(matches, self.cache, in_flight)
        self.events = MatchEventLedger(
            goals=GoalLedger(goals, self.coordinator),
            cards=CardLedger(cards, self.coordinator),
            substitutions=SubstitutionLedger(substitutions, self.coordinator),
        )
        self.aggregates = AggregateResolver(matches, self.cache)

    @property
    def goals(self) -> GoalLedger:
        return self.events.goals

    @property
    def cards(self) -> CardLedger:
        return self.events.cards

    @property
    def substitutions(self) -> SubstitutionLedger:
        return self.events.substitutions

    # ==================== Loading ====================

    async def get_match(self, match_id: int) -> MatchResponse:
        return await self.cache.get_or_fetch(match_key(match_id), lambda: self.matches.get(match_id))

    async def refresh_match(self, match_id: int) -> MatchResponse:
        return await self.cache.fetch(match_key(match_id), lambda: self.matches.get(match_id))

    async def list_matches(self, filters: MatchFilter | None = None) -> list[MatchResponse]:
        filters = filters or MatchFilter()
        key = f"{MATCHES_KEY}:{filters.model_dump_json(exclude_none=True)}"
        return await self.cache.get_or_fetch(key, lambda: self.matches.list(filters))

    async def get_team(self, team_id: int) -> TeamDetail | None:
        if self.teams is None:
            return None
        return await self.cache.get_or_fetch(team_key(team_id), lambda: self.teams.get_team(team_id))

    async def load_teams(self, match: MatchResponse) -> tuple[TeamDetail | None, TeamDetail | None]:
        team_a, team_b = await asyncio.gather(
            self.get_team(match.team_a_id),
            self.get_team(match.team_b_id),
        )
        return team_a, team_b

    async def revalidate(self, match_id: int) -> MatchResponse:
        """Refetch the match and its event collections."""
        match, *_ = await asyncio.gather(
            self.refresh_match(match_id),
            self.goals.refresh(match_id),
            self.cards.refresh(match_id),
            self.substitutions.refresh(match_id),
        )
        return match

    # ==================== Lifecycle ====================

    async def _transition(
        self,
        match_id: int,
        name: str,
        compute: Callable[[MatchResponse], dict[str, Any] | None],
    ) -> MatchResponse:
        async def operation(match: MatchResponse) -> MatchResponse:
            fields = compute(match)
            if fields is None:
                logger.debug("Transition %s is a no-op for match %s", name, match_id)
                return match
            updated = await self.matches.update(match_id, fields)
            logger.info("Match %s: %s (%s)", match_id, name, match_clock.match_phase(updated).value)
            return updated

        return await self.coordinator.run(
            match_id,
            name,
            operation,
            invalidate=(match_key(match_id), *_MATCH_VIEWS),
        )

    async def start(self, match_id: int) -> MatchResponse:
        require = self.settings.require_full_lineup_for_kickoff
        return await self._transition(
            match_id,
            "start",
            lambda match: match_state.start(match, self.now(), require_lineups=require),
        )

    async def set_halftime(self, match_id: int, flag: bool = True) -> MatchResponse:
        return await self._transition(
            match_id,
            f"halftime:{flag}",
            lambda match: match_state.set_halftime(match, flag),
        )

    async def start_second_half(self, match_id: int) -> MatchResponse:
        return await self._transition(
            match_id,
            "second_half",
            lambda match: match_state.start_second_half(match, self.now()),
        )

    async def finish(self, match_id: int) -> MatchResponse:
        return await self._transition(
            match_id,
            "finish",
            lambda match: match_state.finish(match, self.now()),
        )

    # ==================== Match edits ====================

    async def update_match(self, match_id: int, data: MatchUpdate) -> MatchResponse:
        """Scores, regulation/added time, halftime flag and penalty scores."""
        fields = data.model_dump(exclude_unset=True)
        validate_match_update(fields)
        self.coordinator.check_cached_lock(match_id)

        async def operation(match: MatchResponse) -> MatchResponse:
            changes = dict(fields)
            if "is_halftime" in changes:
                if not match_state.check_halftime_edit(match, changes["is_halftime"]):
                    del changes["is_halftime"]
            if "penalty_score_a" in changes or "penalty_score_b" in changes:
                await self._ensure_penalties_allowed(match, changes)
            if not changes:
                return match
            updated = await self.matches.update(match_id, changes)
            logger.info("Match %s updated: %s", match_id, ", ".join(sorted(changes)))
            return updated

        return await self.coordinator.run(
            match_id,
            ("update", data.model_dump_json(exclude_unset=True)),
            operation,
            invalidate=(match_key(match_id), *_MATCH_VIEWS),
        )

    async def _ensure_penalties_allowed(self, match: MatchResponse, fields: dict[str, Any]) -> None:
        """Shootout scores only for a live knockout match that is level."""
        penalties = (fields.get("penalty_score_a"), fields.get("penalty_score_b"))
        if all(value is None for value in penalties):
            # Clearing the shootout is always allowed
            return
        if not match.stage or match.status != MatchStatus.live:
            raise ValidationError(code="penalties_not_allowed")

        after = match.model_copy(
            update={k: v for k, v in fields.items() if k in ("score_a", "score_b")}
        )
        level = after.score_a == after.score_b
        if is_two_legged(after):
            other_leg = await self.aggregates.find_other_leg(after)
            if other_leg is not None:
                level = compute_aggregate(after, other_leg).is_level
        if not level:
            raise ValidationError(code="penalties_not_allowed")

    async def delete_match(self, match_id: int) -> None:
        async def operation(match: MatchResponse) -> None:
            await self.matches.delete(match_id)
            logger.info("Deleted match %s", match_id)

        await self.coordinator.run(
            match_id,
            "delete",
            operation,
            invalidate=(
                match_key(match_id),
                goals_key(match_id),
                cards_key(match_id),
                substitutions_key(match_id),
                other_leg_key(match_id),
                *_MATCH_VIEWS,
            ),
        )

    # ==================== Lineups ====================

    async def lineup_editor(self, match_id: int) -> LineupEditor:
        """Board prefilled from the persisted lineups, rosters loaded when available."""
        match = await self.get_match(match_id)
        team_a, team_b = await self.load_teams(match)
        return LineupEditor.from_match(
            match,
            team_a,
            team_b,
            coordinator=self.coordinator,
            repository=self.lineups,
            enforce_positions=self.settings.enforce_lineup_positions,
        )

    async def save_lineups(self, match_id: int, request: LineupSetRequest) -> list[LineupEntry]:
        """Replace both sides with a submitted board and commit it."""
        self.coordinator.check_cached_lock(match_id)
        editor = await self.lineup_editor(match_id)
        editor.replace_team("A", request.team_a)
        editor.replace_team("B", request.team_b)
        return await editor.commit(match_id)

    # ==================== Derived views ====================

    async def clock(self, match_id: int) -> ClockResponse:
        match = await self.get_match(match_id)
        now = self.now()
        return ClockResponse(
            match_id=match.id,
            status=match.status,
            phase=match_clock.match_phase(match).value,
            clock=match_clock.display_clock(match, now),
            label=match_clock.status_label(match, now),
            is_locked=match_state.is_locked(match),
        )

    async def event_minute_hint(self, match_id: int) -> int:
        match = await self.get_match(match_id)
        return match_clock.event_minute_hint(match, self.now())

    async def timeline(self, match_id: int) -> list[TimelineEntry]:
        return await self.events.timeline(match_id)

    async def aggregate(self, match_id: int) -> AggregateScore | None:
        match = await self.get_match(match_id)
        return await self.aggregates.aggregate(match)

    def live_ticker(self, match_id: int, clock_handler) -> LiveTicker:
        return LiveTicker(
            lambda: self.clock(match_id),
            clock_handler,
            revalidate=lambda: self.revalidate(match_id),
            interval_seconds=self.settings.live_tick_interval_seconds,
        )


def validate_match_update(fields: dict[str, Any]) -> None:
    for name in ("score_a", "score_b"):
        if name in fields and (fields[name] is None or fields[name] < 0):
            raise ValidationError(code="invalid_score")
    for name in ("penalty_score_a", "penalty_score_b"):
        value = fields.get(name)
        if value is not None and value < 0:
            raise ValidationError(code="invalid_score")
    for name in ("additional_time_first_half", "additional_time_second_half"):
        if name in fields and (fields[name] is None or fields[name] < 0):
            raise ValidationError(code="invalid_match_time")
    if "total_time" in fields and (fields["total_time"] is None or fields["total_time"] <= 0):
        raise ValidationError(code="invalid_match_time")
    if "is_halftime" in fields and fields["is_halftime"] is None:
        raise ValidationError(code="validation_error")
